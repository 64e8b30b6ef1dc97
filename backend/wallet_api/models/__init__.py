from wallet_api.models.user import User
from wallet_api.models.wallet import Wallet

__all__ = ["User", "Wallet"]
