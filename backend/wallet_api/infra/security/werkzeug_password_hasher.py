"""Password hashing adapter built on :mod:`werkzeug.security`."""

from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from wallet_api.services._shared.ports import PasswordHasher

SALT_LENGTH = 16
SCRYPT_BLOCK_SIZE = 8
SCRYPT_PARALLELISM = 1


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted scrypt hashing with a configurable work factor.

    :param cost: log2 of the scrypt CPU/memory cost ``N``. ``15`` matches
        Werkzeug's default (``N=32768``); tests use a much lower value.
    """

    cost: int = 15

    @property
    def method(self) -> str:
        return f"scrypt:{2**self.cost}:{SCRYPT_BLOCK_SIZE}:{SCRYPT_PARALLELISM}"

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext, method=self.method, salt_length=SALT_LENGTH)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check ``plaintext`` against ``hashed`` in constant time.

        Hashes produced with another cost still verify because the parameters
        travel inside the hash string. A malformed or unsupported hash yields
        ``False`` instead of an exception.
        """
        if not hashed:
            return False
        try:
            return bool(check_password_hash(hashed, plaintext))
        except (ValueError, TypeError):
            return False
