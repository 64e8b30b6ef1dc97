"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

MIN_SECRET_BYTES: Final[int] = 32
MIN_HASH_COST: Final[int] = 10
MAX_HASH_COST: Final[int] = 20

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS: Final[dict[str, str]] = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}

# Loads .env in development (no-op when the file is missing)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when the loaded settings are unusable."""


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def parse_duration(value: str) -> timedelta:
    """Convert a compact duration such as ``"15m"`` or ``"7d"`` to a timedelta.

    :param value: Amount followed by one unit among ``s``, ``m``, ``h``, ``d``.
    :type value: str
    :returns: Equivalent :class:`datetime.timedelta`.
    :rtype: datetime.timedelta
    :raises ValueError: If the value does not follow the ``<int><unit>`` format.
    """
    match = _DURATION_RE.match(str(value).strip())
    if match is None:
        raise ValueError(f"Invalid duration format: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Unused by the token layer, kept for extensions.
    JWT_SECRET: str | None
        HMAC secret for access tokens (at least 32 bytes).
    JWT_REFRESH_SECRET: str | None
        HMAC secret for refresh tokens (at least 32 bytes, distinct).
    JWT_EXPIRES_IN: str
        Access token lifetime, ``<int><s|m|h|d>``.
    JWT_REFRESH_EXPIRES_IN: str
        Refresh token lifetime, ``<int><s|m|h|d>``.
    PASSWORD_HASH_COST: int
        log2 of the scrypt work factor used for password hashing.
    MAX_REFRESH_SESSIONS: int
        Soft cap of concurrently valid refresh tokens per user.
    REDIS_URL: str | None
        Full Redis URL. When unset, host/port/password/db are used.
    REDIS_SOCKET_TIMEOUT: float
        Seconds before a Redis call is abandoned.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    RATELIMIT_ENABLED: bool
        Toggles Flask-Limiter globally.
    AUTH_RATE_LIMIT: str
        Limit applied to every ``/auth`` endpoint.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_ENV = "development"
    APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
    JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "15m")
    JWT_REFRESH_EXPIRES_IN = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")
    PASSWORD_HASH_COST = env_int("PASSWORD_HASH_COST", 15)
    MAX_REFRESH_SESSIONS = env_int("MAX_REFRESH_SESSIONS", 5)

    # Redis (revocation store)
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = env_int("REDIS_PORT", 6379)
    REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
    REDIS_DB = env_int("REDIS_DB", 0)
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "3"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    CORS_MAX_AGE = 86400

    # Rate limiting (Flask-Limiter)
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per 15 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "5 per 15 minutes")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and ships placeholder token secrets so the
    server boots without a ``.env``. Never reuse them outside a laptop.
    """

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-access-secret-change-me-0123456789abcdef")
    JWT_REFRESH_SECRET = os.getenv(
        "JWT_REFRESH_SECRET", "dev-refresh-secret-change-me-0123456789abcdef"
    )
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the password hashing cost to keep the suite fast.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    JWT_SECRET = "test-access-secret-0123456789abcdef0123456789"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012345678"
    PASSWORD_HASH_COST = MIN_HASH_COST
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Secrets must come from the
    environment; :func:`validate_config` refuses to start without them.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(settings: Mapping[str, Any]) -> None:
    """Fail fast when token, hashing or session settings are unusable.

    :param settings: Loaded configuration (typically ``app.config``).
    :type settings: Mapping[str, Any]
    :raises ConfigurationError: On the first invalid setting found.
    """
    access_secret = settings.get("JWT_SECRET")
    refresh_secret = settings.get("JWT_REFRESH_SECRET")
    for name, secret in (("JWT_SECRET", access_secret), ("JWT_REFRESH_SECRET", refresh_secret)):
        if not secret:
            raise ConfigurationError(f"{name} is required")
        if len(str(secret).encode("utf-8")) < MIN_SECRET_BYTES:
            raise ConfigurationError(f"{name} must be at least {MIN_SECRET_BYTES} bytes long")
    if access_secret == refresh_secret:
        raise ConfigurationError("JWT_SECRET and JWT_REFRESH_SECRET must be different")

    for name in ("JWT_EXPIRES_IN", "JWT_REFRESH_EXPIRES_IN"):
        try:
            parse_duration(settings.get(name, ""))
        except ValueError as exc:
            raise ConfigurationError(f"{name}: {exc}") from exc

    cost = int(settings.get("PASSWORD_HASH_COST", 0))
    if not MIN_HASH_COST <= cost <= MAX_HASH_COST:
        raise ConfigurationError(
            f"PASSWORD_HASH_COST must be between {MIN_HASH_COST} and {MAX_HASH_COST}"
        )

    if int(settings.get("MAX_REFRESH_SESSIONS", 0)) < 1:
        raise ConfigurationError("MAX_REFRESH_SESSIONS must be at least 1")
