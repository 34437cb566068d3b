"""Environment-driven configuration classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Selects the config class: 'development' | 'testing' | 'production'
ENV_VAR: Final[str] = "APP_ENV"

TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

# No-op when there is no .env file
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``default`` when unset, otherwise true only for :data:`TRUTHY`."""
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    """Read an integer; blank or non-numeric values give ``default``."""
    val = (os.getenv(name) or "").strip()
    try:
        return int(val) if val else default
    except ValueError:
        return default


def env_list(name: str, default: str = "") -> list[str]:
    """Read a comma-separated list, dropping blank entries."""
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    SQLALCHEMY_DATABASE_URI: str
        Database behind the SQL principal repository (``DATABASE_URL``).
    REDIS_URL: str | None
        When set, principals are stored in Redis instead of the database.
    REDIS_SOCKET_TIMEOUT: float
        Seconds a Redis round trip may block before failing.
    CREDENTIAL_TOKEN_TTL: int
        Lifetime in seconds granted on issue and on every rotation.
    CREDENTIAL_GRACE_WINDOW: int
        Seconds during which the token replaced by a rotation is accepted
        once more. ``0`` disables the grace window.
    CREDENTIAL_MAX_CLIENTS: int
        Concurrent clients per principal; ``0`` means unlimited.
    CREDENTIAL_MAX_RETRIES: int
        Load-mutate-save attempts before a repository conflict is raised.
    REDIRECT_ALLOW_LIST: list[str]
        Exact URLs or ``prefix*`` patterns accepted as redirects. Empty
        allows every URL.
    DEFAULT_REDIRECT_URL: str | None
        Redirect used by registrations that do not send one.
    REQUIRE_REDIRECT_URL: bool
        Reject registrations that end up without any redirect URL.
    LOG_LEVEL: str
        Root logging level.
    """

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Persistence
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./credkeep.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))

    # Credentials
    CREDENTIAL_TOKEN_TTL = env_int("CREDENTIAL_TOKEN_TTL", 14 * 24 * 3600)
    CREDENTIAL_GRACE_WINDOW = env_int("CREDENTIAL_GRACE_WINDOW", 5)
    CREDENTIAL_MAX_CLIENTS = env_int("CREDENTIAL_MAX_CLIENTS", 0)
    CREDENTIAL_MAX_RETRIES = env_int("CREDENTIAL_MAX_RETRIES", 3)

    # Redirects
    REDIRECT_ALLOW_LIST = env_list("REDIRECT_ALLOW_LIST")
    DEFAULT_REDIRECT_URL = os.getenv("DEFAULT_REDIRECT_URL") or None
    REQUIRE_REDIRECT_URL = env_bool("REQUIRE_REDIRECT_URL", False)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Automated tests.

    Notes
    -----
    - In-memory SQLite unless ``TEST_DATABASE_URL`` is set.
    - Never connects to Redis; tests inject fakeredis explicitly.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Production: no debug, no SQL echo."""

    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the config class named by ``APP_ENV`` (development when unknown)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
