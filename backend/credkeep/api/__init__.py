"""Flask wiring for the credential core."""

from __future__ import annotations

from flask import Flask

from credkeep.api.authenticator import (
    AuthResult,
    RequestAuthenticator,
    get_authenticator,
    require_credentials,
)
from credkeep.core.extensions import REDIS_EXTENSION_KEY
from credkeep.services._shared.ports import PrincipalRepository
from credkeep.services.credentials import CredentialConfig, CredentialStore
from credkeep.services.redirects import RedirectPolicy
from credkeep.services.sessions import SessionService

STORE_KEY = "credkeep.store"
SESSIONS_KEY = "credkeep.sessions"


def build_repository(app: Flask) -> PrincipalRepository:
    """Pick the principal repository for ``app``.

    Redis backs principals when ``REDIS_URL`` is configured, otherwise the
    SQL database does.
    """
    redis_client = app.extensions.get(REDIS_EXTENSION_KEY)
    if redis_client is not None:
        from credkeep.infra.redis.redis_principal_repository import RedisPrincipalRepository

        return RedisPrincipalRepository(redis_client)

    from credkeep.infra.sqlalchemy.sqlalchemy_principal_repository import (
        SQLAlchemyPrincipalRepository,
    )

    return SQLAlchemyPrincipalRepository()


def init_app(app: Flask, repository: PrincipalRepository | None = None) -> None:
    """Build the credential store, session service and request authenticator.

    A single :class:`CredentialStore` is shared by the whole app so its
    per-client locks cover every request.
    """
    from credkeep.api import authenticator

    repository = repository or build_repository(app)
    store = CredentialStore(
        repository=repository,
        config=CredentialConfig.from_mapping(app.config),
    )
    app.extensions[STORE_KEY] = store
    app.extensions[SESSIONS_KEY] = SessionService(
        repository=repository,
        store=store,
        redirects=RedirectPolicy.from_mapping(app.config),
        default_redirect_url=app.config.get("DEFAULT_REDIRECT_URL"),
        require_redirect=bool(app.config.get("REQUIRE_REDIRECT_URL", False)),
    )
    authenticator.init_app(app, RequestAuthenticator(repository=repository, store=store))


__all__ = [
    "AuthResult",
    "RequestAuthenticator",
    "build_repository",
    "get_authenticator",
    "init_app",
    "require_credentials",
]
