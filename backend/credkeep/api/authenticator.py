"""Request authentication over credential headers."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import Flask, current_app, g, request
from marshmallow import ValidationError

from credkeep.schemas.auth import AUTH_HEADERS, DEFAULT_TOKEN_TYPE, AuthHeadersSchema
from credkeep.services._shared.dto import Principal
from credkeep.services._shared.errors import AuthenticationError, NotFoundError
from credkeep.services._shared.ports import PrincipalRepository
from credkeep.services.credentials import CredentialStore, RotatedCredential

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

EXTENSION_KEY = "credkeep.authenticator"


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Outcome of a successful authentication.

    :param principal: Principal with its refreshed credential map.
    :param credential: Token the client must present next.
    :param headers: Outgoing wire headers carrying ``credential``.
    """

    principal: Principal
    credential: RotatedCredential
    headers: dict[str, str]


class RequestAuthenticator:
    """
    Extract token material from request headers, validate it and produce the
    refreshed response headers.

    :param repository: Principal persistence port.
    :param store: Credential store performing validation and rotation.
    """

    def __init__(self, *, repository: PrincipalRepository, store: CredentialStore) -> None:
        self.repository = repository
        self.store = store
        self._schema = AuthHeadersSchema()

    def authenticate(self, headers: Mapping[str, str]) -> AuthResult:
        """
        Validate the credential headers of one request.

        :param headers: Case-insensitive header mapping (e.g. ``request.headers``).
        :raises AuthenticationError: On missing/malformed headers or unknown uid.
        :raises CredentialError: When the store rejects the token.
        """
        raw = {name: headers.get(name) for name in AUTH_HEADERS if headers.get(name) is not None}
        try:
            data = self._schema.load(raw)
        except ValidationError as exc:
            raise AuthenticationError(
                str(raw.get("client", "")), "Missing or malformed authentication headers."
            ) from exc

        if data["token_type"].lower() != DEFAULT_TOKEN_TYPE.lower():
            raise AuthenticationError(data["client"], "Unsupported token type.")

        try:
            principal = self.repository.load(data["uid"])
        except NotFoundError as exc:
            raise AuthenticationError(data["client"]) from exc

        credential = self.store.validate_and_rotate(
            principal, data["client"], data["access_token"]
        )
        return AuthResult(
            principal=principal,
            credential=credential,
            headers=self.response_headers(principal, credential),
        )

    def response_headers(self, principal: Principal, credential: RotatedCredential) -> dict[str, str]:
        """
        Render the wire headers for ``credential`` (all values are strings).

        A grace-window acceptance carries no token, so ``access-token`` and
        ``expiry`` are left out and the client keeps the token it received
        from the rotating request.
        """
        values = {
            "client": credential.client_id,
            "uid": principal.uid,
            "token_type": DEFAULT_TOKEN_TYPE,
        }
        if credential.token is not None:
            values.update(access_token=credential.token, expiry=credential.expiry_timestamp)
        dumped = self._schema.dump(values)
        return {name: str(value) for name, value in dumped.items()}


# ---------------------------------------------------------------------------
# Flask integration
# ---------------------------------------------------------------------------


def init_app(app: Flask, authenticator: RequestAuthenticator) -> None:
    """Register ``authenticator`` and write refreshed headers on responses."""

    app.extensions[EXTENSION_KEY] = authenticator

    @app.after_request
    def _attach_auth_headers(response):
        auth_headers = g.pop("auth_headers", None)
        if auth_headers:
            response.headers.update(auth_headers)
        return response


def get_authenticator() -> RequestAuthenticator:
    """Return the authenticator registered on the current app."""
    authenticator = current_app.extensions.get(EXTENSION_KEY)
    if authenticator is None:
        raise RuntimeError("RequestAuthenticator is not initialized. Call init_app() first.")
    return authenticator


def require_credentials(func: F) -> F:
    """Ensure the request carries valid credential headers.

    On success ``g.principal`` holds the principal and the rotated headers are
    attached to the response.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        result = get_authenticator().authenticate(request.headers)
        g.principal = result.principal
        g.auth_headers = result.headers
        log.debug(
            "request.authenticated",
            extra={"uid": result.principal.uid, "client": result.credential.client_id},
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
