"""
DTOs for SessionService.

Contracts for the caller-side flows that create principals and hand out
credentials: local registration, sign-in (including first sign-in through an
OAuth provider), sign-out and account destruction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from credkeep.services._shared.dto import EMAIL_PROVIDER

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input payload for registration.

    :param uid: Principal identifier (email for local accounts).
    :type uid: str
    :param provider: ``"email"`` or an OAuth provider name.
    :type provider: str
    :param redirect_url: Where the client wants to land after confirmation.
    :type redirect_url: str | None
    """

    uid: str
    provider: str = EMAIL_PROVIDER
    redirect_url: str | None = None


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input payload for sign-in.

    :param uid: Principal identifier.
    :type uid: str
    :param provider: ``"email"`` or an OAuth provider name.
    :type provider: str
    :param client_id: Reuse an existing client id instead of minting one.
    :type client_id: str | None
    """

    uid: str
    provider: str = EMAIL_PROVIDER
    client_id: str | None = None


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    A freshly issued session.

    :param uid: Normalized principal identifier.
    :type uid: str
    :param provider: Principal provider.
    :type provider: str
    :param client_id: Client id of the session.
    :type client_id: str
    :param token: Plaintext access token (only disclosed here).
    :type token: str
    :param expiry: Absolute UTC expiry.
    :type expiry: datetime
    :param redirect_url: Validated redirect target, if one was supplied.
    :type redirect_url: str | None
    :param created: ``True`` when the principal was created by this call.
    :type created: bool
    """

    uid: str
    provider: str
    client_id: str
    token: str
    expiry: datetime
    redirect_url: str | None = None
    created: bool = False
