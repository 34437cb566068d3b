# credkeep/services/_shared/dto.py
"""Shared domain records exchanged between the store and its repositories."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

EMAIL_PROVIDER = "email"


@dataclass(frozen=True, slots=True)
class CredentialPair:
    """
    One active session/device of a principal.

    :param client_id: Opaque identifier of the session, unique per principal.
    :type client_id: str
    :param token_digest: Hex digest of the current access token.
    :type token_digest: str
    :param expiry: Absolute UTC instant after which the pair is invalid.
    :type expiry: datetime
    :param last_token: Digest of the token superseded by the last rotation.
    :type last_token: str | None
    :param last_token_expiry: End of the grace window for ``last_token``.
    :type last_token_expiry: datetime | None
    :param updated_at: Instant of the last issue or rotation.
    :type updated_at: datetime | None
    """

    client_id: str
    token_digest: str
    expiry: datetime
    last_token: str | None = None
    last_token_expiry: datetime | None = None
    updated_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expiry

    def grace_open(self, now: datetime) -> bool:
        """Return ``True`` while the superseded token may still be presented."""
        return (
            self.last_token is not None
            and self.last_token_expiry is not None
            and now <= self.last_token_expiry
        )

    def without_grace(self) -> CredentialPair:
        return replace(self, last_token=None, last_token_expiry=None)


@dataclass(slots=True)
class Principal:
    """
    Authenticable entity as seen by the credential store.

    The store only reads and writes ``credentials``; every other attribute is
    owned by the principal repository.

    :param uid: Unique identifier (normalized email for local accounts).
    :type uid: str
    :param provider: ``"email"`` or the OAuth provider name.
    :type provider: str
    :param credentials: Mapping of client id to its credential pair.
    :type credentials: dict[str, CredentialPair]
    :param version: Optimistic-lock counter maintained by the repository.
    :type version: int
    :param id: Storage identifier assigned by the repository, if any.
    :type id: int | None
    """

    uid: str
    provider: str = EMAIL_PROVIDER
    credentials: dict[str, CredentialPair] = field(default_factory=dict)
    version: int = 0
    id: int | None = None


def normalize_uid(uid: str) -> str:
    """
    Normalize a principal identifier before storage or lookup.

    Email identifiers are case-insensitive keys: they are trimmed and
    lower-cased. Other identifiers (OAuth subject ids) are provider-issued
    and only trimmed.

    :raises ValueError: If the identifier is blank.
    """
    if not isinstance(uid, str) or not uid.strip():
        raise ValueError("Principal uid is required.")
    value = uid.strip()
    return value.lower() if "@" in value else value
