# credkeep/services/credentials/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class IssuedCredential:
    """
    Output of a fresh issuance.

    :param token: Plaintext access token; this is the only time it is disclosed.
    :type token: str
    :param client_id: Client id the token is bound to.
    :type client_id: str
    :param expiry: Absolute UTC expiry of the pair.
    :type expiry: datetime
    """

    token: str
    client_id: str
    expiry: datetime


@dataclass(frozen=True, slots=True)
class RotatedCredential:
    """
    Output of a successful validation.

    :param token: Newly issued token the client must present next, or ``None``
        when the superseded token was accepted inside its grace window. The
        client then keeps the token handed out by the winning rotation.
    :type token: str | None
    :param client_id: Client id the token is bound to.
    :type client_id: str
    :param expiry: Absolute UTC expiry of the still-current pair.
    :type expiry: datetime
    :param rotated: ``True`` for the primary rotation path, ``False`` when the
        superseded token was accepted inside its grace window.
    :type rotated: bool
    """

    token: str | None
    client_id: str
    expiry: datetime
    rotated: bool

    @property
    def expiry_timestamp(self) -> int:
        return int(self.expiry.timestamp())


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class CredentialConfig:
    """
    Credential lifecycle configuration.

    :param token_ttl: Lifetime granted on issue and on every rotation.
    :type token_ttl: timedelta
    :param grace_window: How long the superseded token stays acceptable.
    :type grace_window: timedelta
    :param max_clients: Cap on concurrent clients per principal (``None`` = no cap).
    :type max_clients: int | None
    :param max_retries: Load-mutate-save attempts on repository conflicts.
    :type max_retries: int
    """

    token_ttl: timedelta
    grace_window: timedelta
    max_clients: int | None = None
    max_retries: int = 3

    def __post_init__(self) -> None:
        if self.token_ttl <= timedelta(0):
            raise ValueError("token_ttl must be positive.")
        if self.grace_window < timedelta(0):
            raise ValueError("grace_window must not be negative.")
        if self.max_clients is not None and self.max_clients < 1:
            raise ValueError("max_clients must be at least 1 when set.")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> CredentialConfig:
        """Build the config from ``CREDENTIAL_*`` keys of a Flask config."""
        max_clients = int(config.get("CREDENTIAL_MAX_CLIENTS", 0) or 0)
        return cls(
            token_ttl=timedelta(seconds=int(config["CREDENTIAL_TOKEN_TTL"])),
            grace_window=timedelta(seconds=int(config["CREDENTIAL_GRACE_WINDOW"])),
            max_clients=max_clients or None,
            max_retries=int(config.get("CREDENTIAL_MAX_RETRIES", 3)),
        )
