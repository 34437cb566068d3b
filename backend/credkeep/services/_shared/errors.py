"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, Redis or SQLAlchemy directly. They serve as stable contracts
between repositories, the credential store and the request authenticator.

The translation to HTTP responses (RFC 7807) is handled by
``credkeep/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Every failure is scoped to a single request; none is fatal to the process.
    """

    pass


# --------------------------------------------------------------------------- #
# Repository errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Principal").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Principal").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class RepositoryConflictError(ConflictError):
    """
    Raised by ``PrincipalRepository.save`` when the stored version moved on.

    The caller is expected to reload, re-apply its mutation and save again.
    """

    def __init__(self, uid: str, expected_version: int) -> None:
        super().__init__("Principal", f"version {expected_version} of {uid!r} is stale")
        self.uid = uid
        self.expected_version = expected_version


# --------------------------------------------------------------------------- #
# Credential errors
# --------------------------------------------------------------------------- #


class CredentialError(ServiceError):
    """
    Base class for failed credential validation.

    :ivar code: Stable machine-readable reason.
    """

    code = "invalid_credentials"

    def __init__(self, client_id: str, message: str | None = None) -> None:
        super().__init__(message or self.default_message())
        self.client_id = client_id

    @classmethod
    def default_message(cls) -> str:
        return "Invalid credentials."


class UnknownClientError(CredentialError):
    """No credential pair exists for the presented client id."""

    code = "unknown_client"

    @classmethod
    def default_message(cls) -> str:
        return "Unknown client. Please sign in."


class CredentialExpiredError(CredentialError):
    """The credential pair is past its expiry."""

    code = "credential_expired"

    @classmethod
    def default_message(cls) -> str:
        return "Credentials have expired. Please sign in again."


class TokenMismatchError(CredentialError):
    """The presented token matches neither the current nor the grace token."""

    code = "token_mismatch"

    @classmethod
    def default_message(cls) -> str:
        return "Access token is not valid for this client."


class AuthenticationError(CredentialError):
    """Token headers are missing or malformed, or name an unknown principal."""

    code = "unauthenticated"

    @classmethod
    def default_message(cls) -> str:
        return "Authentication required."


# --------------------------------------------------------------------------- #
# Policy errors
# --------------------------------------------------------------------------- #


class RedirectNotAllowedError(ServiceError):
    """Raised when a client-supplied redirect URL is outside the allow-list."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Redirect to '{url}' is not allowed.")
        self.url = url
