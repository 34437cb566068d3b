"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`credkeep.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``credkeep.services._shared.base``)
    * :class:`BaseService`

- Shared records (from ``credkeep.services._shared.dto``)
    * :class:`Principal`
    * :class:`CredentialPair`

- Credential store (from ``credkeep.services.credentials``)
    * :class:`CredentialStore`
    * DTOs: :class:`CredentialConfig`, :class:`IssuedCredential`,
      :class:`RotatedCredential`

- Redirect policy (from ``credkeep.services.redirects``)
    * :class:`RedirectPolicy`, :func:`is_allowed`

- Session service (from ``credkeep.services.sessions``)
    * :class:`SessionService`
    * DTOs: :class:`RegisterIn`, :class:`SignInIn`, :class:`SessionOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import CredentialPair, Principal
from .credentials import CredentialConfig, CredentialStore, IssuedCredential, RotatedCredential
from .redirects import RedirectPolicy, is_allowed
from .sessions import RegisterIn, SessionOut, SessionService, SignInIn

__all__ = [
    # Base
    "BaseService",
    # Shared records
    "Principal",
    "CredentialPair",
    # Credentials
    "CredentialStore",
    "CredentialConfig",
    "IssuedCredential",
    "RotatedCredential",
    # Redirects
    "RedirectPolicy",
    "is_allowed",
    # Sessions
    "SessionService",
    "RegisterIn",
    "SignInIn",
    "SessionOut",
]
