"""Credential store: issuance, rotation and revocation of token pairs."""

from __future__ import annotations

from .dto import CredentialConfig, IssuedCredential, RotatedCredential
from .service import CredentialStore

__all__ = ["CredentialStore", "CredentialConfig", "IssuedCredential", "RotatedCredential"]
