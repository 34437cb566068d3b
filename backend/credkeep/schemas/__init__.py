"""Convenience exports for schemas."""

from __future__ import annotations

from .auth import AUTH_HEADERS, AuthHeadersSchema
from .credentials import CredentialPairSchema, UnixTimestamp, dump_credentials, load_credentials

__all__ = [
    "AUTH_HEADERS",
    "AuthHeadersSchema",
    "CredentialPairSchema",
    "UnixTimestamp",
    "dump_credentials",
    "load_credentials",
]
