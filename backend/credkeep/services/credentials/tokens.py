"""Token material helpers: generation, one-way digests and comparison."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from uuid import uuid4

TOKEN_BYTES = 32


def new_token() -> str:
    """Return a URL-safe random access token (plaintext, shown once)."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def new_client_id() -> str:
    return uuid4().hex


def digest_token(token: str) -> str:
    """
    Return the SHA-256 hex digest stored in place of ``token``.

    Tokens carry 256 bits of entropy, so an unsalted fast hash is enough to
    make the stored value useless without the plaintext.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def digests_match(presented_digest: str, stored_digest: str | None) -> bool:
    """Constant-time digest comparison; ``None`` never matches."""
    if stored_digest is None:
        return False
    return hmac.compare_digest(presented_digest, stored_digest)
