"""Registration and sign-in flows built on the credential store."""

from __future__ import annotations

from .dto import RegisterIn, SessionOut, SignInIn
from .service import PostIssueHook, SessionService

__all__ = ["SessionService", "RegisterIn", "SignInIn", "SessionOut", "PostIssueHook"]
