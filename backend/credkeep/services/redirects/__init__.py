"""Redirect allow-list policy."""

from __future__ import annotations

from .policy import RedirectPolicy, is_allowed

__all__ = ["RedirectPolicy", "is_allowed"]
