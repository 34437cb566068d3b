"""Factory Boy factories for principals."""

from __future__ import annotations

from .principal import PrincipalFactory, PrincipalRowFactory

__all__ = ["PrincipalFactory", "PrincipalRowFactory"]
