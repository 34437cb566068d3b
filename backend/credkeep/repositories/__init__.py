"""Repository package exposing persistence-layer access for the principal table."""

from __future__ import annotations

from credkeep.repositories.principal import PrincipalRowRepository

__all__ = [
    "PrincipalRowRepository",
]
