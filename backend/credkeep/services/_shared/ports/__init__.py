"""
credkeep.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts the
credential store depends on.

Modules
-------
- :mod:`principal_repository`:
    Defines :class:`~.PrincipalRepository` — load/save of a principal and its
    serialized credential map, with optimistic locking — and the
    :class:`~.InMemoryPrincipalRepository` reference adapter.

Design Notes
------------
Concrete adapters backed by Redis or SQL live under ``credkeep.infra`` and
``credkeep.repositories``; the service layer only sees the protocol.
"""

from __future__ import annotations

from .principal_repository import InMemoryPrincipalRepository, PrincipalRepository

__all__ = [
    "PrincipalRepository",
    "InMemoryPrincipalRepository",
]
