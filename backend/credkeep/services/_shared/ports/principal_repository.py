from __future__ import annotations

import copy
import threading
from typing import Protocol

from credkeep.services._shared.dto import Principal, normalize_uid
from credkeep.services._shared.errors import (
    ConflictError,
    NotFoundError,
    RepositoryConflictError,
)


class PrincipalRepository(Protocol):
    """
    Loads and persists principals together with their credential map.

    Implementations own identifier normalization and the optimistic-lock
    ``version``. Returned principals are detached copies: mutating one never
    changes stored state until :meth:`save` succeeds.
    """

    def load(self, uid: str) -> Principal:
        """
        Fetch a principal by identifier.

        :raises NotFoundError: If no principal has this identifier.
        """

    def save(self, principal: Principal) -> None:
        """
        Persist ``principal.credentials`` if the stored version still equals
        ``principal.version``, then bump ``principal.version``.

        :raises RepositoryConflictError: On a version mismatch.
        :raises NotFoundError: If the principal vanished.
        """

    def add(self, principal: Principal) -> Principal:
        """
        Create a principal.

        :raises ConflictError: If the identifier is already taken.
        """

    def delete(self, uid: str) -> bool:
        """Remove a principal. :returns: True if it existed."""


class InMemoryPrincipalRepository(PrincipalRepository):
    """
    Process-local principal repository.

    .. note::
       Uses a threading lock so concurrent ``save`` calls behave like a
       versioned row update.
    """

    def __init__(self) -> None:
        self._rows: dict[str, Principal] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def load(self, uid: str) -> Principal:
        key = normalize_uid(uid)
        with self._lock:
            row = self._rows.get(key)
            if row is None:
                raise NotFoundError("Principal", key)
            return copy.deepcopy(row)

    def save(self, principal: Principal) -> None:
        key = normalize_uid(principal.uid)
        with self._lock:
            row = self._rows.get(key)
            if row is None:
                raise NotFoundError("Principal", key)
            if row.version != principal.version:
                raise RepositoryConflictError(key, principal.version)
            principal.version += 1
            self._rows[key] = copy.deepcopy(principal)

    def add(self, principal: Principal) -> Principal:
        key = normalize_uid(principal.uid)
        with self._lock:
            if key in self._rows:
                raise ConflictError("Principal", f"uid {key!r} already registered")
            self._seq += 1
            stored = Principal(
                uid=key,
                provider=principal.provider,
                credentials=dict(principal.credentials),
                version=1,
                id=self._seq,
            )
            self._rows[key] = stored
            return copy.deepcopy(stored)

    def delete(self, uid: str) -> bool:
        with self._lock:
            return self._rows.pop(normalize_uid(uid), None) is not None
