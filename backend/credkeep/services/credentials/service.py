# credkeep/services/credentials/service.py
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TypeVar

from credkeep.services._shared.base import BaseService
from credkeep.services._shared.dto import CredentialPair, Principal
from credkeep.services._shared.errors import (
    CredentialExpiredError,
    RepositoryConflictError,
    TokenMismatchError,
    UnknownClientError,
)
from credkeep.services._shared.ports.principal_repository import PrincipalRepository
from credkeep.services.credentials.dto import (
    CredentialConfig,
    IssuedCredential,
    RotatedCredential,
)
from credkeep.services.credentials.tokens import (
    digest_token,
    digests_match,
    new_client_id,
    new_token,
)

log = logging.getLogger(__name__)

R = TypeVar("R")

# A mutation receives a detached working copy plus "now" and returns
# ``(result, changed)``; unchanged copies are never saved.
Mutation = Callable[[Principal, datetime], tuple[R, bool]]


@dataclass(slots=True)
class _PairLock:
    """Lock for one ``(uid, client_id)`` plus the number of threads using it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class CredentialStore(BaseService):
    """
    Owns the mapping from a principal to its currently valid credential pairs.

    Every operation follows load-mutate-save against the
    :class:`PrincipalRepository`. Mutations on one ``(uid, client_id)`` are
    serialized in-process by a narrow lock; cross-process races surface as
    :class:`RepositoryConflictError` and are retried on a fresh load, up to
    ``config.max_retries`` attempts.
    """

    def __init__(
        self,
        *,
        repository: PrincipalRepository,
        config: CredentialConfig,
    ) -> None:
        """
        :param repository: Principal persistence port.
        :param config: TTL, grace window and retry settings.
        """
        self.repository = repository
        self.cfg = config
        # entries vanish with their last holder
        self._locks: dict[tuple[str, str], _PairLock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue(self, principal: Principal, client_id: str | None = None) -> IssuedCredential:
        """
        Issue a new credential pair for ``client_id`` (generated when omitted).

        Reissuing an existing client id replaces its pair. Expired pairs of the
        principal are dropped on the way; when ``max_clients`` is reached the
        pair closest to expiry is evicted.

        :returns: The plaintext token, its client id and expiry.
        """
        cid = client_id or new_client_id()

        def _issue(working: Principal, now: datetime) -> tuple[IssuedCredential, bool]:
            creds = working.credentials
            self._drop_expired(creds, now)
            self._enforce_client_cap(creds, cid)

            token = new_token()
            pair = CredentialPair(
                client_id=cid,
                token_digest=digest_token(token),
                expiry=now + self.cfg.token_ttl,
                updated_at=now,
            )
            creds[cid] = pair
            return IssuedCredential(token=token, client_id=cid, expiry=pair.expiry), True

        issued = self._mutate(principal, cid, _issue)
        log.debug("credential.issued", extra={"uid": principal.uid, "client": cid})
        return issued

    # ------------------------------------------------------------------ #
    # Validation with rotation
    # ------------------------------------------------------------------ #

    def validate_and_rotate(
        self, principal: Principal, client_id: str, token: str
    ) -> RotatedCredential:
        """
        Validate ``token`` for ``client_id`` and rotate it.

        Security
        --------
        - Expiry is checked before the digest so stale pairs report
          :class:`CredentialExpiredError`, never a mismatch.
        - The current token rotates: its digest becomes the grace token and a
          new token with a fresh TTL is returned.
        - The grace token is accepted once while its window is open, without
          rotating again; the result carries no token and the current pair's
          expiry.
        - Anything else raises :class:`TokenMismatchError`; the pair is kept.

        :raises UnknownClientError: If ``client_id`` has no pair.
        :raises CredentialExpiredError: If the pair is past its expiry.
        :raises TokenMismatchError: If the token matches neither digest.
        """
        presented = digest_token(token)

        def _rotate(working: Principal, now: datetime) -> tuple[RotatedCredential, bool]:
            pair = working.credentials.get(client_id)
            if pair is None:
                raise UnknownClientError(client_id)
            if pair.is_expired(now):
                raise CredentialExpiredError(client_id)

            if digests_match(presented, pair.token_digest):
                fresh = new_token()
                grace_until = now + self.cfg.grace_window if self.cfg.grace_window else None
                working.credentials[client_id] = replace(
                    pair,
                    token_digest=digest_token(fresh),
                    expiry=now + self.cfg.token_ttl,
                    last_token=pair.token_digest if grace_until else None,
                    last_token_expiry=grace_until,
                    updated_at=now,
                )
                return (
                    RotatedCredential(
                        token=fresh,
                        client_id=client_id,
                        expiry=now + self.cfg.token_ttl,
                        rotated=True,
                    ),
                    True,
                )

            if pair.grace_open(now) and digests_match(presented, pair.last_token):
                # single use: a further duplicate of this token is a mismatch.
                # No token goes back; the current one belongs to the rotating request.
                working.credentials[client_id] = pair.without_grace()
                return (
                    RotatedCredential(
                        token=None,
                        client_id=client_id,
                        expiry=pair.expiry,
                        rotated=False,
                    ),
                    True,
                )

            log.warning(
                "credential.mismatch",
                extra={"uid": working.uid, "client": client_id},
            )
            raise TokenMismatchError(client_id)

        result = self._mutate(principal, client_id, _rotate)
        if result.rotated:
            log.debug("credential.rotated", extra={"uid": principal.uid, "client": client_id})
        else:
            log.info(
                "credential.grace_accepted",
                extra={"uid": principal.uid, "client": client_id, "rotated": False},
            )
        return result

    # ------------------------------------------------------------------ #
    # Revocation and maintenance
    # ------------------------------------------------------------------ #

    def revoke(self, principal: Principal, client_id: str) -> None:
        """Remove the pair of ``client_id``. Revoking an absent pair is a no-op."""

        def _revoke(working: Principal, now: datetime) -> tuple[None, bool]:
            return None, working.credentials.pop(client_id, None) is not None

        self._mutate(principal, client_id, _revoke)
        log.debug("credential.revoked", extra={"uid": principal.uid, "client": client_id})

    def revoke_all(self, principal: Principal) -> int:
        """
        Remove every pair of the principal (sign out everywhere).

        :returns: Number of pairs removed.
        """

        def _revoke_all(working: Principal, now: datetime) -> tuple[int, bool]:
            count = len(working.credentials)
            working.credentials.clear()
            return count, count > 0

        return self._mutate(principal, "*", _revoke_all)

    def sweep_expired(self, principal: Principal) -> int:
        """
        Drop expired pairs and close lapsed grace windows.

        :returns: Number of pairs removed.
        """

        def _sweep(working: Principal, now: datetime) -> tuple[int, bool]:
            creds = working.credentials
            removed = self._drop_expired(creds, now)
            closed = 0
            for cid, pair in list(creds.items()):
                if pair.last_token is not None and not pair.grace_open(now):
                    creds[cid] = pair.without_grace()
                    closed += 1
            return removed, bool(removed or closed)

        removed = self._mutate(principal, "*", _sweep)
        if removed:
            log.debug("credential.swept", extra={"uid": principal.uid})
        return removed

    def active_clients(self, principal: Principal) -> list[str]:
        """Return the client ids whose pair has not expired, sorted."""
        now = self.now_utc()
        return sorted(cid for cid, pair in principal.credentials.items() if not pair.is_expired(now))

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @contextmanager
    def _pair_lock(self, uid: str, client_id: str) -> Iterator[None]:
        key = (uid, client_id)
        with self._locks_guard:
            entry = self._locks.setdefault(key, _PairLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def _mutate(self, principal: Principal, client_id: str, mutation: Mutation[R]) -> R:
        """
        Apply ``mutation`` under the pair lock and persist it.

        The first attempt works on a copy of the caller's principal; later
        attempts reload it. On success the caller's object is refreshed with
        the stored credential map and version.
        """
        with self._pair_lock(principal.uid, client_id):
            source = principal
            for attempt in range(1, self.cfg.max_retries + 1):
                working = replace(source, credentials=dict(source.credentials))
                result, changed = mutation(working, self.now_utc())
                if not changed:
                    return result
                try:
                    self.repository.save(working)
                except RepositoryConflictError:
                    log.info(
                        "credential.save_conflict",
                        extra={"uid": principal.uid, "client": client_id, "attempt": attempt},
                    )
                    if attempt == self.cfg.max_retries:
                        raise
                    source = self.repository.load(principal.uid)
                    continue
                principal.credentials = working.credentials
                principal.version = working.version
                return result
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def _drop_expired(creds: dict[str, CredentialPair], now: datetime) -> int:
        expired = [cid for cid, pair in creds.items() if pair.is_expired(now)]
        for cid in expired:
            del creds[cid]
        return len(expired)

    def _enforce_client_cap(self, creds: dict[str, CredentialPair], client_id: str) -> None:
        cap = self.cfg.max_clients
        if cap is None or client_id in creds:
            return
        while len(creds) >= cap:
            oldest = min(creds.values(), key=lambda pair: pair.expiry)
            del creds[oldest.client_id]
