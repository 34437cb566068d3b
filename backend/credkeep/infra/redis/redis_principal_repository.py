# credkeep/infra/redis/redis_principal_repository.py
from __future__ import annotations

import json
from dataclasses import dataclass

import redis  # type: ignore[import-untyped]

from credkeep.schemas.credentials import dump_credentials, load_credentials
from credkeep.services._shared.dto import Principal, normalize_uid
from credkeep.services._shared.errors import (
    ConflictError,
    NotFoundError,
    RepositoryConflictError,
)
from credkeep.services._shared.ports import PrincipalRepository


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisPrincipalRepository(PrincipalRepository):
    """
    Redis-backed principal repository.

    Each principal is one hash ``principal:{uid}`` with the fields ``id``,
    ``provider``, ``version`` and ``tokens`` (the JSON credential map).
    Saves use WATCH/MULTI/EXEC so a concurrent writer either bumps ``version``
    first (version mismatch) or invalidates the transaction (``WatchError``);
    both surface as :class:`RepositoryConflictError`.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(uid: str) -> str:
        return f"principal:{uid}"

    @staticmethod
    def _kseq() -> str:
        return "principal:seq"

    # -------------------- API ------------------------

    def load(self, uid: str) -> Principal:
        key_uid = normalize_uid(uid)
        h = {_b(field): value for field, value in self.r.hgetall(self._k(key_uid)).items()}
        if not h:
            raise NotFoundError("Principal", key_uid)
        return Principal(
            uid=key_uid,
            provider=_b(h.get("provider")),
            credentials=load_credentials(json.loads(_b(h.get("tokens"), "{}"))),
            version=int(_b(h.get("version"), "0")),
            id=int(_b(h.get("id"), "0")) or None,
        )

    def save(self, principal: Principal) -> None:
        """
        Write the credential map if the stored version is still current.

        No retry happens here: a lost race is reported to the caller, which
        owns the reload-and-reapply loop.
        """
        key_uid = normalize_uid(principal.uid)
        key = self._k(key_uid)
        tokens = json.dumps(dump_credentials(principal.credentials), separators=(",", ":"))

        with self.r.pipeline() as p:
            try:
                p.watch(key)
                stored = p.hget(key, "version")
                if stored is None:
                    p.unwatch()
                    raise NotFoundError("Principal", key_uid)
                if int(_b(stored)) != principal.version:
                    p.unwatch()
                    raise RepositoryConflictError(key_uid, principal.version)

                p.multi()
                p.hset(key, mapping={"tokens": tokens, "version": str(principal.version + 1)})
                p.execute()
            except redis.WatchError as exc:
                raise RepositoryConflictError(key_uid, principal.version) from exc

        principal.version += 1

    def add(self, principal: Principal) -> Principal:
        key_uid = normalize_uid(principal.uid)
        key = self._k(key_uid)
        tokens = json.dumps(dump_credentials(principal.credentials), separators=(",", ":"))

        with self.r.pipeline() as p:
            try:
                p.watch(key)
                if p.exists(key):
                    p.unwatch()
                    raise ConflictError("Principal", f"uid {key_uid!r} already registered")
                # ids are only drawn once the uid is known to be free
                new_id = int(p.incr(self._kseq()))
                p.multi()
                p.hset(
                    key,
                    mapping={
                        "id": str(new_id),
                        "provider": principal.provider,
                        "version": "1",
                        "tokens": tokens,
                    },
                )
                p.execute()
            except redis.WatchError as exc:
                raise ConflictError("Principal", f"uid {key_uid!r} already registered") from exc

        return Principal(
            uid=key_uid,
            provider=principal.provider,
            credentials=dict(principal.credentials),
            version=1,
            id=new_id,
        )

    def delete(self, uid: str) -> bool:
        return int(self.r.delete(self._k(normalize_uid(uid)))) == 1
