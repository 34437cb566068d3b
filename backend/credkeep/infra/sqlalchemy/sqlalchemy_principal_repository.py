# credkeep/infra/sqlalchemy/sqlalchemy_principal_repository.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from credkeep.models.principal import PrincipalRow
from credkeep.schemas.credentials import dump_credentials, load_credentials
from credkeep.services._shared.dto import Principal, normalize_uid
from credkeep.services._shared.errors import (
    ConflictError,
    NotFoundError,
    RepositoryConflictError,
)
from credkeep.services._shared.ports import PrincipalRepository
from credkeep.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


@dataclass(slots=True)
class SQLAlchemyPrincipalRepository(PrincipalRepository):
    """
    Principal repository over the ``principals`` table.

    Each call runs in its own :class:`SQLAlchemyUnitOfWork`. Saves are a single
    version-guarded ``UPDATE``; zero affected rows means another writer won.

    .. note::
       Requires an active Flask app context when the default unit of work
       (bound to ``db.session``) is used.
    """

    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = field(default=SQLAlchemyUnitOfWork)

    @staticmethod
    def _to_principal(row: PrincipalRow) -> Principal:
        return Principal(
            uid=row.uid,
            provider=row.provider,
            credentials=load_credentials(row.tokens),
            version=row.version,
            id=row.id,
        )

    def load(self, uid: str) -> Principal:
        with self.uow_factory() as uow:
            row = uow.principals.get_by_uid(uid)
            if row is None:
                raise NotFoundError("Principal", normalize_uid(uid))
            return self._to_principal(row)

    def save(self, principal: Principal) -> None:
        tokens = dump_credentials(principal.credentials)
        with self.uow_factory() as uow:
            updated = uow.principals.update_tokens(
                principal.uid, tokens, expected_version=principal.version
            )
            if not updated:
                if not uow.principals.exists_by_uid(principal.uid):
                    raise NotFoundError("Principal", normalize_uid(principal.uid))
                raise RepositoryConflictError(normalize_uid(principal.uid), principal.version)
        principal.version += 1

    def add(self, principal: Principal) -> Principal:
        key_uid = normalize_uid(principal.uid)
        try:
            with self.uow_factory() as uow:
                if uow.principals.exists_by_uid(key_uid):
                    raise ConflictError("Principal", f"uid {key_uid!r} already registered")
                row = uow.principals.add(
                    PrincipalRow(
                        uid=key_uid,
                        provider=principal.provider,
                        tokens=dump_credentials(principal.credentials),
                        version=1,
                    )
                )
                created = self._to_principal(row)
        except IntegrityError as exc:
            # Lost a race against a concurrent registration of the same uid
            raise ConflictError("Principal", f"uid {key_uid!r} already registered") from exc
        return created

    def delete(self, uid: str) -> bool:
        with self.uow_factory() as uow:
            return uow.principals.delete_by_uid(uid)
