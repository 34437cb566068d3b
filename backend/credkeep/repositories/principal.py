"""Principal row repository for persistence-only lookups and versioned writes."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from credkeep.core.extensions import db
from credkeep.models.principal import PrincipalRow
from credkeep.services._shared.dto import normalize_uid


class PrincipalRowRepository:
    """Persistence-only repository for :class:`PrincipalRow`.

    It never commits or rolls back; the Unit of Work owns the transaction.

    :param session: SQLAlchemy session; defaults to the Flask-scoped one.
    """

    model = PrincipalRow

    def __init__(self, session: Session | None = None) -> None:
        self.session = session or db.session

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_uid(self, uid: str) -> PrincipalRow | None:
        """Fetch a principal row by (normalized) identifier.

        :param uid: Identifier to normalise and search.
        :type uid: str
        :returns: Row or ``None`` when not found.
        :rtype: PrincipalRow | None
        """
        stmt = select(PrincipalRow).where(PrincipalRow.uid == normalize_uid(uid))
        result = self.session.execute(stmt).scalars().first()
        return cast(PrincipalRow | None, result)

    def exists_by_uid(self, uid: str) -> bool:
        stmt = select(PrincipalRow.id).where(PrincipalRow.uid == normalize_uid(uid))
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Writes ----------------------------

    def add(self, row: PrincipalRow) -> PrincipalRow:
        """Stage a new row and flush so its primary key is assigned."""
        self.session.add(row)
        self.session.flush()
        return row

    def update_tokens(self, uid: str, tokens: dict[str, Any], *, expected_version: int) -> bool:
        """Replace the credential map if ``version`` still equals ``expected_version``.

        The comparison and the increment run in one ``UPDATE`` statement, so
        two writers holding the same version cannot both succeed.

        :returns: ``True`` when exactly one row was updated.
        :rtype: bool
        """
        stmt = (
            update(PrincipalRow)
            .where(
                PrincipalRow.uid == normalize_uid(uid),
                PrincipalRow.version == expected_version,
            )
            .values(tokens=tokens, version=PrincipalRow.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return cast(int, result.rowcount) == 1  # type: ignore[attr-defined]

    def delete_by_uid(self, uid: str) -> bool:
        row = self.get_by_uid(uid)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True
