"""Principal row model backing the SQL principal repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from credkeep.core.extensions import db
from credkeep.services._shared.dto import EMAIL_PROVIDER, normalize_uid

from .base import PKMixin, ReprMixin, TimestampMixin


class PrincipalRow(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Persistent principal with its serialized credential map.

    Fields
    ------
    uid : str
        Unique identifier. Email identifiers are stored lower-cased.
    provider : str
        ``"email"`` or the OAuth provider name.
    tokens : dict
        Credential map keyed by client id (digests only, see
        :mod:`credkeep.schemas.credentials`).
    version : int
        Optimistic-lock counter compared on every update.
    """

    __tablename__ = "principals"
    __repr_attrs__ = ("id", "uid", "version")

    uid: Mapped[str] = mapped_column(String(254), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False, default=EMAIL_PROVIDER)
    tokens: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("uid", name="uq_principals_uid"),
        Index("ix_principals_uid", "uid"),
    )

    @validates("uid")
    def _normalize_uid(self, key: str, value: str) -> str:
        """
        Normalize the identifier before it reaches the database.

        :raises ValueError: If the identifier is blank.
        """
        return normalize_uid(value)
