"""Unit of Work abstractions and the SQLAlchemy implementation.

The SQL principal repository opens one unit of work per port call so every
``load``/``save`` is its own bounded transaction.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
]
