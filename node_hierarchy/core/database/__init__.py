"""Core database package: declarative base, mixins, repository and unit of work.

Base Classes and Mixins:
    - Base: Declarative base with naming convention and auto table naming
    - IntegerPKMixin: Auto-incrementing integer primary key
    - TimestampMixin: created_at, updated_at tracking

Repository:
    - BaseRepository[T]: Generic CRUD with explicit session passing

Transactions:
    - UnitOfWork: One commit-or-rollback scope per hierarchy operation

Example:
    from node_hierarchy.core.database import BaseRepository, UnitOfWork

    uow = UnitOfWork(session_factory)
    async with uow.scope("list_descendants") as session:
        node = await repo.get_by(session, Node.name, "root")
"""

from __future__ import annotations

from node_hierarchy.core.database.base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
    TimestampMixin,
)
from node_hierarchy.core.database.repository import BaseRepository
from node_hierarchy.core.database.unit_of_work import DEFAULT_ADVISORY_LOCK_KEY, UnitOfWork

__all__ = [
    "DEFAULT_ADVISORY_LOCK_KEY",
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "TimestampMixin",
    "UnitOfWork",
]
