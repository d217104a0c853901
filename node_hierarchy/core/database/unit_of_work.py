"""Transactional boundary shared by the node store and the relationship index.

A UnitOfWork hands out scoped sessions: everything done through the yielded
session is committed when the scope exits cleanly and rolled back on any
exception. Driver and SQLAlchemy errors are re-raised as StorageFailureError;
hierarchy errors pass through unchanged after the rollback.

Example:
    uow = UnitOfWork(session_factory)

    async with uow.scope("add_child", exclusive=True) as session:
        parent = await nodes.find_by_name(session, "root")
        ...
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from node_hierarchy.core.exceptions import StorageFailureError
from node_hierarchy.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)

DEFAULT_ADVISORY_LOCK_KEY = 7_204_118


class UnitOfWork:
    """Scoped commit-or-rollback sessions with optional mutation serialization.

    Exclusive scopes are serialized in-process with an ``asyncio.Lock``; on
    PostgreSQL they also take a transaction-scoped advisory lock so that
    writers in other processes queue behind the current one. Shared scopes
    (read-only work) take neither lock.

    Args:
        session_factory: Factory producing AsyncSession instances.
        serialize_mutations: Whether exclusive scopes take the locks.
        advisory_lock_key: Key passed to ``pg_advisory_xact_lock``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        serialize_mutations: bool = True,
        advisory_lock_key: int = DEFAULT_ADVISORY_LOCK_KEY,
    ) -> None:
        self._session_factory = session_factory
        self._serialize_mutations = serialize_mutations
        self._advisory_lock_key = advisory_lock_key
        self._write_lock = asyncio.Lock()

    @asynccontextmanager
    async def scope(
        self,
        operation: str,
        *,
        exclusive: bool = False,
    ) -> AsyncGenerator[AsyncSession]:
        """Open one atomic unit of work.

        Args:
            operation: Name used in logs and in StorageFailureError.
            exclusive: Serialize against other exclusive scopes.

        Yields:
            Session bound to a single open transaction.

        Raises:
            StorageFailureError: If the store fails at any point, including commit.
        """
        if exclusive and self._serialize_mutations:
            async with self._write_lock:
                async with self._transaction(operation, lock_store=True) as session:
                    yield session
        else:
            async with self._transaction(operation, lock_store=False) as session:
                yield session

    @asynccontextmanager
    async def _transaction(
        self,
        operation: str,
        *,
        lock_store: bool,
    ) -> AsyncGenerator[AsyncSession]:
        session = self._session_factory()
        try:
            try:
                await session.begin()
                if lock_store:
                    await self._acquire_store_lock(session)
                yield session
                await session.commit()
                _lazy.debug(lambda: f"uow.commit: {operation}")
            except SQLAlchemyError as exc:
                await self._rollback(session, operation)
                logger.error(
                    "Storage failure, unit of work rolled back",
                    extra={"operation": operation, "error": str(exc)},
                )
                raise StorageFailureError(
                    f"Storage failure during {operation}: {exc}",
                    operation=operation,
                ) from exc
            except BaseException:
                await self._rollback(session, operation)
                raise
        finally:
            await session.close()

    async def _acquire_store_lock(self, session: AsyncSession) -> None:
        bind = session.get_bind()
        if bind.dialect.name != "postgresql":
            return
        await session.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": self._advisory_lock_key},
        )

    @staticmethod
    async def _rollback(session: AsyncSession, operation: str) -> None:
        if session.in_transaction():
            await session.rollback()
        _lazy.debug(lambda: f"uow.rollback: {operation}")


__all__ = [
    "DEFAULT_ADVISORY_LOCK_KEY",
    "UnitOfWork",
]
