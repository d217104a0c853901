"""Database engine, session factory and schema bootstrap."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, make_url, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from node_hierarchy.core.database.base import Base
from node_hierarchy.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from node_hierarchy.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create the async engine for the configured backend.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so the ON DELETE
    CASCADE from nodes to node_relationships is enforced there too.

    Args:
        settings: Database settings. Loaded via get_db_settings() when omitted.

    Returns:
        AsyncEngine bound to the configured URL.
    """
    db_settings = settings or get_db_settings()
    url = make_url(db_settings.get_sqlalchemy_url())
    engine_kwargs = db_settings.sqlalchemy_engine_kwargs()
    engine_kwargs["echo"] = db_settings.echo or get_app_settings().debug
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # Every pooled connection would otherwise open its own empty database
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(url, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.debug(
        "Database engine created",
        extra={"dialect": engine.dialect.name, "driver": engine.dialect.driver},
    )
    return engine


def _enable_sqlite_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    _ = connection_record
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by UnitOfWork.

    Sessions do not expire on commit so nodes returned from a unit of work
    stay readable after it closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_schema(engine: AsyncEngine, root_name: str) -> bool:
    """Create missing tables and seed the root node.

    Idempotent: existing tables are left alone (``checkfirst``) and the root
    is only inserted when no node with ``root_name`` exists.

    Args:
        engine: Engine to create the schema on.
        root_name: Name of the root node.

    Returns:
        True if the root node was inserted by this call.
    """
    # Model import registers the tables on Base.metadata
    from node_hierarchy.features.nodes.models import Node

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async with create_session_factory(engine)() as session, session.begin():
        existing = await session.execute(select(Node.id).where(Node.name == root_name))
        if existing.first() is not None:
            logger.info("Schema ready, root node already present", extra={"root": root_name})
            return False
        session.add(Node(name=root_name))

    logger.info("Schema created and root node seeded", extra={"root": root_name})
    return True


async def check_connection(engine: AsyncEngine) -> None:
    """Run ``SELECT 1`` to verify the database is reachable.

    Raises:
        SQLAlchemyError: If the connection fails.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose of the engine's connection pool."""
    logger.debug("Closing database engine")
    await engine.dispose()


__all__ = [
    "check_connection",
    "close_engine",
    "create_engine",
    "create_session_factory",
    "init_schema",
]
