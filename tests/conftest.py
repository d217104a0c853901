"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: explicit settings instances, cache reset
    - Database Fixtures: in-memory SQLite engine with schema and root node
    - Service Fixtures: unit of work, repositories and HierarchyService
    - Inspection Fixtures: helpers reading the closure table back for assertions

Every database fixture works against a fresh ``sqlite+aiosqlite`` in-memory
database, so tests never share state.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlalchemy.orm import aliased

from node_hierarchy.core.database import UnitOfWork
from node_hierarchy.core.settings import DatabaseSettings, HierarchySettings, clear_all_caches
from node_hierarchy.features.nodes import (
    HierarchyService,
    Node,
    NodeRelationship,
    NodeRelationshipRepository,
    NodeRepository,
)
from node_hierarchy.infra.database import create_engine, create_session_factory, init_schema

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Keep test runs quiet and independent of a developer's local database
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

ROOT = "root"

ClosureRow = tuple[str, str, int]


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    """Drop cached settings before every test so env changes take effect."""
    clear_all_caches()


@pytest.fixture
def hierarchy_settings() -> HierarchySettings:
    """Hierarchy settings with the default root name."""
    return HierarchySettings(root_name=ROOT)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory SQLite engine with the schema and root node.

    Yields:
        Engine whose database already holds the ``root`` node.
    """
    engine = create_engine(DatabaseSettings(dsn="sqlite+aiosqlite:///:memory:"))
    await init_schema(engine, ROOT)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session inside an open transaction, rolled back after the test.

    Example:
        async def test_insert(db_session):
            db_session.add(Node(name="A"))
            await db_session.flush()
    """
    async with session_factory() as session:
        await session.begin()
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def uow(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWork:
    """Unit of work over the test database."""
    return UnitOfWork(session_factory)


@pytest.fixture
def node_repository() -> NodeRepository:
    return NodeRepository()


@pytest.fixture
def relationship_repository() -> NodeRelationshipRepository:
    return NodeRelationshipRepository()


@pytest.fixture
def service(
    uow: UnitOfWork,
    node_repository: NodeRepository,
    relationship_repository: NodeRelationshipRepository,
    hierarchy_settings: HierarchySettings,
) -> HierarchyService:
    """HierarchyService wired to fresh repositories and the test database."""
    return HierarchyService(
        uow,
        nodes=node_repository,
        relationships=relationship_repository,
        settings=hierarchy_settings,
    )


@pytest.fixture
def build_tree(service: HierarchyService) -> Callable[[list[tuple[str, str]]], Awaitable[None]]:
    """Add ``(parent, child)`` edges in order.

    Example:
        await build_tree([("root", "A"), ("A", "B")])
    """

    async def _build(edges: list[tuple[str, str]]) -> None:
        for parent, child in edges:
            await service.add_child(parent, child)

    return _build


# ============================================================================
# Inspection Fixtures
# ============================================================================


@pytest.fixture
def closure_rows(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], Awaitable[set[ClosureRow]]]:
    """Read every closure row back as ``(ancestor, descendant, depth)`` names."""

    async def _read() -> set[ClosureRow]:
        ancestor = aliased(Node)
        descendant = aliased(Node)
        stmt = (
            select(ancestor.name, descendant.name, NodeRelationship.depth)
            .join(ancestor, NodeRelationship.ancestor_id == ancestor.id)
            .join(descendant, NodeRelationship.descendant_id == descendant.id)
        )
        async with session_factory() as session:
            result = await session.execute(stmt)
            return {(row[0], row[1], row[2]) for row in result}

    return _read


@pytest.fixture
def node_names(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], Awaitable[set[str]]]:
    """Read the set of stored node names."""

    async def _read() -> set[str]:
        async with session_factory() as session:
            result = await session.execute(select(Node.name))
            return set(result.scalars().all())

    return _read


def expected_closure(parents: dict[str, str]) -> set[ClosureRow]:
    """Transitive closure of a child -> parent mapping."""
    rows: set[ClosureRow] = set()
    for node in parents:
        depth = 1
        ancestor = parents[node]
        while True:
            rows.add((ancestor, node, depth))
            if ancestor not in parents:
                break
            ancestor = parents[ancestor]
            depth += 1
    return rows


@pytest.fixture
def closure_of() -> Callable[[dict[str, str]], set[ClosureRow]]:
    """Expose expected_closure() to test modules."""
    return expected_closure
