"""Per-command database resources for CLI commands."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from node_hierarchy.core.settings import get_db_settings, get_hierarchy_settings
from node_hierarchy.features.nodes import create_hierarchy_service
from node_hierarchy.infra.database import close_engine, create_engine, create_session_factory

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from node_hierarchy.features.nodes import HierarchyService


@asynccontextmanager
async def hierarchy_service() -> AsyncGenerator[HierarchyService]:
    """Yield a HierarchyService bound to a fresh engine, disposed on exit.

    Example:
        async with hierarchy_service() as service:
            await service.add_child("root", "A")
    """
    engine = create_engine(get_db_settings())
    try:
        yield create_hierarchy_service(
            create_session_factory(engine),
            settings=get_hierarchy_settings(),
        )
    finally:
        await close_engine(engine)
