"""Node and closure-table repositories.

NodeRepository is the node store (lookup/create/delete by unique name).
NodeRelationshipRepository is the relationship index over the closure table.
Neither commits: both run inside the caller's unit of work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import joinedload

from node_hierarchy.core.database.repository import BaseRepository
from node_hierarchy.infra.logging import get_lazy_logger

from .models import Node, NodeRelationship

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

_lazy = get_lazy_logger(__name__)


class NodeRepository(BaseRepository[Node]):
    """Repository for Node records keyed by unique name.

    Example:
        repo = NodeRepository()
        node = await repo.find_by_name(session, "root")
    """

    def __init__(self) -> None:
        """Initialize node repository."""
        super().__init__(Node)

    async def find_by_name(self, session: AsyncSession, name: str) -> Node | None:
        """Get a node by its unique name.

        Args:
            session: Database session.
            name: Node name.

        Returns:
            Node if found, None otherwise.
        """
        return await self.get_by(session, Node.name, name)

    async def create_named(self, session: AsyncSession, name: str) -> Node:
        """Insert a new node with the given name.

        The unique constraint on ``nodes.name`` rejects duplicates at flush.
        """
        return await self.create(session, Node(name=name))


class NodeRelationshipRepository(BaseRepository[NodeRelationship]):
    """Repository for closure-table rows.

    Every ordered read orders by ``id``, the row insertion sequence, so
    results do not depend on the physical scan order of the store.

    Example:
        repo = NodeRelationshipRepository()
        rows = await repo.find_by_ancestor(session, node)
        names = [row.descendant.name for row in rows]
    """

    def __init__(self) -> None:
        """Initialize relationship repository."""
        super().__init__(NodeRelationship)

    async def find_by_ancestor(
        self, session: AsyncSession, ancestor: Node
    ) -> Sequence[NodeRelationship]:
        """Get every row where ``ancestor`` is the ancestor, oldest first.

        The descendant node is eagerly loaded.
        """
        stmt = (
            select(NodeRelationship)
            .where(NodeRelationship.ancestor_id == ancestor.id)
            .options(joinedload(NodeRelationship.descendant))
            .order_by(NodeRelationship.id)
        )
        result = await session.execute(stmt)
        rows = result.scalars().all()

        _lazy.debug(lambda: f"find_by_ancestor: {ancestor.name} -> {len(rows)} rows")
        return rows

    async def find_by_ancestor_level_order(
        self, session: AsyncSession, ancestor: Node
    ) -> Sequence[NodeRelationship]:
        """Get every row under ``ancestor`` ordered by depth, then insertion.

        Walking this list visits each descendant after its own parent.
        """
        stmt = (
            select(NodeRelationship)
            .where(NodeRelationship.ancestor_id == ancestor.id)
            .options(joinedload(NodeRelationship.descendant))
            .order_by(NodeRelationship.depth, NodeRelationship.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def find_by_descendant(
        self, session: AsyncSession, descendant: Node
    ) -> Sequence[NodeRelationship]:
        """Get the full ancestor chain of ``descendant`` (all depths)."""
        stmt = (
            select(NodeRelationship)
            .where(NodeRelationship.descendant_id == descendant.id)
            .order_by(NodeRelationship.depth)
        )
        result = await session.execute(stmt)
        rows = result.scalars().all()

        _lazy.debug(lambda: f"find_by_descendant: {descendant.name} -> {len(rows)} rows")
        return rows

    async def find_direct_parent(
        self, session: AsyncSession, descendant: Node
    ) -> NodeRelationship | None:
        """Get the unique depth-1 row for ``descendant``, with the parent loaded.

        Returns None for the root.
        """
        stmt = (
            select(NodeRelationship)
            .where(
                NodeRelationship.descendant_id == descendant.id,
                NodeRelationship.depth == 1,
            )
            .options(joinedload(NodeRelationship.ancestor))
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_ancestor(
        self, session: AsyncSession, ancestor: Node, descendant: Node
    ) -> bool:
        """Check whether a row ``(ancestor, descendant, *)`` exists."""
        stmt = select(NodeRelationship.id).where(
            NodeRelationship.ancestor_id == ancestor.id,
            NodeRelationship.descendant_id == descendant.id,
        )
        result = await session.execute(stmt)
        return result.first() is not None

    async def insert(
        self,
        session: AsyncSession,
        ancestor_id: int,
        descendant_id: int,
        depth: int,
    ) -> None:
        """Insert one closure row."""
        await self.insert_many(session, [(ancestor_id, descendant_id, depth)])

    async def insert_many(
        self,
        session: AsyncSession,
        rows: Sequence[tuple[int, int, int]],
    ) -> None:
        """Insert closure rows in the given order.

        Args:
            session: Database session.
            rows: ``(ancestor_id, descendant_id, depth)`` triples; ids are
                assigned in list order.
        """
        if not rows:
            return
        await session.execute(
            insert(NodeRelationship),
            [
                {"ancestor_id": ancestor_id, "descendant_id": descendant_id, "depth": depth}
                for ancestor_id, descendant_id, depth in rows
            ],
        )
        _lazy.debug(lambda: f"insert_many: {len(rows)} rows")

    async def delete_by_ancestor(self, session: AsyncSession, ancestor: Node) -> int:
        """Delete every row where ``ancestor`` is the ancestor."""
        result = await session.execute(
            delete(NodeRelationship).where(NodeRelationship.ancestor_id == ancestor.id)
        )
        return _rowcount(result)

    async def delete_by_descendant(self, session: AsyncSession, descendant: Node) -> int:
        """Delete every row where ``descendant`` is the descendant (its whole ancestor chain)."""
        result = await session.execute(
            delete(NodeRelationship).where(NodeRelationship.descendant_id == descendant.id)
        )
        return _rowcount(result)

    async def delete_by_ancestor_and_descendant(
        self, session: AsyncSession, ancestor: Node, descendant: Node
    ) -> int:
        """Delete the row for one ancestor/descendant pair, if present."""
        result = await session.execute(
            delete(NodeRelationship).where(
                NodeRelationship.ancestor_id == ancestor.id,
                NodeRelationship.descendant_id == descendant.id,
            )
        )
        return _rowcount(result)


def _rowcount(result: object) -> int:
    count = getattr(result, "rowcount", None)
    return count if isinstance(count, int) and count >= 0 else 0


# Global singleton instances
_node_repository: NodeRepository | None = None
_relationship_repository: NodeRelationshipRepository | None = None


def get_node_repository() -> NodeRepository:
    """Get the global NodeRepository instance.

    Returns:
        Singleton NodeRepository instance.
    """
    global _node_repository
    if _node_repository is None:
        _node_repository = NodeRepository()
    return _node_repository


def get_node_relationship_repository() -> NodeRelationshipRepository:
    """Get the global NodeRelationshipRepository instance.

    Returns:
        Singleton NodeRelationshipRepository instance.
    """
    global _relationship_repository
    if _relationship_repository is None:
        _relationship_repository = NodeRelationshipRepository()
    return _relationship_repository


__all__ = [
    "NodeRelationshipRepository",
    "NodeRepository",
    "get_node_relationship_repository",
    "get_node_repository",
]
