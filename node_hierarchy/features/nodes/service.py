"""Hierarchy service.

Maintains the closure table under the three structural mutations (add a
leaf, delete a subtree, move a subtree) and answers descendant queries.
Every public method runs inside one unit of work: either every node and
relationship write of the call is committed, or none is.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from node_hierarchy.core.database import UnitOfWork
from node_hierarchy.core.exceptions import (
    InvalidMoveError,
    InvalidNodeNameError,
    NodeAlreadyExistsError,
    NodeAlreadyUnderParentError,
    NodeNotFoundError,
)
from node_hierarchy.core.services import BaseService
from node_hierarchy.core.settings import HierarchySettings, get_hierarchy_settings

from .repository import (
    NodeRelationshipRepository,
    NodeRepository,
    get_node_relationship_repository,
    get_node_repository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from .models import Node


class HierarchyService(BaseService):
    """Closure-table hierarchy engine.

    The service holds no tree state of its own: node identity lives in the
    node store, the edge set in the relationship index, and every worklist
    is local to a single call.

    Example:
        service = HierarchyService(UnitOfWork(session_factory))

        await service.add_child("root", "A")
        await service.add_child("A", "B")
        await service.list_descendants("root")  # ["A", "B"]

        await service.add_child("root", "D")
        await service.move_subtree("B", "D")
        await service.list_descendants("D")  # ["B"]
    """

    def __init__(
        self,
        uow: UnitOfWork,
        nodes: NodeRepository | None = None,
        relationships: NodeRelationshipRepository | None = None,
        settings: HierarchySettings | None = None,
    ) -> None:
        """Initialize hierarchy service.

        Args:
            uow: Unit of work shared by both stores.
            nodes: Node store. Defaults to the global NodeRepository.
            relationships: Relationship index. Defaults to the global
                NodeRelationshipRepository.
            settings: Hierarchy settings. Loaded via get_hierarchy_settings()
                when omitted.
        """
        super().__init__()
        self._uow = uow
        self._nodes = nodes or get_node_repository()
        self._relationships = relationships or get_node_relationship_repository()
        self._settings = settings or get_hierarchy_settings()

    # ──────────────────────────────────────────────────────────────
    # Public operations
    # ──────────────────────────────────────────────────────────────

    async def add_child(self, parent_name: str, child_name: str) -> Node:
        """Create ``child_name`` as a new leaf under ``parent_name``.

        Inserts the direct edge ``(parent, child, 1)`` followed by one row
        ``(a, child, k + 1)`` for every ancestor row ``(a, parent, k)``.

        Args:
            parent_name: Name of an existing node.
            child_name: Name for the new node; must be unused.

        Returns:
            The created node.

        Raises:
            InvalidNodeNameError: If ``child_name`` is blank or too long.
            NodeNotFoundError: If the parent does not exist.
            NodeAlreadyExistsError: If ``child_name`` is already taken.
            StorageFailureError: If the store fails; nothing is written.
        """
        self._validate_name(child_name)
        self.logger.info("Adding node", extra={"node": child_name, "parent": parent_name})

        async with self._uow.scope("add_child", exclusive=True) as session:
            parent = await self._find_node_or_raise(session, parent_name)

            if await self._nodes.find_by_name(session, child_name) is not None:
                self.logger.warning(
                    "Rejected add: name already registered",
                    extra={"node": child_name, "parent": parent_name},
                )
                raise NodeAlreadyExistsError.for_name(child_name)

            try:
                child = await self._nodes.create_named(session, child_name)
            except IntegrityError as exc:
                # Lost a race with a writer that does not share our lock
                raise NodeAlreadyExistsError.for_name(child_name) from exc

            inserted = await self._attach_to_parent(session, child, parent)

        self.logger.info(
            "Node added",
            extra={"node": child.name, "parent": parent_name, "relationships": inserted},
        )
        return child

    async def delete_subtree(self, parent_name: str, child_name: str) -> bool:
        """Delete ``child_name`` and everything below it.

        The direct edge between the two names is removed if present; the
        nodes do not have to be directly related. Each node of the subtree
        is visited exactly once: its rows as ancestor, its rows as
        descendant and the node itself are deleted.

        Args:
            parent_name: Name of an existing node.
            child_name: Name of the subtree root to delete.

        Returns:
            True once the whole subtree is gone.

        Raises:
            NodeNotFoundError: If either name does not exist.
            StorageFailureError: If the store fails; nothing is deleted.
        """
        self.logger.info("Deleting subtree", extra={"node": child_name, "parent": parent_name})

        async with self._uow.scope("delete_subtree", exclusive=True) as session:
            parent = await self._find_node_or_raise(session, parent_name)
            child = await self._find_node_or_raise(session, child_name)

            await self._relationships.delete_by_ancestor_and_descendant(session, parent, child)

            pending: deque[Node] = deque([child])
            visited = {child.id}
            removed: list[str] = []
            while pending:
                node = pending.pop()
                for row in await self._relationships.find_by_ancestor(session, node):
                    if row.descendant_id not in visited:
                        visited.add(row.descendant_id)
                        pending.append(row.descendant)

                as_ancestor = await self._relationships.delete_by_ancestor(session, node)
                as_descendant = await self._relationships.delete_by_descendant(session, node)
                removed.append(node.name)
                await self._nodes.delete(session, node)
                self._lazy.debug(
                    lambda: f"delete_subtree: removed {removed[-1]} "
                    f"({as_ancestor} rows as ancestor, {as_descendant} as descendant)"
                )

        self.logger.info(
            "Subtree deleted",
            extra={"node": child_name, "parent": parent_name, "nodes_removed": len(removed)},
        )
        return True

    async def move_subtree(self, child_name: str, new_parent_name: str) -> None:
        """Re-parent ``child_name`` (and its subtree) under ``new_parent_name``.

        Phase 1 rebuilds the moved node's own ancestor chain under the new
        parent. Phase 2 walks the subtree breadth-first and rebuilds every
        descendant's chain from its (unchanged) immediate parent, parents
        strictly before their children.

        Args:
            child_name: Name of the node to move.
            new_parent_name: Name of the node to move it under.

        Raises:
            NodeNotFoundError: If either name does not exist.
            NodeAlreadyUnderParentError: If ``new_parent_name`` already is
                the immediate parent.
            InvalidMoveError: If the move targets the node itself or one of
                its descendants, or the node is the root.
            StorageFailureError: If the store fails; nothing is rewritten.
        """
        self.logger.info("Moving subtree", extra={"node": child_name, "parent": new_parent_name})

        async with self._uow.scope("move_subtree", exclusive=True) as session:
            child = await self._find_node_or_raise(session, child_name)
            new_parent = await self._find_node_or_raise(session, new_parent_name)
            await self._check_move(session, child, new_parent)

            # Phase 1: the moved node itself
            await self._relationships.delete_by_descendant(session, child)
            await self._attach_to_parent(session, child, new_parent)

            # Phase 2: everything below it
            pending: deque[Node] = deque([child])
            rerooted = {child.id}
            while pending:
                current = pending.popleft()
                for row in await self._relationships.find_by_ancestor_level_order(session, current):
                    descendant = row.descendant
                    if descendant.id in rerooted:
                        continue

                    direct = await self._relationships.find_direct_parent(session, descendant)
                    if direct is None:
                        raise InvalidMoveError(
                            f"Node {descendant.name!r} has no immediate parent",
                            extra={"name": descendant.name},
                        )
                    direct_parent = direct.ancestor

                    await self._relationships.delete_by_descendant(session, descendant)
                    await self._attach_to_parent(session, descendant, direct_parent)
                    rerooted.add(descendant.id)
                    pending.append(descendant)

        self.logger.info(
            "Subtree moved",
            extra={
                "node": child_name,
                "parent": new_parent_name,
                "nodes_rerooted": len(rerooted),
            },
        )

    async def list_descendants(self, ancestor_name: str) -> list[str]:
        """Names of every node below ``ancestor_name``, oldest relationship first.

        Raises:
            NodeNotFoundError: If the name does not exist.
        """
        async with self._uow.scope("list_descendants") as session:
            ancestor = await self._find_node_or_raise(session, ancestor_name)
            rows = await self._relationships.find_by_ancestor(session, ancestor)
            names = [row.descendant.name for row in rows]

        self._lazy.debug(lambda: f"list_descendants: {ancestor_name} -> {names}")
        return names

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    async def _find_node_or_raise(self, session: AsyncSession, name: str) -> Node:
        node = await self._nodes.find_by_name(session, name)
        if node is None:
            self.logger.warning("Node not found", extra={"node": name})
            raise NodeNotFoundError(name)
        return node

    async def _attach_to_parent(self, session: AsyncSession, node: Node, parent: Node) -> int:
        """Insert ``node``'s direct edge and its copy of ``parent``'s ancestor chain.

        Returns:
            Number of relationship rows inserted.
        """
        chain = await self._relationships.find_by_descendant(session, parent)
        rows = [(parent.id, node.id, 1)]
        rows.extend((row.ancestor_id, node.id, row.depth + 1) for row in chain)
        await self._relationships.insert_many(session, rows)

        self._lazy.debug(
            lambda: f"attach: {node.name} under {parent.name}, {len(rows)} rows "
            f"(ancestors={[ancestor_id for ancestor_id, _, _ in rows]})"
        )
        return len(rows)

    async def _check_move(self, session: AsyncSession, child: Node, new_parent: Node) -> None:
        if child.id == new_parent.id:
            self.logger.warning("Rejected move: node under itself", extra={"node": child.name})
            raise InvalidMoveError(
                f"Cannot move node {child.name!r} under itself",
                extra={"name": child.name, "parent": new_parent.name},
            )

        current = await self._relationships.find_direct_parent(session, child)
        if current is None:
            self.logger.warning("Rejected move: root node", extra={"node": child.name})
            raise InvalidMoveError(
                f"Cannot move root node {child.name!r}",
                extra={"name": child.name, "parent": new_parent.name},
            )

        if current.ancestor_id == new_parent.id:
            self.logger.warning(
                "Rejected move: already under parent",
                extra={"node": child.name, "parent": new_parent.name},
            )
            raise NodeAlreadyUnderParentError(child.name, new_parent.name)

        if await self._relationships.is_ancestor(session, child, new_parent):
            self.logger.warning(
                "Rejected move: target is a descendant",
                extra={"node": child.name, "parent": new_parent.name},
            )
            raise InvalidMoveError(
                f"Cannot move node {child.name!r} under its own descendant {new_parent.name!r}",
                extra={"name": child.name, "parent": new_parent.name},
            )

    def _validate_name(self, name: str) -> None:
        if not name or not name.strip():
            raise InvalidNodeNameError(name, "name must not be blank")
        limit = self._settings.max_name_length
        if len(name) > limit:
            raise InvalidNodeNameError(name, f"name must be at most {limit} characters")


def create_hierarchy_service(
    session_factory: async_sessionmaker[AsyncSession],
    settings: HierarchySettings | None = None,
) -> HierarchyService:
    """Build a HierarchyService with its own UnitOfWork.

    Args:
        session_factory: Factory producing sessions for both stores.
        settings: Hierarchy settings. Loaded via get_hierarchy_settings()
            when omitted.

    Returns:
        Ready-to-use service.
    """
    hierarchy_settings = settings or get_hierarchy_settings()
    uow = UnitOfWork(
        session_factory,
        serialize_mutations=hierarchy_settings.serialize_mutations,
        advisory_lock_key=hierarchy_settings.advisory_lock_key,
    )
    return HierarchyService(uow, settings=hierarchy_settings)


__all__ = [
    "HierarchyService",
    "create_hierarchy_service",
]
