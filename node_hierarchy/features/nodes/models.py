"""Node and closure-table models.

The hierarchy is stored as a closure table: besides the direct parent edge,
every ancestor/descendant pair is materialized as its own row with the
distance between the two nodes.

    nodes                      node_relationships
    -----                      ------------------
    id   name                  id  ancestor_id  descendant_id  depth
    1    root                  1   1 (root)     2 (A)          1
    2    A                     2   2 (A)        3 (B)          1
    3    B                     3   1 (root)     3 (B)          2
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from node_hierarchy.core.database.base import Base, IntegerPKMixin, TimestampMixin

NAME_MAX_LENGTH = 255


class Node(Base, IntegerPKMixin, TimestampMixin):
    """A uniquely named tree node.

    Attributes:
        id: Opaque stable identifier used for joins.
        name: Unique, immutable node name.
    """

    __tablename__ = "nodes"
    __table_args__ = {"sqlite_autoincrement": True}

    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        unique=True,
        nullable=False,
        comment="Unique node name",
    )

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, name={self.name!r})"


class NodeRelationship(Base, IntegerPKMixin):
    """One ancestor/descendant pair of the closure table.

    Rows are never updated: a node that changes position has its rows
    deleted and re-inserted, so ``id`` doubles as the insertion sequence.

    Attributes:
        ancestor_id: The node higher up the tree.
        descendant_id: The node lower down the tree.
        depth: Edges between the two; 1 means immediate parent.
    """

    __tablename__ = "node_relationships"
    __table_args__ = (
        UniqueConstraint("ancestor_id", "descendant_id"),
        CheckConstraint("depth >= 1", name="depth_positive"),
        CheckConstraint("ancestor_id <> descendant_id", name="no_self_reference"),
        Index("ix_node_relationships_descendant_depth", "descendant_id", "depth"),
        {"sqlite_autoincrement": True},
    )

    ancestor_id: Mapped[int] = mapped_column(
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Ancestor node id",
    )
    descendant_id: Mapped[int] = mapped_column(
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Descendant node id",
    )
    depth: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Edges between ancestor and descendant (1 = immediate parent)",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp of row insertion",
    )

    ancestor: Mapped[Node] = relationship(foreign_keys=[ancestor_id], lazy="raise")
    descendant: Mapped[Node] = relationship(foreign_keys=[descendant_id], lazy="raise")

    def __repr__(self) -> str:
        return (
            f"NodeRelationship(ancestor_id={self.ancestor_id!r}, "
            f"descendant_id={self.descendant_id!r}, depth={self.depth!r})"
        )


__all__ = [
    "NAME_MAX_LENGTH",
    "Node",
    "NodeRelationship",
]
