"""Node hierarchy feature.

Provides a closure-table tree of uniquely named nodes:
- Add a leaf under an existing node
- Delete a node together with its whole subtree
- Move a subtree under a different parent
- List every descendant of a node

Usage:
    from node_hierarchy.features.nodes import create_hierarchy_service

    service = create_hierarchy_service(session_factory)
    await service.add_child("root", "A")
    names = await service.list_descendants("root")
"""

from __future__ import annotations

from .models import NAME_MAX_LENGTH, Node, NodeRelationship
from .repository import (
    NodeRelationshipRepository,
    NodeRepository,
    get_node_relationship_repository,
    get_node_repository,
)
from .schemas import DescendantsResponse, NodeResponse
from .service import HierarchyService, create_hierarchy_service

__all__ = [
    # Models
    "NAME_MAX_LENGTH",
    "Node",
    "NodeRelationship",
    # Repositories
    "NodeRelationshipRepository",
    "NodeRepository",
    "get_node_relationship_repository",
    "get_node_repository",
    # Schemas
    "DescendantsResponse",
    "NodeResponse",
    # Service
    "HierarchyService",
    "create_hierarchy_service",
]
