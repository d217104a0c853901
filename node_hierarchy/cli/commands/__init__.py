"""CLI command modules."""

from node_hierarchy.cli.commands import db, nodes

__all__ = [
    "db",
    "nodes",
]
