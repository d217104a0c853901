"""CLI utilities for running async operations and formatting output."""

from node_hierarchy.cli.utils.async_runner import coro
from node_hierarchy.cli.utils.formatters import (
    error,
    header,
    info,
    success,
    tree_line,
    warning,
)
from node_hierarchy.cli.utils.services import hierarchy_service

__all__ = [
    "coro",
    "error",
    "header",
    "hierarchy_service",
    "info",
    "success",
    "tree_line",
    "warning",
]
