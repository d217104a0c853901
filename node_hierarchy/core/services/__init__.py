"""Core service building blocks."""

from node_hierarchy.core.services.base import BaseService

__all__ = ["BaseService"]
