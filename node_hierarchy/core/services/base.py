"""Base service class for business logic."""

from __future__ import annotations

import logging

from node_hierarchy.infra.logging import get_lazy_logger


class BaseService:
    """Base class for all service classes.

    Loggers:
        - self.logger: Standard logger for INFO/WARNING/ERROR (always evaluated)
        - self._lazy: Lazy logger for DEBUG (zero overhead when DEBUG disabled)

    Example:
        class HierarchyService(BaseService):
            async def add_child(self, parent_name: str, child_name: str) -> Node:
                self.logger.info("Adding node", extra={"node": child_name})
                ...
                self._lazy.debug(lambda: f"Chain: {[row.ancestor_id for row in chain]}")
    """

    def __init__(self) -> None:
        """Initialize base service with loggers."""
        class_name = self.__class__.__name__
        self.logger = logging.getLogger(class_name)
        self._lazy = get_lazy_logger(class_name)
