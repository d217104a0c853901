"""Logging infrastructure.

Provides structured logging with:
- JSONL format for log aggregation
- Automatic context injection (operation, node, ...)
- QueueHandler + QueueListener for non-blocking I/O
- Per-handler log levels (console vs file)
- Lazy evaluation for expensive debug messages
- OpenTelemetry trace correlation

Basic usage:
    import logging
    from node_hierarchy.infra.logging import get_lazy_logger, set_log_context

    logger = logging.getLogger(__name__)
    _lazy = get_lazy_logger(__name__)

    set_log_context(operation="add_child")
    logger.info("Adding node")  # Includes operation
    _lazy.debug(lambda: f"Chain: {[row.ancestor_id for row in chain]}")
"""

from node_hierarchy.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from node_hierarchy.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from node_hierarchy.infra.logging.formatters import JSONFormatter
from node_hierarchy.infra.logging.lazy import (
    LazyLoggerAdapter,
    LazyString,
    get_lazy_logger,
    lazy,
)

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "LazyString",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "lazy",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
