"""Database infrastructure: engine, sessions and schema bootstrap."""

from node_hierarchy.infra.database.session import (
    check_connection,
    close_engine,
    create_engine,
    create_session_factory,
    init_schema,
)

__all__ = [
    "check_connection",
    "close_engine",
    "create_engine",
    "create_session_factory",
    "init_schema",
]
