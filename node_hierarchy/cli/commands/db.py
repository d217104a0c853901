"""Database management commands.

Example:bash
    # Create tables and seed the root node
    node-hierarchy db init

    # Show which database the CLI talks to
    node-hierarchy db info
"""

import sys

import click
from sqlalchemy.exc import SQLAlchemyError

from node_hierarchy.cli.utils import coro, error, header, info, success
from node_hierarchy.core.settings import get_db_settings, get_hierarchy_settings
from node_hierarchy.infra.database import (
    check_connection,
    close_engine,
    create_engine,
    init_schema,
)


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Create the hierarchy tables and seed the root node (idempotent)."""
    db_settings = get_db_settings()
    root_name = get_hierarchy_settings().root_name

    info(f"Initializing schema on {db_settings.get_sqlalchemy_url().split('@')[-1]}")

    engine = create_engine(db_settings)
    try:
        await check_connection(engine)
        seeded = await init_schema(engine, root_name)
    except SQLAlchemyError as e:
        error(f"Failed to initialize database: {e}")
        sys.exit(1)
    finally:
        await close_engine(engine)

    if seeded:
        success(f"Schema created, root node '{root_name}' seeded")
    else:
        success(f"Schema ready, root node '{root_name}' already present")


@db.command(name="info")
def info_cmd() -> None:
    """Show database connection settings."""
    db_settings = get_db_settings()
    hierarchy_settings = get_hierarchy_settings()

    header("Database Information")
    click.echo(f"  Dialect:      {'sqlite' if db_settings.is_sqlite else 'postgresql'}")
    click.echo(f"  URL:          {db_settings.get_sqlalchemy_url().split('@')[-1]}")
    click.echo(f"  Echo SQL:     {db_settings.echo}")
    click.echo(f"  Root node:    {hierarchy_settings.root_name}")
    click.echo(f"  Serialized:   {hierarchy_settings.serialize_mutations}")
