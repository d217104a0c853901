"""Main CLI entry point for node-hierarchy management commands."""

import click

from node_hierarchy.cli.commands import db, nodes
from node_hierarchy.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="node-hierarchy")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Node Hierarchy CLI - manage a closure-table tree of named nodes.

    \b
    Command Groups:
      db         Schema bootstrap and connection info
      nodes      Add, delete, move and list nodes

    \b
    Quick Start:
      node-hierarchy db init                  # Create tables, seed root
      node-hierarchy nodes add root A         # Add A under root
      node-hierarchy nodes descendants root   # List everything below root
    """
    ctx.ensure_object(dict)


cli.add_command(db.db)
cli.add_command(nodes.nodes)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
