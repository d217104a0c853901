"""Node hierarchy commands.

Example:bash
    node-hierarchy nodes add root A
    node-hierarchy nodes add A B
    node-hierarchy nodes descendants root --json
    node-hierarchy nodes move B root
    node-hierarchy nodes delete root A
"""

import sys

import click

from node_hierarchy.cli.utils import (
    coro,
    error,
    header,
    hierarchy_service,
    success,
    tree_line,
    warning,
)
from node_hierarchy.core.exceptions import HierarchyError
from node_hierarchy.features.nodes import DescendantsResponse, NodeResponse
from node_hierarchy.infra.logging import set_log_context


@click.group(name="nodes")
def nodes() -> None:
    """Add, delete, move and list nodes."""


@nodes.command()
@click.argument("parent")
@click.argument("child")
@click.option("--json", "as_json", is_flag=True, help="Print the created node as JSON")
@coro
async def add(parent: str, child: str, as_json: bool) -> None:
    """Add CHILD as a new leaf under PARENT."""
    set_log_context(operation="add_child")
    try:
        async with hierarchy_service() as service:
            node = await service.add_child(parent, child)
    except HierarchyError as e:
        error(e.detail)
        sys.exit(1)

    if as_json:
        click.echo(NodeResponse.model_validate(node).model_dump_json())
        return
    success(f"Added '{node.name}' under '{parent}'")


@nodes.command()
@click.argument("parent")
@click.argument("child")
@coro
async def delete(parent: str, child: str) -> None:
    """Delete CHILD and its whole subtree, detaching it from PARENT."""
    set_log_context(operation="delete_subtree")
    try:
        async with hierarchy_service() as service:
            await service.delete_subtree(parent, child)
    except HierarchyError as e:
        error(e.detail)
        sys.exit(1)

    success(f"Deleted '{child}' and its subtree")


@nodes.command()
@click.argument("child")
@click.argument("new_parent")
@coro
async def move(child: str, new_parent: str) -> None:
    """Move CHILD (with its subtree) under NEW_PARENT."""
    set_log_context(operation="move_subtree")
    try:
        async with hierarchy_service() as service:
            await service.move_subtree(child, new_parent)
    except HierarchyError as e:
        error(e.detail)
        sys.exit(1)

    success(f"Moved '{child}' under '{new_parent}'")


@nodes.command()
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@coro
async def descendants(name: str, as_json: bool) -> None:
    """List every node below NAME, oldest first."""
    set_log_context(operation="list_descendants")
    try:
        async with hierarchy_service() as service:
            names = await service.list_descendants(name)
    except HierarchyError as e:
        error(e.detail)
        sys.exit(1)

    response = DescendantsResponse(ancestor=name, descendants=names)
    if as_json:
        click.echo(response.model_dump_json())
        return

    header(f"Descendants of '{name}'")
    if not names:
        warning("No descendants")
        return
    for index, descendant in enumerate(names, start=1):
        tree_line(descendant, index)
