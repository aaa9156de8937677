import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
import yaml
from rich.console import Console
from rich.tree import Tree

from haiku.tree.client import HaikuTree
from haiku.tree.config import (
    AppConfig,
    Config,
    find_config_file,
    generate_default_config,
    load_yaml_config,
    set_config,
)
from haiku.tree.exceptions import NodeNotFoundError, TreeError
from haiku.tree.logging import configure_cli_logging
from haiku.tree.store.exceptions import ReadOnlyError
from haiku.tree.store.models.node import Node

T = TypeVar("T")

console = Console(soft_wrap=True)

cli = typer.Typer(
    name="haiku-tree",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)

DbOption = typer.Option(None, "--db", help="Path to the database directory")


def _parse_meta_options(meta: list[str] | None) -> dict[str, Any]:
    """Parse repeated ``key=value`` options into a metadata dict.

    Values are decoded as JSON when possible and kept as strings otherwise.
    """
    result: dict[str, Any] = {}
    for item in meta or []:
        if "=" not in item:
            raise typer.BadParameter(f"Expected key=value, got: {item}")
        key, value = item.split("=", 1)
        if not key:
            raise typer.BadParameter(f"Empty key in: {item}")
        try:
            result[key] = json.loads(value)
        except json.JSONDecodeError:
            result[key] = value
    return result


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning expected failures into exit code 1."""
    try:
        return asyncio.run(coro)
    except (TreeError, ReadOnlyError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _label(node: Node) -> str:
    if node.title:
        return f"{node.title} [dim]({node.id})[/dim]"
    return str(node.id)


@cli.callback()
def main(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="Path to the configuration file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """Materialized-path trees over LanceDB documents."""
    configure_cli_logging(level=logging.DEBUG if verbose else logging.INFO)
    if config_file:
        try:
            path = find_config_file(config_file)
        except FileNotFoundError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        assert path is not None
        set_config(AppConfig.model_validate(load_yaml_config(path)))


@cli.command("init-config", help="Write a default configuration file")
def init_config(
    output: Path = typer.Argument(
        Path("haiku.tree.yaml"), help="Where to write the configuration"
    ),
) -> None:
    if output.exists():
        console.print(f"[red]Error: {output} already exists[/red]")
        raise typer.Exit(1)
    with open(output, "w") as f:
        yaml.dump(generate_default_config(), f, sort_keys=False)
    console.print(f"[green]Configuration written to {output}[/green]")


@cli.command("add", help="Add a node")
def add(
    parent: str | None = typer.Option(None, "--parent", help="ID of the parent node"),
    title: str | None = typer.Option(None, "--title", help="Title of the node"),
    meta: list[str] | None = typer.Option(
        None, "--meta", help="Metadata as key=value, may be repeated"
    ),
    db: Path | None = DbOption,
) -> None:
    metadata = _parse_meta_options(meta)

    async def _add() -> Node:
        async with HaikuTree(db_path=db, config=Config, create=True) as tree:
            return await tree.create_node(
                parent_id=parent, title=title, metadata=metadata
            )

    node = _run(_add())
    typer.echo(node.id)


@cli.command("move", help="Move a node under another node")
def move(
    node_id: str = typer.Argument(..., help="ID of the node to move"),
    parent: str | None = typer.Option(
        None, "--parent", help="ID of the new parent, omit to make it a root"
    ),
    db: Path | None = DbOption,
) -> None:
    async def _move() -> Node:
        async with HaikuTree(db_path=db, config=Config) as tree:
            return await tree.move_node(node_id, parent)

    node = _run(_move())
    console.print(f"Moved {node.id}, depth is now {node.depth}")


@cli.command("delete", help="Delete a single node, leaving its children in place")
def delete(
    node_id: str = typer.Argument(..., help="ID of the node to delete"),
    db: Path | None = DbOption,
) -> None:
    async def _delete() -> bool:
        async with HaikuTree(db_path=db, config=Config) as tree:
            return await tree.delete_node(node_id)

    if not _run(_delete()):
        console.print(f"[red]Error: Node not found: {node_id}[/red]")
        raise typer.Exit(1)
    console.print(f"Deleted {node_id}")


@cli.command("show", help="Print a tree, or every tree when no node is given")
def show(
    node_id: str | None = typer.Argument(None, help="ID of the subtree root"),
    db: Path | None = DbOption,
) -> None:
    async def _show() -> list[Tree]:
        async with HaikuTree(db_path=db, config=Config) as tree:
            if node_id is None:
                starts = await tree.roots()
            else:
                node = await tree.get_node(node_id)
                if node is None:
                    raise NodeNotFoundError(node_id)
                starts = [node]

            rendered = []
            for start in starts:
                branches: dict[str | None, Tree] = {}
                async for node in tree.traversal.traverse(start):
                    if node is start:
                        branch = Tree(_label(node))
                        rendered.append(branch)
                    else:
                        branch = branches[node.parent_id].add(_label(node))
                    branches[node.id] = branch
            return rendered

    for rendered in _run(_show()):
        console.print(rendered)


@cli.command("ancestors", help="List the ancestors of a node, root first")
def ancestors(
    node_id: str = typer.Argument(..., help="ID of the node"),
    db: Path | None = DbOption,
) -> None:
    async def _ancestors() -> list[Node]:
        async with HaikuTree(db_path=db, config=Config) as tree:
            node = await tree.get_node(node_id)
            if node is None:
                raise NodeNotFoundError(node_id)
            return await tree.traversal.ancestors(node)

    for node in _run(_ancestors()):
        typer.echo(f"{node.id}\t{node.title or ''}")


@cli.command("descendants", help="List the descendants of a node")
def descendants(
    node_id: str = typer.Argument(..., help="ID of the node"),
    db: Path | None = DbOption,
) -> None:
    async def _descendants() -> list[Node]:
        async with HaikuTree(db_path=db, config=Config) as tree:
            node = await tree.get_node(node_id)
            if node is None:
                raise NodeNotFoundError(node_id)
            return await tree.traversal.descendants(node)

    for node in _run(_descendants()):
        typer.echo(f"{node.id}\t{node.title or ''}")


@cli.command("check", help="Report nodes whose paths disagree with their parents")
def check(db: Path | None = DbOption) -> None:
    async def _check() -> list[str]:
        async with HaikuTree(db_path=db, config=Config, read_only=True) as tree:
            return await tree.check()

    inconsistent = _run(_check())
    if inconsistent:
        for node_id in inconsistent:
            typer.echo(node_id)
        console.print(
            f"[yellow]{len(inconsistent)} inconsistent nodes, "
            "run 'haiku-tree rebuild' to repair[/yellow]"
        )
        raise typer.Exit(1)
    console.print("[green]All paths are consistent[/green]")


@cli.command("rebuild", help="Recompute the path of every node")
def rebuild(db: Path | None = DbOption) -> None:
    async def _rebuild() -> int:
        count = 0
        async with HaikuTree(db_path=db, config=Config) as tree:
            with console.status("Rebuilding paths..."):
                async for _ in tree.rebuild():
                    count += 1
        return count

    count = _run(_rebuild())
    console.print(f"[green]Rebuilt {count} trees[/green]")


if __name__ == "__main__":
    cli()
