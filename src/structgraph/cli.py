"""CLI interface for structgraph using Typer framework."""

import importlib
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from structgraph import __description__, __version__
from structgraph.config import StructGraphConfig, load_config
from structgraph.errors import StructGraphError
from structgraph.graph import StructGraph
from structgraph.introspect import is_structure

app = typer.Typer(
    name="structgraph",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"structgraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """structgraph - Render record types as Graphviz structure graphs."""


def _setup_logging(config: StructGraphConfig) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=config.logging.level.to_logging(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_target(target: str) -> type:
    """Import a ``module:Class`` target and check it is a structure."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"Target '{target}' must look like 'module:Class'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {e}") from e

    for attr in attr_path.split("."):
        if not hasattr(obj, attr):
            raise typer.BadParameter(f"'{attr_path}' not found in module '{module_name}'")
        obj = getattr(obj, attr)

    if not is_structure(obj):
        raise typer.BadParameter(f"'{target}' is not a dataclass, pydantic model or named tuple")
    return obj


def _parse_rank(value: str) -> tuple[str, int]:
    name, sep, rank = value.partition("=")
    if not sep or not name:
        raise typer.BadParameter(f"Rank '{value}' must look like 'Name=N'")
    try:
        return name, int(rank)
    except ValueError as e:
        raise typer.BadParameter(f"Rank '{value}' must end in an integer") from e


def _parse_connection(value: str, classes: dict[str, list[type]]) -> tuple[type, str, type, str, str | None]:
    """Parse ``FROM[.ANCHOR]->TO[.ANCHOR][=LABEL]`` against the loaded classes."""
    endpoints, sep, label = value.partition("=")
    tail, arrow, head = endpoints.partition("->")
    if not arrow:
        raise typer.BadParameter(f"Connection '{value}' must look like 'From.anchor->To.anchor'")

    resolved = []
    for endpoint in (tail, head):
        name, _, anchor = endpoint.strip().partition(".")
        candidates = classes.get(name, [])
        if not candidates:
            raise typer.BadParameter(f"Connection endpoint '{name}' is not one of the targets")
        if len(candidates) > 1:
            raise typer.BadParameter(f"Connection endpoint '{name}' is ambiguous between {len(candidates)} targets")
        resolved.append((candidates[0], anchor))

    (tail_cls, tail_anchor), (head_cls, head_anchor) = resolved
    return tail_cls, tail_anchor, head_cls, head_anchor, label if sep else None


@app.command()
def render(
    targets: Annotated[
        list[str],
        typer.Argument(help="Structures to render, as module:Class")
    ],
    flatten: Annotated[
        Optional[list[str]],
        typer.Option("--flatten", "-F", help="Field name to inline into its parent's label (repeatable)")
    ] = None,
    collapse: Annotated[
        Optional[list[str]],
        typer.Option("--collapse", help="Class name rendered as a field count only (repeatable)")
    ] = None,
    rank: Annotated[
        Optional[list[str]],
        typer.Option("--rank", help="Rank hint as Name=N (repeatable)")
    ] = None,
    connect: Annotated[
        Optional[list[str]],
        typer.Option("--connect", help="Connection as From.anchor->To.anchor[=label] (repeatable)")
    ] = None,
    undirected: Annotated[
        bool,
        typer.Option("--undirected", help="Emit an undirected graph")
    ] = False,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output file path (default: stdout)")
    ] = None,
    png: Annotated[
        bool,
        typer.Option("--png", help="Also run the renderer on the written .dot file (requires --out)")
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .structgraph.json)")
    ] = None,
) -> None:
    """Generate a structure graph from dataclasses, pydantic models or named tuples."""
    if png and out is None:
        console.print("[red]Error:[/red] --png requires --out")
        raise typer.Exit(1)

    try:
        sg_config = load_config(config)
        _setup_logging(sg_config)

        structures = [_load_target(target) for target in targets]
        classes: dict[str, list[type]] = {}
        for cls in structures:
            if cls not in classes.setdefault(cls.__name__, []):
                classes[cls.__name__].append(cls)

        ranks = dict(_parse_rank(value) for value in rank or [])
        collapsed = set(collapse or [])
        connections = [_parse_connection(value, classes) for value in connect or []]

        graph = StructGraph(directed=not undirected, config=sg_config)
        for cls in structures:
            graph.add_struct(
                cls,
                flatten,
                rank=ranks.get(cls.__name__),
                no_fields=cls.__name__ in collapsed,
            )
        for connection in connections:
            graph.connect(*connection)

        if png:
            image_file = graph.emit_to_image(out)
            console.print(f"[green]Graph rendered:[/green] {image_file}")
        elif out:
            with open(out, "w", encoding="utf-8") as f:
                graph.emit(f)
            console.print(f"[green]Graph generated:[/green] {out}")
        else:
            graph.emit(sys.stdout)

    except typer.BadParameter as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except (StructGraphError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
