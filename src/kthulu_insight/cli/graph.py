"""Dependency graph export command."""

from pathlib import Path
from typing import Optional

import typer

from ..api import analyze_project, build_graph
from ..exceptions import KthuluInsightError
from ..graph import to_dot, to_json
from . import app
from ._common import (
    CONFIG_OPTION,
    NO_CACHE_OPTION,
    PATH_ARGUMENT,
    QUIET_OPTION,
    VERBOSE_OPTION,
    console,
    fail,
    resolve_config,
)

_FORMATS = ("dot", "json")


@app.command()
def graph(
    path: Path = PATH_ARGUMENT,
    fmt: str = typer.Option("dot", "--format", "-f", help="Output format: dot or json"),
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """
    Export the module dependency graph.

    [bold cyan]Examples:[/bold cyan]

      kthulu-insight graph . | dot -Tsvg > modules.svg

      kthulu-insight graph . --format json
    """
    if fmt not in _FORMATS:
        console.print(f"[red]Error:[/red] unknown format '{fmt}' (expected dot or json)")
        raise typer.Exit(1)

    try:
        settings = resolve_config(config, no_cache, verbose, quiet)
        result = build_graph(analyze_project(path, config=settings), settings)
    except KthuluInsightError as e:
        fail(e)

    typer.echo(to_dot(result) if fmt == "dot" else to_json(result))
