"""Install plan command."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..api import analyze_project, resolve_dependencies
from ..exceptions import KthuluInsightError
from ..resolver import ResolutionPlan
from . import app
from ._common import QUIET_OPTION, VERBOSE_OPTION, console, fail, resolve_config


@app.command()
def plan(
    modules: list[str] = typer.Argument(..., help="Modules to install"),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Also honour dependencies declared in this project",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit the plan as JSON"),
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """
    Resolve modules into an install order with conflicts and suggestions.

    [bold cyan]Examples:[/bold cyan]

      kthulu-insight plan invoice

      kthulu-insight plan sqlite postgresql --json
    """
    try:
        settings = resolve_config(verbose=verbose, quiet=quiet)
        analysis = analyze_project(project, config=settings) if project is not None else None
        result = resolve_dependencies(modules, analysis)
    except KthuluInsightError as e:
        fail(e)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _output_text(result)


def _output_text(result: ResolutionPlan) -> None:
    typer.echo(f"Required: {', '.join(sorted(result.required_modules)) or '<none>'}")
    typer.echo(f"Install order: {' -> '.join(result.install_order) or '<none>'}")
    typer.echo(f"Optional: {', '.join(result.optional_modules) or '<none>'}")
    for conflict in result.conflicts:
        console.print(f"[red]Conflict:[/red] {conflict.description}", highlight=False)
        for suggestion in conflict.suggestions:
            typer.echo(f"  - {suggestion}")
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)
    for rec in result.recommendations:
        auto = " (auto)" if rec.auto_apply else ""
        typer.echo(f"Recommend {rec.type} {rec.module} [{rec.impact}]{auto}: {rec.reason}")
