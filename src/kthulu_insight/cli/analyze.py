"""Semantic analysis command: patterns, metrics, recommendations."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..api import analyze_project, analyze_semantics, build_graph
from ..exceptions import KthuluInsightError
from ..semantics import SemanticInsights
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

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "cyan"}


@app.command()
def analyze(
    path: Path = PATH_ARGUMENT,
    as_json: bool = typer.Option(False, "--json", help="Emit the report as JSON"),
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Append debug-level logs to this file"
    ),
):
    """
    Detect architectural patterns, score modules and list recommendations.

    [bold cyan]Examples:[/bold cyan]

      kthulu-insight analyze ./backend

      kthulu-insight analyze . --json | jq .metrics
    """
    try:
        settings = resolve_config(config, no_cache, verbose, quiet, log_file)
        analysis = analyze_project(path, config=settings)
        insights = analyze_semantics(analysis, build_graph(analysis, settings))
    except KthuluInsightError as e:
        fail(e)

    if as_json:
        typer.echo(json.dumps(insights.to_dict(), indent=2, sort_keys=True))
    else:
        _output_rich(insights)


def _output_rich(insights: SemanticInsights) -> None:
    m = insights.metrics
    console.print("[bold cyan]KTHULU INSIGHT - Semantic Analysis[/bold cyan]")
    console.print()
    console.print(
        f"  [bold]{m.total_files}[/bold] files, [bold]{m.module_count}[/bold] modules, "
        f"[bold]{m.dependency_count}[/bold] dependencies, [bold]{m.tag_count}[/bold] tags"
    )
    console.print(
        f"  coverage {m.coverage:.0%}  quality {m.quality:.2f}  complexity {m.complexity:.2f}  "
        f"cycles {m.cycle_count}  depth {m.max_depth}"
    )
    console.print()

    if insights.patterns:
        table = Table(title="Patterns", show_header=True, header_style="bold")
        table.add_column("Pattern")
        table.add_column("Kind")
        table.add_column("Occurrences", justify="right")
        table.add_column("Confidence", justify="right")
        for p in insights.patterns:
            table.add_row(p.name, p.kind, str(p.occurrences), f"{p.confidence:.2f}")
        console.print(table)

    if m.modules:
        table = Table(title="Modules", show_header=True, header_style="bold")
        table.add_column("Module")
        table.add_column("Files", justify="right")
        table.add_column("Lines", justify="right")
        table.add_column("Tags", justify="right")
        table.add_column("Deps", justify="right")
        table.add_column("Coverage", justify="right")
        table.add_column("Quality", justify="right")
        for name in sorted(m.modules):
            mm = m.modules[name]
            table.add_row(
                name,
                str(mm.file_count),
                str(mm.line_count),
                str(mm.tag_count),
                str(mm.dependency_count),
                f"{mm.coverage:.0%}",
                f"{mm.quality:.2f}",
            )
        console.print(table)

    if not insights.recommendations:
        console.print("[green]No recommendations[/green]")
        return

    console.print("[bold]Recommendations[/bold]")
    for rec in insights.recommendations:
        style = _SEVERITY_STYLE.get(rec.severity, "white")
        console.print(f"  [{style}]{rec.severity.upper()}[/{style}] {rec.message}", highlight=False)
        for suggestion in rec.suggestions:
            console.print(f"    [dim]- {suggestion}[/dim]", highlight=False)
