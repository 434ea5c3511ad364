"""Text insight commands: overview, modules, tags, deps, guide."""

from pathlib import Path
from typing import Callable, Optional

import typer

from ..analysis.models import ProjectAnalysis
from ..exceptions import KthuluInsightError
from ..insights import (
    InsightsFacade,
    render_dependencies,
    render_guide,
    render_modules,
    render_overview,
    render_tags,
)
from . import app
from ._common import (
    CONFIG_OPTION,
    NO_CACHE_OPTION,
    PATH_ARGUMENT,
    QUIET_OPTION,
    VERBOSE_OPTION,
    fail,
    resolve_config,
)


def _report(
    path: Path,
    render: Callable[[ProjectAnalysis], str],
    config: Optional[Path],
    no_cache: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    try:
        settings = resolve_config(config, no_cache, verbose, quiet)
        analysis = InsightsFacade(settings).analyze(path)
    except KthuluInsightError as e:
        fail(e)
    typer.echo(render(analysis))


@app.command()
def overview(
    path: Path = PATH_ARGUMENT,
    no_deps: bool = typer.Option(False, "--no-deps", help="Omit the dependency edge listing"),
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """
    Summarise modules, dependencies and tags.

    [bold cyan]Examples:[/bold cyan]

      kthulu-insight overview ./backend

      kthulu-insight overview . --no-deps
    """
    _report(
        path,
        lambda analysis: render_overview(analysis, include_dependencies=not no_deps),
        config,
        no_cache,
        verbose,
        quiet,
    )


@app.command()
def modules(
    path: Path = PATH_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """List every module with its package, files and dependencies."""
    _report(path, render_modules, config, no_cache, verbose, quiet)


@app.command()
def tags(
    path: Path = PATH_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """Count tags per type."""
    _report(path, render_tags, config, no_cache, verbose, quiet)


@app.command()
def deps(
    path: Path = PATH_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """List dependency edges sorted by source, target and kind."""
    _report(path, render_dependencies, config, no_cache, verbose, quiet)


@app.command()
def guide(
    path: Path = PATH_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """Suggest tags for files that carry none."""
    _report(path, render_guide, config, no_cache, verbose, quiet)
