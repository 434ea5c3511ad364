"""Shared CLI helpers."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console

from ..config import AnalyzerConfig, load_config
from ..exceptions import KthuluInsightError
from ..logging_config import setup_logging

console = Console()

PATH_ARGUMENT = typer.Argument(Path("."), help="Project root to analyse")
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Configuration file (TOML)",
    exists=True,
    file_okay=True,
    dir_okay=False,
)
NO_CACHE_OPTION = typer.Option(False, "--no-cache", help="Disable the file cache")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
QUIET_OPTION = typer.Option(False, "--quiet", "-q", help="Only log errors")


def resolve_config(
    config: Optional[Path] = None,
    no_cache: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
) -> AnalyzerConfig:
    """Set up logging and build the configuration from CLI options."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)
    overrides = {}
    if no_cache:
        overrides["cache_enabled"] = False
    return load_config(config_file=config, **overrides)


def fail(error: KthuluInsightError) -> NoReturn:
    console.print(f"[red]Error:[/red] {error}", markup=True, highlight=False)
    raise typer.Exit(1)
