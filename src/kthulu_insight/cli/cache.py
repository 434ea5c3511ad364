"""Cache management commands."""

from pathlib import Path
from typing import Optional

import typer

from ..cache import DiskCache
from . import app
from ._common import CONFIG_OPTION, console, resolve_config


@app.command()
def cache_info(config: Optional[Path] = CONFIG_OPTION):
    """Show persistent cache information and statistics."""
    settings = resolve_config(config, quiet=True)
    console.print("[bold cyan]Kthulu Insight Cache Info[/bold cyan]")
    console.print()

    if not settings.cache_enabled or settings.cache_backend != "disk":
        console.print(f"Backend: [yellow]{settings.cache_backend}[/yellow]")
        console.print("Status: [red]No persistent cache[/red]")
        return

    cache = DiskCache(settings.cache_dir, ttl=settings.cache_ttl)
    try:
        stats = cache.stats()
    finally:
        cache.close()
    console.print("Status: [green]Enabled[/green]")
    console.print(f"Directory: [blue]{stats.get('directory', 'N/A')}[/blue]")
    console.print(f"Entries: [yellow]{stats.get('size', 0)}[/yellow]")
    console.print(f"Size: [yellow]{stats.get('volume', 0)} bytes[/yellow]")


@app.command()
def cache_clear(config: Optional[Path] = CONFIG_OPTION):
    """Clear the persistent analysis cache."""
    settings = resolve_config(config, quiet=True)
    if not settings.cache_enabled or settings.cache_backend != "disk":
        console.print("[yellow]No persistent cache configured[/yellow]")
        raise typer.Exit(0)

    cache = DiskCache(settings.cache_dir, ttl=settings.cache_ttl)
    try:
        cache.clear()
    finally:
        cache.close()
    console.print("[green]Cache cleared successfully[/green]")
