"""Policy synthesis and access check commands."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..api import analyze_project, create_authorization_core, synthesize_policies
from ..exceptions import KthuluInsightError
from ..security import AccessRequest, generate_security_config
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


@app.command()
def policies(
    path: Path = PATH_ARGUMENT,
    as_json: bool = typer.Option(False, "--json", help="Emit the security config as JSON"),
    config: Optional[Path] = CONFIG_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """Synthesize authorization policies and roles from security tags."""
    try:
        settings = resolve_config(config, no_cache, verbose, quiet)
        found, roles = synthesize_policies(analyze_project(path, config=settings))
    except KthuluInsightError as e:
        fail(e)

    if as_json:
        bundle = generate_security_config(found, roles, settings.authorization)
        typer.echo(json.dumps(bundle, indent=2))
        return

    table = Table(title="Policies", show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Module")
    table.add_column("Resource")
    table.add_column("Actions")
    table.add_column("Roles")
    for p in sorted(found, key=lambda p: p.id):
        table.add_row(p.id, p.module, p.resource, ",".join(p.actions), ",".join(p.required_roles))
    console.print(table)
    console.print(f"{len(found)} policies, {len(roles)} roles", highlight=False)


def _parse_context(pairs: list[str]) -> dict[str, str]:
    context = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{pair}'", param_hint="--context")
        context[key] = value
    return context


@app.command()
def check(
    subject: str = typer.Option(..., "--subject", "-s", help="Who is asking"),
    resource: str = typer.Option(..., "--resource", "-r", help="Resource being accessed"),
    action: str = typer.Option("read", "--action", "-a", help="Action to perform"),
    role: list[str] = typer.Option([], "--role", help="Role held by the subject (repeatable)"),
    context: list[str] = typer.Option([], "--context", help="key=value request context"),
    path: Path = typer.Option(Path("."), "--path", help="Project root to synthesize policies from"),
    config: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
):
    """
    Check one access request against policies synthesized from a project.

    Exits with 0 when access is allowed and 1 when it is denied.
    """
    try:
        settings = resolve_config(config, verbose=verbose, quiet=quiet)
        core = create_authorization_core(
            analyze_project(path, config=settings), settings.authorization
        )
    except KthuluInsightError as e:
        fail(e)

    request = AccessRequest(subject, resource, action, roles=role, context=_parse_context(context))
    result = core.check_access(request)
    verdict = "[green]ALLOWED[/green]" if result.allowed else "[red]DENIED[/red]"
    console.print(f"{verdict} {result.reason}", highlight=False)
    if not result.allowed:
        raise typer.Exit(1)
