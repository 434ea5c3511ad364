"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="kthulu-insight",
    help="Kthulu Insight - Annotation-Driven Project Intelligence",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kthulu-insight {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Read @kthulu: annotations and report on modules, dependencies and policies."""


# Import subcommands to register them
from .insights import overview as _overview  # noqa: F401, E402
from .insights import modules as _modules, tags as _tags, deps as _deps, guide as _guide  # noqa: F401, E402
from .graph import graph as _graph  # noqa: F401, E402
from .analyze import analyze as _analyze  # noqa: F401, E402
from .plan import plan as _plan  # noqa: F401, E402
from .policies import policies as _policies, check as _check  # noqa: F401, E402
from .cache import cache_info as _cache_info, cache_clear as _cache_clear  # noqa: F401, E402
