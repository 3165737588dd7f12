"""CLI entry point. Registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="devkit-graph",
    help="devkit-graph - Monorepo Dependency Graph Analyzer",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"devkit-graph {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Analyze package dependencies across a monorepo."""


# Import subcommands to register them
from .architecture import architecture as _architecture  # noqa: F401, E402
from .build_order import build_order as _build_order  # noqa: F401, E402
from .layers import layers as _layers  # noqa: F401, E402
