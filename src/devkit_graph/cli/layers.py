"""Layers command: packages grouped by inferred architectural layer."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..api import analyze
from ..exceptions import DevkitGraphError
from ..logging_config import setup_logging, verbosity_from_flags
from . import app
from ._common import console, err_console, resolve_config


@app.command()
def layers(
    path: Path = typer.Argument(
        Path("."),
        help="Monorepo root directory",
        file_okay=False,
        dir_okay=True,
    ),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Package name prefix of the ecosystem (default: @kb-labs/)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress logging"),
):
    """
    List packages by inferred layer with their coupling metrics.

    Layers come from package naming conventions; adjust them with
    layer_rules in devkit-graph.toml.
    """
    setup_logging(verbosity_from_flags(verbose, quiet))

    try:
        settings = resolve_config(path, config, namespace, verbose, quiet)
        setup_logging(settings.verbosity)
        report = analyze(path, config=settings)
    except DevkitGraphError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)

    if len(report.graph) == 0:
        err_console.print(f"[yellow]No packages found under {path}[/yellow]")
        raise typer.Exit()

    table = Table(show_header=True, title="Packages by Layer")
    table.add_column("Layer", style="cyan")
    table.add_column("Package")
    table.add_column("Ca", justify="right")
    table.add_column("Ce", justify="right")
    table.add_column("I", justify="right")
    table.add_column("Depth", justify="right")

    for layer, summary in report.layers.items():
        for i, name in enumerate(summary.packages):
            m = report.metrics[name]
            table.add_row(
                layer.value if i == 0 else "",
                name,
                str(m.afferent_coupling),
                str(m.efferent_coupling),
                f"{m.instability:.2f}",
                str(m.depth),
            )
        table.add_section()

    console.print(table)
