"""Architecture audit command: metrics, anomalies, health score."""

from pathlib import Path
from typing import Optional

import typer

from ..api import analyze
from ..exceptions import DevkitGraphError
from ..formatters import MarkdownFormatter, RichFormatter, get_formatter
from ..logging_config import setup_logging, verbosity_from_flags
from ..models import Layer
from . import app
from ._common import EXIT_FINDINGS, EXIT_USAGE, console, err_console, resolve_config


@app.command()
def architecture(
    path: Path = typer.Argument(
        Path("."),
        help="Monorepo root directory",
        file_okay=False,
        dir_okay=True,
    ),
    layer: Optional[str] = typer.Option(
        None,
        "--layer",
        "-l",
        help="Only show packages and anomalies in this layer "
        "(infrastructure, core, plugin, feature, ui, unknown)",
    ),
    threshold: int = typer.Option(
        0,
        "--threshold",
        "-t",
        help="Only show anomalies scoring at least this much (0-100)",
        min=0,
        max=100,
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default), json, markdown",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to this file instead of stdout",
        dir_okay=False,
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-package metrics"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress logging"),
):
    """
    Audit monorepo architecture: coupling, cycles, layer violations, orphans.

    Exits with status 1 when any critical or high severity anomaly remains
    after filtering, so it can gate CI.

    [bold cyan]Examples:[/bold cyan]

      devkit-graph architecture /path/to/monorepo

      devkit-graph architecture . --format json > architecture.json

      devkit-graph architecture . --layer core --threshold 70
    """
    logger = setup_logging(verbosity_from_flags(verbose, quiet))

    try:
        layer_filter = Layer.parse(layer) if layer else None
        formatter = get_formatter(fmt)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_USAGE)

    try:
        settings = resolve_config(path, config, namespace, verbose, quiet)
        logger = setup_logging(settings.verbosity)

        if fmt == "rich" and settings.verbosity != "quiet":
            console.print()
            console.print("[bold cyan]DEVKIT GRAPH: Architecture Audit[/bold cyan]")

        report = analyze(path, config=settings)
    except DevkitGraphError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)
    except Exception as e:
        logger.exception("Unexpected error")
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(EXIT_FINDINGS)

    if len(report.graph) == 0:
        err_console.print(
            f"[yellow]No packages found under {path} "
            f"(namespace {settings.namespace_prefix or 'any'})[/yellow]"
        )
        raise typer.Exit()

    report = report.filtered(layer=layer_filter, min_score=threshold)

    if isinstance(formatter, (RichFormatter, MarkdownFormatter)):
        formatter.top = settings.max_anomalies_displayed
    if isinstance(formatter, RichFormatter):
        formatter.verbose = settings.verbosity == "verbose"

    if output is not None:
        output.write_text(formatter.format(report), encoding="utf-8")
        console.print(f"Report written to [cyan]{output}[/cyan]")
    else:
        formatter.render(report)

    if report.has_blocking_anomalies:
        raise typer.Exit(EXIT_FINDINGS)
