"""Rich terminal formatter for devkit-graph."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from ..architecture.models import ArchitectureReport, Severity
from .base import BaseFormatter

_SEVERITY_STYLE = {
    Severity.CRITICAL: "red bold",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _grade_style(grade: str) -> str:
    if grade in ("A", "B"):
        return "green"
    elif grade in ("C", "D"):
        return "yellow"
    return "red"


class RichFormatter(BaseFormatter):
    """Human-readable terminal output: health, top issues, layer table."""

    def __init__(self, console: Optional[Console] = None, top: int = 10, verbose: bool = False):
        self.console = console or Console()
        self.top = top
        self.verbose = verbose

    def render(self, report: ArchitectureReport) -> None:
        console = self.console
        health = report.health
        style = _grade_style(health.grade)

        console.print()
        shown = len(report.package_names)
        total = len(report.graph)
        of_total = "" if shown == total else f" (of {total})"
        console.print(
            f"  [bold]{shown}[/bold]{of_total} packages across "
            f"[bold]{report.repository_count}[/bold] repositories, "
            f"[bold]{report.graph.edge_count}[/bold] dependency edges"
        )
        console.print(
            f"  Health score: [{style}]{health.score}/100 (Grade {health.grade})[/{style}]"
        )
        console.print()

        if report.build_cycles:
            console.print("[bold red]Build order blocked by circular dependencies[/bold red]")
            for cycle in report.build_cycles:
                console.print(f"  {' -> '.join(cycle)}")
            console.print()

        top = report.anomalies[: self.top]
        if top:
            console.print(f"[bold red]Top {len(top)} Issues Requiring Attention[/bold red]")
            for i, anomaly in enumerate(top, start=1):
                sev_style = _SEVERITY_STYLE[anomaly.severity]
                subject = " <-> ".join(anomaly.packages)
                console.print(
                    f"  {i}. [{sev_style}]{anomaly.type.title}[/{sev_style}]: "
                    f"[bold]{subject}[/bold] (score {anomaly.score})"
                )
                console.print(f"     [dim]Impact: {anomaly.impact}[/dim]")
                console.print(f"     [dim]Fix: {anomaly.recommendation}[/dim]")
            remaining = len(report.anomalies) - len(top)
            if remaining > 0:
                console.print(f"  [dim]... and {remaining} more (use --format json to see all)[/dim]")
            console.print()
        else:
            console.print("[bold green]No anomalies detected.[/bold green]")
            console.print()

        console.print("[bold]Metrics by Layer[/bold]")
        table = Table(show_header=True)
        table.add_column("Layer", style="cyan")
        table.add_column("Packages", justify="right")
        table.add_column("Avg Instability", justify="right")
        table.add_column("Avg Coupling", justify="right")
        table.add_column("LOC", justify="right")
        table.add_column("Crit/High/Med", justify="right")

        for layer, summary in report.visible_layers.items():
            inst = summary.average_instability
            inst_style = "green" if inst < 0.3 else "yellow" if inst < 0.7 else "red"
            table.add_row(
                layer.value,
                str(summary.count),
                f"[{inst_style}]{inst:.2f}[/{inst_style}]",
                f"{summary.average_coupling:.1f}",
                f"{summary.total_loc:,}",
                f"{summary.issues['critical']}/{summary.issues['high']}/{summary.issues['medium']}",
            )
        console.print(table)
        console.print()

        if self.verbose:
            self._render_packages(report)

    def _render_packages(self, report: ArchitectureReport) -> None:
        table = Table(show_header=True, title="Packages")
        table.add_column("Package", style="cyan")
        table.add_column("Layer")
        table.add_column("Ca", justify="right")
        table.add_column("Ce", justify="right")
        table.add_column("I", justify="right")
        table.add_column("Depth", justify="right")
        for name in report.package_names:
            m = report.metrics[name]
            table.add_row(
                name,
                report.graph[name].metadata.layer.value,
                str(m.afferent_coupling),
                str(m.efferent_coupling),
                f"{m.instability:.2f}",
                str(m.depth),
            )
        self.console.print(table)
        self.console.print()

    def format(self, report: ArchitectureReport) -> str:
        # Rich output goes directly to the console; capture it as text
        with self.console.capture() as capture:
            self.render(report)
        return capture.get()
