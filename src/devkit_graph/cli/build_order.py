"""Build order command: sequential order, parallel layers, build scripts."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..config import AnalysisConfig
from ..discovery import discover_packages
from ..exceptions import DevkitGraphError
from ..graph import (
    PackageGraph,
    TopologicalOrder,
    build_order_for,
    build_package_graph,
    explain_cycles,
    render_build_script,
    topological_sort,
)
from ..logging_config import setup_logging, verbosity_from_flags
from . import app
from ._common import EXIT_FINDINGS, console, err_console, resolve_config


@app.command(name="build-order")
def build_order(
    path: Path = typer.Argument(
        Path("."),
        help="Monorepo root directory",
        file_okay=False,
        dir_okay=True,
    ),
    layers: bool = typer.Option(
        False,
        "--layers",
        help="Show parallel build layers (with --script: one parallel command per layer)",
    ),
    package: Optional[str] = typer.Option(
        None,
        "--package",
        "-p",
        help="Only the build order for this package and its dependencies",
    ),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
    script: bool = typer.Option(False, "--script", help="Output a bash build script"),
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show each package's dependencies"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress logging"),
):
    """
    Compute the order packages must be built in.

    Packages in the same layer have no dependencies on each other and can
    be built in parallel. Exits with status 1 when circular dependencies
    block the order.

    [bold cyan]Examples:[/bold cyan]

      devkit-graph build-order . --layers

      devkit-graph build-order . --package core-sys

      devkit-graph build-order . --script --layers > build.sh
    """
    # stdout carries machine-readable output in these modes
    machine = as_json or script
    setup_logging("quiet" if machine else verbosity_from_flags(verbose, quiet))

    try:
        settings = resolve_config(path, config, namespace, verbose, quiet)
        setup_logging("quiet" if machine else settings.verbosity)
        packages = discover_packages(path, settings)
    except DevkitGraphError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)

    verbose = settings.verbosity == "verbose"

    if not packages:
        err_console.print(f"[yellow]No packages found under {path}[/yellow]")
        raise typer.Exit()

    graph = build_package_graph(packages)

    if package is not None:
        _single_package(graph, _qualify(package, settings), as_json)
        return

    order = topological_sort(graph)
    cycles = explain_cycles(graph, order)

    if as_json:
        output = {
            "total": len(graph),
            "layers": order.layers,
            "sorted": order.flat_order,
            "circular": order.circular,
        }
        if cycles:
            output["cycles"] = cycles
        print(json.dumps(output, indent=2))
    elif not order.is_complete:
        _print_cycles(order, cycles)
    elif script:
        print(render_build_script(order, parallel=layers), end="")
    elif layers:
        _print_layers(graph, order, verbose)
    else:
        _print_sequential(graph, order, verbose)

    if not order.is_complete:
        raise typer.Exit(EXIT_FINDINGS)


def _qualify(name: str, settings: AnalysisConfig) -> str:
    prefix = settings.namespace_prefix
    if prefix and not name.startswith(prefix):
        return f"{prefix}{name}"
    return name


def _single_package(graph: PackageGraph, name: str, as_json: bool) -> None:
    try:
        order = build_order_for(graph, name)
    except DevkitGraphError as e:
        err_console.print(f"[yellow]{e}[/yellow]")
        err_console.print("\nAvailable packages:")
        for pkg in sorted(graph):
            err_console.print(f"   {pkg}", style="dim")
        raise typer.Exit(EXIT_FINDINGS)

    if as_json:
        print(json.dumps({"package": name, "order": order}, indent=2))
        return

    console.print(f"\n[bold blue]Build order for {name}:[/bold blue]\n")
    for i, pkg in enumerate(order, start=1):
        if pkg == name:
            console.print(f"{i:>3}. [yellow]{pkg}[/yellow] <- target")
        else:
            console.print(f"{i:>3}. [dim]{pkg}[/dim]")
    console.print()


def _print_cycles(order: TopologicalOrder, cycles: list[list[str]]) -> None:
    console.print("[bold red]Circular dependencies detected![/bold red]\n")
    if cycles:
        console.print(f"[yellow]Found {len(cycles)} circular dependency cycle(s):[/yellow]\n")
        for i, cycle in enumerate(cycles, start=1):
            console.print(f"{i}. [red]{' -> '.join(cycle)}[/red]")
    else:
        console.print("[yellow]Packages involved in circular dependencies:[/yellow]")
        for pkg in order.circular:
            console.print(f"   [red]{pkg}[/red]")
    console.print("\n[dim]Cannot determine build order. Fix circular dependencies first.[/dim]")
    console.print(
        "[cyan]To fix: break the cycle by extracting shared code into a separate package[/cyan]\n"
    )


def _print_layers(graph: PackageGraph, order: TopologicalOrder, verbose: bool) -> None:
    console.print(f"[dim]Found {len(order.flat_order)} packages[/dim]\n")
    console.print("[bold blue]Build layers (packages in the same layer can build in parallel):[/bold blue]\n")
    for i, layer in enumerate(order.layers, start=1):
        console.print(f"[cyan]Layer {i} ({len(layer)} packages):[/cyan]")
        for pkg in layer:
            console.print(f"   {pkg}")
            _print_deps(graph, pkg, verbose)
        console.print()
    console.print(f"[blue]Total layers: {len(order.layers)}[/blue]")
    console.print(f"[blue]Max parallelism: {order.max_parallelism} packages[/blue]\n")


def _print_sequential(graph: PackageGraph, order: TopologicalOrder, verbose: bool) -> None:
    console.print(f"[dim]Found {len(order.flat_order)} packages[/dim]\n")
    console.print("[bold blue]Build order (sequential):[/bold blue]\n")
    for i, pkg in enumerate(order.flat_order, start=1):
        console.print(f"{i:>3}. [cyan]{pkg}[/cyan]")
        _print_deps(graph, pkg, verbose)
    console.print()


def _print_deps(graph: PackageGraph, pkg: str, verbose: bool) -> None:
    deps = graph.dependencies_of(pkg)
    if verbose and deps:
        console.print(f"      [dim]depends on: {', '.join(deps)}[/dim]")
