"""Build order: Kahn layering of the dependency graph.

Packages with no unbuilt dependencies form a layer and can be built in
parallel. Layers are produced until nothing is left or a cycle blocks the
rest. A blocked sort is a normal result (``circular`` is non-empty), not an
exception; ``explain_cycles`` turns the residue into readable cycle paths.
"""

from ..exceptions import PackageNotFoundError
from ..logging_config import get_logger
from .cycles import find_cycles
from .models import PackageGraph, TopologicalOrder

logger = get_logger(__name__)


def topological_sort(graph: PackageGraph) -> TopologicalOrder:
    """Layer the graph so every package comes after its dependencies.

    In-degree here is the number of a package's own dependencies not yet
    built. Each round drains the whole ready set as one layer.
    """
    remaining = {name: len(node.dependencies) for name, node in graph.items()}
    ready = [name for name, degree in remaining.items() if degree == 0]

    result = TopologicalOrder()

    while ready:
        layer = sorted(ready)
        result.layers.append(layer)
        result.flat_order.extend(layer)
        ready = []

        for name in layer:
            for dependent in sorted(graph[name].dependents):
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    ready.append(dependent)

    if len(result.flat_order) != len(graph):
        ordered = set(result.flat_order)
        result.circular = [name for name in graph if name not in ordered]
        logger.debug(f"Topological sort blocked: {len(result.circular)} packages in cycles")

    return result


def explain_cycles(graph: PackageGraph, order: TopologicalOrder) -> list[list[str]]:
    """Readable cycle paths among the packages a sort could not order."""
    if order.is_complete:
        return []
    return find_cycles(graph, restrict_to=order.circular)


def build_order_for(graph: PackageGraph, name: str) -> list[str]:
    """Dependency-first build order for one package and everything it needs.

    Raises:
        PackageNotFoundError: If ``name`` is not in the graph
    """
    if name not in graph:
        raise PackageNotFoundError(name, available=sorted(graph))

    visited: set[str] = set()
    order: list[str] = []

    def visit(pkg: str) -> None:
        if pkg in visited:
            return
        visited.add(pkg)
        for dep in graph.dependencies_of(pkg):
            visit(dep)
        order.append(pkg)

    visit(name)
    return order


def render_build_script(
    order: TopologicalOrder,
    parallel: bool = False,
    runner: str = "pnpm",
) -> str:
    """Render a bash script that builds packages in order.

    Args:
        order: A complete topological order
        parallel: One command per layer (parallel within the layer) instead of per package
        runner: Workspace package manager invoked with ``--filter``

    Raises:
        ValueError: If the order is blocked by cycles
    """
    if not order.is_complete:
        raise ValueError(
            f"Cannot generate a build script: {len(order.circular)} packages are in cycles"
        )

    lines = [
        "#!/bin/bash",
        "",
        "# Auto-generated build script",
        "# Generated by devkit-graph build-order",
        "",
        "set -e",
        "",
    ]

    if parallel:
        lines.append("# Build in layers (parallel within each layer)")
        lines.append("")
        total = len(order.layers)
        for i, layer in enumerate(order.layers, start=1):
            lines.append(f'echo "Building layer {i}/{total} ({len(layer)} packages)..."')
            if len(layer) == 1:
                lines.append(f"{runner} --filter {layer[0]} run build")
            else:
                filters = " ".join(f"--filter {pkg}" for pkg in layer)
                lines.append(f"{runner} {filters} run build --parallel")
            lines.append("")
    else:
        lines.append("# Build in order (sequential)")
        lines.append("")
        total = len(order.flat_order)
        for i, pkg in enumerate(order.flat_order, start=1):
            lines.append(f'echo "Building {i}/{total}: {pkg}..."')
            lines.append(f"{runner} --filter {pkg} run build")
        lines.append("")

    lines.append('echo "All packages built successfully!"')
    return "\n".join(lines) + "\n"
