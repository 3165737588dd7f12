"""Coupling metrics per package.

- Afferent Coupling (Ca): packages that depend on this one
- Efferent Coupling (Ce): packages this one depends on
- Instability (I): Ce / (Ca + Ce), 0.0 if isolated
- Centrality: Ca / total packages
- Depth: longest chain of outgoing dependency edges

Depth is an approximation when cycles are present: a package already on
the current walk counts as a leaf instead of being expanded again. Every
package therefore gets a finite depth even in a cyclic graph, at the cost
of undercounting chains that run through a cycle.
"""

from typing import Optional

from ..logging_config import get_logger
from .models import PackageGraph, PackageMetrics

logger = get_logger(__name__)


def compute_instability(ca: int, ce: int) -> float:
    """Compute instability I = Ce / (Ca + Ce).

    Args:
        ca: Afferent coupling (incoming edges)
        ce: Efferent coupling (outgoing edges)

    Returns:
        Instability in [0, 1]; 0.0 for an isolated package (treated as stable)
    """
    total = ca + ce
    if total == 0:
        return 0.0
    return ce / total


def compute_depth(
    name: str,
    graph: PackageGraph,
    cache: Optional[dict[str, int]] = None,
) -> int:
    """Longest outgoing dependency chain starting at ``name``.

    Args:
        name: Package to measure
        graph: The dependency graph
        cache: Optional memo shared across calls on the same graph

    Returns:
        Number of edges in the longest chain (0 for a package with no dependencies)
    """
    if cache is None:
        cache = {}
    depth, _ = _walk_depth(name, graph, set(), cache)
    return depth


def _walk_depth(
    name: str,
    graph: PackageGraph,
    path: set[str],
    cache: dict[str, int],
) -> tuple[int, bool]:
    """Return (depth, touched_path).

    ``touched_path`` is True when the walk below ``name`` hit a package on the
    current path. Only untouched results are cached: such a subtree is
    acyclic and its depth does not depend on how it was reached.
    """
    if name in path:
        return 0, True
    if name in cache:
        return cache[name], False

    path.add(name)
    best = 0
    touched = False
    for dep in graph.dependencies_of(name):
        dep_depth, dep_touched = _walk_depth(dep, graph, path, cache)
        best = max(best, dep_depth + 1)
        touched = touched or dep_touched
    path.discard(name)

    if not touched:
        cache[name] = best
    return best, touched


def compute_metrics(graph: PackageGraph) -> dict[str, PackageMetrics]:
    """Compute coupling metrics for every package in the graph."""
    total = max(1, len(graph))
    depth_cache: dict[str, int] = {}
    metrics: dict[str, PackageMetrics] = {}

    for name, node in graph.items():
        ca = len(node.dependents)
        ce = len(node.dependencies)
        metrics[name] = PackageMetrics(
            afferent_coupling=ca,
            efferent_coupling=ce,
            instability=compute_instability(ca, ce),
            centrality=ca / total,
            depth=compute_depth(name, graph, depth_cache),
        )

    logger.debug(f"Computed metrics for {len(metrics)} packages")
    return metrics
