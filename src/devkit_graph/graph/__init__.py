"""Package dependency graph: construction, metrics, cycles, build order."""

from .builder import build_package_graph
from .cycles import find_cycles
from .metrics import compute_depth, compute_instability, compute_metrics
from .models import PackageGraph, PackageMetrics, PackageNode, TopologicalOrder
from .toposort import build_order_for, explain_cycles, render_build_script, topological_sort

__all__ = [
    "PackageGraph",
    "PackageMetrics",
    "PackageNode",
    "TopologicalOrder",
    "build_order_for",
    "build_package_graph",
    "compute_depth",
    "compute_instability",
    "compute_metrics",
    "explain_cycles",
    "find_cycles",
    "render_build_script",
    "topological_sort",
]
