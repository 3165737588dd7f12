"""
devkit-graph - Monorepo Dependency Graph Analysis

Discovers workspace packages, builds their dependency graph, and derives
coupling metrics, structural anomalies and a parallel build order.
"""

__version__ = "0.1.0"

from .api import analyze, build_report
from .architecture.models import Anomaly, AnomalyType, ArchitectureReport, Severity
from .graph.models import PackageGraph, PackageMetrics, TopologicalOrder
from .models import Layer, Package, PackageSize

__all__ = [
    "analyze",  # Main entry point
    "build_report",  # Analysis over in-memory packages
    "Anomaly",
    "AnomalyType",
    "ArchitectureReport",
    "Layer",
    "Package",
    "PackageGraph",
    "PackageMetrics",
    "PackageSize",
    "Severity",
    "TopologicalOrder",
]
