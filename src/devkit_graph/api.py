"""Public API for devkit-graph.

Example:
    >>> from devkit_graph import analyze
    >>>
    >>> report = analyze("/path/to/monorepo")
    >>> report.health.grade
    'B'
    >>> [a.type.value for a in report.anomalies[:3]]
    ['circular-dependency', 'layer-violation', 'god-package']
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from .architecture.anomalies import OrphanExemptions, detect_anomalies
from .architecture.models import ArchitectureReport
from .architecture.report import compute_health, longest_chain, prioritize, summarize_layers
from .config import AnalysisConfig, load_config
from .discovery import discover_packages, validate_root
from .graph import (
    build_package_graph,
    compute_metrics,
    explain_cycles,
    find_cycles,
    topological_sort,
)
from .logging_config import get_logger
from .models import Package

logger = get_logger(__name__)


def analyze(
    path: Union[str, Path] = ".",
    config: Optional[AnalysisConfig] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> ArchitectureReport:
    """Analyze a monorepo and return the full architecture report.

    Pipeline:
    1. Load configuration (auto-discover TOML + apply overrides)
    2. Discover packages under ``path``
    3. Build the dependency graph
    4. Compute metrics and the topological build order
    5. Detect anomalies, score health, prioritize recommendations

    Args:
        path: Monorepo root (default: current directory)
        config: Ready-made configuration; skips config file discovery
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g., namespace_prefix="@acme/")

    Returns:
        ArchitectureReport

    Raises:
        InvalidPathError: If the root does not exist or is not a directory
        ConfigurationError: If configuration is invalid
    """
    root = validate_root(Path(path))
    if config is None:
        config = load_config(config_file=config_file, root=root, **overrides)

    start = time.perf_counter()
    packages = discover_packages(root, config)
    logger.info(f"Found {len(packages)} package(s) ({time.perf_counter() - start:.1f}s)")

    return build_report(packages, config=config, root=str(root))


def build_report(
    packages: Iterable[Package],
    config: Optional[AnalysisConfig] = None,
    root: str = "",
) -> ArchitectureReport:
    """Run graph analysis over already-discovered packages."""
    config = config or AnalysisConfig()
    packages = list(packages)
    start = time.perf_counter()

    graph = build_package_graph(packages)

    # The graph is complete from here on; everything below only reads it.
    metrics = compute_metrics(graph)
    logger.info(
        f"Calculated metrics for {len(metrics)} packages ({time.perf_counter() - start:.1f}s)"
    )

    order = topological_sort(graph)
    build_cycles = explain_cycles(graph, order)
    if build_cycles:
        logger.warning(f"Build order blocked by {len(build_cycles)} circular dependency cycle(s)")

    exemptions = OrphanExemptions(
        suffixes=tuple(config.expected_orphan_suffixes),
        prefixes=tuple(config.expected_orphan_prefixes),
        namespace_prefix=config.namespace_prefix,
    )
    anomalies = detect_anomalies(
        graph,
        metrics,
        thresholds=config.thresholds,
        exemptions=exemptions,
        cycles=find_cycles(graph),
    )
    logger.info(f"Detected {len(anomalies)} anomalies ({time.perf_counter() - start:.1f}s)")

    return ArchitectureReport(
        root=root,
        generated_at=datetime.now(timezone.utc),
        packages=packages,
        graph=graph,
        metrics=metrics,
        anomalies=anomalies,
        build_order=order,
        build_cycles=build_cycles,
        health=compute_health(anomalies),
        layers=summarize_layers(graph, metrics, anomalies),
        recommendations=prioritize(anomalies),
        longest_chain=longest_chain(graph, metrics),
    )
