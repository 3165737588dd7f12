"""Structural anomaly detection over the package graph.

Each rule is independent and may fire any number of times. Rules run in a
fixed order, then findings are stably sorted by score (highest first), so
equal scores keep detection order and repeated runs give identical lists.

Rule inputs that are unknown (no size data, README status not checked,
package missing from metrics) make that rule skip the package; a rule
never raises.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..graph.cycles import find_cycles
from ..graph.models import PackageGraph, PackageMetrics
from ..logging_config import get_logger
from ..models import Layer
from .layers import strip_namespace
from .models import Anomaly, AnomalyType, Severity

logger = get_logger(__name__)


@dataclass(frozen=True)
class _RuleSpec:
    severity: Severity
    score: int
    id_prefix: str
    effort: str


_RULES: dict[AnomalyType, _RuleSpec] = {
    AnomalyType.CIRCULAR_DEPENDENCY: _RuleSpec(Severity.CRITICAL, 100, "cycle", "2-4 hours"),
    AnomalyType.LAYER_VIOLATION: _RuleSpec(Severity.CRITICAL, 90, "layer-violation", "3-6 hours"),
    AnomalyType.GOD_PACKAGE: _RuleSpec(Severity.HIGH, 80, "god", "4-8 hours"),
    AnomalyType.UNSTABLE_CORE: _RuleSpec(Severity.HIGH, 75, "unstable", "2-4 hours"),
    AnomalyType.BIDIRECTIONAL_DEPENDENCY: _RuleSpec(Severity.HIGH, 70, "bidirectional", "2-3 hours"),
    AnomalyType.LARGE_PACKAGE: _RuleSpec(Severity.MEDIUM, 60, "large-package", "8-12 hours"),
    AnomalyType.ORPHAN_PACKAGE: _RuleSpec(Severity.MEDIUM, 60, "orphan", "1-2 hours"),
    AnomalyType.MANY_DEPENDENCIES: _RuleSpec(Severity.MEDIUM, 50, "many-deps", "4-6 hours"),
    AnomalyType.DEEP_CHAIN: _RuleSpec(Severity.MEDIUM, 50, "deep", "4-6 hours"),
    AnomalyType.NO_DOCS: _RuleSpec(Severity.LOW, 40, "no-docs", "1-2 hours"),
}

DEFAULT_ORPHAN_SUFFIXES = ("-cli", "-plugin", "-bin", "-app")
DEFAULT_ORPHAN_PREFIXES = ("rest-api-", "studio-", "playbooks-")


def rule_score(anomaly_type: AnomalyType) -> int:
    return _RULES[anomaly_type].score


def rule_severity(anomaly_type: AnomalyType) -> Severity:
    return _RULES[anomaly_type].severity


@dataclass(frozen=True)
class OrphanExemptions:
    """Name patterns of packages that are expected to have no dependents
    (CLI entry points, plugins, apps)."""

    suffixes: tuple[str, ...] = DEFAULT_ORPHAN_SUFFIXES
    prefixes: tuple[str, ...] = DEFAULT_ORPHAN_PREFIXES
    namespace_prefix: str = ""

    def is_expected(self, name: str) -> bool:
        short = strip_namespace(name, self.namespace_prefix)
        return short.endswith(self.suffixes) or short.startswith(self.prefixes)


class _Findings:
    """Accumulates anomalies with ids numbered by one shared counter."""

    def __init__(self) -> None:
        self.items: list[Anomaly] = []
        self._counter = 0

    def add(
        self,
        anomaly_type: AnomalyType,
        packages: Iterable[str],
        impact: str,
        recommendation: str,
        **details,
    ) -> None:
        spec = _RULES[anomaly_type]
        self._counter += 1
        self.items.append(
            Anomaly(
                id=f"{spec.id_prefix}-{self._counter}",
                type=anomaly_type,
                severity=spec.severity,
                score=spec.score,
                packages=tuple(packages),
                impact=impact,
                recommendation=recommendation,
                estimated_effort=spec.effort,
                details=details,
            )
        )


def detect_anomalies(
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    layers: Optional[Mapping[str, Layer]] = None,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    exemptions: Optional[OrphanExemptions] = None,
    cycles: Optional[list[list[str]]] = None,
) -> list[Anomaly]:
    """Run every anomaly rule and rank the findings.

    Args:
        graph: The dependency graph
        metrics: Per-package metrics from compute_metrics
        layers: Layer per package; defaults to each package's inferred layer
        thresholds: Rule thresholds
        exemptions: Expected-orphan name patterns
        cycles: Pre-computed cycles (found with find_cycles if None)

    Returns:
        Anomalies sorted by descending score, ties in detection order
    """
    if layers is None:
        layers = {name: node.metadata.layer for name, node in graph.items()}
    if exemptions is None:
        exemptions = OrphanExemptions()
    if cycles is None:
        cycles = find_cycles(graph)

    findings = _Findings()

    _detect_cycles(findings, cycles)
    _detect_god_packages(findings, graph, metrics, thresholds)
    _detect_orphans(findings, graph, metrics, exemptions)
    _detect_unstable_core(findings, graph, metrics, layers, thresholds)
    _detect_deep_chains(findings, graph, metrics, thresholds)
    _detect_layer_violations(findings, graph, layers)
    _detect_bidirectional(findings, graph, cycles)
    _detect_large_packages(findings, graph, thresholds)
    _detect_many_dependencies(findings, graph, metrics, thresholds)
    _detect_missing_docs(findings, graph)

    # sorted() is stable: equal scores keep detection order
    ranked = sorted(findings.items, key=lambda a: -a.score)
    logger.debug(f"Detected {len(ranked)} anomalies")
    return ranked


# ── Rules ─────────────────────────────────────────────────────────


def _detect_cycles(findings: _Findings, cycles: list[list[str]]) -> None:
    for cycle in cycles:
        members = cycle[:-1]
        findings.add(
            AnomalyType.CIRCULAR_DEPENDENCY,
            members,
            impact="Blocks build order calculation",
            recommendation="Extract shared types/interfaces to a new contracts package",
            cycle=list(cycle),
            affected_packages=len(members),
        )


def _detect_god_packages(
    findings: _Findings,
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    thresholds: ThresholdConfig,
) -> None:
    total = max(1, len(graph))
    for name in graph:
        m = metrics.get(name)
        if m is None or m.afferent_coupling <= thresholds.god_package_dependents:
            continue
        ca = m.afferent_coupling
        short = name.rsplit("/", 1)[-1]
        findings.add(
            AnomalyType.GOD_PACKAGE,
            [name],
            impact=f"Changes ripple through {ca} packages ({ca / total * 100:.1f}% of codebase)",
            recommendation=f"Split into smaller packages (e.g., {short}-types, {short}-impl)",
            dependents=ca,
        )


def _detect_orphans(
    findings: _Findings,
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    exemptions: OrphanExemptions,
) -> None:
    for name in graph:
        m = metrics.get(name)
        if m is None or m.afferent_coupling != 0 or exemptions.is_expected(name):
            continue
        findings.add(
            AnomalyType.ORPHAN_PACKAGE,
            [name],
            impact="No other package depends on this (potential dead code)",
            recommendation="Review if package is still needed or should be removed",
        )


def _detect_unstable_core(
    findings: _Findings,
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    layers: Mapping[str, Layer],
    thresholds: ThresholdConfig,
) -> None:
    for name in graph:
        m = metrics.get(name)
        if m is None or layers.get(name) not in (Layer.INFRASTRUCTURE, Layer.CORE):
            continue
        if m.instability <= thresholds.unstable_instability:
            continue
        findings.add(
            AnomalyType.UNSTABLE_CORE,
            [name],
            impact="Core package is unstable (high efferent coupling)",
            recommendation="Reduce dependencies or extract to separate package",
            instability=round(m.instability, 2),
        )


def _detect_deep_chains(
    findings: _Findings,
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    thresholds: ThresholdConfig,
) -> None:
    for name in graph:
        m = metrics.get(name)
        if m is None or m.depth <= thresholds.deep_chain_depth:
            continue
        findings.add(
            AnomalyType.DEEP_CHAIN,
            [name],
            impact="Deep dependency chain increases fragility",
            recommendation="Flatten dependency tree or introduce intermediate layers",
            depth=m.depth,
        )


def _detect_layer_violations(
    findings: _Findings,
    graph: PackageGraph,
    layers: Mapping[str, Layer],
) -> None:
    for name, dep in graph.edges():
        source_layer = layers.get(name)
        target_layer = layers.get(dep)
        if source_layer is None or target_layer is None:
            continue
        if source_layer.level >= target_layer.level:
            continue
        findings.add(
            AnomalyType.LAYER_VIOLATION,
            [name, dep],
            impact=(
                f"{source_layer.value} layer depends on {target_layer.value} layer "
                "(inverted hierarchy)"
            ),
            recommendation=f"Move {dep} to {source_layer.value} layer or refactor dependency",
            from_layer=source_layer.value,
            to_layer=target_layer.value,
        )


def _detect_bidirectional(
    findings: _Findings,
    graph: PackageGraph,
    cycles: list[list[str]],
) -> None:
    cycle_sets = [set(cycle) for cycle in cycles]
    reported: set[tuple[str, str]] = set()

    for a, b in graph.edges():
        if a not in graph[b].dependencies:
            continue
        pair = (min(a, b), max(a, b))
        if pair in reported:
            continue
        reported.add(pair)
        if any(a in members and b in members for members in cycle_sets):
            continue
        findings.add(
            AnomalyType.BIDIRECTIONAL_DEPENDENCY,
            [a, b],
            impact="Bidirectional coupling increases complexity and fragility",
            recommendation="Extract shared types to a contracts package or invert one dependency",
        )


def _detect_large_packages(
    findings: _Findings,
    graph: PackageGraph,
    thresholds: ThresholdConfig,
) -> None:
    for name, node in graph.items():
        size = node.metadata.size
        if size is None or size.lines_of_code <= thresholds.large_package_loc:
            continue
        loc = size.lines_of_code
        findings.add(
            AnomalyType.LARGE_PACKAGE,
            [name],
            impact=f"Package is very large ({loc:,} LOC), hard to maintain",
            recommendation="Split into smaller, focused packages by feature or domain",
            lines_of_code=loc,
        )


def _detect_many_dependencies(
    findings: _Findings,
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    thresholds: ThresholdConfig,
) -> None:
    for name in graph:
        m = metrics.get(name)
        if m is None or m.efferent_coupling <= thresholds.many_dependencies:
            continue
        ce = m.efferent_coupling
        findings.add(
            AnomalyType.MANY_DEPENDENCIES,
            [name],
            impact=f"Package has {ce} dependencies, high coupling",
            recommendation="Review and reduce dependencies, consider dependency injection",
            dependencies_count=ce,
        )


def _detect_missing_docs(findings: _Findings, graph: PackageGraph) -> None:
    for name, node in graph.items():
        # None means README presence was never checked
        if node.metadata.has_readme is not False:
            continue
        findings.add(
            AnomalyType.NO_DOCS,
            [name],
            impact="Package has no README, difficult for new developers",
            recommendation="Create README.md with overview, usage, and examples",
        )
