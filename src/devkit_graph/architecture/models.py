"""Architecture analysis models.

Anomaly ``type`` and ``severity`` values are stable identifiers: trend
tooling compares runs by them, so renaming one is a breaking change.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..graph.models import PackageGraph, PackageMetrics, TopologicalOrder
from ..models import Layer, Package


class Severity(Enum):
    """How urgently an anomaly needs attention."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def blocking(self) -> bool:
        """Critical and high findings fail CI runs."""
        return self in (Severity.CRITICAL, Severity.HIGH)


class AnomalyType(Enum):
    """Kinds of structural anomaly."""

    CIRCULAR_DEPENDENCY = "circular-dependency"
    LAYER_VIOLATION = "layer-violation"
    GOD_PACKAGE = "god-package"
    UNSTABLE_CORE = "unstable-core"
    BIDIRECTIONAL_DEPENDENCY = "bidirectional-dependency"
    LARGE_PACKAGE = "code-smell-large-package"
    ORPHAN_PACKAGE = "orphan-package"
    MANY_DEPENDENCIES = "code-smell-many-dependencies"
    DEEP_CHAIN = "deep-chain"
    NO_DOCS = "code-smell-no-docs"

    @property
    def title(self) -> str:
        return self.value.replace("-", " ")


@dataclass(frozen=True)
class Anomaly:
    """A scored structural finding.

    ``score`` is fixed per type and only used for ranking.
    ``packages`` lists the subject packages (one, a pair, or a cycle's members).
    """

    id: str
    type: AnomalyType
    severity: Severity
    score: int
    packages: tuple[str, ...]
    impact: str
    recommendation: str
    estimated_effort: str
    details: dict[str, Any] = field(default_factory=dict)

    def involves(self, name: str) -> bool:
        return name in self.packages


@dataclass(frozen=True)
class HealthScore:
    """Overall architecture health derived from anomaly severities."""

    score: int
    grade: str


@dataclass
class LayerSummary:
    """Aggregates for all packages inferred to be in one layer."""

    layer: Layer
    packages: list[str] = field(default_factory=list)
    average_instability: float = 0.0
    average_coupling: float = 0.0
    total_loc: int = 0
    issues: dict[str, int] = field(
        default_factory=lambda: {s.value: 0 for s in Severity}
    )

    @property
    def count(self) -> int:
        return len(self.packages)


@dataclass(frozen=True)
class RecommendationTask:
    id: str
    title: str
    description: str
    effort: str
    impact: str
    related_anomalies: tuple[str, ...]


@dataclass(frozen=True)
class RecommendationGroup:
    """Recommendations bucketed by urgency."""

    priority: str  # immediate, high, medium
    timeframe: str
    tasks: tuple[RecommendationTask, ...]


@dataclass(frozen=True)
class DependencyChain:
    """The deepest dependency chain in the graph."""

    depth: int = 0
    path: tuple[str, ...] = ()


@dataclass
class ArchitectureReport:
    """Everything one analysis run produces. Renderers treat it as read-only."""

    root: str
    generated_at: datetime
    packages: list[Package]
    graph: PackageGraph
    metrics: dict[str, PackageMetrics]
    anomalies: list[Anomaly]
    build_order: TopologicalOrder
    build_cycles: list[list[str]]
    health: HealthScore
    layers: dict[Layer, LayerSummary]
    recommendations: list[RecommendationGroup]
    longest_chain: DependencyChain
    visible_packages: Optional[list[str]] = None  # None = all packages

    @property
    def package_names(self) -> list[str]:
        if self.visible_packages is None:
            return list(self.graph)
        return list(self.visible_packages)

    @property
    def visible_layers(self) -> dict[Layer, LayerSummary]:
        """Layer summaries that hold at least one visible package."""
        if self.visible_packages is None:
            return self.layers
        shown = set(self.visible_packages)
        return {
            layer: summary
            for layer, summary in self.layers.items()
            if any(p in shown for p in summary.packages)
        }

    @property
    def repository_count(self) -> int:
        return len({p.repository for p in self.packages})

    @property
    def has_blocking_anomalies(self) -> bool:
        return any(a.severity.blocking for a in self.anomalies)

    def severity_counts(self) -> dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for anomaly in self.anomalies:
            counts[anomaly.severity.value] += 1
        return counts

    def anomalies_for(self, name: str) -> list[Anomaly]:
        return [a for a in self.anomalies if a.involves(name)]

    def filtered(self, layer: Optional[Layer] = None, min_score: int = 0) -> "ArchitectureReport":
        """A view limited to one layer and/or anomalies scoring at least ``min_score``.

        With a layer, packages outside it are hidden and only anomalies
        touching at least one visible package are kept.
        """
        visible = self.package_names
        anomalies = list(self.anomalies)

        if layer is not None:
            visible = [n for n in visible if self.graph[n].metadata.layer == layer]
            keep = set(visible)
            anomalies = [a for a in anomalies if any(p in keep for p in a.packages)]

        if min_score > 0:
            anomalies = [a for a in anomalies if a.score >= min_score]

        return replace(self, anomalies=anomalies, visible_packages=visible)
