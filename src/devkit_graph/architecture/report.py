"""Report assembly: health score, layer summaries, prioritized recommendations.

Health score:
    100 - 20 per critical - 10 per high - 5 per medium, clamped to [0, 100]
    Grades: A >= 90, B >= 80, C >= 70, D >= 60, else F
"""

from typing import Mapping

import numpy as np

from ..graph.models import PackageGraph, PackageMetrics
from ..models import Layer
from .models import (
    Anomaly,
    DependencyChain,
    HealthScore,
    LayerSummary,
    RecommendationGroup,
    RecommendationTask,
    Severity,
)

_SEVERITY_PENALTY = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 0,
}

_GRADES = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

# (severity, priority, timeframe, how many tasks to surface)
_RECOMMENDATION_BUCKETS = (
    (Severity.CRITICAL, "immediate", "Week 1", 3),
    (Severity.HIGH, "high", "Month 1", 5),
    (Severity.MEDIUM, "medium", "Quarter", 5),
)


def compute_health(anomalies: list[Anomaly]) -> HealthScore:
    """Score overall health from anomaly severities."""
    score = 100 - sum(_SEVERITY_PENALTY[a.severity] for a in anomalies)
    score = max(0, min(100, score))
    grade = next((g for threshold, g in _GRADES if score >= threshold), "F")
    return HealthScore(score=score, grade=grade)


def summarize_layers(
    graph: PackageGraph,
    metrics: Mapping[str, PackageMetrics],
    anomalies: list[Anomaly],
) -> dict[Layer, LayerSummary]:
    """Aggregate metrics and issue counts per inferred layer.

    Layers appear in order of first occurrence in the graph.
    """
    summaries: dict[Layer, LayerSummary] = {}
    for name, node in graph.items():
        layer = node.metadata.layer
        summary = summaries.setdefault(layer, LayerSummary(layer=layer))
        summary.packages.append(name)
        if node.metadata.size is not None:
            summary.total_loc += node.metadata.size.lines_of_code

    for summary in summaries.values():
        layer_metrics = [metrics[p] for p in summary.packages if p in metrics]
        if layer_metrics:
            summary.average_instability = round(
                float(np.mean([m.instability for m in layer_metrics])), 2
            )
            summary.average_coupling = round(
                float(np.mean([m.total_coupling for m in layer_metrics])), 1
            )

        members = set(summary.packages)
        for anomaly in anomalies:
            # An anomaly counts once per member package it touches
            hits = sum(1 for p in anomaly.packages if p in members)
            summary.issues[anomaly.severity.value] += hits

    return summaries


def prioritize(anomalies: list[Anomaly]) -> list[RecommendationGroup]:
    """Bucket the top anomalies into immediate / high / medium action lists."""
    groups: list[RecommendationGroup] = []
    task_number = 0

    for severity, priority, timeframe, limit in _RECOMMENDATION_BUCKETS:
        matching = [a for a in anomalies if a.severity == severity]
        if not matching:
            continue
        tasks = []
        for anomaly in matching[:limit]:
            task_number += 1
            tasks.append(
                RecommendationTask(
                    id=f"rec-{task_number}",
                    title=anomaly.type.title,
                    description=anomaly.recommendation,
                    effort=anomaly.estimated_effort,
                    impact=anomaly.impact,
                    related_anomalies=(anomaly.id,),
                )
            )
        groups.append(
            RecommendationGroup(priority=priority, timeframe=timeframe, tasks=tuple(tasks))
        )

    return groups


def longest_chain(graph: PackageGraph, metrics: Mapping[str, PackageMetrics]) -> DependencyChain:
    """Find the deepest package and reconstruct one chain below it.

    The chain follows the deepest dependency at each step and stops at a
    package already on the chain, so it stays finite under cycles.
    """
    start = None
    best = 0
    for name in graph:
        m = metrics.get(name)
        if m is not None and m.depth > best:
            start, best = name, m.depth

    if start is None:
        return DependencyChain()

    path = [start]
    on_path = {start}
    current = start
    while len(path) <= best:
        candidates = [
            d for d in graph.dependencies_of(current) if d not in on_path and d in metrics
        ]
        if not candidates:
            break
        # max() keeps the first (alphabetical) dependency on ties
        current = max(candidates, key=lambda d: metrics[d].depth)
        path.append(current)
        on_path.add(current)

    return DependencyChain(depth=best, path=tuple(path))
