"""JSON formatter for devkit-graph.

Machine-readable output for CI and AI agents. Anomaly ``type`` and
``severity`` strings are stable identifiers.
"""

import json
from typing import Any

from ..architecture.models import Anomaly, ArchitectureReport
from .. import __version__
from .base import BaseFormatter


def anomaly_to_dict(anomaly: Anomaly) -> dict[str, Any]:
    return {
        "id": anomaly.id,
        "type": anomaly.type.value,
        "severity": anomaly.severity.value,
        "score": anomaly.score,
        "packages": list(anomaly.packages),
        "impact": anomaly.impact,
        "recommendation": anomaly.recommendation,
        "estimatedEffort": anomaly.estimated_effort,
        "details": anomaly.details,
    }


def report_to_dict(report: ArchitectureReport) -> dict[str, Any]:
    """Serialize a report into plain JSON-compatible data."""
    names = report.package_names
    visible = set(names)

    packages = []
    for name in names:
        node = report.graph[name]
        meta = node.metadata
        m = report.metrics[name]
        packages.append(
            {
                "name": name,
                "version": meta.version,
                "description": meta.description,
                "path": meta.source_path,
                "repository": meta.repository,
                "layer": meta.layer.value,
                "metrics": {
                    "linesOfCode": meta.size.lines_of_code if meta.size else None,
                    "fileCount": meta.size.file_count if meta.size else None,
                    "afferentCoupling": m.afferent_coupling,
                    "efferentCoupling": m.efferent_coupling,
                    "instability": round(m.instability, 3),
                    "centrality": round(m.centrality, 3),
                    "depth": m.depth,
                },
                "dependencies": sorted(node.dependencies),
                "dependents": sorted(node.dependents),
                "anomalies": [
                    {
                        "type": a.type.value,
                        "severity": a.severity.value,
                        "score": a.score,
                        "message": a.impact,
                    }
                    for a in report.anomalies_for(name)
                ],
            }
        )

    layers = {
        layer.value: {
            "packages": [p for p in summary.packages if p in visible],
            "count": sum(1 for p in summary.packages if p in visible),
            "metrics": {
                "averageInstability": summary.average_instability,
                "averageCoupling": summary.average_coupling,
                "totalLOC": summary.total_loc,
            },
            "issues": dict(summary.issues),
        }
        for layer, summary in report.visible_layers.items()
    }

    order = report.build_order
    return {
        "metadata": {
            "generatedAt": report.generated_at.isoformat(),
            "version": __version__,
            "root": report.root,
            "totalPackages": len(report.graph),
            "shownPackages": len(names),
            "totalRepositories": report.repository_count,
            "totalEdges": report.graph.edge_count,
            "healthScore": report.health.score,
            "healthGrade": report.health.grade,
            "severityCounts": report.severity_counts(),
        },
        "packages": packages,
        "layers": layers,
        "anomalies": [anomaly_to_dict(a) for a in report.anomalies],
        "graph": {
            "nodes": [
                {"id": name, "layer": report.graph[name].metadata.layer.value}
                for name in names
            ],
            "edges": [
                {"from": source, "to": target, "type": "dependency"}
                for source, target in report.graph.edges()
                if source in visible and target in visible
            ],
        },
        "buildOrder": {
            "layers": order.layers,
            "sorted": order.flat_order,
            "circular": order.circular,
            "cycles": report.build_cycles,
        },
        "chains": {
            "longest": {
                "depth": report.longest_chain.depth,
                "path": list(report.longest_chain.path),
            }
        },
        "recommendations": [
            {
                "priority": group.priority,
                "timeframe": group.timeframe,
                "tasks": [
                    {
                        "id": task.id,
                        "title": task.title,
                        "description": task.description,
                        "effort": task.effort,
                        "impact": task.impact,
                        "relatedAnomalies": list(task.related_anomalies),
                    }
                    for task in group.tasks
                ],
            }
            for group in report.recommendations
        ],
    }


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    def format(self, report: ArchitectureReport) -> str:
        return json.dumps(report_to_dict(report), indent=2)
