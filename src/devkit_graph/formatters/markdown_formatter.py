"""Markdown report formatter."""

from ..architecture.models import ArchitectureReport, Severity
from .base import BaseFormatter

_DEFAULT_TOP = 10


def _status(value: float, good: float, warn: float) -> str:
    if value < good:
        return "OK"
    elif value < warn:
        return "WARN"
    return "BAD"


def _shown_count(report: ArchitectureReport) -> str:
    shown = len(report.package_names)
    total = len(report.graph)
    return str(total) if shown == total else f"{shown} of {total}"


class MarkdownFormatter(BaseFormatter):
    """Executive summary, top anomalies, per-layer metrics and recommendations."""

    def __init__(self, top: int = _DEFAULT_TOP):
        self.top = top

    def format(self, report: ArchitectureReport) -> str:
        counts = report.severity_counts()
        lines = [
            "# Architecture Audit Report",
            "",
            f"**Date:** {report.generated_at.date().isoformat()}",
            "",
            "## Executive Summary",
            "",
            f"- **Total packages:** {_shown_count(report)}",
            f"- **Total repositories:** {report.repository_count}",
            f"- **Health score:** {report.health.score}/100 (Grade {report.health.grade})",
            f"- **Critical issues:** {counts[Severity.CRITICAL.value]}",
            f"- **High priority issues:** {counts[Severity.HIGH.value]}",
            f"- **Medium priority issues:** {counts[Severity.MEDIUM.value]}",
            "",
        ]

        top = report.anomalies[: self.top]
        if top:
            lines += [f"## Top {len(top)} Anomalies", ""]
            for i, anomaly in enumerate(top, start=1):
                lines += [
                    f"### {i}. {anomaly.type.title}",
                    f"**Packages:** {', '.join(anomaly.packages)}",
                    f"**Severity:** {anomaly.severity.value} (Score: {anomaly.score})",
                    f"**Impact:** {anomaly.impact}",
                    f"**Recommendation:** {anomaly.recommendation}",
                    f"**Estimated Effort:** {anomaly.estimated_effort}",
                    "",
                ]

        if report.build_cycles:
            lines += ["## Build Order Blocked", ""]
            for cycle in report.build_cycles:
                lines.append(f"- {' -> '.join(cycle)}")
            lines.append("")

        lines += ["## Metrics by Layer", ""]
        for layer, summary in report.visible_layers.items():
            lines += [
                f"### {layer.value.capitalize()} Layer ({summary.count} packages)",
                f"- **Average Instability:** {summary.average_instability} "
                f"{_status(summary.average_instability, 0.3, 0.7)}",
                f"- **Average Coupling:** {summary.average_coupling} deps/pkg "
                f"{'OK' if summary.average_coupling < 5 else 'WARN'}",
                f"- **Total LOC:** {summary.total_loc:,}",
                f"- **Issues:** {summary.issues['critical']} critical, "
                f"{summary.issues['high']} high, {summary.issues['medium']} medium",
                "",
            ]

        if report.recommendations:
            lines += ["## Recommendations (Prioritized)", ""]
            for group in report.recommendations:
                lines += [f"### {group.priority.capitalize()} Priority ({group.timeframe})", ""]
                for i, task in enumerate(group.tasks, start=1):
                    lines.append(f"{i}. **{task.title}**: {task.description} ({task.effort})")
                lines.append("")

        return "\n".join(lines)
