"""Architecture analysis: layer inference, anomalies, health reporting.

Import detectors from their modules (``architecture.anomalies``,
``architecture.report``); this package only re-exports the models and the
layer heuristic, which configuration depends on.
"""

from .layers import DEFAULT_LAYER_RULES, LayerRule, infer_layer
from .models import (
    Anomaly,
    AnomalyType,
    ArchitectureReport,
    HealthScore,
    LayerSummary,
    Severity,
)

__all__ = [
    "Anomaly",
    "AnomalyType",
    "ArchitectureReport",
    "DEFAULT_LAYER_RULES",
    "HealthScore",
    "LayerRule",
    "LayerSummary",
    "Severity",
    "infer_layer",
]
