"""Core data model: architectural layers and discovered packages.

A Package is created once per discovery run and never mutated afterwards.
Everything downstream of discovery (graph, metrics, anomalies, build order)
consumes these records without touching the filesystem again.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Layer(Enum):
    """Inferred architectural tier of a package.

    Lower layers must not depend on higher ones; ``level`` gives the order.
    """

    INFRASTRUCTURE = "infrastructure"
    CORE = "core"
    PLUGIN = "plugin"
    FEATURE = "feature"
    UI = "ui"
    UNKNOWN = "unknown"

    @property
    def level(self) -> int:
        return _LAYER_LEVELS[self]

    @classmethod
    def parse(cls, value: str) -> "Layer":
        """Look up a layer by its string value (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(layer.value for layer in cls)
            raise ValueError(f"Unknown layer: {value!r}. Choose from: {valid}") from None


_LAYER_LEVELS = {
    Layer.INFRASTRUCTURE: 0,
    Layer.CORE: 1,
    Layer.PLUGIN: 2,
    Layer.FEATURE: 3,
    Layer.UI: 4,
    Layer.UNKNOWN: 5,
}


@dataclass(frozen=True)
class PackageSize:
    """Source tree statistics for one package."""

    file_count: int = 0
    lines_of_code: int = 0


@dataclass(frozen=True)
class Package:
    """One discovered workspace package.

    ``dependencies`` holds declared dependency names inside the ecosystem
    namespace, merged across all manifest dependency kinds with duplicates
    collapsed. Whether a name resolves to another discovered package is
    decided by the graph builder, not here.

    ``size`` and ``has_readme`` are None when unknown; anomaly rules that
    need them do not fire in that case.
    """

    name: str
    version: str = "0.0.0"
    description: str = ""
    source_path: str = ""
    repository: str = ""
    layer: Layer = Layer.UNKNOWN
    size: Optional[PackageSize] = None
    dependencies: tuple[str, ...] = ()
    has_readme: Optional[bool] = None
