"""Exception hierarchy for devkit-graph."""

from .analysis import (
    DiscoveryError,
    GraphError,
    ManifestError,
    PackageNotFoundError,
)
from .base import DevkitGraphError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "DevkitGraphError",
    "DiscoveryError",
    "ManifestError",
    "GraphError",
    "PackageNotFoundError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
