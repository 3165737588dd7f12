"""Discovery and graph exceptions: manifests, unknown packages."""

from pathlib import Path
from typing import List, Optional

from .base import DevkitGraphError


class DiscoveryError(DevkitGraphError):
    """Base class for package discovery errors."""
    pass


class ManifestError(DiscoveryError):
    """Raised when a package.json cannot be read or has the wrong shape.

    Discovery recovers from this locally: the package is skipped.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Invalid manifest: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class GraphError(DevkitGraphError):
    """Base class for dependency graph errors."""
    pass


class PackageNotFoundError(GraphError):
    """Raised when a package name is not a node of the graph."""

    def __init__(self, name: str, available: Optional[List[str]] = None):
        details = {"package": name}
        if available is not None:
            details["available"] = str(len(available))
        super().__init__(f"Package not found: {name}", details=details)
        self.name = name
        self.available = available or []
