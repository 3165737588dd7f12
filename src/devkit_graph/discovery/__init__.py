"""Package discovery: manifests, source statistics, namespace filtering."""

from .manifest import PackageManifest, parse_manifest
from .scanner import (
    ManifestLocation,
    discover_packages,
    find_manifests,
    has_readme,
    measure_package,
    validate_root,
)

__all__ = [
    "ManifestLocation",
    "PackageManifest",
    "discover_packages",
    "find_manifests",
    "has_readme",
    "measure_package",
    "parse_manifest",
    "validate_root",
]
