"""Package discovery: find manifests under a monorepo root and build Packages.

Layout convention::

    <root>/<group>/packages/<pkg>/package.json
    <root>/<group>/packages/<pkg>/src/**        (walked for size statistics)

Discovery is read-only. A broken manifest or unreadable file is logged and
skipped; only an invalid root aborts the run.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..architecture.layers import infer_layer
from ..config import AnalysisConfig
from ..exceptions import InvalidPathError, ManifestError
from ..logging_config import get_logger
from ..models import Package, PackageSize
from .manifest import PackageManifest, parse_manifest

logger = get_logger(__name__)

MANIFEST_NAME = "package.json"
_SKIP_DIRS = {"node_modules", "dist", "build", "coverage"}
# Inside a package source tree only vendored code is excluded
_SOURCE_SKIP_DIRS = {"node_modules"}


@dataclass(frozen=True)
class ManifestLocation:
    """A package.json found on disk and the group it was found under."""

    manifest_path: Path
    package_dir: Path
    repository: str


def validate_root(root: Path) -> Path:
    """Resolve the monorepo root, failing fast if it is unusable.

    Raises:
        InvalidPathError: If root does not exist or is not a directory
    """
    if not root.exists():
        raise InvalidPathError(root, "does not exist")
    if not root.is_dir():
        raise InvalidPathError(root, "is not a directory")
    return root.resolve()


def _list_dirs(path: Path) -> list[Path]:
    try:
        entries = sorted(path.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(f"Cannot list {path}: {e}")
        return []
    return [p for p in entries if p.is_dir() and not p.name.startswith(".")]


def find_manifests(root: Path, config: AnalysisConfig) -> list[ManifestLocation]:
    """Enumerate package manifests under the two-level group/packages layout."""
    locations = []
    for group_dir in _list_dirs(root):
        if group_dir.name in _SKIP_DIRS:
            continue
        if config.group_prefix and not group_dir.name.startswith(config.group_prefix):
            continue

        packages_dir = group_dir / config.packages_dir
        if not packages_dir.is_dir():
            continue

        for pkg_dir in _list_dirs(packages_dir):
            manifest = pkg_dir / MANIFEST_NAME
            if manifest.is_file():
                locations.append(
                    ManifestLocation(
                        manifest_path=manifest,
                        package_dir=pkg_dir,
                        repository=group_dir.name,
                    )
                )

    logger.debug(f"Found {len(locations)} manifests under {root}")
    return locations


def count_lines(content: str) -> int:
    """Count newline-delimited segments, including a final unterminated one."""
    return content.count("\n") + 1


def measure_package(package_dir: Path, config: AnalysisConfig) -> PackageSize:
    """Walk the package source tree counting source files and their lines.

    A missing source directory yields an empty size, not an error.
    """
    src_dir = package_dir / config.source_dir
    if not src_dir.is_dir():
        return PackageSize(file_count=0, lines_of_code=0)

    extensions = tuple(config.source_extensions)
    file_count = 0
    lines_of_code = 0

    for dirpath, dirnames, filenames in os.walk(src_dir):
        dirnames[:] = sorted(d for d in dirnames if d not in _SOURCE_SKIP_DIRS)
        for filename in sorted(filenames):
            if not filename.endswith(extensions):
                continue
            file_path = Path(dirpath) / filename
            try:
                content = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning(f"Skipping unreadable source file {file_path}: {e}")
                continue
            file_count += 1
            lines_of_code += count_lines(content)

    return PackageSize(file_count=file_count, lines_of_code=lines_of_code)


def has_readme(package_dir: Path) -> bool:
    """True if a README-like file sits next to the manifest."""
    try:
        return any(
            entry.is_file() and entry.name.lower().startswith("readme")
            for entry in package_dir.iterdir()
        )
    except OSError:
        return False


def internal_dependencies(manifest: PackageManifest, config: AnalysisConfig) -> tuple[str, ...]:
    """Declared dependency names that belong to the ecosystem namespace.

    With ``strict_workspace_protocol`` only dependencies whose version spec
    starts with a workspace marker (``workspace:``, ``link:``, ``*``) count.
    """
    names = []
    markers = tuple(config.workspace_markers)
    for dep_name, spec in manifest.declared_dependencies():
        if config.namespace_prefix and not dep_name.startswith(config.namespace_prefix):
            continue
        if config.strict_workspace_protocol and not spec.strip().startswith(markers):
            continue
        names.append(dep_name)
    return tuple(names)


def discover_packages(
    root: Path,
    config: Optional[AnalysisConfig] = None,
    locations: Optional[Iterable[ManifestLocation]] = None,
) -> list[Package]:
    """Discover all ecosystem packages under ``root``.

    Args:
        root: Monorepo root directory
        config: Analysis configuration (defaults if None)
        locations: Pre-computed manifest locations (skips the directory scan)

    Returns:
        Packages in discovery order

    Raises:
        InvalidPathError: If root is missing or not a directory
    """
    config = config or AnalysisConfig()
    root = validate_root(root)
    if locations is None:
        locations = find_manifests(root, config)

    packages: list[Package] = []
    seen: dict[str, Path] = {}

    for location in locations:
        try:
            manifest = parse_manifest(location.manifest_path)
        except ManifestError as e:
            logger.warning(f"Skipping package: {e}")
            continue

        if config.namespace_prefix and not manifest.name.startswith(config.namespace_prefix):
            logger.debug(f"Ignoring {manifest.name}: outside namespace {config.namespace_prefix}")
            continue

        if manifest.name in seen:
            logger.warning(
                f"Duplicate package name {manifest.name} at {location.package_dir} "
                f"(already found at {seen[manifest.name]}), skipping"
            )
            continue
        seen[manifest.name] = location.package_dir

        packages.append(
            Package(
                name=manifest.name,
                version=manifest.version,
                description=manifest.description,
                source_path=str(location.package_dir),
                repository=location.repository,
                layer=infer_layer(manifest.name, config.layer_rules, config.namespace_prefix),
                size=measure_package(location.package_dir, config),
                dependencies=internal_dependencies(manifest, config),
                has_readme=has_readme(location.package_dir),
            )
        )

    logger.info(f"Discovered {len(packages)} packages in {root}")
    return packages
