"""package.json parsing.

Manifests are loosely-typed JSON. They are validated once here into a
PackageManifest so nothing downstream has to probe for missing fields.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from ..exceptions import ManifestError

# Merged in this order; the first declaration of a name wins.
DEPENDENCY_FIELDS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


@dataclass(frozen=True)
class PackageManifest:
    """The parts of a package.json this tool reads."""

    name: str
    version: str = "0.0.0"
    description: str = ""
    # field name -> {dependency name -> version spec}
    dependency_maps: dict[str, dict[str, str]] = field(default_factory=dict)

    def declared_dependencies(self) -> Iterator[tuple[str, str]]:
        """Yield (name, version_spec) across all dependency kinds, deduplicated by name."""
        seen: set[str] = set()
        for kind in DEPENDENCY_FIELDS:
            for dep_name, spec in self.dependency_maps.get(kind, {}).items():
                if dep_name in seen:
                    continue
                seen.add(dep_name)
                yield dep_name, spec


def parse_manifest(path: Path) -> PackageManifest:
    """Read and validate a package.json file.

    Args:
        path: Path to package.json

    Returns:
        Validated PackageManifest

    Raises:
        ManifestError: If the file is unreadable, not JSON, or has wrong field types
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(path, f"cannot read: {e}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestError(path, f"invalid JSON: {e}")

    return manifest_from_dict(raw, path)


def manifest_from_dict(raw: Any, path: Path) -> PackageManifest:
    """Validate an already-decoded manifest document."""
    if not isinstance(raw, dict):
        raise ManifestError(path, "top-level value is not an object")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestError(path, "missing or empty 'name'")

    version = _optional_str(raw, "version", "0.0.0", path)
    description = _optional_str(raw, "description", "", path)

    dependency_maps: dict[str, dict[str, str]] = {}
    for kind in DEPENDENCY_FIELDS:
        value = raw.get(kind)
        if value is None:
            continue
        if not isinstance(value, dict):
            raise ManifestError(path, f"'{kind}' is not an object")
        # Non-string specs (rare, hand-edited manifests) are kept as their str()
        dependency_maps[kind] = {str(k): str(v) for k, v in value.items()}

    return PackageManifest(
        name=name.strip(),
        version=version,
        description=description,
        dependency_maps=dependency_maps,
    )


def _optional_str(raw: dict, key: str, default: str, path: Path) -> str:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ManifestError(path, f"'{key}' is not a string")
    return value
