"""Configuration loading and management for devkit-graph.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.devkit-graph.toml)
    3. Project config (<root>/devkit-graph.toml)
    4. Explicit config file
    5. Environment variables (DEVKIT_GRAPH_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(namespace_prefix="@acme/")
    >>> config.namespace_prefix
    '@acme/'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .architecture.layers import DEFAULT_LAYER_RULES, LayerRule, rules_from_config
from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

_ENV_PREFIX = "DEVKIT_GRAPH_"
_CONFIG_FILENAME = "devkit-graph.toml"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ThresholdConfig:
    """Anomaly rule thresholds.

    Each threshold is exclusive: a package is flagged only when its value is
    strictly greater. Scores and severities are fixed per anomaly type and
    are not configurable, since trend tooling ranks findings by them.

    Attributes:
        god_package_dependents: Afferent coupling above which a package is a god package
        unstable_instability: Instability above which an infrastructure/core package is unstable
        large_package_loc: Lines of code above which a package is too large
        many_dependencies: Efferent coupling above which a package has too many dependencies
        deep_chain_depth: Dependency depth above which a chain is too deep
    """

    god_package_dependents: int = 15
    unstable_instability: float = 0.7
    large_package_loc: int = 10000
    many_dependencies: int = 10
    deep_chain_depth: int = 7

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for field_name in (
            "god_package_dependents",
            "large_package_loc",
            "many_dependencies",
            "deep_chain_depth",
        ):
            if not _is_int(getattr(self, field_name)):
                raise ValueError(f"{field_name} must be an integer")
        if not (_is_int(self.unstable_instability) or isinstance(self.unstable_instability, float)):
            raise ValueError("unstable_instability must be a number")
        if not 0.0 <= self.unstable_instability <= 1.0:
            raise ValueError("unstable_instability must be between 0.0 and 1.0")

        for field_name in (
            "god_package_dependents",
            "large_package_loc",
            "many_dependencies",
            "deep_chain_depth",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a discovery and analysis run.

    Attributes:
        Discovery:
            namespace_prefix: Package names outside this prefix are ignored ("" keeps all)
            group_prefix: Top-level directories scanned for packages ("" scans all)
            packages_dir: Subdirectory of each group holding package directories
            source_dir: Subdirectory of each package walked for size statistics
            source_extensions: File extensions counted as source code

        Dependency resolution:
            workspace_markers: Version-spec prefixes marking a workspace-local dependency
            strict_workspace_protocol: Only keep dependencies carrying a workspace marker

        Anomaly rules:
            expected_orphan_suffixes: Name suffixes exempt from the orphan rule
            expected_orphan_prefixes: Name prefixes exempt from the orphan rule
            layer_rules: Ordered (pattern, layer) table for layer inference
            thresholds: Anomaly thresholds

        Output control:
            max_anomalies_displayed: Anomalies listed in terminal and markdown output
            verbosity: Logging verbosity level
    """

    namespace_prefix: str = "@kb-labs/"
    group_prefix: str = "kb-labs-"
    packages_dir: str = "packages"
    source_dir: str = "src"
    source_extensions: list[str] = field(
        default_factory=lambda: [".ts", ".tsx", ".js", ".jsx"]
    )

    workspace_markers: list[str] = field(
        default_factory=lambda: ["workspace:", "link:", "*"]
    )
    strict_workspace_protocol: bool = False

    expected_orphan_suffixes: list[str] = field(
        default_factory=lambda: ["-cli", "-plugin", "-bin", "-app"]
    )
    expected_orphan_prefixes: list[str] = field(
        default_factory=lambda: ["rest-api-", "studio-", "playbooks-"]
    )
    layer_rules: tuple[LayerRule, ...] = DEFAULT_LAYER_RULES
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    max_anomalies_displayed: int = 10
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for field_name in ("namespace_prefix", "group_prefix", "packages_dir", "source_dir"):
            if not isinstance(getattr(self, field_name), str):
                raise ValueError(f"{field_name} must be a string")
        for field_name in (
            "source_extensions",
            "workspace_markers",
            "expected_orphan_suffixes",
            "expected_orphan_prefixes",
        ):
            value = getattr(self, field_name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"{field_name} must be a list of strings")
        if not isinstance(self.strict_workspace_protocol, bool):
            raise ValueError("strict_workspace_protocol must be true or false")
        if not _is_int(self.max_anomalies_displayed):
            raise ValueError("max_anomalies_displayed must be an integer")
        if not self.packages_dir:
            raise ValueError("packages_dir must not be empty")
        if not self.source_dir:
            raise ValueError("source_dir must not be empty")
        for ext in self.source_extensions:
            if not ext.startswith("."):
                raise ValueError(f"source extension must start with '.', got {ext!r}")
        if self.max_anomalies_displayed < 1:
            raise ValueError("max_anomalies_displayed must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")


def load_config(
    config_file: Optional[Path] = None,
    root: Optional[Path] = None,
    **overrides,
) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        root: Monorepo root searched for a project config (default: cwd)
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / f".{_CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = (root or Path.cwd()) / _CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    # [thresholds] section from TOML
    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ThresholdConfig(**thresholds)
        except (TypeError, ValueError) as e:
            raise InvalidConfigError("thresholds", thresholds, str(e))
    elif isinstance(thresholds, ThresholdConfig):
        merged["thresholds"] = thresholds
    elif thresholds is not None:
        raise InvalidConfigError("thresholds", thresholds, "must be a table")

    # layer_rules = [["core-", "infrastructure"], ["-ui", "ui", "suffix"]]
    layer_rules = merged.pop("layer_rules", None)
    if layer_rules is not None:
        if layer_rules and all(isinstance(r, LayerRule) for r in layer_rules):
            merged["layer_rules"] = tuple(layer_rules)
        else:
            try:
                merged["layer_rules"] = rules_from_config(layer_rules)
            except (TypeError, ValueError) as e:
                raise InvalidConfigError("layer_rules", layer_rules, str(e))

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("config", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from DEVKIT_GRAPH_* environment variables.

    Supported environment variables:
        DEVKIT_GRAPH_NAMESPACE_PREFIX: str
        DEVKIT_GRAPH_GROUP_PREFIX: str
        DEVKIT_GRAPH_PACKAGES_DIR: str
        DEVKIT_GRAPH_SOURCE_DIR: str
        DEVKIT_GRAPH_STRICT_WORKSPACE_PROTOCOL: bool (true/false/1/0)
        DEVKIT_GRAPH_MAX_ANOMALIES_DISPLAYED: int
        DEVKIT_GRAPH_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any DEVKIT_GRAPH_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{_ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single string
    (lists, nested configs, rule tables).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Skip list/tuple types - too complex for env vars
    if origin in (list, tuple) or type_hint in (list, tuple):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        # Fallback to tomli for Python 3.9-3.10
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
