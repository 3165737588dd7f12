"""Layer inference from package naming conventions.

Packages do not declare their architectural tier, so it is guessed from the
package name using an ordered table of (pattern, layer) rules:

1. Strip the ecosystem namespace prefix (e.g. ``@kb-labs/``)
2. Try each rule in order; the first match wins
3. Anything unmatched is ``Layer.UNKNOWN``

This is best-effort. A wrong guess only affects the precision of the
layer-violation anomaly, never the dependency graph itself.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..models import Layer

_MATCH_KINDS = ("prefix", "suffix", "contains")


@dataclass(frozen=True)
class LayerRule:
    """Map names matching ``pattern`` to ``layer``."""

    pattern: str
    layer: Layer
    match: str = "prefix"

    def __post_init__(self) -> None:
        if self.match not in _MATCH_KINDS:
            raise ValueError(
                f"match must be one of {', '.join(_MATCH_KINDS)}, got {self.match!r}"
            )
        if not self.pattern:
            raise ValueError("pattern must not be empty")

    def matches(self, name: str) -> bool:
        if self.match == "prefix":
            return name.startswith(self.pattern)
        elif self.match == "suffix":
            return name.endswith(self.pattern)
        return self.pattern in name


DEFAULT_LAYER_RULES: tuple[LayerRule, ...] = (
    # Infrastructure
    LayerRule("core-", Layer.INFRASTRUCTURE),
    LayerRule("shared-", Layer.INFRASTRUCTURE),
    LayerRule("infra-", Layer.INFRASTRUCTURE),
    # Core / platform
    LayerRule("plugin-", Layer.CORE),
    LayerRule("cli-", Layer.CORE),
    LayerRule("workflow-", Layer.CORE),
    # Intelligence / analytics plugins
    LayerRule("mind-", Layer.PLUGIN),
    LayerRule("knowledge-", Layer.PLUGIN),
    LayerRule("analytics-", Layer.PLUGIN),
    # Feature areas
    LayerRule("ai-", Layer.FEATURE),
    LayerRule("audit-", Layer.FEATURE),
    LayerRule("devlink-", Layer.FEATURE),
    LayerRule("feature-", Layer.FEATURE),
    # UI / API surface
    LayerRule("studio-", Layer.UI),
    LayerRule("rest-api-", Layer.UI),
    LayerRule("ui-", Layer.UI),
)


def strip_namespace(name: str, namespace_prefix: str = "") -> str:
    """Return ``name`` without the ecosystem namespace prefix."""
    if namespace_prefix and name.startswith(namespace_prefix):
        return name[len(namespace_prefix):]
    return name


def infer_layer(
    name: str,
    rules: Iterable[LayerRule] = DEFAULT_LAYER_RULES,
    namespace_prefix: str = "",
) -> Layer:
    """Classify a package name into an architectural layer.

    Args:
        name: Full package name (e.g. "@kb-labs/core-sys")
        rules: Ordered rule table, first match wins
        namespace_prefix: Prefix stripped before matching

    Returns:
        Matching Layer, or Layer.UNKNOWN
    """
    if not name:
        return Layer.UNKNOWN

    short_name = strip_namespace(name, namespace_prefix)
    for rule in rules:
        if rule.matches(short_name):
            return rule.layer
    return Layer.UNKNOWN


def rules_from_config(entries: Sequence[Sequence[str]]) -> tuple[LayerRule, ...]:
    """Build a rule table from config entries ``[pattern, layer]`` or
    ``[pattern, layer, match]``.

    Raises:
        ValueError: If an entry is malformed or names an unknown layer
    """
    rules = []
    for entry in entries:
        if len(entry) not in (2, 3):
            raise ValueError(f"layer rule must be [pattern, layer] or [pattern, layer, match]: {entry!r}")
        pattern, layer_name = entry[0], entry[1]
        match = entry[2] if len(entry) == 3 else "prefix"
        rules.append(LayerRule(pattern, Layer.parse(layer_name), match))
    return tuple(rules)
