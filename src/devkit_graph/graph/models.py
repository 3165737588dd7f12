"""Data models for the package dependency graph.

Edges are directed: ``graph[A].dependencies`` contains B means package A
declares a dependency on package B. Only packages that were discovered are
nodes; dependencies on anything else never enter the graph.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from ..models import Package


@dataclass
class PackageNode:
    """A package and its adjacency in both directions."""

    metadata: Package
    dependencies: set[str] = field(default_factory=set)  # outgoing: what this package uses
    dependents: set[str] = field(default_factory=set)  # incoming: who uses this package


class PackageGraph:
    """Directed dependency graph keyed by package name.

    The forward (``dependencies``) and reverse (``dependents``) adjacency sets
    are only ever written together through ``add_edge``, so
    ``B in graph[A].dependencies`` iff ``A in graph[B].dependents``.

    Iteration follows node insertion order (discovery order).
    """

    def __init__(self) -> None:
        self._nodes: dict[str, PackageNode] = {}
        self._edge_count = 0

    # ── construction ──────────────────────────────────────────────

    def add_node(self, package: Package) -> PackageNode:
        if package.name in self._nodes:
            return self._nodes[package.name]
        node = PackageNode(metadata=package)
        self._nodes[package.name] = node
        return node

    def add_edge(self, source: str, target: str) -> bool:
        """Add ``source -> target``. Returns False if either end is unknown,
        the edge is a self-loop, or it already exists."""
        if source == target or source not in self._nodes or target not in self._nodes:
            return False
        deps = self._nodes[source].dependencies
        if target in deps:
            return False
        deps.add(target)
        self._nodes[target].dependents.add(source)
        self._edge_count += 1
        return True

    # ── queries ───────────────────────────────────────────────────

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __getitem__(self, name: str) -> PackageNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, name: str) -> Optional[PackageNode]:
        return self._nodes.get(name)

    def items(self) -> Iterator[tuple[str, PackageNode]]:
        return iter(self._nodes.items())

    @property
    def names(self) -> list[str]:
        return list(self._nodes)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def dependencies_of(self, name: str) -> list[str]:
        """Sorted dependency names, for deterministic traversal."""
        return sorted(self._nodes[name].dependencies)

    def edges(self) -> Iterator[tuple[str, str]]:
        for name, node in self._nodes.items():
            for dep in sorted(node.dependencies):
                yield name, dep

    def subgraph(self, names: Iterable[str]) -> "PackageGraph":
        """Induced subgraph over ``names``, preserving this graph's node order."""
        keep = set(names)
        sub = PackageGraph()
        for name, node in self._nodes.items():
            if name in keep:
                sub.add_node(node.metadata)
        for source, target in self.edges():
            if source in keep and target in keep:
                sub.add_edge(source, target)
        return sub


@dataclass(frozen=True)
class PackageMetrics:
    """Per-package coupling measurements.

    instability is Ce / (Ca + Ce), 0.0 for isolated packages.
    centrality is Ca / total node count.
    depth is the longest outgoing dependency chain (approximate under cycles).
    """

    afferent_coupling: int = 0  # Ca: dependents
    efferent_coupling: int = 0  # Ce: dependencies
    instability: float = 0.0
    centrality: float = 0.0
    depth: int = 0

    @property
    def total_coupling(self) -> int:
        return self.afferent_coupling + self.efferent_coupling


@dataclass
class TopologicalOrder:
    """Result of Kahn layering.

    ``layers[0]`` holds packages with no dependencies; every package appears
    in a later layer than all of its dependencies. ``circular`` lists the
    packages that could not be ordered because a cycle blocks them.
    """

    layers: list[list[str]] = field(default_factory=list)
    flat_order: list[str] = field(default_factory=list)
    circular: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.circular

    @property
    def max_parallelism(self) -> int:
        return max((len(layer) for layer in self.layers), default=0)

    def layer_index(self, name: str) -> int:
        """Index of the layer holding ``name``, -1 if it was not ordered."""
        for i, layer in enumerate(self.layers):
            if name in layer:
                return i
        return -1
