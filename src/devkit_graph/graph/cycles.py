"""Circular dependency detection.

Depth-first search with a recursion stack. Whenever a dependency is found
on the stack, the slice of the current path from that package back to it
is one cycle, reported closed (last element == first element).

Cycles are deduplicated by their member set, so two distinct elementary
cycles through the same packages are reported once. That is enough to tell
a user which packages are entangled; it is not an exact enumeration of
elementary cycles.
"""

from typing import Iterable, Optional

from .models import PackageGraph


def cycle_key(cycle: list[str]) -> tuple[str, ...]:
    """Rotation-independent identity of a closed cycle."""
    return tuple(sorted(cycle[:-1]))


def find_cycles(
    graph: PackageGraph,
    restrict_to: Optional[Iterable[str]] = None,
) -> list[list[str]]:
    """Find circular dependencies.

    Args:
        graph: The dependency graph
        restrict_to: Only start from and follow edges into these packages.
            Used to explain the residue of a failed topological sort.

    Returns:
        Closed cycles like ``["a", "b", "a"]`` in discovery order, one per member set
    """
    if restrict_to is None:
        allowed = set(graph)
        roots = list(graph)
    else:
        allowed = {name for name in restrict_to if name in graph}
        roots = [name for name in graph if name in allowed]

    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    def dfs(node: str) -> None:
        visited.add(node)
        on_stack.add(node)
        path.append(node)

        for dep in graph.dependencies_of(node):
            if dep not in allowed:
                continue
            if dep in on_stack:
                cycle = path[path.index(dep):] + [dep]
                key = cycle_key(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif dep not in visited:
                dfs(dep)

        on_stack.discard(node)
        path.pop()

    for root in roots:
        if root not in visited:
            dfs(root)

    return cycles


def packages_in_cycles(cycles: Iterable[list[str]]) -> set[str]:
    """All packages that are a member of at least one cycle."""
    return {name for cycle in cycles for name in cycle}
