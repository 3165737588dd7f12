"""Build the package dependency graph from discovered packages."""

from typing import Iterable

from ..logging_config import get_logger
from ..models import Package
from .models import PackageGraph

logger = get_logger(__name__)


def build_package_graph(packages: Iterable[Package]) -> PackageGraph:
    """Construct a PackageGraph.

    Two passes:
    1. One node per package, so packages with no edges are still members
    2. One edge per declared dependency that names an existing node

    Names that do not resolve to a discovered package are dropped.
    """
    graph = PackageGraph()

    for package in packages:
        if package.name in graph:
            logger.debug(f"Duplicate package {package.name} ignored")
            continue
        graph.add_node(package)

    dropped = 0
    for name, node in graph.items():
        for dep in node.metadata.dependencies:
            if dep not in graph:
                dropped += 1
                logger.debug(f"{name}: dependency {dep} is not a discovered package")
                continue
            graph.add_edge(name, dep)

    logger.debug(
        f"Built graph: {len(graph)} packages, {graph.edge_count} edges, "
        f"{dropped} unresolved dependencies dropped"
    )
    return graph
