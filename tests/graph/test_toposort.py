"""Tests for build order computation."""

import pytest

from devkit_graph.exceptions import PackageNotFoundError
from devkit_graph.graph import (
    TopologicalOrder,
    build_order_for,
    explain_cycles,
    render_build_script,
    topological_sort,
)


class TestTopologicalSort:
    """Test Kahn layering."""

    def test_chain(self, make_graph):
        order = topological_sort(make_graph({"a": ["b"], "b": ["c"], "c": []}))
        assert order.layers == [["c"], ["b"], ["a"]]
        assert order.flat_order == ["c", "b", "a"]
        assert order.is_complete

    def test_diamond(self, diamond):
        order = topological_sort(diamond)
        assert order.layers == [["d"], ["b", "c"], ["a"]]
        assert order.max_parallelism == 2
        assert order.layer_index("a") == 2

    def test_layers_sorted(self, make_graph):
        order = topological_sort(make_graph({"zeta": [], "alpha": [], "mid": []}))
        assert order.layers == [["alpha", "mid", "zeta"]]

    def test_dependencies_come_first(self, make_graph):
        graph = make_graph(
            {
                "app": ["ui", "core"],
                "ui": ["core", "utils"],
                "core": ["utils"],
                "utils": [],
                "tool": ["utils"],
                "solo": [],
            }
        )
        order = topological_sort(graph)
        assert order.is_complete
        assert sorted(order.flat_order) == sorted(graph)
        for source, target in graph.edges():
            assert order.layer_index(target) < order.layer_index(source)

    def test_cycle_leaves_residue(self, make_graph):
        graph = make_graph({"a": ["b"], "b": ["a"], "c": ["a"], "d": []})
        order = topological_sort(graph)
        assert order.layers == [["d"]]
        assert order.circular == ["a", "b", "c"]
        assert not order.is_complete
        assert order.layer_index("a") == -1

    def test_empty_graph(self, make_graph):
        order = topological_sort(make_graph({}))
        assert order.layers == []
        assert order.is_complete
        assert order.max_parallelism == 0


class TestExplainCycles:
    """Test explain_cycles."""

    def test_complete_order_has_no_cycles(self, diamond):
        assert explain_cycles(diamond, topological_sort(diamond)) == []

    def test_names_the_blocking_cycle(self, make_graph):
        graph = make_graph({"a": ["b"], "b": ["a"], "c": ["a"], "d": []})
        assert explain_cycles(graph, topological_sort(graph)) == [["a", "b", "a"]]


class TestBuildOrderFor:
    """Test single-package build order."""

    def test_diamond(self, diamond):
        assert build_order_for(diamond, "a") == ["d", "b", "c", "a"]

    def test_leaf(self, diamond):
        assert build_order_for(diamond, "d") == ["d"]

    def test_only_includes_reachable(self, diamond):
        assert build_order_for(diamond, "b") == ["d", "b"]

    def test_unknown_package(self, diamond):
        with pytest.raises(PackageNotFoundError) as exc_info:
            build_order_for(diamond, "nope")
        assert exc_info.value.name == "nope"
        assert exc_info.value.available == ["a", "b", "c", "d"]


class TestRenderBuildScript:
    """Test bash build script generation."""

    def test_sequential(self, diamond):
        script = render_build_script(topological_sort(diamond))
        lines = script.splitlines()
        assert lines[0] == "#!/bin/bash"
        assert "set -e" in lines
        builds = [line for line in lines if line.startswith("pnpm")]
        assert builds == [
            "pnpm --filter d run build",
            "pnpm --filter b run build",
            "pnpm --filter c run build",
            "pnpm --filter a run build",
        ]
        assert lines[-1] == 'echo "All packages built successfully!"'

    def test_parallel(self, diamond):
        script = render_build_script(topological_sort(diamond), parallel=True)
        assert "pnpm --filter b --filter c run build --parallel" in script
        assert "pnpm --filter d run build\n" in script
        assert 'echo "Building layer 2/3 (2 packages)..."' in script

    def test_custom_runner(self, diamond):
        script = render_build_script(topological_sort(diamond), runner="yarn")
        assert "yarn --filter a run build" in script

    def test_refuses_blocked_order(self):
        order = TopologicalOrder(layers=[["d"]], flat_order=["d"], circular=["a", "b"])
        with pytest.raises(ValueError, match="cycles"):
            render_build_script(order)
