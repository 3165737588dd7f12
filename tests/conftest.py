"""Shared test fixtures for devkit-graph tests."""

import json
import os
from pathlib import Path
from typing import Optional

import pytest

from devkit_graph.architecture.layers import infer_layer
from devkit_graph.graph import build_package_graph
from devkit_graph.models import Package, PackageSize


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep the developer's ~/.devkit-graph.toml and env out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("DEVKIT_GRAPH_"):
            monkeypatch.delenv(key)


def packages_from(
    adjacency: dict,
    sizes: Optional[dict] = None,
    readmes: Optional[dict] = None,
) -> list:
    """Packages from ``{name: [dependency names]}``, in dict order.

    Layers are inferred from the names with the default rules.
    """
    sizes = sizes or {}
    readmes = readmes or {}
    return [
        Package(
            name=name,
            layer=infer_layer(name),
            dependencies=tuple(deps),
            size=PackageSize(file_count=1, lines_of_code=sizes[name]) if name in sizes else None,
            has_readme=readmes.get(name),
        )
        for name, deps in adjacency.items()
    ]


@pytest.fixture
def make_packages():
    return packages_from


@pytest.fixture
def make_graph():
    def _make(adjacency: dict, **kwargs):
        return build_package_graph(packages_from(adjacency, **kwargs))

    return _make


@pytest.fixture
def diamond(make_graph):
    """a -> b, a -> c, b -> d, c -> d."""
    return make_graph({"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []})


class Monorepo:
    """Writes a ``<group>/packages/<pkg>/package.json`` tree under ``root``."""

    def __init__(self, root: Path):
        self.root = root

    def add(
        self,
        group: str,
        dirname: str,
        name: str,
        dependencies: Optional[dict] = None,
        sources: Optional[dict] = None,
        readme: bool = True,
        **manifest,
    ) -> Path:
        pkg_dir = self.root / group / "packages" / dirname
        pkg_dir.mkdir(parents=True)
        data = {"name": name, "version": "1.0.0", **manifest}
        if dependencies:
            data["dependencies"] = dependencies
        (pkg_dir / "package.json").write_text(json.dumps(data), encoding="utf-8")
        if readme:
            (pkg_dir / "README.md").write_text(f"# {name}\n", encoding="utf-8")
        for rel, content in (sources or {}).items():
            path = pkg_dir / "src" / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return pkg_dir


@pytest.fixture
def monorepo(tmp_path):
    root = tmp_path / "repo"
    root.mkdir()
    return Monorepo(root)


@pytest.fixture
def clean_monorepo(monorepo):
    """core-sys <- studio-app. No anomalies."""
    monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys", sources={"index.ts": "a\nb\n"})
    monorepo.add(
        "kb-labs-studio",
        "app",
        "@kb-labs/studio-app",
        dependencies={"@kb-labs/core-sys": "workspace:*", "react": "^18.0.0"},
        sources={"main.tsx": "x\n"},
    )
    return monorepo


@pytest.fixture
def cyclic_monorepo(monorepo):
    """core-a <-> core-b, plus an independent core-c."""
    monorepo.add("kb-labs-core", "a", "@kb-labs/core-a", dependencies={"@kb-labs/core-b": "workspace:*"})
    monorepo.add("kb-labs-core", "b", "@kb-labs/core-b", dependencies={"@kb-labs/core-a": "workspace:*"})
    monorepo.add("kb-labs-core", "c", "@kb-labs/core-c")
    return monorepo
