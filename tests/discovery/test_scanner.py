"""Tests for package discovery on disk."""

import pytest

from devkit_graph.config import AnalysisConfig
from devkit_graph.discovery import (
    discover_packages,
    find_manifests,
    has_readme,
    measure_package,
    validate_root,
)
from devkit_graph.discovery.manifest import PackageManifest
from devkit_graph.discovery.scanner import count_lines, internal_dependencies
from devkit_graph.exceptions import InvalidPathError
from devkit_graph.models import Layer, PackageSize


class TestValidateRoot:
    """Test validate_root."""

    def test_missing(self, tmp_path):
        with pytest.raises(InvalidPathError) as exc_info:
            validate_root(tmp_path / "nope")
        assert exc_info.value.reason == "does not exist"

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(InvalidPathError, match="Invalid path"):
            validate_root(path)

    def test_resolves(self, tmp_path):
        assert validate_root(tmp_path) == tmp_path.resolve()


class TestFindManifests:
    """Test the group/packages directory walk."""

    def test_layout(self, monorepo):
        monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        monorepo.add("kb-labs-core", "types", "@kb-labs/core-types")
        monorepo.add("kb-labs-cli", "bin", "@kb-labs/cli-bin")
        monorepo.add("other-repo", "x", "@kb-labs/other")
        (monorepo.root / "kb-labs-empty").mkdir()

        locations = find_manifests(monorepo.root, AnalysisConfig())
        assert [(loc.repository, loc.package_dir.name) for loc in locations] == [
            ("kb-labs-cli", "bin"),
            ("kb-labs-core", "sys"),
            ("kb-labs-core", "types"),
        ]

    def test_no_group_prefix_scans_all(self, monorepo):
        monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        monorepo.add("other-repo", "x", "@kb-labs/other")
        locations = find_manifests(monorepo.root, AnalysisConfig(group_prefix=""))
        assert [loc.repository for loc in locations] == ["kb-labs-core", "other-repo"]

    def test_hidden_and_skipped_dirs(self, monorepo):
        monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        monorepo.add("kb-labs-core", ".cache", "@kb-labs/hidden")
        locations = find_manifests(monorepo.root, AnalysisConfig())
        assert [loc.package_dir.name for loc in locations] == ["sys"]

    def test_directory_without_manifest(self, monorepo):
        (monorepo.root / "kb-labs-core" / "packages" / "empty").mkdir(parents=True)
        assert find_manifests(monorepo.root, AnalysisConfig()) == []


class TestMeasurePackage:
    """Test source size statistics."""

    def test_counts_source_files(self, monorepo):
        pkg_dir = monorepo.add(
            "kb-labs-core",
            "sys",
            "@kb-labs/core-sys",
            sources={
                "index.ts": "a\nb\n",
                "nested/util.tsx": "x",
                "notes.md": "ignored\n",
            },
        )
        size = measure_package(pkg_dir, AnalysisConfig())
        assert size == PackageSize(file_count=2, lines_of_code=4)

    def test_missing_source_dir(self, monorepo):
        pkg_dir = monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        assert measure_package(pkg_dir, AnalysisConfig()) == PackageSize(0, 0)

    def test_skips_node_modules(self, monorepo):
        pkg_dir = monorepo.add(
            "kb-labs-core",
            "sys",
            "@kb-labs/core-sys",
            sources={"index.ts": "a", "node_modules/dep/index.js": "b\nc\n"},
        )
        assert measure_package(pkg_dir, AnalysisConfig()).file_count == 1

    def test_counts_source_dirs_named_like_build_output(self, monorepo):
        pkg_dir = monorepo.add(
            "kb-labs-core",
            "sys",
            "@kb-labs/core-sys",
            sources={
                "index.ts": "a\nb\n",
                "build/steps.ts": "x\ny\n",
                "dist/format.ts": "z",
                "coverage/report.ts": "w",
            },
        )
        size = measure_package(pkg_dir, AnalysisConfig())
        assert size == PackageSize(file_count=4, lines_of_code=8)

    def test_count_lines(self):
        assert count_lines("") == 1
        assert count_lines("one") == 1
        assert count_lines("one\ntwo\n") == 3


class TestHasReadme:
    """Test README detection."""

    def test_present(self, monorepo):
        assert has_readme(monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys"))

    def test_absent(self, monorepo):
        assert not has_readme(monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys", readme=False))

    def test_case_insensitive(self, monorepo):
        pkg_dir = monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys", readme=False)
        (pkg_dir / "readme.txt").write_text("hi")
        assert has_readme(pkg_dir)


class TestInternalDependencies:
    """Test namespace and workspace filtering of declared dependencies."""

    def _manifest(self):
        return PackageManifest(
            name="@kb-labs/app",
            dependency_maps={
                "dependencies": {
                    "@kb-labs/core-sys": "workspace:*",
                    "@kb-labs/pinned": "^1.0.0",
                    "lodash": "^4.17.0",
                },
                "devDependencies": {"@kb-labs/linked": "link:../linked"},
            },
        )

    def test_namespace_filter(self):
        names = internal_dependencies(self._manifest(), AnalysisConfig())
        assert names == ("@kb-labs/core-sys", "@kb-labs/pinned", "@kb-labs/linked")

    def test_strict_workspace_protocol(self):
        config = AnalysisConfig(strict_workspace_protocol=True)
        names = internal_dependencies(self._manifest(), config)
        assert names == ("@kb-labs/core-sys", "@kb-labs/linked")

    def test_no_namespace_keeps_everything(self):
        names = internal_dependencies(self._manifest(), AnalysisConfig(namespace_prefix=""))
        assert "lodash" in names


class TestDiscoverPackages:
    """Test discover_packages end to end."""

    def test_discovers_packages(self, clean_monorepo):
        packages = discover_packages(clean_monorepo.root)
        assert [p.name for p in packages] == ["@kb-labs/core-sys", "@kb-labs/studio-app"]

        core, studio = packages
        assert core.layer == Layer.INFRASTRUCTURE
        assert core.repository == "kb-labs-core"
        assert core.version == "1.0.0"
        assert core.size == PackageSize(file_count=1, lines_of_code=3)
        assert core.has_readme is True
        assert core.dependencies == ()

        assert studio.layer == Layer.UI
        assert studio.dependencies == ("@kb-labs/core-sys",)

    def test_broken_manifest_skipped(self, monorepo):
        monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        broken = monorepo.root / "kb-labs-core" / "packages" / "broken"
        broken.mkdir()
        (broken / "package.json").write_text("{oops")

        packages = discover_packages(monorepo.root)
        assert [p.name for p in packages] == ["@kb-labs/core-sys"]

    def test_outside_namespace_ignored(self, monorepo):
        monorepo.add("kb-labs-core", "sys", "@kb-labs/core-sys")
        monorepo.add("kb-labs-core", "vendored", "left-pad")
        packages = discover_packages(monorepo.root)
        assert [p.name for p in packages] == ["@kb-labs/core-sys"]

    def test_duplicate_name_first_wins(self, monorepo):
        monorepo.add("kb-labs-a", "sys", "@kb-labs/core-sys", description="first")
        monorepo.add("kb-labs-b", "sys", "@kb-labs/core-sys", description="second")
        packages = discover_packages(monorepo.root)
        assert len(packages) == 1
        assert packages[0].description == "first"
        assert packages[0].repository == "kb-labs-a"

    def test_custom_layout(self, monorepo):
        pkg_dir = monorepo.root / "libs" / "modules" / "thing"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "package.json").write_text('{"name": "@acme/thing"}')
        config = AnalysisConfig(namespace_prefix="@acme/", group_prefix="", packages_dir="modules")
        packages = discover_packages(monorepo.root, config)
        assert [p.name for p in packages] == ["@acme/thing"]
        assert packages[0].has_readme is False

    def test_empty_root(self, monorepo):
        assert discover_packages(monorepo.root) == []

    def test_invalid_root(self, tmp_path):
        with pytest.raises(InvalidPathError):
            discover_packages(tmp_path / "missing")
