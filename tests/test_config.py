"""Tests for configuration loading and validation."""

import pytest

from devkit_graph.architecture.layers import DEFAULT_LAYER_RULES, LayerRule
from devkit_graph.config import AnalysisConfig, ThresholdConfig, load_config
from devkit_graph.exceptions import ConfigurationError, InvalidConfigError
from devkit_graph.models import Layer


class TestThresholdConfig:
    """Test ThresholdConfig defaults and validation."""

    def test_defaults(self):
        t = ThresholdConfig()
        assert t.god_package_dependents == 15
        assert t.unstable_instability == 0.7
        assert t.large_package_loc == 10000
        assert t.many_dependencies == 10
        assert t.deep_chain_depth == 7

    def test_instability_range(self):
        with pytest.raises(ValueError, match="unstable_instability"):
            ThresholdConfig(unstable_instability=1.5)

    def test_negative_threshold(self):
        with pytest.raises(ValueError, match="deep_chain_depth"):
            ThresholdConfig(deep_chain_depth=-1)


class TestAnalysisConfig:
    """Test AnalysisConfig defaults and validation."""

    def test_defaults(self):
        config = AnalysisConfig()
        assert config.namespace_prefix == "@kb-labs/"
        assert config.group_prefix == "kb-labs-"
        assert config.packages_dir == "packages"
        assert config.strict_workspace_protocol is False
        assert config.layer_rules == DEFAULT_LAYER_RULES
        assert config.verbosity == "normal"

    def test_bad_extension(self):
        with pytest.raises(ValueError, match="source extension"):
            AnalysisConfig(source_extensions=["ts"])

    def test_bad_verbosity(self):
        with pytest.raises(ValueError, match="verbosity"):
            AnalysisConfig(verbosity="loud")


class TestLoadConfig:
    """Test load_config source merging."""

    def test_defaults_without_files(self, tmp_path):
        assert load_config(root=tmp_path) == AnalysisConfig()

    def test_overrides(self, tmp_path):
        config = load_config(root=tmp_path, namespace_prefix="@acme/", group_prefix=None)
        assert config.namespace_prefix == "@acme/"
        assert config.group_prefix == "kb-labs-"

    def test_verbosity_flags(self, tmp_path):
        assert load_config(root=tmp_path, verbose=True).verbosity == "verbose"
        assert load_config(root=tmp_path, quiet=True).verbosity == "quiet"
        assert load_config(root=tmp_path, verbose=False).verbosity == "normal"

    def test_project_file(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text(
            'namespace_prefix = "@acme/"\n'
            "strict_workspace_protocol = true\n"
            'layer_rules = [["base-", "infrastructure"], ["-view", "ui", "suffix"]]\n'
            "\n"
            "[thresholds]\n"
            "god_package_dependents = 5\n"
        )
        config = load_config(root=tmp_path)
        assert config.namespace_prefix == "@acme/"
        assert config.strict_workspace_protocol is True
        assert config.thresholds.god_package_dependents == 5
        assert config.thresholds.deep_chain_depth == 7
        assert config.layer_rules == (
            LayerRule("base-", Layer.INFRASTRUCTURE),
            LayerRule("-view", Layer.UI, "suffix"),
        )

    def test_global_file_below_project_file(self, tmp_path):
        home = tmp_path / "home"
        (home / ".devkit-graph.toml").write_text('namespace_prefix = "@global/"\ngroup_prefix = ""\n')
        (tmp_path / "devkit-graph.toml").write_text('namespace_prefix = "@project/"\n')
        config = load_config(root=tmp_path)
        assert config.namespace_prefix == "@project/"
        assert config.group_prefix == ""

    def test_explicit_file_and_override_precedence(self, tmp_path):
        explicit = tmp_path / "custom.toml"
        explicit.write_text('namespace_prefix = "@file/"\npackages_dir = "libs"\n')
        config = load_config(config_file=explicit, root=tmp_path, namespace_prefix="@cli/")
        assert config.namespace_prefix == "@cli/"
        assert config.packages_dir == "libs"

    def test_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEVKIT_GRAPH_NAMESPACE_PREFIX", "@env/")
        monkeypatch.setenv("DEVKIT_GRAPH_STRICT_WORKSPACE_PROTOCOL", "yes")
        monkeypatch.setenv("DEVKIT_GRAPH_MAX_ANOMALIES_DISPLAYED", "25")
        config = load_config(root=tmp_path)
        assert config.namespace_prefix == "@env/"
        assert config.strict_workspace_protocol is True
        assert config.max_anomalies_displayed == 25

    def test_env_var_bad_bool(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEVKIT_GRAPH_STRICT_WORKSPACE_PROTOCOL", "maybe")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "DEVKIT_GRAPH_STRICT_WORKSPACE_PROTOCOL"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(config_file=tmp_path / "missing.toml", root=tmp_path)

    def test_malformed_toml(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text("namespace_prefix = \n")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(root=tmp_path)

    def test_unknown_key(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text('colour = "blue"\n')
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "colour"

    def test_invalid_value(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_config(root=tmp_path, max_anomalies_displayed=0)

    def test_invalid_thresholds(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text("[thresholds]\nunstable_instability = 2.0\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "thresholds"

    def test_invalid_layer_rules(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text('layer_rules = [["x-", "backend"]]\n')
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "layer_rules"

    @pytest.mark.parametrize(
        "toml,key",
        [
            ('max_anomalies_displayed = "ten"\n', "max_anomalies_displayed"),
            ("source_extensions = [1]\n", "source_extensions"),
            ("namespace_prefix = 5\n", "namespace_prefix"),
            ('strict_workspace_protocol = "yes"\n', "strict_workspace_protocol"),
        ],
    )
    def test_wrongly_typed_value(self, tmp_path, toml, key):
        (tmp_path / "devkit-graph.toml").write_text(toml)
        with pytest.raises(InvalidConfigError, match=key):
            load_config(root=tmp_path)

    def test_wrongly_typed_threshold(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text('[thresholds]\ndeep_chain_depth = "seven"\n')
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "thresholds"

    def test_thresholds_not_a_table(self, tmp_path):
        (tmp_path / "devkit-graph.toml").write_text("thresholds = 3\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(root=tmp_path)
        assert exc_info.value.key == "thresholds"
