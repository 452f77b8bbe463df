"""
Configuration loading and validation.
"""

from pathlib import Path

import pytest
import yaml

from matchmaking.configs import get_config_value, load_config, validate_config

CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "config.yaml"


@pytest.fixture
def config():
    return load_config(str(CONFIG_PATH))


class TestLoadConfig:

    def test_shipped_config_is_valid(self, config):
        assert validate_config(config) == []
        assert config["scoring"]["k"] == 0.7

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(str(path))


class TestValidateConfig:

    def test_missing_sections(self):
        issues = validate_config({})
        assert "Missing required section: scoring" in issues
        assert "Missing required section: network" in issues

    def test_bad_thresholds(self, config):
        config["scoring"]["strategic_threshold"] = 0.8
        assert any("Thresholds" in issue for issue in validate_config(config))

    def test_bad_k(self, config):
        config["scoring"]["k"] = 0
        assert any("k must be positive" in issue for issue in validate_config(config))

    def test_bad_importance_override(self, config):
        config["commonality"]["field_importance"] = {"industry": 2.0}
        assert any("industry" in issue for issue in validate_config(config))

    def test_bad_clustering(self, config):
        config["network"]["clustering"] = "louvain"
        assert any("clustering" in issue for issue in validate_config(config))

    def test_bad_rank_scale(self, config):
        config["commonality"]["rank_scale"] = 3.0
        assert any("Rank scale" in issue for issue in validate_config(config))

    def test_backfill_needs_both_caps(self, config):
        config["matching"]["backfill"] = True
        config["matching"]["max_strategic"] = 2
        assert any("backfill" in issue for issue in validate_config(config))

    def test_bad_diversity_limit(self, config):
        config["matching"]["diversity_limit"] = 0
        assert any("diversity_limit" in issue for issue in validate_config(config))

    def test_bad_completion_threshold(self, config):
        config["questionnaire"]["completion_threshold"] = 150
        assert len(validate_config(config)) == 1


def test_get_config_value(config):
    assert get_config_value(config, "scoring.high_affinity_threshold") == 0.6
    assert get_config_value(config, "scoring.missing", "x") == "x"
    assert get_config_value(config, "nope.deeper") is None


def test_config_round_trips_through_yaml(config, tmp_path):
    path = tmp_path / "copy.yaml"
    path.write_text(yaml.safe_dump(config))
    assert load_config(str(path)) == config
