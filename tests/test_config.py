"""
Tests for Configuration Loading
"""

import pytest

from smartmatch.utils.config import Config, _deep_merge, _resolve_env_vars, load_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_files(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml", tmp_path / "missing.local.yaml")

        assert config == Config()
        assert config.scoring.weights == {"base": 0.4, "behavior": 0.3, "pattern": 0.3}
        assert config.boosts.optimal_time_multiplier == 1.10
        assert config.cache.enabled is False

    def test_local_overrides_merge(self, tmp_path):
        main = tmp_path / "config.yaml"
        local = tmp_path / "config.local.yaml"
        main.write_text("scoring:\n  neutral_score: 40\n  experience_scale_years: 20\n")
        local.write_text("scoring:\n  neutral_score: 45\n")

        config = load_config(main, local)

        assert config.scoring.neutral_score == 45
        assert config.scoring.experience_scale_years == 20

    def test_env_vars(self, tmp_path, monkeypatch):
        main = tmp_path / "config.yaml"
        main.write_text("pipeline:\n  timeout_seconds: ${SMARTMATCH_TEST_TIMEOUT:-10}\n")

        assert load_config(main, tmp_path / "none.yaml").pipeline.timeout_seconds == 10

        monkeypatch.setenv("SMARTMATCH_TEST_TIMEOUT", "2.5")
        assert load_config(main, tmp_path / "none.yaml").pipeline.timeout_seconds == 2.5


class TestHelpers:
    """Tests for config helpers."""

    def test_deep_merge(self):
        merged = _deep_merge({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}})

        assert merged == {"a": {"b": 1, "c": 3}, "d": 1}

    def test_resolve_unset_var_kept(self, monkeypatch):
        monkeypatch.delenv("SMARTMATCH_UNSET", raising=False)

        assert _resolve_env_vars({"x": ["${SMARTMATCH_UNSET}"]}) == {"x": ["${SMARTMATCH_UNSET}"]}

    def test_invalid_neutral_score(self):
        with pytest.raises(ValueError):
            Config(scoring={"neutral_score": 150})

    def test_boost_max_score_bounded(self):
        """Test that the boost cap stays within the 0-100 score range."""
        assert Config(boosts={"max_score": 80}).boosts.max_score == 80

        with pytest.raises(ValueError):
            Config(boosts={"max_score": 120})
        with pytest.raises(ValueError):
            Config(boosts={"max_score": 0})
