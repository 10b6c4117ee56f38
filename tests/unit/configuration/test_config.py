"""
Unit tests for typed configuration loading, environment overrides and validation.
"""
import json

import pytest

from fossilmind.configuration import ConfigManager, EngineConfig, get_config, reset_config
from fossilmind.configuration.environment import EnvironmentHandler
from fossilmind.configuration.validator import ConfigValidator


class TestEngineConfigDefaults:

    def test_defaults_validate(self):
        config = EngineConfig().validate()

        assert config.similarity.semantic_threshold == 0.30
        assert config.decay.sentinel == -999
        assert config.resurface.dismiss_intervals == [1, 2, 3, 5, 8, 13, 21, 34]
        assert config.conflicts.min_similarity == 0.25
        assert config.layout.width == 600
        assert config.linking.suggestion_limit == 10

    def test_partial_mapping_keeps_defaults(self):
        config = EngineConfig.from_mapping({"layout": {"width": 800}, "unknown": {"x": 1}})

        assert config.layout.width == 800
        assert config.layout.height == 400

    def test_invalid_band_raises(self):
        with pytest.raises(ValueError, match="conflicts"):
            EngineConfig.from_mapping({"conflicts": {"min_similarity": 0.9, "max_similarity": 0.5}})

    def test_invalid_intervals_raise(self):
        with pytest.raises(ValueError, match="dismiss_intervals"):
            EngineConfig.from_mapping({"resurface": {"dismiss_intervals": [3, 1]}})

    def test_merged_with_override(self):
        base = EngineConfig()
        override = EngineConfig()
        override.layout.width = 1024

        assert base.merged_with(override).layout.width == 1024


class TestConfigLoading:

    def test_load_from_file_with_placeholders(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FM_TEST_HEIGHT", "720")
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({
            "layout": {"width": "${FM_TEST_WIDTH:-900}", "height": "${FM_TEST_HEIGHT}"},
        }))

        config = EngineConfig.load(str(path))
        assert config.layout.width == 900
        assert config.layout.height == 720

    def test_env_overrides_without_file(self, monkeypatch):
        monkeypatch.setenv("FOSSILMIND_DECAY_MIN_AGE_DAYS", "3")
        monkeypatch.setenv("FOSSILMIND_RESURFACE_DISMISS_INTERVALS", "[2, 4]")
        monkeypatch.setenv("FOSSILMIND_RESURFACE_TOP_K", "2")

        config = EngineConfig.load()
        assert config.decay.min_age_days == 3.0
        assert config.resurface.dismiss_intervals == [2, 4]
        assert config.resurface.top_k == 2

    def test_unreadable_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        assert EngineConfig.load(str(path)).layout.width == 600

    def test_manager_reload(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"layout": {"width": 500}}))
        manager = ConfigManager(str(path))

        assert manager.get_section("layout") == {"width": 500}
        path.write_text(json.dumps({"layout": {"width": 700}}))
        assert manager.reload_if_stale(force=True)
        assert manager.get_section("layout") == {"width": 700}
        assert manager.get_section("missing", {"a": 1}) == {"a": 1}

    def test_process_wide_config_is_cached(self):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first


class TestEnvironmentHandler:

    def test_expand_scalar_types(self, monkeypatch):
        monkeypatch.setenv("FM_FLAG", "true")
        monkeypatch.setenv("FM_RATIO", "0.5")

        assert EnvironmentHandler.expand_env_string("${FM_FLAG}") is True
        assert EnvironmentHandler.expand_env_string("${FM_RATIO}") == 0.5
        assert EnvironmentHandler.expand_env_string("${FM_MISSING:-[1, 2]}") == [1, 2]
        assert EnvironmentHandler.expand_env_string("ratio=${FM_RATIO}") == "ratio=0.5"

    def test_resolve_config_path_prefers_existing_candidate(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text("{}")
        assert EnvironmentHandler.resolve_config_path(str(path)) == str(path)


class TestConfigValidator:

    def test_range(self):
        ConfigValidator.validate_range(0.5, 0, 1, "k")
        with pytest.raises(ValueError, match="'k'"):
            ConfigValidator.validate_range(2, 0, 1, "k")

    def test_positive(self):
        ConfigValidator.validate_positive(0, "k", allow_zero=True)
        with pytest.raises(ValueError):
            ConfigValidator.validate_positive(0, "k")
