"""
Unit Tests for ConfigManager
============================

Test Coverage
-------------
- YAML defaults loading
- Dot-notation reads with defaults
- In-memory overrides, reset and re-initialization
- Deep merge across YAML files
"""

import pytest

from hunter.core.config.manager import ConfigManager, ConfigWriteError


@pytest.fixture
def config():
    ConfigManager.initialize()
    yield ConfigManager
    ConfigManager.reset()


@pytest.mark.unit
class TestConfigManagerReads:
    def test_progression_defaults_loaded(self, config):
        assert config.get("progression.initial_experience_to_next_level") == 100
        assert config.get("progression.threshold_base") == 100
        assert config.get("progression.threshold_per_level") == 100
        assert config.get("progression.cascade_rank_promotions") is False

    def test_reference_ranks_are_ordered_ladder(self, config):
        ranks = config.get("reference.ranks")

        assert [rank["rank_name"] for rank in ranks] == ["E", "D", "C", "B", "A", "S"]
        assert [rank["rank_order"] for rank in ranks] == [1, 2, 3, 4, 5, 6]

    def test_missing_key_returns_default(self, config):
        assert config.get("progression.unknown_key", 7) == 7
        assert config.get("no.such.section") is None


@pytest.mark.unit
class TestConfigManagerWrites:
    def test_set_overrides_value(self, config):
        config.set("progression.cascade_rank_promotions", True)

        assert config.get("progression.cascade_rank_promotions") is True

    def test_reset_restores_defaults(self, config):
        config.set("progression.threshold_base", 500)

        config.reset()

        assert config.get("progression.threshold_base") == 100

    def test_set_through_scalar_rejected(self, config):
        with pytest.raises(ConfigWriteError):
            config.set("progression.threshold_base.nested", 1)

    def test_set_new_key_under_existing_section(self, config):
        config.set("progression.experimental_bonus", 3)

        assert config.get("progression.experimental_bonus") == 3
        assert config.get("progression.threshold_base") == 100

    def test_initialize_discards_overrides(self, config):
        config.set("progression.threshold_base", 500)

        config.initialize()

        assert config.get("progression.threshold_base") == 100


@pytest.mark.unit
class TestConfigManagerLoading:
    def test_yaml_files_deep_merged_in_order(self, tmp_path):
        (tmp_path / "a.yaml").write_text("progression:\n  threshold_base: 100\n  per: 1\n")
        (tmp_path / "b.yml").write_text("progression:\n  threshold_base: 250\n")

        ConfigManager.initialize(tmp_path)
        try:
            assert ConfigManager.get("progression.threshold_base") == 250
            assert ConfigManager.get("progression.per") == 1
        finally:
            ConfigManager.initialize()

    def test_missing_directory_yields_no_defaults(self, tmp_path):
        ConfigManager.initialize(tmp_path / "absent")
        try:
            assert ConfigManager.get("progression.threshold_base", 42) == 42
        finally:
            ConfigManager.initialize()
