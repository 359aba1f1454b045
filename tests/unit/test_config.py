"""
Unit Tests for Config
=====================

Test Coverage
-------------
- Environment parsing with bounded fallbacks
- Boolean spellings
- Startup validation
"""

import pytest

from hunter.core.config.config import Config, Environment


@pytest.fixture
def load_env(monkeypatch):
    """Reload Config under the given variables; restore the real env afterwards."""

    def _load(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        Config.load()
        return Config

    yield _load

    monkeypatch.undo()
    Config.load()


@pytest.mark.unit
class TestConfigLoad:
    def test_integer_settings_parsed(self, load_env):
        config = load_env(DATABASE_POOL_SIZE="12", DATABASE_POOL_TIMEOUT="45")

        assert config.DATABASE_POOL_SIZE == 12
        assert config.DATABASE_POOL_TIMEOUT == 45
        assert config.warnings == []

    @pytest.mark.parametrize("raw", ["0", "500", "many"])
    def test_bad_integer_falls_back_with_warning(self, load_env, raw):
        config = load_env(DATABASE_POOL_SIZE=raw)

        assert config.DATABASE_POOL_SIZE == 5
        assert len(config.warnings) == 1
        assert "DATABASE_POOL_SIZE" in config.warnings[0]

    @pytest.mark.parametrize(
        "raw,expected",
        [("yes", True), ("ON", True), ("0", False), ("off", False)],
    )
    def test_boolean_spellings(self, load_env, raw, expected):
        assert load_env(DATABASE_ECHO=raw).DATABASE_ECHO is expected

    def test_invalid_boolean_keeps_default(self, load_env):
        config = load_env(LOG_TO_FILE="sometimes", LOG_JSON="maybe")

        assert config.LOG_TO_FILE is True
        assert config.LOG_JSON is None
        assert len(config.warnings) == 2

    def test_testing_detected_from_environment_name(self, load_env):
        assert load_env(ENVIRONMENT="Testing", TESTING="false").is_testing()

    def test_unknown_environment_is_development(self):
        assert Environment.from_string("qa") is Environment.DEVELOPMENT


@pytest.mark.unit
class TestConfigValidate:
    def test_missing_database_url_fatal_in_production(self, load_env):
        config = load_env(ENVIRONMENT="production", DATABASE_URL="")

        with pytest.raises(ValueError):
            config.validate()

    def test_missing_database_url_tolerated_outside_production(self, load_env):
        config = load_env(ENVIRONMENT="development", DATABASE_URL="")

        config.validate()

    def test_invalid_log_level_reset(self, load_env):
        config = load_env(LOG_LEVEL="LOUD")

        config.validate()

        assert config.LOG_LEVEL == "INFO"
