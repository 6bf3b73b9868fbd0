"""Unit tests for engine settings."""

from pathlib import Path

import pytest

from fence_lang.config import EngineSettings, split_list

ENV_VARS = [
    "FENCE_LANG_CONFIDENCE_THRESHOLD",
    "FENCE_LANG_DETECTION_ORDER",
    "FENCE_LANG_PATTERN_LANGUAGES",
    "FENCE_LANG_CACHE",
    "FENCE_LANG_CACHE_SIZE",
    "FENCE_LANG_CACHE_MAX_AGE",
    "FENCE_LANG_PATTERNS_DIR",
    "FENCE_LANG_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every fence-lang environment variable."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEngineSettings:
    """Test the EngineSettings dataclass."""

    def test_defaults(self):
        """Test default values."""
        settings = EngineSettings()

        assert settings.confidence_threshold == 70
        assert settings.detection_order == ["ml-model", "pygments", "pattern-matching"]
        assert settings.enabled_pattern_languages == [
            "javascript", "typescript", "python", "java", "cpp", "bash"
        ]
        assert settings.enable_cache is True
        assert settings.patterns_dir is None
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"confidence_threshold": 101},
            {"confidence_threshold": -1},
            {"cache_max_size": 0},
            {"cache_max_age_seconds": -1},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test validation in __post_init__."""
        with pytest.raises(ValueError):
            EngineSettings(**kwargs)

    def test_log_level_normalized(self):
        """Test that the log level is upper-cased."""
        import logging

        settings = EngineSettings(log_level="debug")

        assert settings.log_level == "DEBUG"
        assert settings.logging_level == logging.DEBUG

    def test_to_configuration(self):
        """Test the runtime configuration payload."""
        settings = EngineSettings(confidence_threshold=55, enabled_pattern_languages=["python"])

        assert settings.to_configuration() == {
            "detection_order": ["ml-model", "pygments", "pattern-matching"],
            "confidence_threshold": 55,
            "enabled_pattern_languages": ["python"],
        }


class TestFromEnv:
    """Test reading settings from environment variables."""

    def test_from_env_defaults(self, clean_env):
        """Test that an empty environment gives the defaults."""
        assert EngineSettings.from_env() == EngineSettings()

    def test_from_env_values(self, clean_env):
        """Test every supported variable."""
        clean_env.setenv("FENCE_LANG_CONFIDENCE_THRESHOLD", "42.5")
        clean_env.setenv("FENCE_LANG_DETECTION_ORDER", "pattern-matching, pygments")
        clean_env.setenv("FENCE_LANG_PATTERN_LANGUAGES", "python,bash,")
        clean_env.setenv("FENCE_LANG_CACHE", "false")
        clean_env.setenv("FENCE_LANG_CACHE_SIZE", "10")
        clean_env.setenv("FENCE_LANG_CACHE_MAX_AGE", "60")
        clean_env.setenv("FENCE_LANG_PATTERNS_DIR", "/tmp/patterns")
        clean_env.setenv("FENCE_LANG_LOG_LEVEL", "info")

        settings = EngineSettings.from_env()

        assert settings.confidence_threshold == 42.5
        assert settings.detection_order == ["pattern-matching", "pygments"]
        assert settings.enabled_pattern_languages == ["python", "bash"]
        assert settings.enable_cache is False
        assert settings.cache_max_size == 10
        assert settings.cache_max_age_seconds == 60
        assert settings.patterns_dir == Path("/tmp/patterns")
        assert settings.log_level == "INFO"

    def test_empty_language_list_allows_all(self, clean_env):
        """Test that an empty variable yields an empty allow-list."""
        clean_env.setenv("FENCE_LANG_PATTERN_LANGUAGES", "")

        assert EngineSettings.from_env().enabled_pattern_languages == []

    def test_invalid_env_value(self, clean_env):
        """Test that out-of-range values are rejected."""
        clean_env.setenv("FENCE_LANG_CONFIDENCE_THRESHOLD", "500")

        with pytest.raises(ValueError):
            EngineSettings.from_env()


def test_split_list():
    """Test comma separated list parsing."""
    assert split_list(" a, b ,,c ") == ["a", "b", "c"]
    assert split_list("") == []
