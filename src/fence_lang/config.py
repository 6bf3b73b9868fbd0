"""Configuration for fence-lang."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_DETECTION_ORDER = ["ml-model", "pygments", "pattern-matching"]
DEFAULT_PATTERN_LANGUAGES = ["javascript", "typescript", "python", "java", "cpp", "bash"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EngineSettings:
    """Startup settings for the language detection engine."""

    confidence_threshold: float = 70
    detection_order: list[str] = field(default_factory=lambda: list(DEFAULT_DETECTION_ORDER))
    enabled_pattern_languages: list[str] = field(
        default_factory=lambda: list(DEFAULT_PATTERN_LANGUAGES)
    )
    enable_cache: bool = True
    cache_max_size: int = 1000
    cache_max_age_seconds: int = 3600
    patterns_dir: Path | None = None
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate settings."""
        if not 0 <= self.confidence_threshold <= 100:
            raise ValueError("confidence_threshold must be between 0 and 100")

        if self.cache_max_size < 1:
            raise ValueError("cache_max_size must be at least 1")

        if self.cache_max_age_seconds < 0:
            raise ValueError("cache_max_age_seconds cannot be negative")

        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

        if self.patterns_dir is not None:
            self.patterns_dir = Path(self.patterns_dir)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Create settings from environment variables."""
        kwargs: dict[str, Any] = {}

        threshold = os.getenv("FENCE_LANG_CONFIDENCE_THRESHOLD")
        if threshold:
            kwargs["confidence_threshold"] = float(threshold)

        order = os.getenv("FENCE_LANG_DETECTION_ORDER")
        if order is not None:
            kwargs["detection_order"] = split_list(order)

        languages = os.getenv("FENCE_LANG_PATTERN_LANGUAGES")
        if languages is not None:
            kwargs["enabled_pattern_languages"] = split_list(languages)

        cache = os.getenv("FENCE_LANG_CACHE")
        if cache:
            kwargs["enable_cache"] = _parse_bool(cache)

        cache_size = os.getenv("FENCE_LANG_CACHE_SIZE")
        if cache_size:
            kwargs["cache_max_size"] = int(cache_size)

        cache_max_age = os.getenv("FENCE_LANG_CACHE_MAX_AGE")
        if cache_max_age:
            kwargs["cache_max_age_seconds"] = int(cache_max_age)

        patterns_dir = os.getenv("FENCE_LANG_PATTERNS_DIR")
        if patterns_dir:
            kwargs["patterns_dir"] = Path(patterns_dir)

        log_level = os.getenv("FENCE_LANG_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level

        return cls(**kwargs)

    def to_configuration(self) -> dict[str, Any]:
        """Build the runtime configuration payload for these settings."""
        return {
            "detection_order": list(self.detection_order),
            "confidence_threshold": self.confidence_threshold,
            "enabled_pattern_languages": list(self.enabled_pattern_languages),
        }
