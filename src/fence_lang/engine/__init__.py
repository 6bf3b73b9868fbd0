"""Detection engine: registry, orchestration and configuration management."""

from .configuration import (
    ConfigurationError,
    ConfigurationManager,
    ConfigurationSummary,
    ConfigurationValidation,
    ImportResult,
)
from .detection_engine import LanguageDetectionEngine, create_default_engine
from .orchestrator import DetectionOrchestrator
from .registry import DetectorRegistry

__all__ = [
    "DetectorRegistry",
    "DetectionOrchestrator",
    "ConfigurationManager",
    "ConfigurationError",
    "ConfigurationValidation",
    "ConfigurationSummary",
    "ImportResult",
    "LanguageDetectionEngine",
    "create_default_engine",
]
