"""fence-lang - Language detection for code fences and snippets."""

# Version tracking
__version__ = "0.1.0"

from .cli import cli, main
from .config import EngineSettings
from .engine import (
    ConfigurationManager,
    DetectionOrchestrator,
    DetectorRegistry,
    LanguageDetectionEngine,
    create_default_engine,
)
from .language_detection import (
    DetectionResult,
    LanguageDetector,
    ModelDetector,
    PatternMatchingDetector,
    PygmentsDetector,
)

# Expose main components
__all__ = [
    "main", "cli", "EngineSettings", "LanguageDetectionEngine", "create_default_engine",
    "DetectorRegistry", "DetectionOrchestrator", "ConfigurationManager",
    "LanguageDetector", "PatternMatchingDetector", "PygmentsDetector", "ModelDetector",
    "DetectionResult", "__version__",
]
