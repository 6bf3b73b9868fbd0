"""Language detectors and detection data models."""

from .base import ConfigurableDetector, LanguageDetector, LanguageSelectableDetector
from .cache import CacheEntry, CacheStatistics, LanguageDetectionCache
from .model_detector import ModelDetector
from .models import (
    AnalysisSummary,
    BlockComment,
    CodeValidation,
    CommentStyle,
    DetectionAnalysis,
    DetectionResult,
    DetectorInfo,
    LanguagePattern,
)
from .pattern_detector import PatternMatchingDetector
from .patterns import load_builtin_patterns, load_patterns_from_directory, parse_pattern
from .pygments_detector import PygmentsDetector

__all__ = [
    "LanguageDetector",
    "ConfigurableDetector",
    "LanguageSelectableDetector",
    "PatternMatchingDetector",
    "PygmentsDetector",
    "ModelDetector",
    "DetectionResult",
    "DetectorInfo",
    "LanguagePattern",
    "CommentStyle",
    "BlockComment",
    "CodeValidation",
    "DetectionAnalysis",
    "AnalysisSummary",
    "LanguageDetectionCache",
    "CacheEntry",
    "CacheStatistics",
    "load_builtin_patterns",
    "load_patterns_from_directory",
    "parse_pattern",
]
