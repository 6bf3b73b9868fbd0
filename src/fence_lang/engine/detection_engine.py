"""Language detection engine wiring registry, orchestrator and configuration."""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..config import EngineSettings
from ..language_detection.base import LanguageDetector
from ..language_detection.cache import LanguageDetectionCache
from ..language_detection.model_detector import ModelDetector
from ..language_detection.models import (
    CodeValidation,
    DetectionAnalysis,
    DetectionResult,
    DetectorInfo,
)
from ..language_detection.pattern_detector import PatternMatchingDetector
from ..language_detection.patterns import load_builtin_patterns, load_patterns_from_directory
from ..language_detection.pygments_detector import PygmentsDetector
from .configuration import ConfigurationManager, ImportResult
from .orchestrator import DetectionOrchestrator
from .registry import DetectorRegistry

logger = logging.getLogger(__name__)


class LanguageDetectionEngine:
    """
    Facade over the detector registry, orchestrator and configuration manager.

    Accepted sequential results are cached by content hash. The cache is
    cleared whenever the configuration or the set of detectors changes.
    """

    def __init__(
        self,
        confidence_threshold: float = 70,
        enabled_pattern_languages: Optional[List[str]] = None,
        enable_cache: bool = True,
        cache_max_size: int = 1000,
        cache_max_age_seconds: int = 3600,
    ):
        """
        Initialize the engine.

        Args:
            confidence_threshold: Global acceptance threshold (0-100)
            enabled_pattern_languages: Language allow-list (empty allows all)
            enable_cache: Whether to cache accepted detection results
            cache_max_size: Maximum number of cache entries
            cache_max_age_seconds: Maximum age of cache entries in seconds
        """
        self.registry = DetectorRegistry()
        self.orchestrator = DetectionOrchestrator(
            self.registry,
            confidence_threshold=confidence_threshold,
            enabled_pattern_languages=enabled_pattern_languages or (),
        )
        self.configuration = ConfigurationManager(self.registry, self.orchestrator)

        self.cache_enabled = enable_cache
        if enable_cache:
            self.cache: Optional[LanguageDetectionCache] = LanguageDetectionCache(
                max_size=cache_max_size, max_age_seconds=cache_max_age_seconds
            )
            self.configuration.add_change_listener(self.cache.clear)
            logger.info("Language detection cache enabled")
        else:
            self.cache = None
            logger.info("Language detection cache disabled")

    def _invalidate_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    # Detectors

    def register_detector(self, detector: LanguageDetector) -> None:
        """
        Register a detector and bring it in line with the current configuration.

        The detector receives the current allow-list (if it honors one). A
        newly registered name also receives the global threshold as its own;
        a replacement keeps the threshold it was built with.
        """
        is_new = detector.name not in self.registry
        self.registry.register(detector)
        self.orchestrator.sync_detector_languages(detector)
        if is_new:
            self.configuration.set_detector_threshold(
                detector.name, self.configuration.get_confidence_threshold()
            )
        self._invalidate_cache()

    def unregister_detector(self, name: str) -> bool:
        removed = self.registry.unregister(name)
        if removed:
            self._invalidate_cache()
        return removed

    def get_registered_detectors(self) -> List[DetectorInfo]:
        return [detector.get_info() for detector in self.registry.list_all()]

    def get_detection_order(self) -> List[str]:
        return self.registry.get_order()

    def supported_languages(self) -> List[str]:
        return self.registry.supported_languages()

    # Detection

    async def detect_language(self, code: str, use_cache: Optional[bool] = None) -> Optional[DetectionResult]:
        """
        Detect the language with the sequential protocol.

        Args:
            code: The code to analyze
            use_cache: Override the cache setting for this call (None = default)

        Returns:
            Accepted DetectionResult or None
        """
        should_use_cache = self.cache_enabled if use_cache is None else use_cache

        if should_use_cache and self.cache is not None:
            cached = self.cache.get(code)
            if cached is not None:
                return cached

        result = await self.orchestrator.detect_language(code)

        if result is not None and should_use_cache and self.cache is not None:
            self.cache.put(code, result)
        return result

    async def detect_with_all_methods(self, code: str) -> List[DetectionResult]:
        return await self.orchestrator.detect_with_all_methods(code)

    async def detect_with_analysis(
        self,
        code: str,
        min_confidence: Optional[float] = None,
        include_all_results: bool = True,
        include_fallbacks: bool = True,
    ) -> DetectionAnalysis:
        return await self.orchestrator.detect_with_analysis(
            code,
            min_confidence=min_confidence,
            include_all_results=include_all_results,
            include_fallbacks=include_fallbacks,
        )

    async def detect_with_detector(self, code: str, detector_name: str) -> Optional[DetectionResult]:
        return await self.orchestrator.detect_with_detector(code, detector_name)

    def validate_code(self, code: str) -> CodeValidation:
        return self.orchestrator.validate_code(code)

    # Configuration

    def get_configuration(self) -> Dict[str, Any]:
        return self.configuration.get_configuration()

    def set_configuration(self, config: Dict[str, Any]) -> ImportResult:
        """Apply a configuration payload; errors are reported, not raised."""
        return self.configuration.apply_configuration(config)

    def get_cache_info(self) -> Optional[Dict[str, Any]]:
        if self.cache is None:
            return None
        return self.cache.get_info()


def create_default_engine(
    settings: EngineSettings | None = None,
    model_factory: Callable[[], Any] | None = None,
) -> LanguageDetectionEngine:
    """
    Build an engine with the bundled detectors.

    The pygments and pattern-matching detectors are always registered. The
    model detector is registered only when a model factory is supplied.

    Args:
        settings: Engine settings (defaults to EngineSettings())
        model_factory: Callable creating an ML model exposing ``run_model``

    Returns:
        Configured LanguageDetectionEngine
    """
    settings = settings or EngineSettings()

    engine = LanguageDetectionEngine(
        confidence_threshold=settings.confidence_threshold,
        enabled_pattern_languages=settings.enabled_pattern_languages,
        enable_cache=settings.enable_cache,
        cache_max_size=settings.cache_max_size,
        cache_max_age_seconds=settings.cache_max_age_seconds,
    )

    if model_factory is not None:
        engine.register_detector(ModelDetector(model_factory))

    engine.register_detector(PygmentsDetector())

    patterns = load_builtin_patterns()
    if settings.patterns_dir is not None:
        patterns.update(load_patterns_from_directory(settings.patterns_dir))
    engine.register_detector(PatternMatchingDetector(patterns))

    result = engine.set_configuration(settings.to_configuration())
    for warning in result.warnings:
        logger.debug(f"Configuration warning: {warning}")
    if not result.success:
        logger.warning(f"Engine configuration is incomplete: {'; '.join(result.errors)}")

    return engine
