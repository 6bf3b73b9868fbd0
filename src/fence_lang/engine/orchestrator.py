"""Detection protocols run against the detector registry."""

import asyncio
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from ..language_detection.base import LanguageDetector, LanguageSelectableDetector
from ..language_detection.models import (
    AnalysisSummary,
    CodeValidation,
    DetectionAnalysis,
    DetectionResult,
)
from .registry import DetectorRegistry

logger = logging.getLogger(__name__)

MIN_RELIABLE_LENGTH = 10
LONG_LINE_LENGTH = 100


class DetectionOrchestrator:
    """
    Runs the sequential, exhaustive and analytical detection protocols.

    The orchestrator holds the global confidence threshold (0-100) and the
    enabled-language allow-list. It reads detectors from the registry and
    never mutates the registry itself.
    """

    def __init__(
        self,
        registry: DetectorRegistry,
        confidence_threshold: float = 70,
        enabled_pattern_languages: Iterable[str] = (),
    ):
        self.registry = registry
        self._confidence_threshold = 70
        self._enabled_pattern_languages: List[str] = []
        self.set_confidence_threshold(confidence_threshold)
        self.set_enabled_pattern_languages(enabled_pattern_languages)

    async def detect_language(self, code: str) -> Optional[DetectionResult]:
        """
        Detect the language with the enabled detectors in order.

        The first result that clears the global threshold and the detector's
        language allow-list wins. Failing detectors are logged and skipped.

        Args:
            code: The code to analyze

        Returns:
            Accepted DetectionResult or None
        """
        if not code or not code.strip():
            return None

        for detector in self.registry.list_in_order():
            try:
                result = await detector.detect(code)
            except Exception as e:
                logger.warning(f"Error in {detector.name} detection: {e}")
                continue

            if result is None:
                logger.debug(f"{detector.name}: no result")
                continue

            if result.confidence < self._confidence_threshold:
                logger.debug(
                    f"{detector.name}: {result.language} ({result.confidence}) below "
                    f"threshold {self._confidence_threshold}"
                )
                continue

            if not detector.accepts_language(result.language):
                logger.debug(f"{detector.name}: language {result.language} not enabled")
                continue

            return result

        return None

    async def detect_with_detector(self, code: str, detector_name: str) -> Optional[DetectionResult]:
        """
        Detect the language using one specific detector, ignoring gates.

        Args:
            code: The code to analyze
            detector_name: The name of the detector to use

        Returns:
            The detector's result or None
        """
        detector = self.registry.lookup(detector_name)
        if detector is None:
            logger.warning(f"Detector '{detector_name}' not found in registry")
            return None

        if not code or not code.strip():
            return None

        try:
            return await detector.detect(code)
        except Exception as e:
            logger.warning(f"Error in {detector_name} detection: {e}")
            return None

    async def detect_with_all_methods(self, code: str) -> List[DetectionResult]:
        """
        Run every registered detector concurrently, regardless of enablement.

        Args:
            code: The code to analyze

        Returns:
            All non-null results ranked by descending confidence
        """
        if not code or not code.strip():
            return []

        detectors = self.registry.list_all()
        outcomes = await asyncio.gather(
            *(self._run_detector(detector, code) for detector in detectors),
            return_exceptions=True,
        )

        results: List[DetectionResult] = []
        for detector, outcome in zip(detectors, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Error in {detector.name} detection: {outcome}")
                continue
            if outcome is not None:
                results.append(outcome)

        return sorted(results, key=lambda result: result.confidence, reverse=True)

    @staticmethod
    async def _run_detector(detector: LanguageDetector, code: str) -> Optional[DetectionResult]:
        return await detector.detect(code)

    async def detect_with_analysis(
        self,
        code: str,
        min_confidence: Optional[float] = None,
        include_all_results: bool = True,
        include_fallbacks: bool = True,
    ) -> DetectionAnalysis:
        """
        Detect with a primary result, alternatives, fallbacks and consensus.

        Args:
            code: The code to analyze
            min_confidence: Acceptance threshold (defaults to the global threshold)
            include_all_results: Whether to return the alternatives
            include_fallbacks: Whether to return results below the threshold

        Returns:
            DetectionAnalysis
        """
        threshold = self._confidence_threshold if min_confidence is None else min_confidence

        primary = await self.detect_language(code)
        all_results = await self.detect_with_all_methods(code)

        accepted = [result for result in all_results if result.confidence >= threshold]
        fallbacks = [result for result in all_results if result.confidence < threshold]

        alternatives = list(accepted)
        if primary is not None and primary in alternatives:
            alternatives.remove(primary)

        average = (
            sum(result.confidence for result in accepted) / len(accepted) if accepted else 0.0
        )

        return DetectionAnalysis(
            primary=primary,
            alternatives=alternatives if include_all_results else [],
            fallbacks=fallbacks if include_fallbacks else [],
            analysis=AnalysisSummary(
                total_detectors=len(self.registry),
                successful_detectors=len(accepted),
                average_confidence=round(average, 2),
                consensus_language=self.consensus_language(accepted),
            ),
        )

    @staticmethod
    def consensus_language(results: Iterable[DetectionResult]) -> Optional[str]:
        """
        Get the most frequent language among results.

        Equal counts are resolved alphabetically.
        """
        counts = Counter(result.language for result in results)
        if not counts:
            return None
        return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]

    def validate_code(self, code: str) -> CodeValidation:
        """
        Inspect a code snippet for advisory concerns before detection.

        Args:
            code: The code to validate

        Returns:
            CodeValidation; only empty input is reported as invalid
        """
        issues: List[str] = []
        recommendations: List[str] = []

        if not isinstance(code, str) or not code:
            issues.append("Code must be a non-empty string")
            return CodeValidation(is_valid=False, issues=issues, recommendations=recommendations)

        trimmed = code.strip()
        if not trimmed:
            issues.append("Code cannot be empty or only whitespace")
            return CodeValidation(is_valid=False, issues=issues, recommendations=recommendations)

        if len(trimmed) < MIN_RELIABLE_LENGTH:
            recommendations.append(
                "Code snippets with more content typically yield better detection results"
            )

        if "\t" in trimmed and "    " in trimmed:
            recommendations.append(
                "Mixed indentation detected - consider consistent indentation for better analysis"
            )

        if "\n" not in trimmed and len(trimmed) > LONG_LINE_LENGTH:
            recommendations.append(
                "Long single-line code - line breaks may improve detection accuracy"
            )

        return CodeValidation(is_valid=True, issues=issues, recommendations=recommendations)

    def get_performance_metrics(self) -> Dict[str, Any]:
        return {
            "available_detectors": len(self.registry),
            "enabled_detectors": len(self.registry.get_order()),
            "confidence_threshold": self._confidence_threshold,
            "enabled_languages": len(self._enabled_pattern_languages),
            "total_available_languages": len(self.registry.supported_languages()),
        }

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the global gate on the 0-100 scale (clamped)."""
        self._confidence_threshold = max(0, min(100, threshold))

    def get_confidence_threshold(self) -> float:
        return self._confidence_threshold

    def set_enabled_pattern_languages(self, languages: Iterable[str]) -> None:
        """
        Set the language allow-list and push it to every detector that honors one.

        An empty list allows every language.
        """
        self._enabled_pattern_languages = [language.lower().strip() for language in languages]
        for detector in self._language_selectable_detectors():
            detector.set_enabled_languages(self._enabled_pattern_languages)

    def get_enabled_pattern_languages(self) -> List[str]:
        return list(self._enabled_pattern_languages)

    def sync_detector_languages(self, detector: LanguageDetector) -> None:
        """Push the current allow-list to a newly registered detector."""
        if isinstance(detector, LanguageSelectableDetector):
            detector.set_enabled_languages(self._enabled_pattern_languages)

    def _language_selectable_detectors(self) -> List[LanguageSelectableDetector]:
        return [
            detector for detector in self.registry.list_all()
            if isinstance(detector, LanguageSelectableDetector)
        ]

    def is_configuration_valid(self) -> bool:
        return self.registry.is_valid() and 0 <= self._confidence_threshold <= 100
