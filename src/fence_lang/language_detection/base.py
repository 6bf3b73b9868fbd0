"""Abstract base classes for language detectors.

Every detection strategy implements :class:`LanguageDetector`. Optional
capabilities are expressed as secondary interfaces that callers query at
runtime with ``isinstance``:

- :class:`ConfigurableDetector` exposes an opaque configuration payload.
- :class:`LanguageSelectableDetector` restricts results to an allow-list
  of languages.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .models import DetectionResult, DetectorInfo

logger = logging.getLogger(__name__)


def clamp_confidence(value: float) -> int:
    """Round a raw score half-up and clamp it to the 0-100 scale."""
    rounded = int(value + 0.5) if value > 0 else 0
    return max(0, min(100, rounded))


class LanguageDetector(ABC):
    """Abstract base class for language detection strategies.

    Subclasses set the ``name``, ``display_name`` and ``description`` class
    attributes and implement :meth:`detect` and :meth:`supported_languages`.
    ``name`` is the join key used by the registry and the configuration
    layer and must never change.
    """

    name: str = ""
    display_name: str = ""
    description: str = ""

    def __init__(self, min_confidence: float = 0.5):
        """Initialize the detector.

        Args:
            min_confidence: Own suppression threshold on the 0-1 scale
        """
        if not self.name:
            raise ValueError(f"{type(self).__name__} must define a detector name")
        self._min_confidence = 0.0
        self.set_min_confidence(min_confidence)

    @abstractmethod
    async def detect(self, code: str) -> Optional[DetectionResult]:
        """Detect the language of a code snippet.

        Implementations return None for empty or whitespace-only input and
        never raise; internal failures degrade to None.

        Args:
            code: The code to analyze

        Returns:
            DetectionResult or None if nothing cleared the own threshold
        """
        pass

    @abstractmethod
    def supported_languages(self) -> List[str]:
        """Return the canonical language identifiers this detector can emit."""
        pass

    def set_min_confidence(self, min_confidence: float) -> None:
        """Set the own threshold on the internal 0-1 scale (clamped)."""
        self._min_confidence = max(0.0, min(1.0, float(min_confidence)))

    def get_min_confidence(self) -> float:
        return self._min_confidence

    def set_threshold(self, threshold: float) -> None:
        """Set the own threshold on the external 0-100 scale."""
        self.set_min_confidence(threshold / 100)

    def get_threshold(self) -> int:
        """Get the own threshold on the external 0-100 scale."""
        return clamp_confidence(self._min_confidence * 100)

    def clears_threshold(self, confidence: float) -> bool:
        """Compare a raw, unrounded 0-100 score against the own threshold."""
        # 0.3 * 100 is 30.000000000000004 in floating point
        return round(confidence, 6) >= round(self._min_confidence * 100, 6)

    def is_configurable(self) -> bool:
        return isinstance(self, ConfigurableDetector)

    def accepts_language(self, language: str) -> bool:
        """Check a result language against this detector's allow-list.

        Detectors without an allow-list accept every language.
        """
        return True

    def is_language_supported(self, language: str) -> bool:
        return language.lower() in self.supported_languages()

    def get_info(self) -> DetectorInfo:
        return DetectorInfo(
            name=self.name,
            display_name=self.display_name or self.name,
            description=self.description,
            is_configurable=self.is_configurable(),
        )

    def _make_result(self, language: str, confidence: float) -> DetectionResult:
        return DetectionResult(
            language=language,
            confidence=clamp_confidence(confidence),
            source_name=self.name,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', threshold={self.get_threshold()})"


class ConfigurableDetector(ABC):
    """Secondary interface for detectors with an extended configuration."""

    @abstractmethod
    def get_configuration(self) -> Dict[str, Any]:
        """Return the detector's configuration payload."""
        pass

    @abstractmethod
    def set_configuration(self, config: Dict[str, Any]) -> None:
        """Apply a configuration payload; unknown keys are ignored."""
        pass


class LanguageSelectableDetector(ABC):
    """Secondary interface for detectors honoring a language allow-list.

    An empty allow-list means every loaded language is allowed.
    """

    @abstractmethod
    def set_enabled_languages(self, languages: Iterable[str]) -> None:
        pass

    @abstractmethod
    def get_enabled_languages(self) -> List[str]:
        pass

    @abstractmethod
    def is_language_enabled(self, language: str) -> bool:
        pass
