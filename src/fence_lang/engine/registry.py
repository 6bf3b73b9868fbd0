"""Registration and ordering of language detectors."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..language_detection.base import LanguageDetector

logger = logging.getLogger(__name__)


class DetectorRegistry:
    """
    Owns the registered detector instances and the detection order.

    The detection order is the enabled subset of registered detector names:
    membership means enabled, position is the order in which the sequential
    protocol tries them. It never contains duplicates or names that are not
    registered.
    """

    def __init__(self):
        self._detectors: Dict[str, LanguageDetector] = {}
        self._order: List[str] = []

    def register(self, detector: LanguageDetector) -> None:
        """
        Register a detector, replacing any detector with the same name.

        A new name is appended to the detection order. Replacing an already
        registered detector keeps its current enablement and position.

        Args:
            detector: The detector to register
        """
        name = detector.name
        replacing = name in self._detectors
        self._detectors[name] = detector

        if replacing:
            logger.info(f"Replaced detector: {name}")
            return

        if name not in self._order:
            self._order.append(name)
        logger.info(f"Registered detector: {name}")

    def unregister(self, name: str) -> bool:
        """
        Remove a detector from the registry and the detection order.

        Args:
            name: The name of the detector to remove

        Returns:
            True if the detector was registered
        """
        removed = self._detectors.pop(name, None) is not None
        self._order = [entry for entry in self._order if entry != name]
        if removed:
            logger.info(f"Unregistered detector: {name}")
        return removed

    def lookup(self, name: str) -> Optional[LanguageDetector]:
        return self._detectors.get(name)

    def list_all(self) -> List[LanguageDetector]:
        """Get all registered detectors in registration order."""
        return list(self._detectors.values())

    def list_names(self) -> List[str]:
        return list(self._detectors.keys())

    def list_in_order(self) -> List[LanguageDetector]:
        """Resolve the detection order to detector instances."""
        detectors = []
        for name in self._order:
            detector = self._detectors.get(name)
            if detector is not None:
                detectors.append(detector)
        return detectors

    def set_order(self, names: Iterable[str]) -> None:
        """
        Replace the detection order.

        Unknown names and repeated names are dropped silently.

        Args:
            names: Detector names in the desired order
        """
        order: List[str] = []
        for name in names:
            if name in self._detectors and name not in order:
                order.append(name)
        self._order = order
        logger.debug(f"Detection order set to {order}")

    def get_order(self) -> List[str]:
        return list(self._order)

    def enable(self, name: str) -> bool:
        """
        Append a registered detector to the detection order.

        Returns:
            True if the detector is registered (and now enabled)
        """
        if name not in self._detectors:
            return False
        if name not in self._order:
            self._order.append(name)
        return True

    def disable(self, name: str) -> None:
        self._order = [entry for entry in self._order if entry != name]

    def set_enabled(self, name: str, enabled: bool) -> None:
        if enabled:
            self.enable(name)
        else:
            self.disable(name)

    def is_enabled(self, name: str) -> bool:
        return name in self._order

    def supported_languages(self) -> List[str]:
        """Get the deduplicated, sorted languages of all registered detectors."""
        languages = set()
        for detector in self._detectors.values():
            languages.update(detector.supported_languages())
        return sorted(languages)

    def update_all_thresholds(self, min_confidence: float) -> None:
        """
        Push one threshold to every registered detector.

        Args:
            min_confidence: Threshold on the 0-1 scale
        """
        for detector in self._detectors.values():
            detector.set_min_confidence(min_confidence)

    def is_valid(self) -> bool:
        """At least one detector is registered and at least one is enabled."""
        return len(self._detectors) > 0 and len(self._order) > 0

    def get_registry_info(self) -> Dict[str, Any]:
        """
        Get registry information for diagnostics.

        Returns:
            Dictionary with counts, names, order and per-detector identity
        """
        return {
            "total_detectors": len(self._detectors),
            "enabled_detectors": len(self._order),
            "detector_names": self.list_names(),
            "detection_order": self.get_order(),
            "detector_info": [detector.get_info().to_dict() for detector in self._detectors.values()],
        }

    def __len__(self) -> int:
        return len(self._detectors)

    def __contains__(self, name: str) -> bool:
        return name in self._detectors
