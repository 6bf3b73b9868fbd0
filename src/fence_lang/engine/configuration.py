"""Configuration management for the language detection engine.

The :class:`ConfigurationManager` is the single writer of the engine's
tunables: global threshold, detection order, enabled-language allow-list,
per-detector thresholds and per-detector configuration payloads. It never
holds detector instances itself and mutates state only through the
registry and orchestrator.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional

from ..language_detection.base import ConfigurableDetector, LanguageSelectableDetector
from .orchestrator import DetectionOrchestrator
from .registry import DetectorRegistry

logger = logging.getLogger(__name__)

DEFAULT_DETECTION_ORDER = ["ml-model", "pygments", "pattern-matching"]
DEFAULT_CONFIDENCE_THRESHOLD = 70
DEFAULT_PATTERN_LANGUAGES = ["javascript", "typescript", "python", "java", "cpp", "bash"]

LOW_THRESHOLD_WARNING = 10
HIGH_THRESHOLD_WARNING = 90
MIN_LANGUAGE_COVERAGE = 5

ChangeListener = Callable[[], None]


class ConfigurationError(ValueError):
    """Raised when a configuration payload has the wrong shape or a detector rejects it."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class ConfigurationValidation:
    """Outcome of validating the current configuration."""

    is_valid: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of applying or importing a configuration payload."""

    success: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ConfigurationSummary:
    """Condensed view of the configuration for display."""

    enabled_detectors: List[str]
    detection_order: List[str]
    confidence_threshold: float
    pattern_languages_count: int
    total_available_languages: int
    status: Literal["healthy", "warning", "error"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


class ConfigurationManager:
    """Manages configuration for the language detection engine."""

    def __init__(self, registry: DetectorRegistry, orchestrator: DetectionOrchestrator):
        self.registry = registry
        self.orchestrator = orchestrator
        self._listeners: List[ChangeListener] = []

    def add_change_listener(self, listener: ChangeListener) -> None:
        """Register a callback invoked after every configuration write."""
        self._listeners.append(listener)

    def _notify_change(self) -> None:
        for listener in self._listeners:
            listener()

    # Reading

    def get_configuration(self) -> Dict[str, Any]:
        """
        Get the current engine configuration.

        Returns:
            Configuration dictionary; ``registered_detectors``,
            ``registry_info`` and ``performance_metrics`` are read-only
        """
        detector_configs = {}
        detector_thresholds = {}
        for detector in self.registry.list_all():
            detector_thresholds[detector.name] = detector.get_threshold()
            if isinstance(detector, ConfigurableDetector):
                detector_configs[detector.name] = detector.get_configuration()

        return {
            "detection_order": self.registry.get_order(),
            "confidence_threshold": self.orchestrator.get_confidence_threshold(),
            "enabled_pattern_languages": self.orchestrator.get_enabled_pattern_languages(),
            "detector_thresholds": detector_thresholds,
            "detector_configs": detector_configs,
            "registered_detectors": self.registry.list_names(),
            "registry_info": self.registry.get_registry_info(),
            "performance_metrics": self.orchestrator.get_performance_metrics(),
        }

    # Writing

    def set_configuration(self, config: Mapping[str, Any]) -> None:
        """
        Apply a bulk configuration payload.

        The whole payload is checked before anything is applied; fields that
        are absent are left untouched and unknown keys are ignored.

        Args:
            config: Configuration dictionary

        Raises:
            ConfigurationError: If any field has the wrong shape, or a detector
                rejects its payload (everything applied so far is rolled back)
        """
        errors = self._check_shape(config)
        if errors:
            raise ConfigurationError(errors)

        snapshot = self._snapshot()

        if "detection_order" in config:
            self.registry.set_order(config["detection_order"])

        if "confidence_threshold" in config:
            self._apply_confidence_threshold(config["confidence_threshold"])

        if "enabled_pattern_languages" in config:
            self.orchestrator.set_enabled_pattern_languages(config["enabled_pattern_languages"])

        if "detector_configs" in config:
            errors = self._apply_detector_configurations(config["detector_configs"])
            if errors:
                self._restore(snapshot)
                raise ConfigurationError(errors)

        if "detector_thresholds" in config:
            for name, threshold in config["detector_thresholds"].items():
                self._apply_detector_threshold(name, threshold)

        logger.info("Applied engine configuration")
        self._notify_change()

    @staticmethod
    def _check_shape(config: Any) -> List[str]:
        if not isinstance(config, Mapping):
            return ["Configuration must be a valid object"]

        errors = []
        if "detection_order" in config and not _is_string_list(config["detection_order"]):
            errors.append("'detection_order' must be a list of detector names")

        if "confidence_threshold" in config and not _is_number(config["confidence_threshold"]):
            errors.append("'confidence_threshold' must be a number between 0 and 100")

        if "enabled_pattern_languages" in config and not _is_string_list(
            config["enabled_pattern_languages"]
        ):
            errors.append("'enabled_pattern_languages' must be a list of language names")

        if "detector_configs" in config:
            configs = config["detector_configs"]
            if not isinstance(configs, Mapping):
                errors.append("'detector_configs' must be an object keyed by detector name")
            else:
                for name, payload in configs.items():
                    if not isinstance(payload, Mapping):
                        errors.append(f"Configuration for detector '{name}' must be an object")

        if "detector_thresholds" in config:
            thresholds = config["detector_thresholds"]
            if not isinstance(thresholds, Mapping):
                errors.append("'detector_thresholds' must be an object keyed by detector name")
            else:
                for name, value in thresholds.items():
                    if not _is_number(value):
                        errors.append(f"Threshold for detector '{name}' must be a number")

        return errors

    def _apply_confidence_threshold(self, threshold: float) -> None:
        clamped = max(0, min(100, threshold))
        self.orchestrator.set_confidence_threshold(clamped)
        self.registry.update_all_thresholds(clamped / 100)

    def _apply_detector_threshold(self, name: str, threshold: float) -> bool:
        detector = self.registry.lookup(name)
        if detector is None:
            logger.debug(f"Ignoring threshold for unknown detector '{name}'")
            return False
        detector.set_threshold(max(0, min(100, threshold)))
        return True

    def _apply_detector_configurations(self, detector_configs: Mapping[str, Any]) -> List[str]:
        """Apply payloads detector by detector and collect the failures."""
        errors: List[str] = []
        for name, payload in detector_configs.items():
            detector = self.registry.lookup(name)
            if detector is None or not isinstance(detector, ConfigurableDetector):
                logger.debug(f"Ignoring configuration for non-configurable detector '{name}'")
                continue

            payload = dict(payload)
            # The allow-list has a single owner; route it through the orchestrator
            if isinstance(detector, LanguageSelectableDetector) and "enabled_languages" in payload:
                languages = payload.pop("enabled_languages")
                if _is_string_list(languages):
                    self.orchestrator.set_enabled_pattern_languages(languages)

            try:
                detector.set_configuration(payload)
            except Exception as e:
                logger.warning(f"Detector '{name}' rejected its configuration: {e}")
                errors.append(f"Configuration for detector '{name}' failed: {e}")
        return errors

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "detection_order": self.registry.get_order(),
            "confidence_threshold": self.orchestrator.get_confidence_threshold(),
            "enabled_pattern_languages": self.orchestrator.get_enabled_pattern_languages(),
            "min_confidence": {
                detector.name: detector.get_min_confidence() for detector in self.registry.list_all()
            },
            "detector_configs": {
                detector.name: detector.get_configuration()
                for detector in self.registry.list_all()
                if isinstance(detector, ConfigurableDetector)
            },
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for name, payload in snapshot["detector_configs"].items():
            try:
                self.registry.lookup(name).set_configuration(payload)
            except Exception as e:
                logger.warning(f"Could not restore configuration of detector '{name}': {e}")

        self.registry.set_order(snapshot["detection_order"])
        self.orchestrator.set_confidence_threshold(snapshot["confidence_threshold"])
        self.orchestrator.set_enabled_pattern_languages(snapshot["enabled_pattern_languages"])
        for name, min_confidence in snapshot["min_confidence"].items():
            self.registry.lookup(name).set_min_confidence(min_confidence)
        logger.info("Configuration rolled back")

    def set_confidence_threshold(self, threshold: float) -> None:
        """
        Set the global threshold and push it to every registered detector.

        Args:
            threshold: New confidence threshold (0-100)
        """
        self._apply_confidence_threshold(threshold)
        logger.info(f"Confidence threshold set to {self.get_confidence_threshold()}")
        self._notify_change()

    def get_confidence_threshold(self) -> float:
        return self.orchestrator.get_confidence_threshold()

    def set_detector_threshold(self, name: str, threshold: float) -> bool:
        """
        Override the own threshold of one detector.

        Args:
            name: Detector name
            threshold: New threshold (0-100)

        Returns:
            True if the detector is registered
        """
        applied = self._apply_detector_threshold(name, threshold)
        if applied:
            self._notify_change()
        return applied

    def set_detection_order(self, order: List[str]) -> None:
        self.registry.set_order(order)
        self._notify_change()

    def get_detection_order(self) -> List[str]:
        return self.registry.get_order()

    def set_detector_enabled(self, name: str, enabled: bool) -> None:
        self.registry.set_enabled(name, enabled)
        self._notify_change()

    def is_detector_enabled(self, name: str) -> bool:
        return self.registry.is_enabled(name)

    def set_enabled_pattern_languages(self, languages: List[str]) -> None:
        self.orchestrator.set_enabled_pattern_languages(languages)
        self._notify_change()

    def get_enabled_pattern_languages(self) -> List[str]:
        return self.orchestrator.get_enabled_pattern_languages()

    def set_detector_configuration(self, name: str, payload: Mapping[str, Any]) -> bool:
        """
        Apply an opaque configuration payload to one configurable detector.

        Returns:
            True if the detector exists and is configurable

        Raises:
            ConfigurationError: If the detector rejects the payload
        """
        detector = self.registry.lookup(name)
        if detector is None or not isinstance(detector, ConfigurableDetector):
            return False
        snapshot = self._snapshot()
        errors = self._apply_detector_configurations({name: payload})
        if errors:
            self._restore(snapshot)
            raise ConfigurationError(errors)
        self._notify_change()
        return True

    def reset_to_defaults(self) -> None:
        """Restore default order, threshold and allow-list, and enable every detector."""
        self.registry.set_order(DEFAULT_DETECTION_ORDER)
        self._apply_confidence_threshold(DEFAULT_CONFIDENCE_THRESHOLD)
        self.orchestrator.set_enabled_pattern_languages(DEFAULT_PATTERN_LANGUAGES)

        for name in self.registry.list_names():
            self.registry.enable(name)

        logger.info("Configuration reset to defaults")
        self._notify_change()

    # Validation

    def validate_configuration(self) -> ConfigurationValidation:
        """
        Validate the current configuration.

        Returns:
            ConfigurationValidation with blocking issues, warnings and
            recommendations
        """
        issues: List[str] = []
        warnings: List[str] = []
        recommendations: List[str] = []

        if not self.orchestrator.is_configuration_valid():
            issues.append("Orchestrator configuration is invalid")

        if len(self.registry) == 0:
            issues.append("No detectors are registered")

        threshold = self.get_confidence_threshold()
        if threshold < LOW_THRESHOLD_WARNING:
            warnings.append("Very low confidence threshold may result in false positives")
        elif threshold > HIGH_THRESHOLD_WARNING:
            warnings.append("Very high confidence threshold may result in missed detections")

        detection_order = self.get_detection_order()
        if not detection_order:
            issues.append("No detectors are enabled")
        elif len(detection_order) == 1:
            recommendations.append("Consider enabling multiple detectors for better accuracy")

        if not self.get_enabled_pattern_languages():
            for detector in self.registry.list_in_order():
                if isinstance(detector, LanguageSelectableDetector):
                    warnings.append(
                        f"{detector.display_name or detector.name} is enabled but no languages "
                        f"are configured; all loaded languages will be used"
                    )

        if len(self.registry) > 0 and len(self.registry.supported_languages()) < MIN_LANGUAGE_COVERAGE:
            warnings.append("Limited language support detected")

        enabled = len(detection_order)
        available = len(self.registry)
        if 0 < enabled < available:
            recommendations.append(
                f"Consider enabling more detectors ({enabled}/{available} active)"
            )

        return ConfigurationValidation(
            is_valid=len(issues) == 0,
            issues=issues,
            warnings=warnings,
            recommendations=recommendations,
        )

    def get_configuration_summary(self) -> ConfigurationSummary:
        validation = self.validate_configuration()

        status: Literal["healthy", "warning", "error"] = "healthy"
        if not validation.is_valid:
            status = "error"
        elif validation.warnings:
            status = "warning"

        order = self.get_detection_order()
        return ConfigurationSummary(
            enabled_detectors=order,
            detection_order=list(order),
            confidence_threshold=self.get_confidence_threshold(),
            pattern_languages_count=len(self.get_enabled_pattern_languages()),
            total_available_languages=len(self.registry.supported_languages()),
            status=status,
        )

    # Import / export

    def apply_configuration(self, config: Any) -> ImportResult:
        """
        Apply a configuration payload and validate the result.

        Never raises; shape errors and blocking validation issues are
        reported in the returned ImportResult.
        """
        try:
            self.set_configuration(config)
        except ConfigurationError as e:
            return ImportResult(success=False, errors=list(e.errors))

        validation = self.validate_configuration()
        return ImportResult(
            success=validation.is_valid,
            errors=list(validation.issues),
            warnings=list(validation.warnings),
        )

    def export_configuration(self, indent: Optional[int] = 2) -> str:
        """Serialize the current configuration to JSON."""
        return json.dumps(self.get_configuration(), indent=indent)

    def import_configuration(self, config_string: str) -> ImportResult:
        """
        Import configuration from a JSON string.

        Args:
            config_string: Serialized configuration

        Returns:
            ImportResult with success flag, errors and warnings
        """
        try:
            config = json.loads(config_string)
        except (TypeError, json.JSONDecodeError) as e:
            return ImportResult(success=False, errors=[f"Failed to parse configuration: {e}"])

        return self.apply_configuration(config)
