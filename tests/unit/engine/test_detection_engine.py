"""Unit tests for the language detection engine facade."""

import json
from unittest.mock import Mock

import pytest

from conftest import FakeDetector, FakeSelectableDetector
from fence_lang.config import EngineSettings
from fence_lang.engine import LanguageDetectionEngine, create_default_engine
from fence_lang.language_detection import LanguagePattern, PatternMatchingDetector


class TestEngineCaching:
    """Test result caching in the sequential protocol."""

    @pytest.mark.asyncio
    async def test_accepted_results_are_cached(self):
        """Test that a repeated detection is served from the cache."""
        engine = LanguageDetectionEngine()
        detector = FakeDetector("a", language="python", confidence=90)
        engine.register_detector(detector)

        first = await engine.detect_language("x = 1")
        second = await engine.detect_language("x = 1")

        assert first == second
        assert detector.calls == 1
        assert engine.get_cache_info()["statistics"]["hits"] == 1

    @pytest.mark.asyncio
    async def test_negative_results_are_not_cached(self):
        """Test that None results are recomputed."""
        engine = LanguageDetectionEngine()
        detector = FakeDetector("a", language="python", confidence=10)
        engine.register_detector(detector)

        await engine.detect_language("x = 1")
        await engine.detect_language("x = 1")

        assert detector.calls == 2

    @pytest.mark.asyncio
    async def test_configuration_change_clears_cache(self):
        """Test that a configuration write invalidates cached results."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a", language="python", confidence=75))
        assert await engine.detect_language("x = 1") is not None

        result = engine.set_configuration({"confidence_threshold": 80})

        assert result.success
        assert await engine.detect_language("x = 1") is None

    @pytest.mark.asyncio
    async def test_registration_clears_cache(self):
        """Test that registering a detector invalidates cached results."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a", language="python", confidence=75))
        await engine.detect_language("x = 1")

        engine.register_detector(FakeDetector("a", language="bash", confidence=75))

        assert (await engine.detect_language("x = 1")).language == "bash"

    @pytest.mark.asyncio
    async def test_cache_disabled(self):
        """Test the engine without a cache."""
        engine = LanguageDetectionEngine(enable_cache=False)
        detector = FakeDetector("a", language="python", confidence=90)
        engine.register_detector(detector)

        await engine.detect_language("x = 1")
        await engine.detect_language("x = 1")

        assert detector.calls == 2
        assert engine.get_cache_info() is None


class TestEngineFacade:
    """Test delegation to the orchestrator and configuration manager."""

    def test_register_syncs_allow_list(self):
        """Test that new selectable detectors receive the current allow-list."""
        engine = LanguageDetectionEngine(enabled_pattern_languages=["python"])
        selectable = FakeSelectableDetector("pattern-matching", language="python")

        engine.register_detector(selectable)

        assert selectable.get_enabled_languages() == ["python"]

    @pytest.mark.asyncio
    async def test_register_applies_global_threshold(self):
        """Test that a new detector adopts the engine threshold as its own."""
        engine = LanguageDetectionEngine(confidence_threshold=30, enable_cache=False)
        detector = PatternMatchingDetector([LanguagePattern("alpha", keywords=("foo", "bar"))])

        engine.register_detector(detector)
        result = await engine.detect_language("foo bar foo")

        assert detector.get_threshold() == 30
        assert result.language == "alpha"
        assert result.confidence == 40

    def test_replacement_keeps_own_threshold(self):
        """Test that re-registering a name keeps the replacement's threshold."""
        engine = LanguageDetectionEngine(confidence_threshold=30)
        engine.register_detector(FakeDetector("a"))
        replacement = FakeDetector("a")
        replacement.set_threshold(55)

        engine.register_detector(replacement)

        assert replacement.get_threshold() == 55

    def test_unregister(self):
        """Test detector removal through the facade."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a"))

        assert engine.unregister_detector("a") is True
        assert engine.unregister_detector("a") is False
        assert engine.get_detection_order() == []

    def test_registered_detectors(self):
        """Test the detector info listing."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a"))
        engine.register_detector(FakeSelectableDetector("b"))

        infos = engine.get_registered_detectors()

        assert [info.name for info in infos] == ["a", "b"]
        assert [info.is_configurable for info in infos] == [False, True]

    def test_set_configuration_reports_errors(self):
        """Test that malformed payloads are reported, not raised."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a"))

        result = engine.set_configuration({"detection_order": 7})

        assert not result.success
        assert result.errors

    @pytest.mark.asyncio
    async def test_protocol_delegation(self):
        """Test the exhaustive, analytical and targeted protocols."""
        engine = LanguageDetectionEngine()
        engine.register_detector(FakeDetector("a", language="python", confidence=90))
        engine.register_detector(FakeDetector("b", language="bash", confidence=40))

        assert len(await engine.detect_with_all_methods("x")) == 2
        assert (await engine.detect_with_analysis("x")).analysis.consensus_language == "python"
        assert (await engine.detect_with_detector("x", "b")).language == "bash"
        assert engine.validate_code("x").is_valid


class TestCreateDefaultEngine:
    """Test the default engine factory."""

    def test_default_detectors(self):
        """Test the bundled detectors and default configuration."""
        engine = create_default_engine()

        assert engine.get_detection_order() == ["pygments", "pattern-matching"]
        config = engine.get_configuration()
        assert config["confidence_threshold"] == 70
        assert config["enabled_pattern_languages"] == [
            "javascript", "typescript", "python", "java", "cpp", "bash"
        ]
        pattern = engine.registry.lookup("pattern-matching")
        assert isinstance(pattern, PatternMatchingDetector)
        assert pattern.get_enabled_languages() == config["enabled_pattern_languages"]

    def test_model_detector_registered_with_factory(self):
        """Test that a model factory adds the ml-model detector first."""
        engine = create_default_engine(model_factory=Mock())

        assert engine.get_detection_order() == ["ml-model", "pygments", "pattern-matching"]

    def test_settings_are_applied(self, temp_dir):
        """Test threshold, order and user pattern directory settings."""
        (temp_dir / "alpha.json").write_text(json.dumps({"name": "alpha", "keywords": ["foo"]}))
        settings = EngineSettings(
            confidence_threshold=40,
            detection_order=["pattern-matching", "pygments"],
            enabled_pattern_languages=[],
            enable_cache=False,
            patterns_dir=temp_dir,
        )

        engine = create_default_engine(settings)

        assert engine.get_detection_order() == ["pattern-matching", "pygments"]
        assert engine.orchestrator.get_confidence_threshold() == 40
        assert "alpha" in engine.registry.lookup("pattern-matching").supported_languages()
        assert engine.cache is None

    @pytest.mark.asyncio
    async def test_detects_python_end_to_end(self):
        """Test detection of a realistic python snippet."""
        engine = create_default_engine(EngineSettings(confidence_threshold=50))
        code = (
            "#!/usr/bin/env python3\n"
            "import os\n"
            "import sys\n\n"
            "class Config:\n"
            "    def __init__(self, path):\n"
            "        self.path = path\n\n"
            "    def exists(self):\n"
            "        return os.path.exists(self.path)\n\n"
            "def main():\n"
            "    config = Config(sys.argv[1])\n"
            "    print(config.exists())\n\n"
            "if __name__ == '__main__':\n"
            "    main()\n"
        )

        results = await engine.detect_with_all_methods(code)

        assert results
        assert "python" in {result.language for result in results}
