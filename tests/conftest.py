"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from fence_lang.engine import ConfigurationManager, DetectionOrchestrator, DetectorRegistry
from fence_lang.language_detection import (
    BlockComment,
    CommentStyle,
    ConfigurableDetector,
    DetectionResult,
    LanguageDetector,
    LanguagePattern,
    LanguageSelectableDetector,
)


class FakeDetector(LanguageDetector):
    """Detector returning a fixed result, or raising, for orchestration tests."""

    def __init__(
        self,
        name: str,
        language: Optional[str] = None,
        confidence: int = 0,
        error: Optional[Exception] = None,
        languages: Iterable[str] = (),
    ):
        self.name = name
        super().__init__(min_confidence=0.0)
        self.language = language
        self.confidence = confidence
        self.error = error
        self.languages = list(languages) or ([language] if language else [])
        self.calls = 0

    async def detect(self, code: str) -> Optional[DetectionResult]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if not code or not code.strip() or self.language is None:
            return None
        return DetectionResult(self.language, self.confidence, self.name)

    def supported_languages(self) -> List[str]:
        return list(self.languages)


class FakeSelectableDetector(FakeDetector, ConfigurableDetector, LanguageSelectableDetector):
    """Fake detector honoring a language allow-list."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enabled: List[str] = []
        self.applied: List[Dict] = []

    def set_enabled_languages(self, languages: Iterable[str]) -> None:
        self.enabled = [language.lower() for language in languages]

    def get_enabled_languages(self) -> List[str]:
        return list(self.enabled)

    def is_language_enabled(self, language: str) -> bool:
        return not self.enabled or language.lower() in self.enabled

    def accepts_language(self, language: str) -> bool:
        return self.is_language_enabled(language)

    def get_configuration(self) -> Dict:
        return {"enabled_languages": self.get_enabled_languages()}

    def set_configuration(self, config: Dict) -> None:
        self.applied.append(dict(config))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    """Create an empty detector registry."""
    return DetectorRegistry()


@pytest.fixture
def orchestrator(registry):
    """Create an orchestrator with an empty allow-list."""
    return DetectionOrchestrator(registry, confidence_threshold=70)


@pytest.fixture
def manager(registry, orchestrator):
    """Create a configuration manager over the registry and orchestrator."""
    return ConfigurationManager(registry, orchestrator)


@pytest.fixture
def alpha_pattern():
    """A small pattern definition with one of each feature."""
    return LanguagePattern(
        name="alpha",
        keywords=("foo", "bar"),
        patterns=(r"foo\(",),
        imports=("baz",),
        builtins=("qux",),
        comments=CommentStyle(line=("#",), block=(BlockComment("/*", "*/"),)),
    )


@pytest.fixture
def python_pattern():
    """A reduced python definition."""
    return LanguagePattern(
        name="python",
        keywords=("def", "return", "import", "class", "if", "else", "for", "in"),
        patterns=(r"def\s+\w+\s*\(", r"^\s*import\s+\w+", r"print\s*\("),
        imports=("os", "sys"),
        builtins=("print", "len", "range"),
        comments=CommentStyle(line=("#",)),
    )


@pytest.fixture
def javascript_pattern():
    """A reduced javascript definition."""
    return LanguagePattern(
        name="javascript",
        keywords=("function", "const", "let", "return", "var", "if", "else"),
        patterns=(r"function\s+\w+\s*\(", r"console\.log\s*\(", r"=>"),
        imports=("require",),
        builtins=("console", "document", "window"),
        comments=CommentStyle(line=("//",), block=(BlockComment("/*", "*/"),)),
    )
