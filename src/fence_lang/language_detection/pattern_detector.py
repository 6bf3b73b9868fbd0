"""Language detection by weighted keyword, regex, import, builtin and comment scoring."""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple, Union

from .base import ConfigurableDetector, LanguageDetector, LanguageSelectableDetector
from .models import CommentStyle, DetectionResult, LanguagePattern

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"\b[a-zA-Z_][a-zA-Z0-9_]*\b")
# ^ and $ in catalog regexes anchor at line boundaries
REGEX_FLAGS = re.IGNORECASE | re.MULTILINE


class PatternMatchingDetector(LanguageDetector, ConfigurableDetector, LanguageSelectableDetector):
    """Language detector using pattern matching and keyword analysis.

    Each enabled language definition is scored with five sub-scores in the
    0-100 range which are combined with fixed weights. Definitions are
    evaluated in alphabetical order of their names, so equal scores are
    resolved in favour of the alphabetically first language.
    """

    name = "pattern-matching"
    display_name = "Pattern Matching Detector"
    description = (
        "Language detection using keyword analysis, regex patterns, and syntax "
        "features with configurable language selection"
    )

    KEYWORD_WEIGHT = 0.4
    PATTERN_WEIGHT = 0.3
    IMPORT_WEIGHT = 0.15
    BUILTIN_WEIGHT = 0.1
    COMMENT_WEIGHT = 0.05

    KEYWORD_CAP = 10
    BUILTIN_CAP = 15
    MAX_PATTERNS = 8

    def __init__(
        self,
        patterns: Union[Iterable[LanguagePattern], Mapping[str, LanguagePattern]],
        min_confidence: float = 0.6,
        enabled_languages: Iterable[str] = (),
    ):
        """
        Initialize the pattern matching detector.

        Args:
            patterns: Already-parsed language pattern definitions
            min_confidence: Own threshold on the 0-1 scale
            enabled_languages: Allow-list of language names (empty allows all)
        """
        super().__init__(min_confidence)

        if isinstance(patterns, Mapping):
            patterns = patterns.values()

        loaded: Dict[str, LanguagePattern] = {}
        for pattern in patterns:
            loaded[pattern.name.lower()] = pattern
        self._patterns: Dict[str, LanguagePattern] = dict(sorted(loaded.items()))

        # Regexes are compiled once; definitions are read-only after construction
        self._compiled: Dict[str, List[Pattern[str]]] = {
            language: self._compile_patterns(language, pattern.patterns)
            for language, pattern in self._patterns.items()
        }

        self._enabled_languages: List[str] = []
        self.set_enabled_languages(enabled_languages)

        logger.info(
            f"Initialized PatternMatchingDetector with {len(self._patterns)} language patterns"
        )

    @staticmethod
    def _compile_patterns(language: str, patterns: Tuple[str, ...]) -> List[Pattern[str]]:
        compiled = []
        for source in patterns[:PatternMatchingDetector.MAX_PATTERNS]:
            try:
                compiled.append(re.compile(source, REGEX_FLAGS))
            except re.error as e:
                logger.warning(f"Skipping invalid regex for {language}: {source!r} ({e})")
        return compiled

    async def detect(self, code: str) -> Optional[DetectionResult]:
        """
        Detect the language of the given code using pattern matching.

        Args:
            code: The code to analyze

        Returns:
            DetectionResult for the best match or None if below threshold
        """
        if not code or not code.strip():
            return None

        try:
            candidates = self.score_languages(code)
            if not candidates:
                return None

            language, score = candidates[0]
            if not self.clears_threshold(score):
                logger.debug(
                    f"Best pattern match {language} ({score:.2f}) below threshold "
                    f"{self.get_threshold()}"
                )
                return None
            return self._make_result(language, score)
        except Exception as e:
            logger.warning(f"Pattern matching detection failed: {e}")
            return None

    def score_languages(self, code: str) -> List[Tuple[str, float]]:
        """Score every enabled language, best first.

        Returns:
            List of (language, confidence) pairs with confidence > 0
        """
        words = self._extract_words(code)
        results = []
        for language, pattern in self._patterns.items():
            if not self.is_language_enabled(language):
                continue
            confidence = self.calculate_language_confidence(code, pattern, words)
            if confidence > 0:
                results.append((language, confidence))

        # sorted() is stable, so alphabetical order survives among equal scores
        return sorted(results, key=lambda item: item[1], reverse=True)

    def calculate_language_confidence(
        self,
        code: str,
        pattern: LanguagePattern,
        words: Optional[set] = None,
    ) -> float:
        """
        Calculate the weighted confidence for one language pattern.

        Args:
            code: The code to analyze
            pattern: The language pattern to match against
            words: Pre-extracted identifier tokens of ``code``

        Returns:
            Confidence on the 0-100 scale
        """
        if words is None:
            words = self._extract_words(code)

        compiled = self._compiled.get(pattern.name.lower())
        if compiled is None:
            compiled = self._compile_patterns(pattern.name, pattern.patterns)

        return (
            self._keyword_score(words, pattern.keywords) * self.KEYWORD_WEIGHT
            + self._pattern_score(code, compiled) * self.PATTERN_WEIGHT
            + self._import_score(words, pattern.imports) * self.IMPORT_WEIGHT
            + self._builtin_score(words, pattern.builtins) * self.BUILTIN_WEIGHT
            + self._comment_score(code, pattern.comments) * self.COMMENT_WEIGHT
        )

    @staticmethod
    def _match_score(words: set, candidates: Tuple[str, ...], cap: Optional[int]) -> float:
        if not candidates:
            return 0.0
        matches = sum(1 for candidate in candidates if candidate in words)
        denominator = len(candidates) if cap is None else min(len(candidates), cap)
        return min(100.0, matches / denominator * 100)

    def _keyword_score(self, words: set, keywords: Tuple[str, ...]) -> float:
        return self._match_score(words, keywords, self.KEYWORD_CAP)

    def _import_score(self, words: set, imports: Tuple[str, ...]) -> float:
        return self._match_score(words, imports, None)

    def _builtin_score(self, words: set, builtins: Tuple[str, ...]) -> float:
        return self._match_score(words, builtins, self.BUILTIN_CAP)

    @staticmethod
    def _pattern_score(code: str, compiled: List[Pattern[str]]) -> float:
        # Unparseable regexes were dropped at compile time and do not count
        if not compiled:
            return 0.0
        matches = sum(1 for regex in compiled if regex.search(code))
        return matches / len(compiled) * 100

    @staticmethod
    def _comment_score(code: str, comments: CommentStyle) -> float:
        score = 0.0
        checks = 0

        if comments.line:
            checks += 1
            for token in comments.line:
                if re.search(rf"^\s*{re.escape(token)}", code, re.MULTILINE):
                    score += 50
                    break

        if comments.block:
            checks += 1
            for block in comments.block:
                if block.start in code and block.end in code:
                    score += 50
                    break

        return score / checks if checks else 0.0

    @staticmethod
    def _extract_words(code: str) -> set:
        return set(WORD_PATTERN.findall(code))

    def supported_languages(self) -> List[str]:
        return list(self._patterns)

    def get_pattern(self, language: str) -> Optional[LanguagePattern]:
        return self._patterns.get(language.lower())

    def set_enabled_languages(self, languages: Iterable[str]) -> None:
        enabled = []
        for language in languages:
            normalized = language.lower().strip()
            if normalized and normalized not in enabled:
                enabled.append(normalized)
        self._enabled_languages = enabled

    def get_enabled_languages(self) -> List[str]:
        return list(self._enabled_languages)

    def is_language_enabled(self, language: str) -> bool:
        # An empty allow-list enables every loaded definition
        if not self._enabled_languages:
            return True
        return language.lower() in self._enabled_languages

    def accepts_language(self, language: str) -> bool:
        return self.is_language_enabled(language)

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "enabled_languages": self.get_enabled_languages(),
            "available_languages": self.supported_languages(),
            "min_confidence": self.get_min_confidence(),
        }

    def set_configuration(self, config: Dict[str, Any]) -> None:
        enabled = config.get("enabled_languages")
        if isinstance(enabled, (list, tuple)):
            self.set_enabled_languages(enabled)
        min_confidence = config.get("min_confidence")
        if isinstance(min_confidence, (int, float)) and not isinstance(min_confidence, bool):
            self.set_min_confidence(min_confidence)
