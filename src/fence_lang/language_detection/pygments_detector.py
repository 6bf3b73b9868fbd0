"""Language detection backed by Pygments lexer guessing."""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

from pygments.lexers import get_all_lexers, guess_lexer
from pygments.util import ClassNotFound

from .base import LanguageDetector
from .models import DetectionResult

logger = logging.getLogger(__name__)


class PygmentsDetector(LanguageDetector):
    """Language detector using Pygments' ``guess_lexer``.

    Pygments does not report a confidence; the chosen lexer's
    ``analyse_text`` score (0-1) is used as relevance and adjusted for the
    length of the snippet, since short snippets are inherently less reliable.
    """

    name = "pygments"
    display_name = "Pygments Lexer Detector"
    description = "Language detection using the lexer analysers of the Pygments syntax highlighter"

    # Pygments aliases to canonical language identifiers
    LANGUAGE_NORMALIZE = {
        "python3": "python",
        "py": "python",
        "py3": "python",
        "python2": "python",
        "js": "javascript",
        "javascript": "javascript",
        "node": "javascript",
        "ts": "typescript",
        "typescript": "typescript",
        "c++": "cpp",
        "cpp": "cpp",
        "c#": "csharp",
        "csharp": "csharp",
        "cs": "csharp",
        "sh": "bash",
        "shell": "bash",
        "zsh": "bash",
        "ksh": "bash",
        "console": "bash",
        "shell-session": "bash",
        "objective-c": "objective-c",
        "objectivec": "objective-c",
        "objc": "objective-c",
        "kt": "kotlin",
        "rb": "ruby",
        "golang": "go",
        "rs": "rust",
        "yml": "yaml",
        "ps1": "powershell",
        "pwsh": "powershell",
        "docker": "dockerfile",
        "make": "makefile",
        "mf": "makefile",
        "html+jinja": "html",
        "text": "text",
    }

    def __init__(self, min_confidence: float = 0.5):
        super().__init__(min_confidence)
        self._supported: Optional[List[str]] = None

    def _normalize_language(self, language: str) -> str:
        """Normalize language name to standard format."""
        normalized = language.lower().strip()
        return self.LANGUAGE_NORMALIZE.get(normalized, normalized)

    @staticmethod
    def calculate_confidence(relevance: float, code_length: int) -> float:
        """
        Convert a lexer relevance score into a 0-100 confidence.

        Args:
            relevance: ``analyse_text`` score in the 0-1 range
            code_length: Length of the analyzed snippet

        Returns:
            Confidence percentage (0-100)
        """
        if relevance <= 0:
            return 0.0

        confidence = min(100.0, relevance * 100)

        if code_length < 50:
            confidence *= 0.7
        elif code_length < 100:
            confidence *= 0.85
        elif code_length > 500:
            confidence *= 1.1

        return max(0.0, min(100.0, confidence))

    @staticmethod
    def _guess(code: str) -> Tuple[Any, float]:
        lexer = guess_lexer(code)
        return lexer, float(lexer.analyse_text(code) or 0.0)

    async def detect(self, code: str) -> Optional[DetectionResult]:
        """
        Detect the language using Pygments lexer analysis.

        Args:
            code: The code to analyze

        Returns:
            DetectionResult or None if no lexer matched with enough confidence
        """
        if not code or not code.strip():
            return None

        try:
            # guess_lexer scans every lexer; keep it off the event loop
            lexer, relevance = await asyncio.to_thread(self._guess, code)
            confidence = self.calculate_confidence(relevance, len(code))

            alias = lexer.aliases[0] if lexer.aliases else lexer.name
            language = self._normalize_language(alias)

            if language == "text" or confidence <= 0:
                return None

            if not self.clears_threshold(confidence):
                logger.debug(
                    f"Pygments guess {language} ({confidence:.2f}) below threshold "
                    f"{self.get_threshold()}"
                )
                return None
            return self._make_result(language, confidence)

        except ClassNotFound:
            logger.debug("Pygments found no lexer matching the text")
            return None
        except Exception as e:
            logger.warning(f"Pygments detection failed: {e}")
            return None

    def supported_languages(self) -> List[str]:
        """Get the canonical names of every lexer Pygments ships with."""
        if self._supported is None:
            languages = set()
            for _name, aliases, _filenames, _mimetypes in get_all_lexers():
                if aliases:
                    languages.add(self._normalize_language(aliases[0]))
            self._supported = sorted(languages)
        return list(self._supported)
