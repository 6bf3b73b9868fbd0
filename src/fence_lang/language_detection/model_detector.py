"""Adapter for machine-learning language classifiers."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .base import ConfigurableDetector, LanguageDetector
from .models import DetectionResult

logger = logging.getLogger(__name__)

ModelFactory = Callable[[], Any]


class ModelDetector(LanguageDetector, ConfigurableDetector):
    """
    Language detector wrapping an ML classification model.

    The model is created lazily by ``model_factory`` on first use. It must
    provide a ``run_model(code)`` method (plain or coroutine) returning
    predictions ordered best first, each either a ``(language_id,
    confidence)`` pair or an object with ``language_id`` and ``confidence``
    attributes, confidence in the 0-1 range. Native language ids are mapped
    to canonical names.

    Model output is not guaranteed to be deterministic, so repeated calls
    with the same code may yield different results.
    """

    name = "ml-model"
    display_name = "ML Model Detector"
    description = "Machine learning based language detection using a pluggable classification model"

    LANGUAGE_MAPPING = {
        "ts": "typescript",
        "js": "javascript",
        "py": "python",
        "rs": "rust",
        "cs": "csharp",
        "rb": "ruby",
        "kt": "kotlin",
        "yml": "yaml",
        "md": "markdown",
        "sh": "bash",
        "ps1": "powershell",
        "pl": "perl",
        "hs": "haskell",
        "erl": "erlang",
        "coffee": "coffeescript",
        "bat": "batch",
        "tex": "latex",
        "mm": "objective-c",
        "ipynb": "jupyter",
    }

    DEFAULT_LANGUAGES = (
        "typescript", "javascript", "python", "rust", "cpp", "c", "csharp", "java",
        "php", "ruby", "go", "swift", "kotlin", "scala", "r", "sql", "html", "css",
        "json", "yaml", "xml", "markdown", "bash", "powershell", "dockerfile",
        "makefile", "lua", "perl", "haskell", "erlang", "coffeescript", "batch",
        "latex", "scss", "sass", "objective-c", "jupyter", "matlab",
    )

    def __init__(
        self,
        model_factory: ModelFactory,
        min_confidence: float = 0.5,
        language_mapping: Optional[Dict[str, str]] = None,
        languages: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the model detector.

        Args:
            model_factory: Callable creating the model (may return an awaitable)
            min_confidence: Own threshold on the 0-1 scale
            language_mapping: Extra native id to canonical name mappings
            languages: Canonical languages the model can emit
        """
        super().__init__(min_confidence)
        self._model_factory = model_factory
        self._language_mapping = {**self.LANGUAGE_MAPPING, **(language_mapping or {})}
        self._languages = sorted(set(languages)) if languages is not None else sorted(self.DEFAULT_LANGUAGES)
        self._model: Any = None
        self._initialized = False
        self._init_lock: Optional[asyncio.Lock] = None

    async def _ensure_initialized(self) -> None:
        """Create the model once; concurrent callers wait on the same lock."""
        if self._initialized:
            return

        if self._init_lock is None:
            self._init_lock = asyncio.Lock()

        async with self._init_lock:
            # Double-check after acquiring lock
            if self._initialized:
                return
            model = self._model_factory()
            if inspect.isawaitable(model):
                model = await model
            self._model = model
            self._initialized = True
            logger.info(f"Initialized model for {self.name} detector")

    async def initialize(self) -> None:
        """Preload the model."""
        await self._ensure_initialized()

    def is_ready(self) -> bool:
        return self._initialized and self._model is not None

    def dispose(self) -> None:
        """Release the model; it is recreated on the next detection."""
        self._model = None
        self._initialized = False
        self._init_lock = None

    def map_language_id(self, language_id: str) -> str:
        normalized = language_id.lower().strip()
        return self._language_mapping.get(normalized, normalized)

    @staticmethod
    def _unpack(prediction: Any) -> Tuple[str, float]:
        if isinstance(prediction, (tuple, list)):
            language_id, confidence = prediction[0], prediction[1]
        else:
            language_id = prediction.language_id
            confidence = prediction.confidence
        return str(language_id), float(confidence)

    async def _run_model(self, code: str) -> Sequence[Any]:
        predictions = self._model.run_model(code)
        if inspect.isawaitable(predictions):
            predictions = await predictions
        return predictions or []

    async def detect(self, code: str) -> Optional[DetectionResult]:
        """
        Detect the language by running the model.

        Args:
            code: The code to analyze

        Returns:
            DetectionResult for the top prediction or None
        """
        if not code or not code.strip():
            return None

        try:
            await self._ensure_initialized()

            if self._model is None:
                logger.warning(f"{self.name} model not available")
                return None

            predictions = await self._run_model(code)
            if not predictions:
                return None

            language_id, score = self._unpack(predictions[0])
            language = self.map_language_id(language_id)
            confidence = score * 100

            if not self.clears_threshold(confidence):
                logger.debug(
                    f"Model prediction {language} ({confidence:.2f}) below threshold "
                    f"{self.get_threshold()}"
                )
                return None
            return self._make_result(language, confidence)

        except Exception as e:
            logger.warning(f"{self.name} detection failed: {e}")
            return None

    def supported_languages(self) -> List[str]:
        return list(self._languages)

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "min_confidence": self.get_min_confidence(),
            "is_initialized": self._initialized,
            "model_available": self._model is not None,
        }

    def set_configuration(self, config: Dict[str, Any]) -> None:
        min_confidence = config.get("min_confidence")
        if isinstance(min_confidence, (int, float)) and not isinstance(min_confidence, bool):
            self.set_min_confidence(min_confidence)
