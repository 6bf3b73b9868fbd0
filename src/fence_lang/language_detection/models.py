"""Data models for language detection."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DetectionResult:
    """Result of language detection with confidence score.

    Confidence is an integer on the 0-100 scale. ``source_name`` is the
    name of the detector that produced the result.
    """

    language: str
    confidence: int
    source_name: str

    def __post_init__(self):
        if not self.language:
            raise ValueError("Detection result language cannot be empty")
        if not 0 <= self.confidence <= 100:
            raise ValueError(
                f"Confidence must be between 0 and 100, got {self.confidence}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "confidence": self.confidence,
            "source_name": self.source_name,
        }

    def __repr__(self) -> str:
        return f"DetectionResult(language='{self.language}', confidence={self.confidence}, source={self.source_name})"


@dataclass(frozen=True)
class DetectorInfo:
    """Identity and capability flags of a registered detector."""

    name: str
    display_name: str
    description: str
    is_configurable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "is_configurable": self.is_configurable,
        }


@dataclass(frozen=True)
class BlockComment:
    """Start/end token pair of a block comment."""

    start: str
    end: str


@dataclass(frozen=True)
class CommentStyle:
    """Comment descriptors of a language."""

    line: Tuple[str, ...] = ()
    block: Tuple[BlockComment, ...] = ()


@dataclass(frozen=True)
class LanguagePattern:
    """Lexical fingerprint of one language used by the pattern detector."""

    name: str
    keywords: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    imports: Tuple[str, ...] = ()
    builtins: Tuple[str, ...] = ()
    comments: CommentStyle = field(default_factory=CommentStyle)
    extensions: Tuple[str, ...] = ()
    operators: Tuple[str, ...] = ()


@dataclass
class CodeValidation:
    """Advisory inspection of a code snippet before detection."""

    is_valid: bool
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class AnalysisSummary:
    """Aggregate figures of an analytical detection run."""

    total_detectors: int
    successful_detectors: int
    average_confidence: float
    consensus_language: Optional[str]


@dataclass
class DetectionAnalysis:
    """Composite outcome of the analytical detection protocol."""

    primary: Optional[DetectionResult]
    alternatives: List[DetectionResult]
    fallbacks: List[DetectionResult]
    analysis: AnalysisSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.to_dict() if self.primary else None,
            "alternatives": [r.to_dict() for r in self.alternatives],
            "fallbacks": [r.to_dict() for r in self.fallbacks],
            "analysis": {
                "total_detectors": self.analysis.total_detectors,
                "successful_detectors": self.analysis.successful_detectors,
                "average_confidence": self.analysis.average_confidence,
                "consensus_language": self.analysis.consensus_language,
            },
        }
