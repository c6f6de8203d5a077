from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


Mode = Literal["general", "focused"]
Source = Literal["local", "external"]


class ErrorType(str, Enum):
    GRAMMAR = "grammar"
    SPELLING = "spelling"
    VOCABULARY = "vocabulary"
    STYLE = "style"
    PUNCTUATION = "punctuation"
    WORD_ORDER = "word-order"
    TENSE = "tense"
    ARTICLE = "article"
    PREPOSITION = "preposition"
    CONTRACTION = "contraction"
    CAPITALIZATION = "capitalization"

    @classmethod
    def parse(cls, value: Any) -> "ErrorType":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            # Categories we do not track separately (e.g. "syntax") count as grammar.
            return cls.GRAMMAR


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Severity"]:
        if isinstance(value, str):
            return _SEVERITY_ALIASES.get(value.strip().lower())
        return None


_SEVERITY_ALIASES = {
    "minor": Severity.MINOR,
    "low": Severity.MINOR,
    "moderate": Severity.MODERATE,
    "medium": Severity.MODERATE,
    "major": Severity.MAJOR,
    "high": Severity.MAJOR,
}


class Utterance(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str
    actual: str


class Span(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int

    @model_validator(mode="after")
    def _non_empty(self) -> "Span":
        if self.end <= self.start:
            raise ValueError(f"span end ({self.end}) must be greater than start ({self.start})")
        return self

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end

    def fits(self, text: str) -> bool:
        return self.end <= len(text)


class DetectedError(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ErrorType
    original: str
    corrected: str
    explanation: str = ""
    rule: str = ""
    rule_id: str = ""
    severity: Severity = Severity.MODERATE
    position: Span
    examples: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    source: Source = "local"

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> ErrorType:
        return ErrorType.parse(v)

    @field_validator("severity", mode="before")
    @classmethod
    def _parse_severity(cls, v: Any) -> Severity:
        return v if isinstance(v, Severity) else Severity(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _percent_to_ratio(cls, v: Any) -> Any:
        # Remote payloads may report whole percentages (0-100). A fractional
        # value above 1 is left as is and fails the 0-1 bound.
        if isinstance(v, (int, float)) and not isinstance(v, bool) and 1 < v <= 100 and float(v).is_integer():
            return v / 100.0
        return v


class SoundAccuracy(BaseModel):
    model_config = ConfigDict(frozen=True)

    phoneme: str
    target_sound: str
    actual_sound: str
    accuracy: float = Field(ge=0.0, le=1.0)
    position: int
    feedback: str


class DifficultSound(BaseModel):
    model_config = ConfigDict(frozen=True)

    phoneme: str
    symbol: str
    examples: tuple[str, ...]
    common_mistakes: tuple[str, ...] = ()
    tips: tuple[str, ...] = ()
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"

    @field_validator("examples", "common_mistakes", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return tuple(str(x).lower() for x in v)
        return v

    def tip(self, index: int) -> str:
        if not self.tips:
            return ""
        return self.tips[index] if index < len(self.tips) else self.tips[0]


class PronunciationAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Mode
    overall_score: int = Field(ge=0, le=100)
    similarity: int = Field(ge=0, le=100)
    accuracy: int = Field(ge=0, le=100)
    fluency: int = Field(ge=0, le=100)
    clarity: int = Field(ge=0, le=100)
    completeness: int = Field(ge=0, le=100)
    pacing: int = Field(ge=0, le=100)
    stress_pattern: int = Field(ge=0, le=100)
    sound_accuracies: list[SoundAccuracy] = Field(default_factory=list)
    detected_words: list[str] = Field(default_factory=list)
    missed_words: list[str] = Field(default_factory=list)
    confusions: dict[str, int] = Field(default_factory=dict)
    feedback: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class ScoreHints(BaseModel):
    grammar: Optional[float] = Field(default=None, validation_alias=AliasChoices("grammar", "grammarScore"))
    vocabulary: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("vocabulary", "vocabularyScore")
    )
    style: Optional[float] = Field(default=None, validation_alias=AliasChoices("style", "styleScore"))
    overall: Optional[float] = Field(default=None, validation_alias=AliasChoices("overall", "overallScore"))


class ExternalCorrection(BaseModel):
    """
    Correction payload handed in by the remote collaborator. Every field is
    optional; absent fields fall back to the locally computed values.
    """

    corrected_text: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("corrected_text", "correctedText", "corrected")
    )
    score_hints: Optional[ScoreHints] = Field(
        default=None, validation_alias=AliasChoices("score_hints", "scoreHints")
    )
    errors: list[DetectedError] = Field(default_factory=list)
    explanation: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("explanation", "encouragement")
    )
    reply: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("reply", "conversationReply")
    )

    @field_validator("errors", mode="before")
    @classmethod
    def _mark_external(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        out = []
        for item in v:
            if isinstance(item, dict):
                item = {"source": "external", **item}
                item["source"] = "external"
            out.append(item)
        return out

    def is_empty(self) -> bool:
        hints = self.score_hints
        has_hints = hints is not None and any(
            x is not None for x in (hints.grammar, hints.vocabulary, hints.style, hints.overall)
        )
        return not (self.corrected_text and self.corrected_text.strip()) and not has_hints and not self.errors


class CategoryScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: int = Field(ge=0, le=100)
    grammar: int = Field(ge=0, le=100)
    vocabulary: int = Field(ge=0, le=100)
    style: int = Field(ge=0, le=100)


class Feedback(BaseModel):
    suggestions: list[str] = Field(default_factory=list, max_length=5)
    strengths: list[str] = Field(default_factory=list, max_length=3)
    improvements: list[str] = Field(default_factory=list, max_length=4)


class CorrectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    original: str
    corrected: str
    errors: list[DetectedError] = Field(default_factory=list)
    overall_score: int = Field(ge=0, le=100)
    grammar_score: int = Field(ge=0, le=100)
    vocabulary_score: int = Field(ge=0, le=100)
    style_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    explanation: str = ""
    used_external: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors) or self.corrected != self.original
