from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Literal, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, ScoringConfig
from .feedback import NO_SPEECH, pronunciation_feedback, pronunciation_headline
from .schemas import DifficultSound, Mode, PronunciationAnalysis, SoundAccuracy
from .similarity import confusions, phoneme_scan, similarity
from .tables import SubstitutionTable, default_sounds
from .text_normalize import normalize_text
from .text_tokenize import count_hesitations, tokenize


CompletenessVariant = Literal["recognizable_words", "word_coverage"]


def word_accuracy(target_tokens: Sequence[str], actual_tokens: Sequence[str]) -> float:
    """Share of target words that appear anywhere in the spoken words."""
    if not target_tokens:
        return 0.0
    spoken = set(actual_tokens)
    return sum(1 for w in target_tokens if w in spoken) / len(target_tokens)


def fluency(
    target_tokens: Sequence[str],
    actual_tokens: Sequence[str],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    ratio = min(len(actual_tokens) / len(target_tokens), 1.0) if target_tokens else 1.0
    penalty = max(0.0, 1.0 - config.hesitation_penalty * count_hesitations(actual_tokens))
    return ratio * penalty


def recognizable_words(
    target_tokens: Sequence[str],
    actual_tokens: Sequence[str],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    if not actual_tokens:
        return 0.0
    clear = [w for w in actual_tokens if w.isalpha() and len(w) >= config.clear_word_min_length]
    return len(clear) / len(actual_tokens)


def word_coverage(
    target_tokens: Sequence[str],
    actual_tokens: Sequence[str],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    if not target_tokens:
        return 1.0
    spoken = set(actual_tokens)
    return len([w for w in target_tokens if w in spoken]) / len(target_tokens)


COMPLETENESS: Mapping[str, Callable[..., float]] = MappingProxyType(
    {
        "recognizable_words": recognizable_words,
        "word_coverage": word_coverage,
    }
)


def completeness(
    target_tokens: Sequence[str],
    actual_tokens: Sequence[str],
    variant: CompletenessVariant = "word_coverage",
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    try:
        fn = COMPLETENESS[variant]
    except KeyError:
        raise ValueError(f"Unknown completeness variant: {variant!r}") from None
    return fn(target_tokens, actual_tokens, config)


def pacing(target: str, actual: str, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    ideal, tolerated, scores = config.pacing_ideal, config.pacing_tolerated, config.pacing_scores
    t = normalize_text(target)
    a = normalize_text(actual)
    if not t:
        return scores[2]
    ratio = len(a) / len(t)
    if ideal[0] <= ratio <= ideal[1]:
        return scores[0]
    if tolerated[0] <= ratio <= tolerated[1]:
        return scores[1]
    return scores[2]


def stress_pattern(
    target_tokens: Sequence[str],
    actual_tokens: Sequence[str],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    pairs = list(zip(target_tokens, actual_tokens))
    if not pairs:
        return 1.0
    long_ = config.long_word_length
    agree = sum(1 for t, a in pairs if (len(t) > long_) == (len(a) > long_))
    return agree / len(pairs)


# Metric name -> weight for each scoring mode.
WEIGHTINGS: Mapping[str, Mapping[str, float]] = MappingProxyType(
    {
        "general": MappingProxyType(
            {"similarity": 0.4, "accuracy": 0.3, "fluency": 0.15, "completeness": 0.15}
        ),
        "focused": MappingProxyType(
            {"accuracy": 0.3, "fluency": 0.25, "clarity": 0.2, "pacing": 0.15, "stress_pattern": 0.1}
        ),
    }
)


@dataclass(frozen=True)
class Metrics:
    mode: str
    similarity: float = 0.0
    accuracy: float = 0.0
    fluency: float = 0.0
    clarity: float = 0.0
    completeness: float = 0.0
    pacing: float = 0.0
    stress_pattern: float = 0.0
    overall: float = 0.0
    sound_accuracies: tuple[SoundAccuracy, ...] = ()
    detected_words: tuple[str, ...] = ()
    missed_words: tuple[str, ...] = ()
    spoken: bool = True


def _weights(mode: str) -> Mapping[str, float]:
    try:
        return WEIGHTINGS[mode]
    except KeyError:
        raise ValueError(f"Unknown mode: {mode!r} (expected one of {', '.join(WEIGHTINGS)})") from None


def score(
    target: str,
    actual: str,
    mode: Mode = "general",
    config: Optional[ScoringConfig] = None,
    sounds: Optional[Sequence[DifficultSound]] = None,
    table: Optional[SubstitutionTable] = None,
) -> Metrics:
    weights = _weights(mode)
    cfg = config or DEFAULT_CONFIG

    target_tokens = tokenize(target)
    actual_tokens = tokenize(actual)
    if not actual_tokens:
        return Metrics(mode=mode, missed_words=tuple(target_tokens), spoken=False)

    spoken = set(actual_tokens)
    detected = tuple(w for w in target_tokens if w in spoken)
    missed = tuple(w for w in target_tokens if w not in spoken)

    sim = similarity(target, actual, table)
    found = tuple(phoneme_scan(target, actual, sounds, table, cfg))
    if mode == "focused":
        accuracy = sum(s.accuracy for s in found) / len(found) if found else sim
    else:
        accuracy = word_accuracy(target_tokens, actual_tokens)

    values = {
        "similarity": sim,
        "accuracy": accuracy,
        "fluency": fluency(target_tokens, actual_tokens, cfg),
        "clarity": completeness(target_tokens, actual_tokens, "recognizable_words", cfg),
        "completeness": completeness(target_tokens, actual_tokens, "word_coverage", cfg),
        "pacing": pacing(target, actual, cfg),
        "stress_pattern": stress_pattern(target_tokens, actual_tokens, cfg),
    }
    overall = sum(values[name] * w for name, w in weights.items())

    return Metrics(
        mode=mode,
        overall=overall,
        sound_accuracies=found,
        detected_words=detected,
        missed_words=missed,
        **values,
    )


def _pct(x: float) -> int:
    return int(round(min(1.0, max(0.0, x)) * 100))


def analyze_pronunciation(
    target_text: str,
    spoken_text: str,
    mode: Mode = "general",
    config: Optional[ScoringConfig] = None,
    sounds: Optional[Sequence[DifficultSound]] = None,
    table: Optional[SubstitutionTable] = None,
) -> PronunciationAnalysis:
    sounds = default_sounds() if sounds is None else sounds
    m = score(target_text, spoken_text, mode, config, sounds, table)

    if not m.spoken:
        return PronunciationAnalysis(
            mode=mode,
            overall_score=0,
            similarity=0,
            accuracy=0,
            fluency=0,
            clarity=0,
            completeness=0,
            pacing=0,
            stress_pattern=0,
            missed_words=list(m.missed_words),
            feedback=[NO_SPEECH],
        )

    headline = pronunciation_headline(m.similarity, m.accuracy, m.fluency, m.completeness, m.missed_words)
    fb = pronunciation_feedback(m.accuracy, m.sound_accuracies, sounds)

    return PronunciationAnalysis(
        mode=mode,
        overall_score=_pct(m.overall),
        similarity=_pct(m.similarity),
        accuracy=_pct(m.accuracy),
        fluency=_pct(m.fluency),
        clarity=_pct(m.clarity),
        completeness=_pct(m.completeness),
        pacing=_pct(m.pacing),
        stress_pattern=_pct(m.stress_pattern),
        sound_accuracies=list(m.sound_accuracies),
        detected_words=list(m.detected_words),
        missed_words=list(m.missed_words),
        confusions=confusions(target_text, spoken_text, table),
        feedback=headline,
        recommendations=fb.suggestions,
        strengths=fb.strengths,
        improvements=fb.improvements,
    )
