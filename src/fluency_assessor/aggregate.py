from __future__ import annotations

import warnings
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, ScoringConfig
from .errors import ExternalCorrectionWarning
from .external import Payload, coerce_payload
from .feedback import correction_feedback, explain_errors
from .rules import CorrectionRule, apply_rules
from .schemas import CategoryScores, CorrectionResult, DetectedError, ExternalCorrection, ScoreHints, Span
from .tables import default_rules
from .text_tokenize import tokenize


ExternalInput = Payload


def apply_corrections(text: str, errors: Sequence[DetectedError]) -> str:
    """
    Splice every correction into `text`.

    Spans refer to the original text, so edits run from the last start to the
    first; an earlier splice never moves a later span. Spans must be disjoint.
    """
    out = text
    for e in sorted(errors, key=lambda e: e.position.start, reverse=True):
        out = out[: e.position.start] + e.corrected + out[e.position.end :]
    return out


def _usable(text: str, e: DetectedError) -> bool:
    if not e.position.fits(text):
        warnings.warn(
            f"Dropping external error {e.original!r}: span {e.position.start}-{e.position.end} "
            f"is outside the text",
            ExternalCorrectionWarning,
            stacklevel=3,
        )
        return False
    if text[e.position.start : e.position.end] != e.original:
        warnings.warn(
            f"Dropping external error {e.original!r}: the text at its span reads "
            f"{text[e.position.start : e.position.end]!r}",
            ExternalCorrectionWarning,
            stacklevel=3,
        )
        return False
    return True


def dedupe_errors(
    text: str,
    local: Sequence[DetectedError],
    external: Sequence[DetectedError] = (),
) -> list[DetectedError]:
    """
    Merge local and external errors into one disjoint, start-ordered list.

    Errors anchored at the same span keep the higher confidence, external on
    ties. Any remaining overlap is settled by claiming spans external-first.
    """
    usable = [e for e in external if _usable(text, e)]

    by_span: dict[tuple[int, int], DetectedError] = {}
    for e in usable:
        by_span.setdefault((e.position.start, e.position.end), e)
    dropped_local: set[int] = set()
    for i, e in enumerate(local):
        key = (e.position.start, e.position.end)
        other = by_span.get(key)
        if other is None:
            continue
        if e.confidence > other.confidence:
            by_span[key] = e
        else:
            dropped_local.add(i)

    ranked = [by_span[(e.position.start, e.position.end)] for e in usable]
    ranked += [e for i, e in enumerate(local) if i not in dropped_local and e not in ranked]

    claimed: list[Span] = []
    kept: list[DetectedError] = []
    for e in ranked:
        if any(e.position.overlaps(c) for c in claimed):
            continue
        claimed.append(e.position)
        kept.append(e)

    kept.sort(key=lambda e: e.position.start)
    return kept


def _score(count: float, words: int, factor: float) -> int:
    return int(round(min(100.0, max(0.0, 100.0 - (count / words) * factor))))


def category_scores(
    original: str,
    errors: Sequence[DetectedError],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> CategoryScores:
    words = max(1, len(tokenize(original)))

    def count(types: frozenset[str]) -> int:
        return sum(1 for e in errors if e.type.value in types)

    weight = sum(config.severity_weights.get(e.severity.value, 1) for e in errors)
    return CategoryScores(
        overall=_score(weight, words, config.overall_factor),
        grammar=_score(count(config.grammar_types), words, config.grammar_factor),
        vocabulary=_score(count(config.vocabulary_types), words, config.vocabulary_factor),
        style=_score(count(config.style_types), words, config.style_factor),
    )


def _hint(value: Optional[float], fallback: int) -> int:
    if value is None:
        return fallback
    return int(round(min(100.0, max(0.0, float(value)))))


def _merge_scores(local: CategoryScores, hints: Optional[ScoreHints]) -> CategoryScores:
    if hints is None:
        return local
    return CategoryScores(
        overall=_hint(hints.overall, local.overall),
        grammar=_hint(hints.grammar, local.grammar),
        vocabulary=_hint(hints.vocabulary, local.vocabulary),
        style=_hint(hints.style, local.style),
    )


def parse_external(external: ExternalInput) -> Optional[ExternalCorrection]:
    """Read a payload in any accepted shape; unreadable payloads become None with a warning."""
    return coerce_payload(external)


def as_external(external: ExternalInput) -> Optional[ExternalCorrection]:
    """Coerce a payload to an ExternalCorrection; empty payloads count as absent."""
    parsed = parse_external(external)
    return None if parsed is None or parsed.is_empty() else parsed


def aggregate(
    original: str,
    local_errors: Sequence[DetectedError],
    external: ExternalInput = None,
    config: Optional[ScoringConfig] = None,
) -> CorrectionResult:
    cfg = config or DEFAULT_CONFIG
    ext = as_external(external)

    errors = dedupe_errors(original, local_errors, ext.errors if ext else ())
    corrected = apply_corrections(original, errors)
    if ext and ext.corrected_text and ext.corrected_text.strip():
        corrected = ext.corrected_text

    scores = _merge_scores(category_scores(original, errors, cfg), ext.score_hints if ext else None)
    fb = correction_feedback(errors, scores)
    explanation = ext.explanation if ext and ext.explanation else explain_errors(errors)

    return CorrectionResult(
        original=original,
        corrected=corrected,
        errors=errors,
        overall_score=scores.overall,
        grammar_score=scores.grammar,
        vocabulary_score=scores.vocabulary,
        style_score=scores.style,
        suggestions=fb.suggestions,
        strengths=fb.strengths,
        improvements=fb.improvements,
        explanation=explanation,
        used_external=ext is not None,
    )


def correct_text(
    text: str,
    external_correction: ExternalInput = None,
    rules: Optional[Sequence[CorrectionRule]] = None,
    config: Optional[ScoringConfig] = None,
) -> CorrectionResult:
    text = text or ""
    rules = default_rules() if rules is None else rules
    return aggregate(text, apply_rules(text, rules), external_correction, config)
