from __future__ import annotations

import re
import warnings
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Sequence

from .errors import RuleSkippedWarning
from .schemas import DetectedError, ErrorType, Severity, Span


Matcher = Callable[[str], Iterable[tuple[int, int]]]
Corrector = Callable[[str], str]


@dataclass(frozen=True)
class CorrectionRule:
    """
    One declarative correction rule. The engine only ever calls `matcher` and
    `corrector`; everything else is reported metadata.
    """

    rule_id: str
    matcher: Matcher
    corrector: Corrector
    type: ErrorType
    severity: Severity
    explanation: str
    rule: str = ""
    examples: tuple[str, ...] = field(default_factory=tuple)


def follow_case(matched: str, corrected: str) -> str:
    # "Dont" -> "Don't"; lower-case matches keep the replacement as written.
    if matched[:1].isupper() and corrected[:1].islower():
        return corrected[:1].upper() + corrected[1:]
    return corrected


def regex_matcher(pattern: str, flags: int = 0) -> Matcher:
    compiled = re.compile(pattern, flags)

    def match(text: str) -> Iterable[tuple[int, int]]:
        for m in compiled.finditer(text):
            if m.end() > m.start():
                yield m.span()

    return match


def literal_corrector(replacement: str) -> Corrector:
    return lambda matched: follow_case(matched, replacement)


def lookup_corrector(mapping: Mapping[str, str]) -> Corrector:
    table = {" ".join(k.lower().split()): v for k, v in mapping.items()}

    def correct(matched: str) -> str:
        key = " ".join(matched.lower().split())
        if key not in table:
            return matched
        return follow_case(matched, table[key])

    return correct


def substitute_corrector(pairs: Sequence[tuple[str, str]], flags: int = re.IGNORECASE) -> Corrector:
    """
    Apply `(pattern, template)` pairs to the matched text in order, one
    substitution each.
    """
    compiled = [(re.compile(p, flags), t) for p, t in pairs]

    def correct(matched: str) -> str:
        out = matched
        for rx, template in compiled:
            out = rx.sub(template, out, count=1)
        return follow_case(matched, out)

    return correct


def _upper_first(matched: str) -> str:
    return matched[:1].upper() + matched[1:]


def _first_word(matched: str) -> str:
    parts = matched.split()
    return parts[0] if parts else matched


def _add_comma(matched: str) -> str:
    return matched if matched.endswith(",") else matched + ","


def _swap_pair(matched: str) -> str:
    parts = matched.split()
    if len(parts) != 2:
        return matched
    first, second = parts
    if first[:1].isupper():
        first = first[:1].lower() + first[1:]
    return follow_case(matched, f"{second} {first}")


TRANSFORMS: Mapping[str, Corrector] = {
    "upper_first": _upper_first,
    "first_word": _first_word,
    "add_comma": _add_comma,
    "swap_pair": _swap_pair,
}


def _checked_spans(rule: CorrectionRule, text: str) -> list[tuple[int, int]]:
    spans = []
    for start, end in rule.matcher(text):
        if not (0 <= start < end <= len(text)):
            raise ValueError(f"span ({start}, {end}) outside text of length {len(text)}")
        spans.append((start, end))
    return spans


def apply_rules(text: str, rules: Sequence[CorrectionRule]) -> list[DetectedError]:
    """
    Run every rule over `text` in table order.

    A detected error claims its span; a later match that overlaps any claimed
    span is dropped whole, so earlier rules always win. A rule whose matcher or
    corrector fails is skipped for this call and the rest still run.
    """
    if not text:
        return []

    claimed: list[Span] = []
    found: list[DetectedError] = []
    for rule in rules:
        try:
            spans = _checked_spans(rule, text)
            candidates = []
            for start, end in spans:
                original = text[start:end]
                corrected = rule.corrector(original)
                if not isinstance(corrected, str):
                    raise TypeError(f"corrector returned {type(corrected).__name__}")
                if corrected != original:
                    candidates.append((Span(start=start, end=end), original, corrected))
        except Exception as e:
            warnings.warn(
                f"Skipping rule {rule.rule_id!r}: {type(e).__name__}: {e}",
                RuleSkippedWarning,
                stacklevel=2,
            )
            continue

        for span, original, corrected in candidates:
            if any(span.overlaps(c) for c in claimed):
                continue
            claimed.append(span)
            found.append(
                DetectedError(
                    type=rule.type,
                    original=original,
                    corrected=corrected,
                    explanation=rule.explanation,
                    rule=rule.rule or rule.rule_id,
                    rule_id=rule.rule_id,
                    severity=rule.severity,
                    position=span,
                    examples=list(rule.examples),
                    source="local",
                )
            )

    found.sort(key=lambda e: e.position.start)
    return found
