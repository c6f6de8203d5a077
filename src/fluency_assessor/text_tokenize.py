from __future__ import annotations

from typing import Iterable

from .text_normalize import normalize_text


HESITATION_MARKERS = frozenset({"um", "uh", "er", "ah"})


def tokenize(text: str | None) -> list[str]:
    return [t for t in normalize_text(text).split(" ") if t]


def count_hesitations(tokens: Iterable[str]) -> int:
    return sum(1 for t in tokens if t in HESITATION_MARKERS)


def grapheme_units(word: str, multi: Iterable[str] = ()) -> list[str]:
    """
    Split a word into comparison units for edit distance.

    - Greedy longest-match for multi-letter units (e.g. "th").
    - Every other codepoint is its own unit.
    """
    ordered = sorted((m for m in multi if len(m) > 1), key=len, reverse=True)
    units: list[str] = []
    i = 0
    while i < len(word):
        matched = None
        for m in ordered:
            if word.startswith(m, i):
                matched = m
                break
        if matched is not None:
            units.append(matched)
            i += len(matched)
            continue
        units.append(word[i])
        i += 1
    return units
