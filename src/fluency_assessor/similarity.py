from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, ScoringConfig
from .edit_distance import SubCost, weighted_distance, weighted_levenshtein_ops
from .feedback import sound_feedback
from .schemas import DifficultSound, SoundAccuracy
from .tables import SubstitutionTable, default_sounds, default_substitutions, multi_units
from .text_normalize import normalize_text
from .text_tokenize import grapheme_units, tokenize


def substitution_cost(table: SubstitutionTable) -> SubCost:
    def cost(expected: str, predicted: str) -> float:
        return table.get(expected, {}).get(predicted, 1.0)

    return cost


def similarity(target: str, actual: str, table: Optional[SubstitutionTable] = None) -> float:
    """
    Phoneme-aware similarity in [0, 1] between two utterances.

    Both sides are normalized first. Confusions listed in the substitution
    table are cheaper than other substitutions, so "tink" is closer to "think"
    than "sink" is to "wink".
    """
    t = normalize_text(target)
    a = normalize_text(actual)
    if t == a:
        return 1.0
    if not t or not a:
        return 0.0

    table = default_substitutions() if table is None else table
    multi = multi_units(table)
    t_units = grapheme_units(t, multi)
    a_units = grapheme_units(a, multi)

    max_len = max(len(t_units), len(a_units))
    distance = weighted_distance(t_units, a_units, substitution_cost(table))
    return min(1.0, max(0.0, (max_len - distance) / max_len))


def phoneme_scan(
    target: str,
    actual: str,
    sounds: Optional[Sequence[DifficultSound]] = None,
    table: Optional[SubstitutionTable] = None,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> list[SoundAccuracy]:
    """
    Score every difficult-sound example word of the target against the
    spoken word at the same index. A spoken word that is a known mistake for
    that sound loses an extra, difficulty-scaled discount.
    """
    sounds = default_sounds() if sounds is None else sounds
    target_words = tokenize(target)
    actual_words = tokenize(actual)

    out: list[SoundAccuracy] = []
    for i, word in enumerate(target_words):
        spoken = actual_words[i] if i < len(actual_words) else ""
        for sound in sounds:
            if word not in sound.examples:
                continue
            accuracy = similarity(word, spoken, table)
            if spoken in sound.common_mistakes:
                discount = config.mistake_discounts.get(sound.difficulty, 0.3)
                accuracy = max(0.0, accuracy - discount)
            out.append(
                SoundAccuracy(
                    phoneme=sound.phoneme,
                    target_sound=word,
                    actual_sound=spoken,
                    accuracy=accuracy,
                    position=i,
                    feedback=sound_feedback(accuracy, sound),
                )
            )
    return out


def confusions(target: str, actual: str, table: Optional[SubstitutionTable] = None) -> dict[str, int]:
    """Count "expected→spoken" unit substitutions between two utterances."""
    table = default_substitutions() if table is None else table
    multi = multi_units(table)
    t_units = grapheme_units(normalize_text(target).replace(" ", ""), multi)
    a_units = grapheme_units(normalize_text(actual).replace(" ", ""), multi)

    c: Counter[str] = Counter()
    for o in weighted_levenshtein_ops(t_units, a_units, substitution_cost(table)):
        if o.op == "sub" and o.expected is not None and o.predicted is not None:
            c[f"{o.expected}→{o.predicted}"] += 1
    return dict(c)
