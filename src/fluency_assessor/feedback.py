from __future__ import annotations

from collections import Counter
from typing import Sequence

from .schemas import CategoryScores, DetectedError, DifficultSound, ErrorType, Feedback, Severity, SoundAccuracy


MAX_SUGGESTIONS = 5
MAX_STRENGTHS = 3
MAX_IMPROVEMENTS = 4

NO_SPEECH = "No speech detected. Please try speaking again."
NO_ERRORS = "Excellent! Your writing has no detected errors. Keep up the great work!"


def _unique(items: list[str], limit: int) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen[:limit]


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


# --- pronunciation -----------------------------------------------------------


def sound_feedback(accuracy: float, sound: DifficultSound) -> str:
    if accuracy >= 0.9:
        return f"Excellent pronunciation of {sound.symbol}!"
    if accuracy >= 0.7:
        return f"Good attempt with {sound.symbol}. {sound.tip(0)}".strip()
    if accuracy >= 0.5:
        return f"Keep practicing {sound.symbol}. {sound.tip(1)}".strip()
    return f"Focus on {sound.symbol}: {sound.tip(0)}".strip()


def pronunciation_headline(
    similarity: float,
    accuracy: float,
    fluency: float,
    completeness: float,
    missed_words: Sequence[str],
) -> list[str]:
    """Short verdict lines shown right after an attempt."""
    lines: list[str] = []
    if similarity >= 0.9:
        lines.append("Excellent pronunciation! You nailed it!")
    elif similarity >= 0.8:
        lines.append("Great job! Your pronunciation is very good.")
    elif similarity >= 0.6:
        lines.append("Good effort! You're on the right track.")
    elif similarity >= 0.4:
        lines.append("Keep practicing! You're making progress.")
    else:
        lines.append("Let's try again. Take your time and speak clearly.")

    if accuracy < 0.7:
        lines.append("Focus on pronouncing each word clearly and distinctly.")
    if fluency < 0.7:
        lines.append("Try to speak at a steady pace without too many pauses.")
    if completeness < 0.8:
        lines.append("Make sure to say the complete sentence or phrase.")

    if missed_words:
        if len(missed_words) <= 3:
            lines.append(f"You missed these words: {', '.join(missed_words)}")
        else:
            lines.append(f"You missed {len(missed_words)} words. Try speaking the full sentence.")

    if similarity < 0.6:
        lines.append("Tip: Listen to the example audio again and repeat slowly.")
        lines.append("Break the sentence into smaller parts if needed.")
    return lines


def pronunciation_feedback(
    accuracy: float,
    sound_accuracies: Sequence[SoundAccuracy],
    sounds: Sequence[DifficultSound],
) -> Feedback:
    by_phoneme = {s.phoneme: s for s in sounds}

    recommendations: list[str] = []
    if accuracy < 0.7:
        recommendations.append("Focus on practicing individual sounds before full sentences")
        recommendations.append("Use a mirror to watch your mouth movements")
    if accuracy < 0.5:
        recommendations.append("Record yourself and compare with native speakers")
        recommendations.append("Start with slower speech and gradually increase pace")
    for sa in sound_accuracies:
        sound = by_phoneme.get(sa.phoneme)
        if sound is not None and sa.accuracy < 0.6:
            recommendations.append(f"Practice {sound.symbol}: {sound.tip(0)}")

    strengths: list[str] = []
    if accuracy >= 0.8:
        strengths.append("Excellent overall pronunciation accuracy")
    if accuracy >= 0.6:
        strengths.append("Good speech clarity and intelligibility")
    for sa in sound_accuracies:
        sound = by_phoneme.get(sa.phoneme)
        if sound is not None and sa.accuracy >= 0.8:
            strengths.append(f"Strong {sound.symbol} pronunciation")

    improvements: list[str] = []
    if accuracy < 0.5:
        improvements.append("Work on basic phoneme recognition and production")
        improvements.append("Practice minimal pairs exercises")
    if accuracy < 0.7:
        improvements.append("Focus on mouth positioning for difficult sounds")
        improvements.append("Increase practice time with repetition exercises")
    for sa in sound_accuracies:
        sound = by_phoneme.get(sa.phoneme)
        if sound is not None and sa.accuracy < 0.7:
            improvements.append(f"Improve {sound.symbol}: {sound.tip(1)}")

    return Feedback(
        suggestions=_unique(recommendations, MAX_SUGGESTIONS),
        strengths=_unique(strengths, MAX_STRENGTHS),
        improvements=_unique(improvements, MAX_IMPROVEMENTS),
    )


# --- written correction ------------------------------------------------------

_TYPE_SUGGESTIONS = {
    ErrorType.GRAMMAR: "Review basic grammar rules for subject-verb agreement",
    ErrorType.TENSE: "Practice irregular past tense forms",
    ErrorType.ARTICLE: 'Study when to use "a" vs "an" vs "the"',
    ErrorType.PREPOSITION: "Practice prepositions of time and place",
    ErrorType.CONTRACTION: "Remember the apostrophe in contractions like \"I'm\" and \"don't\"",
    ErrorType.SPELLING: "Keep a list of words you often misspell and review it",
    ErrorType.WORD_ORDER: "Pay attention to word order, especially adjectives and adverbs",
}

_TYPE_IMPROVEMENTS = {
    ErrorType.GRAMMAR: "Focus on subject-verb agreement and auxiliary verbs",
    ErrorType.TENSE: "Review tense usage and time indicators",
    ErrorType.ARTICLE: "Listen for vowel sounds when choosing between a and an",
    ErrorType.PREPOSITION: "Learn preposition collocations (on Monday, in the morning)",
    ErrorType.SPELLING: "Practice spelling common words",
    ErrorType.VOCABULARY: "Expand your vocabulary with synonyms",
    ErrorType.STYLE: "Prefer full forms over informal spellings in writing",
    ErrorType.PUNCTUATION: "Check commas and spacing around punctuation",
    ErrorType.CAPITALIZATION: "Start every sentence with a capital letter",
    ErrorType.CONTRACTION: "Check every contraction for its apostrophe",
    ErrorType.WORD_ORDER: "Practice English word order in short sentences",
}


def correction_feedback(errors: Sequence[DetectedError], scores: CategoryScores) -> Feedback:
    """
    Templated suggestions, strengths and improvements for a corrected text.
    Only counts and thresholds are used, so equal inputs give equal output.
    """
    counts = Counter(e.type for e in errors)

    suggestions = [_TYPE_SUGGESTIONS[t] for t in _TYPE_SUGGESTIONS if counts.get(t)]
    if len(errors) > 5:
        suggestions.append("Consider writing shorter sentences to reduce errors")
        suggestions.append("Read your writing aloud to catch mistakes")

    strengths: list[str] = []
    if not errors:
        strengths.append("Error-free writing")
    if scores.grammar >= 90:
        strengths.append("Strong grammar control")
    if not counts.get(ErrorType.SPELLING):
        strengths.append("Excellent spelling")
    if scores.vocabulary >= 90:
        strengths.append("Good vocabulary range")
    if scores.style >= 90:
        strengths.append("Clear, well-punctuated sentences")

    ordered = sorted(counts, key=lambda t: (-counts[t], list(ErrorType).index(t)))
    improvements = [_TYPE_IMPROVEMENTS[t] for t in ordered if t in _TYPE_IMPROVEMENTS]

    return Feedback(
        suggestions=_unique(suggestions, MAX_SUGGESTIONS),
        strengths=_unique(strengths, MAX_STRENGTHS),
        improvements=_unique(improvements, MAX_IMPROVEMENTS),
    )


def explain_errors(errors: Sequence[DetectedError]) -> str:
    if not errors:
        return NO_ERRORS

    counts = Counter(e.severity for e in errors)
    parts = [f"{counts[s]} {s.value}" for s in (Severity.MAJOR, Severity.MODERATE, Severity.MINOR) if counts[s]]
    sentence = f"I found {_plural(len(errors), 'error')}: {', '.join(parts)}."
    if counts[Severity.MAJOR]:
        sentence += " Focus on the major errors first."
    return sentence
