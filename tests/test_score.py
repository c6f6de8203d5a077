import random

import pytest

from fluency_assessor.feedback import NO_SPEECH
from fluency_assessor.score import (
    analyze_pronunciation,
    completeness,
    fluency,
    pacing,
    recognizable_words,
    stress_pattern,
    word_accuracy,
)


def test_general_all_words_present():
    a = analyze_pronunciation("Cat, bat, hat", "Cat bat hat", "general")
    assert a.accuracy == 100
    assert a.overall_score >= 85
    assert a.missed_words == []
    assert a.detected_words == ["cat", "bat", "hat"]


def test_focused_th_drill():
    a = analyze_pronunciation("Think about three things", "Tink about tree tings", "focused")
    assert a.mode == "focused"
    assert a.sound_accuracies
    th = [s for s in a.sound_accuracies if s.phoneme == "th_voiceless"]
    assert th and all(s.accuracy < 0.6 for s in th)
    assert a.accuracy < 80
    assert a.recommendations
    assert any("/θ/" in r for r in a.recommendations)
    assert a.confusions.get("th→t") == 3


@pytest.mark.parametrize("mode", ["general", "focused"])
def test_no_speech(mode):
    a = analyze_pronunciation("Hello there", "   ", mode)
    assert a.overall_score == 0
    assert a.accuracy == a.fluency == a.clarity == a.pacing == a.stress_pattern == 0
    assert a.feedback == [NO_SPEECH]
    assert a.missed_words == ["hello", "there"]


def test_unknown_mode():
    with pytest.raises(ValueError):
        analyze_pronunciation("a", "a", "karaoke")  # type: ignore[arg-type]


def test_word_accuracy_is_set_membership():
    assert word_accuracy(["a", "b", "c"], ["c", "b", "a"]) == 1.0
    assert word_accuracy(["a", "b"], ["b"]) == 0.5


def test_fluency_hesitation_penalty():
    assert fluency(["a", "b"], ["um", "a", "b"]) == pytest.approx(0.9)
    assert fluency(["a", "b", "c", "d"], ["a", "b"]) == pytest.approx(0.5)
    assert fluency(["a"], ["um"] * 12) == 0.0


def test_completeness_variants():
    assert recognizable_words([], ["um", "hello", "ok"]) == pytest.approx(1 / 3)
    assert completeness(["a", "b"], ["b"], "word_coverage") == 0.5
    with pytest.raises(ValueError):
        completeness(["a"], ["a"], "nope")  # type: ignore[arg-type]


def test_pacing_bands():
    assert pacing("abcdefghij", "abcdefghij") == 1.0
    assert pacing("abcdefghij", "abcdefg") == 0.8
    assert pacing("abcdefghij", "abc") == 0.6


def test_stress_pattern():
    assert stress_pattern(["wonderful", "cat"], ["wonder", "dog"]) == 1.0
    assert stress_pattern(["wonderful"], ["won"]) == 0.0
    assert stress_pattern([], ["x"]) == 1.0


def test_scores_stay_in_range():
    rng = random.Random(3)
    words = ["think", "tink", "about", "um", "three", "tree", "very", "bery", "cat", "!", ""]
    for _ in range(100):
        target = " ".join(rng.choice(words) for _ in range(rng.randint(0, 6)))
        spoken = " ".join(rng.choice(words) for _ in range(rng.randint(0, 6)))
        for mode in ("general", "focused"):
            a = analyze_pronunciation(target, spoken, mode)
            for value in (a.overall_score, a.similarity, a.accuracy, a.fluency, a.pacing, a.stress_pattern):
                assert 0 <= value <= 100
