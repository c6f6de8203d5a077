import random

import pytest

from fluency_assessor.similarity import confusions, phoneme_scan, similarity


def test_identical_after_normalization():
    assert similarity("Cat!", "cat") == 1.0


def test_empty_conventions():
    assert similarity("", "") == 1.0
    assert similarity("", "x") == 0.0
    assert similarity("x", "") == 0.0


def test_listed_confusion_costs_half():
    assert similarity("think", "tink") == pytest.approx(0.875)
    assert similarity("light", "right") == pytest.approx(0.9)
    # s/w is not a listed confusion.
    assert similarity("sink", "wink") == pytest.approx(0.75)


def test_similarity_bounds():
    rng = random.Random(7)
    alphabet = "abcdefghijklmnopqrstuvwxyz th"
    for _ in range(200):
        a = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
        b = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
        s = similarity(a, b)
        assert 0.0 <= s <= 1.0
        assert similarity(a, a) == 1.0


def test_phoneme_scan_th_mistakes():
    found = phoneme_scan("Think about three things", "Tink about tree tings")
    assert [f.phoneme for f in found] == ["th_voiceless", "schwa", "th_voiceless"]
    assert found[0].accuracy == pytest.approx(0.575)
    assert found[1].accuracy == pytest.approx(1.0)
    assert found[2].position == 2
    assert "/θ/" in found[0].feedback


def test_phoneme_scan_missing_spoken_word():
    found = phoneme_scan("very good", "")
    assert {f.phoneme for f in found} == {"r_sound", "v_sound"}
    assert all(f.accuracy == 0.0 and f.actual_sound == "" for f in found)


def test_confusions_histogram():
    assert confusions("think three", "tink tree") == {"th→t": 2}
    assert confusions("cat", "cat") == {}
