from fluency_assessor.text_normalize import normalize_text
from fluency_assessor.text_tokenize import count_hesitations, grapheme_units, tokenize


def test_normalize_strips_punctuation_and_case():
    assert normalize_text("  Hello,   World! ") == "hello world"


def test_normalize_empty_and_none():
    assert normalize_text("") == ""
    assert normalize_text(None) == ""
    assert normalize_text("?!...") == ""


def test_normalize_keeps_digits_and_accents():
    assert normalize_text("Café No. 5") == "café no 5"


def test_tokenize_and_hesitations():
    tokens = tokenize("Um, I think... uh yes")
    assert tokens == ["um", "i", "think", "uh", "yes"]
    assert count_hesitations(tokens) == 2


def test_grapheme_units_digraph():
    assert grapheme_units("think", {"th"}) == ["th", "i", "n", "k"]
    assert grapheme_units("tink", {"th"}) == ["t", "i", "n", "k"]


def test_grapheme_units_plain_codepoints():
    assert grapheme_units("cat") == ["c", "a", "t"]
