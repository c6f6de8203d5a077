import pytest

from fluency_assessor.errors import RuleSkippedWarning
from fluency_assessor.rules import (
    CorrectionRule,
    apply_rules,
    literal_corrector,
    lookup_corrector,
    regex_matcher,
    substitute_corrector,
)
from fluency_assessor.schemas import ErrorType, Severity
from fluency_assessor.tables import default_rules


def _rule(rule_id, pattern, corrector, type_=ErrorType.GRAMMAR):
    return CorrectionRule(
        rule_id=rule_id,
        matcher=regex_matcher(pattern),
        corrector=corrector,
        type=type_,
        severity=Severity.MINOR,
        explanation=rule_id,
    )


def test_earlier_rule_wins_overlap():
    first = _rule("first", r"quick brown", literal_corrector("slow brown"))
    second = _rule("second", r"brown fox", literal_corrector("red fox"))
    text = "the quick brown fox"

    errors = apply_rules(text, [first, second])
    assert [e.rule_id for e in errors] == ["first"]

    errors = apply_rules(text, [second, first])
    assert [e.rule_id for e in errors] == ["second"]


def test_no_op_match_claims_nothing():
    same = _rule("same", r"cat", literal_corrector("cat"))
    fix = _rule("fix", r"cat", literal_corrector("dog"))
    errors = apply_rules("a cat", [same, fix])
    assert [(e.rule_id, e.corrected) for e in errors] == [("fix", "dog")]


def test_failing_rule_is_skipped():
    def boom(_text):
        raise RuntimeError("bad matcher")

    broken = CorrectionRule(
        rule_id="broken",
        matcher=boom,
        corrector=str.upper,
        type=ErrorType.GRAMMAR,
        severity=Severity.MAJOR,
        explanation="",
    )
    fix = _rule("fix", r"teh", literal_corrector("the"), ErrorType.SPELLING)
    with pytest.warns(RuleSkippedWarning, match="broken"):
        errors = apply_rules("teh end", [broken, fix])
    assert [e.corrected for e in errors] == ["the"]


def test_out_of_range_span_is_skipped():
    liar = CorrectionRule(
        rule_id="liar",
        matcher=lambda text: [(0, len(text) + 5)],
        corrector=str.upper,
        type=ErrorType.STYLE,
        severity=Severity.MINOR,
        explanation="",
    )
    with pytest.warns(RuleSkippedWarning):
        assert apply_rules("abc", [liar]) == []


def test_output_sorted_by_start():
    late = _rule("late", r"dog", literal_corrector("cat"))
    early = _rule("early", r"teh", literal_corrector("the"))
    errors = apply_rules("teh dog", [late, early])
    assert [e.position.start for e in errors] == [0, 4]


def test_corrector_helpers_follow_case():
    assert lookup_corrector({"dont": "don't"})("Dont") == "Don't"
    assert substitute_corrector([(r"\bgo$", "goes")])("He go") == "He goes"
    assert literal_corrector("I'm")("im") == "I'm"


def test_default_table_contraction():
    errors = apply_rules("Im going to the store", default_rules())
    assert len(errors) == 1
    e = errors[0]
    assert (e.original, e.corrected, e.type) == ("Im", "I'm", ErrorType.CONTRACTION)
    assert e.severity is Severity("high")


def test_default_table_third_person():
    errors = apply_rules("He go to school", default_rules())
    assert [(e.original, e.corrected) for e in errors] == [("He go", "He goes")]


def test_default_table_irregular_past():
    errors = apply_rules("I goed home yesterday", default_rules())
    assert [(e.original, e.corrected, e.type) for e in errors] == [("goed", "went", ErrorType.TENSE)]


def test_empty_text():
    assert apply_rules("", default_rules()) == []
