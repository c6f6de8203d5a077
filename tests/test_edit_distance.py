import pytest

from fluency_assessor.edit_distance import weighted_distance, weighted_levenshtein_ops


def test_plain_levenshtein():
    assert weighted_distance(list("kitten"), list("sitting")) == pytest.approx(3.0)


def test_weighted_substitution_is_cheaper():
    def cost(e, p):
        return 0.5 if (e, p) == ("th", "t") else 1.0

    assert weighted_distance(["th", "i"], ["t", "i"], cost) == pytest.approx(0.5)
    # Weights are directional.
    assert weighted_distance(["t", "i"], ["th", "i"], cost) == pytest.approx(1.0)


def test_ops_script():
    ops = weighted_levenshtein_ops(["a", "b", "c"], ["a", "x", "c"])
    assert [o.op for o in ops] == ["match", "sub", "match"]
    assert ops[1].expected == "b" and ops[1].predicted == "x"


def test_ops_deletion_and_insertion():
    assert [o.op for o in weighted_levenshtein_ops(["a", "b"], ["a"])] == ["match", "del"]
    assert [o.op for o in weighted_levenshtein_ops(["a"], ["a", "b"])] == ["match", "ins"]
