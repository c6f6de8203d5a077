import json

import pytest

from fluency_assessor.aggregate import correct_text
from fluency_assessor.config import DEFAULT_CONFIG, config_from_mapping, load_config


def test_no_path_gives_defaults():
    assert load_config(None) is DEFAULT_CONFIG
    assert DEFAULT_CONFIG.grammar_factor == 150
    assert DEFAULT_CONFIG.severity_weights["major"] == 3


def test_yaml_overrides_merge(tmp_path):
    p = tmp_path / "scoring.yaml"
    p.write_text("grammar_factor: 100\nseverity_weights:\n  major: 5\npacing_ideal: [0.9, 1.1]\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.grammar_factor == 100
    assert cfg.severity_weights["major"] == 5
    assert cfg.severity_weights["minor"] == 1
    assert cfg.pacing_ideal == (0.9, 1.1)


def test_json_overrides(tmp_path):
    p = tmp_path / "scoring.json"
    p.write_text(json.dumps({"grammar_types": ["grammar"]}), encoding="utf-8")
    cfg = load_config(p)
    assert cfg.grammar_types == frozenset({"grammar"})


def test_unknown_key_rejected():
    with pytest.raises(ValueError):
        config_from_mapping({"grammar_factr": 1})


def test_config_changes_scores():
    cfg = config_from_mapping({"grammar_factor": 50})
    assert correct_text("I has 25 years old", config=cfg).grammar_score == 90
