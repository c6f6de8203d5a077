from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ScoringConfig:
    """
    Empirical scoring constants.

    The defaults reproduce the product's historical behaviour; override them
    with `load_config` rather than editing them here.
    """

    # Correction aggregator: score = 100 - (count / words) * factor
    grammar_factor: float = 150.0
    vocabulary_factor: float = 100.0
    style_factor: float = 80.0
    overall_factor: float = 50.0
    severity_weights: Mapping[str, int] = field(
        default_factory=lambda: _frozen({"major": 3, "moderate": 2, "minor": 1})
    )
    grammar_types: frozenset[str] = frozenset({"grammar", "tense", "article"})
    vocabulary_types: frozenset[str] = frozenset({"vocabulary", "spelling"})
    style_types: frozenset[str] = frozenset({"style", "punctuation"})

    # Pronunciation scorer
    pacing_ideal: tuple[float, float] = (0.8, 1.2)
    pacing_tolerated: tuple[float, float] = (0.6, 1.5)
    pacing_scores: tuple[float, float, float] = (1.0, 0.8, 0.6)
    hesitation_penalty: float = 0.1
    long_word_length: int = 5
    clear_word_min_length: int = 3
    mistake_discounts: Mapping[str, float] = field(
        default_factory=lambda: _frozen({"beginner": 0.2, "intermediate": 0.25, "advanced": 0.3})
    )


DEFAULT_CONFIG = ScoringConfig()

_TUPLE_FIELDS = {"pacing_ideal", "pacing_tolerated", "pacing_scores"}
_SET_FIELDS = {"grammar_types", "vocabulary_types", "style_types"}
_MAPPING_FIELDS = {"severity_weights", "mistake_discounts"}


def read_mapping(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(path))
    if p.suffix.lower() in {".yml", ".yaml"}:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    elif p.suffix.lower() == ".json":
        data = json.loads(p.read_text(encoding="utf-8"))
    else:
        raise ValueError(f"{path}: must be .yml/.yaml or .json")
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def config_from_mapping(data: Mapping[str, Any], base: ScoringConfig = DEFAULT_CONFIG) -> ScoringConfig:
    known = {f.name for f in fields(ScoringConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    updates: dict[str, Any] = {}
    for key, value in data.items():
        if key in _TUPLE_FIELDS:
            updates[key] = tuple(float(v) for v in value)
        elif key in _SET_FIELDS:
            updates[key] = frozenset(str(v) for v in value)
        elif key in _MAPPING_FIELDS:
            merged = dict(getattr(base, key))
            merged.update(value)
            updates[key] = _frozen(merged)
        else:
            updates[key] = value
    return replace(base, **updates)


def load_config(path: str | Path | None) -> ScoringConfig:
    if not path:
        return DEFAULT_CONFIG
    return config_from_mapping(read_mapping(path))
