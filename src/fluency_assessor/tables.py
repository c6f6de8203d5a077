from __future__ import annotations

import re
import warnings
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .config import read_mapping
from .errors import RuleSkippedWarning, RuleTableError
from .rules import (
    TRANSFORMS,
    CorrectionRule,
    literal_corrector,
    lookup_corrector,
    regex_matcher,
    substitute_corrector,
)
from .schemas import DifficultSound, ErrorType, Severity


DATA_DIR = Path(__file__).parent / "data"
RULES_PATH = DATA_DIR / "rules.yaml"
SUBSTITUTIONS_PATH = DATA_DIR / "substitutions.yaml"
SOUNDS_PATH = DATA_DIR / "sounds.yaml"

SubstitutionTable = Mapping[str, Mapping[str, float]]


class RuleSpec(BaseModel):
    """One entry of a rule table file."""

    id: str
    rule: str = ""
    type: ErrorType
    severity: Severity
    pattern: str
    flags: list[str] = Field(default_factory=list)
    explanation: str = ""
    examples: list[str] = Field(default_factory=list)
    replace: Optional[str] = None
    lookup: Optional[dict[str, str]] = None
    substitute: Optional[list[tuple[str, str]]] = None
    transform: Optional[str] = None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, v: Any) -> Severity:
        return v if isinstance(v, Severity) else Severity(v)

    @model_validator(mode="after")
    def _one_corrector(self) -> "RuleSpec":
        given = [k for k in ("replace", "lookup", "substitute", "transform") if getattr(self, k) is not None]
        if len(given) != 1:
            raise ValueError(f"rule {self.id!r} needs exactly one of replace/lookup/substitute/transform")
        if self.transform is not None and self.transform not in TRANSFORMS:
            raise ValueError(f"rule {self.id!r}: unknown transform {self.transform!r}")
        return self

    def regex_flags(self) -> int:
        out = 0
        for name in self.flags:
            flag = getattr(re, name.upper(), None)
            if not isinstance(flag, re.RegexFlag):
                raise ValueError(f"rule {self.id!r}: unknown regex flag {name!r}")
            out |= flag
        return out

    def build(self) -> CorrectionRule:
        flags = self.regex_flags()
        if self.replace is not None:
            corrector = literal_corrector(self.replace)
        elif self.lookup is not None:
            corrector = lookup_corrector(self.lookup)
        elif self.substitute is not None:
            corrector = substitute_corrector(self.substitute)
        else:
            corrector = TRANSFORMS[self.transform]  # type: ignore[index]
        return CorrectionRule(
            rule_id=self.id,
            matcher=regex_matcher(self.pattern, flags),
            corrector=corrector,
            type=self.type,
            severity=self.severity,
            explanation=self.explanation,
            rule=self.rule,
            examples=tuple(self.examples),
        )


def _load(path: str | Path | None, default: Path) -> dict[str, Any]:
    try:
        return read_mapping(path or default)
    except ValueError as e:
        raise RuleTableError(str(e)) from e


def rules_from_mapping(data: Mapping[str, Any]) -> tuple[CorrectionRule, ...]:
    entries = data.get("rules")
    if not isinstance(entries, list):
        raise RuleTableError("rule table needs a top-level 'rules' list")

    out: list[CorrectionRule] = []
    seen: set[str] = set()
    for i, entry in enumerate(entries):
        try:
            spec = RuleSpec.model_validate(entry)
            if spec.id in seen:
                raise ValueError(f"duplicate rule id {spec.id!r}")
            out.append(spec.build())
            seen.add(spec.id)
        except (ValidationError, ValueError, TypeError, re.error) as e:
            # One broken entry must not take the whole table down.
            warnings.warn(f"Dropping rule #{i}: {e}", RuleSkippedWarning, stacklevel=2)
    return tuple(out)


def load_rule_table(path: str | Path | None = None) -> tuple[CorrectionRule, ...]:
    return rules_from_mapping(_load(path, RULES_PATH))


def substitutions_from_mapping(data: Mapping[str, Any]) -> SubstitutionTable:
    default_weight = float(data.get("default_weight", 0.5))
    entries = data.get("substitutions")
    if not isinstance(entries, dict):
        raise RuleTableError("substitution table needs a 'substitutions' mapping")

    table: dict[str, Mapping[str, float]] = {}
    for key, subs in entries.items():
        if isinstance(subs, dict):
            weights = {str(k).lower(): float(v) for k, v in subs.items()}
        elif isinstance(subs, list):
            weights = {str(k).lower(): default_weight for k in subs}
        else:
            raise RuleTableError(f"substitutes for {key!r} must be a list or mapping")
        for sub, w in weights.items():
            if not 0.0 < w < 1.0:
                raise RuleTableError(f"weight for {key!r}->{sub!r} must be in (0, 1), got {w}")
        table[str(key).lower()] = MappingProxyType(weights)
    return MappingProxyType(table)


def load_substitution_table(path: str | Path | None = None) -> SubstitutionTable:
    return substitutions_from_mapping(_load(path, SUBSTITUTIONS_PATH))


def load_difficult_sounds(path: str | Path | None = None) -> tuple[DifficultSound, ...]:
    data = _load(path, SOUNDS_PATH)
    entries = data.get("sounds")
    if not isinstance(entries, list):
        raise RuleTableError("sound table needs a top-level 'sounds' list")
    try:
        return tuple(DifficultSound.model_validate(e) for e in entries)
    except ValidationError as e:
        raise RuleTableError(str(e)) from e


def multi_units(table: SubstitutionTable) -> frozenset[str]:
    """Multi-letter units named anywhere in the table (e.g. "th")."""
    units = {k for k in table if len(k) > 1}
    for subs in table.values():
        units.update(s for s in subs if len(s) > 1)
    return frozenset(units)


_RULES: Optional[tuple[CorrectionRule, ...]] = None
_SUBSTITUTIONS: Optional[SubstitutionTable] = None
_SOUNDS: Optional[tuple[DifficultSound, ...]] = None


def default_rules() -> tuple[CorrectionRule, ...]:
    global _RULES
    if _RULES is None:
        _RULES = load_rule_table()
    return _RULES


def default_substitutions() -> SubstitutionTable:
    global _SUBSTITUTIONS
    if _SUBSTITUTIONS is None:
        _SUBSTITUTIONS = load_substitution_table()
    return _SUBSTITUTIONS


def default_sounds() -> tuple[DifficultSound, ...]:
    global _SOUNDS
    if _SOUNDS is None:
        _SOUNDS = load_difficult_sounds()
    return _SOUNDS
