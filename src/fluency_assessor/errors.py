from __future__ import annotations


class RuleTableError(ValueError):
    """A table file is structurally unusable (not a mapping, no rule list, ...)."""


class RuleSkippedWarning(UserWarning):
    """A single correction rule was skipped; the remaining rules still ran."""


class ExternalCorrectionWarning(UserWarning):
    """The external correction was absent, failed, or carried unusable parts."""
