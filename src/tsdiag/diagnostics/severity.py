"""Severity classification for backend diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tsdiag.diagnostics.codes import is_style_check
from tsdiag.diagnostics.models import DiagnosticCategory, Severity

if TYPE_CHECKING:
    from tsdiag.config.models import DiagnosticsConfig


@dataclass(frozen=True)
class ClassifierConfig:
    """Settings read by every classification.

    Replaced as a whole when configuration changes, so diagnostics
    classified earlier keep the severity they were given.
    """

    report_style_checks_as_warnings: bool = True

    @classmethod
    def from_config(cls, config: DiagnosticsConfig) -> ClassifierConfig:
        return cls(report_style_checks_as_warnings=config.report_style_checks_as_warnings)


_CATEGORY_SEVERITY = {
    DiagnosticCategory.ERROR: Severity.ERROR,
    DiagnosticCategory.WARNING: Severity.WARNING,
    DiagnosticCategory.SUGGESTION: Severity.HINT,
}


def classify(
    code: int | None,
    category: DiagnosticCategory | None,
    config: ClassifierConfig,
) -> Severity:
    """Map a backend category and code to a display severity.

    Style-check errors are downgraded to warnings when configured.
    Categories without a mapping (``message``, unknown) are errors.
    """
    if (
        config.report_style_checks_as_warnings
        and is_style_check(code)
        and category is DiagnosticCategory.ERROR
    ):
        return Severity.WARNING
    if category is None:
        return Severity.ERROR
    return _CATEGORY_SEVERITY.get(category, Severity.ERROR)
