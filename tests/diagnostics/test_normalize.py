"""Tests for backend diagnostic normalization."""

from __future__ import annotations

import pytest

from tsdiag.diagnostics.models import (
    DiagnosticCategory,
    DiagnosticTag,
    FileSpan,
    Position,
    Range,
    RawDiagnostic,
    RawRelatedInformation,
    Severity,
)
from tsdiag.diagnostics.normalize import derive_tags, normalize, normalize_all
from tsdiag.diagnostics.severity import ClassifierConfig


def _resolve(path: str) -> str:
    return "file://" + path


def _unused_x(**overrides: object) -> RawDiagnostic:
    fields: dict[str, object] = {
        "text": "'x' is declared but its value is never read.",
        "start": Position(5, 3),
        "end": Position(5, 10),
        "category": DiagnosticCategory.ERROR,
        "code": 6133,
        "reports_unnecessary": True,
    }
    fields.update(overrides)
    return RawDiagnostic(**fields)  # type: ignore[arg-type]


class TestNormalize:
    """End-to-end normalization of single records."""

    def test_unused_variable_reported_as_warning(self) -> None:
        """Style check with the downgrade enabled."""
        result = normalize(_unused_x(), _resolve, ClassifierConfig(True))

        assert result.range == Range(4, 2, 4, 9)
        assert result.severity is Severity.WARNING
        assert result.code == 6133
        assert result.tags == frozenset({DiagnosticTag.UNNECESSARY})
        assert result.message == "'x' is declared but its value is never read."
        assert result.reports_unnecessary is True

    def test_unused_variable_reported_as_error_when_disabled(self) -> None:
        result = normalize(_unused_x(), _resolve, ClassifierConfig(False))

        assert result.range == Range(4, 2, 4, 9)
        assert result.severity is Severity.ERROR

    def test_code_zero_is_absent(self) -> None:
        assert normalize(_unused_x(code=0), _resolve, ClassifierConfig()).code is None

    def test_missing_end_uses_fallback_range(self) -> None:
        result = normalize(_unused_x(end=None), _resolve, ClassifierConfig())
        assert result.range == Range.fallback()

    def test_source_passed_through(self) -> None:
        result = normalize(_unused_x(source="eslint"), _resolve, ClassifierConfig())
        assert result.source == "eslint"

    def test_not_formatted_yet(self) -> None:
        assert normalize(_unused_x(), _resolve, ClassifierConfig()).filetype is None

    def test_related_information_resolved(self) -> None:
        raw = _unused_x(
            related_information=(
                RawRelatedInformation(
                    span=FileSpan("/p/b.ts", Position(3, 1), Position(3, 6)),
                    message="declared here",
                ),
                RawRelatedInformation(span=None, message="no span"),
            )
        )

        result = normalize(raw, _resolve, ClassifierConfig())

        assert result.related_information is not None
        first, second = result.related_information
        assert first.location.uri == "file:///p/b.ts"
        assert first.location.range == Range(2, 0, 2, 5)
        assert first.message == "declared here"
        assert second.location.uri == ""
        assert second.location.range == Range.fallback()

    def test_empty_related_information_kept_empty(self) -> None:
        result = normalize(_unused_x(related_information=()), _resolve, ClassifierConfig())
        assert result.related_information == ()

    def test_normalize_all_keeps_order(self) -> None:
        raws = [_unused_x(text="first"), _unused_x(text="second")]

        result = normalize_all(raws, _resolve, ClassifierConfig())

        assert [d.message for d in result] == ["first", "second"]


class TestDeriveTags:
    """Tests for derive_tags."""

    @pytest.mark.parametrize(
        ("unnecessary", "deprecated", "expected"),
        [
            (False, False, None),
            (True, False, frozenset({DiagnosticTag.UNNECESSARY})),
            (False, True, frozenset({DiagnosticTag.DEPRECATED})),
            (True, True, frozenset({DiagnosticTag.UNNECESSARY, DiagnosticTag.DEPRECATED})),
        ],
    )
    def test_flags_to_tags(
        self,
        unnecessary: bool,
        deprecated: bool,
        expected: frozenset[DiagnosticTag] | None,
    ) -> None:
        raw = RawDiagnostic(
            text="t", reports_unnecessary=unnecessary, reports_deprecated=deprecated
        )
        assert derive_tags(raw) == expected
