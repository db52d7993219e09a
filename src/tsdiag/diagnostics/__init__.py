"""Diagnostics module - conversion, classification and formatting."""

from tsdiag.diagnostics.format import FormatOptions, format_diagnostic, format_diagnostics
from tsdiag.diagnostics.manager import DiagnosticsManager
from tsdiag.diagnostics.models import (
    DiagnosticCategory,
    DiagnosticKind,
    DiagnosticTag,
    NormalizedDiagnostic,
    Range,
    RawDiagnostic,
    Severity,
)
from tsdiag.diagnostics.normalize import normalize, normalize_all
from tsdiag.diagnostics.severity import ClassifierConfig, classify

__all__ = [
    "ClassifierConfig",
    "DiagnosticCategory",
    "DiagnosticKind",
    "DiagnosticTag",
    "DiagnosticsManager",
    "FormatOptions",
    "NormalizedDiagnostic",
    "Range",
    "RawDiagnostic",
    "Severity",
    "classify",
    "format_diagnostic",
    "format_diagnostics",
    "normalize",
    "normalize_all",
]
