"""Diagnostic models - backend records and normalized diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tsdiag.config.constants import FALLBACK_RANGE


class DiagnosticCategory(Enum):
    """Category reported by the analysis backend."""

    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"
    MESSAGE = "message"


class Severity(Enum):
    """Display severity of a normalized diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


class DiagnosticTag(Enum):
    """Extra rendering hints attached to a diagnostic."""

    UNNECESSARY = "unnecessary"
    DEPRECATED = "deprecated"


class DiagnosticKind(Enum):
    """Backend channel a diagnostic batch was produced on."""

    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    SUGGESTION = "suggestion"


# =============================================================================
# Backend records (1-based)
# =============================================================================


@dataclass(frozen=True)
class Position:
    """Backend coordinate: 1-based line and character offset."""

    line: int
    offset: int


@dataclass(frozen=True)
class FileSpan:
    """A span in a (possibly different) file, as named by the backend."""

    file: str
    start: Position | None
    end: Position | None


@dataclass(frozen=True)
class RawRelatedInformation:
    span: FileSpan | None
    message: str


@dataclass(frozen=True)
class RawDiagnostic:
    """A diagnostic exactly as the backend reported it."""

    text: str
    start: Position | None = None
    end: Position | None = None
    category: DiagnosticCategory | None = None  # None when unrecognized
    code: int | None = None
    source: str | None = None
    reports_unnecessary: bool = False
    reports_deprecated: bool = False
    related_information: tuple[RawRelatedInformation, ...] | None = None


# =============================================================================
# Normalized records (0-based, end-exclusive)
# =============================================================================


@dataclass(frozen=True)
class Range:
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def fallback(cls) -> Range:
        """Single-character range at the start of the file."""
        return cls(*FALLBACK_RANGE)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "start": {"line": self.start_line, "character": self.start_col},
            "end": {"line": self.end_line, "character": self.end_col},
        }


@dataclass(frozen=True)
class Location:
    """A range in a consumer-facing resource."""

    uri: str
    range: Range


@dataclass(frozen=True)
class RelatedInformation:
    location: Location
    message: str


@dataclass(frozen=True)
class NormalizedDiagnostic:
    """A diagnostic ready for display."""

    range: Range
    message: str
    severity: Severity | None
    code: int | None = None
    tags: frozenset[DiagnosticTag] | None = None
    related_information: tuple[RelatedInformation, ...] | None = None
    source: str | None = None
    reports_unnecessary: bool = False
    reports_deprecated: bool = False
    filetype: str | None = None  # "markdown" once formatted

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON output."""
        return {
            "range": self.range.to_dict(),
            "message": self.message,
            "severity": self.severity.value if self.severity else None,
            "code": self.code,
            "tags": sorted(t.value for t in self.tags) if self.tags else None,
            "relatedInformation": [
                {
                    "location": {"uri": r.location.uri, "range": r.location.range.to_dict()},
                    "message": r.message,
                }
                for r in self.related_information
            ]
            if self.related_information is not None
            else None,
            "source": self.source,
            "filetype": self.filetype,
        }
