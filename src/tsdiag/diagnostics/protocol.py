"""Parsers for backend diagnostic payloads.

The backend reports diagnostics as JSON objects shaped like::

    {
        "start": {"line": 5, "offset": 3},
        "end": {"line": 5, "offset": 10},
        "text": "'x' is declared but its value is never read.",
        "category": "error",
        "code": 6133,
        "reportsUnnecessary": true,
        "relatedInformation": [
            {"span": {"file": "/p/b.ts", "start": {...}, "end": {...}}, "message": "..."}
        ]
    }

Parsing is lenient: malformed positions become ``None`` and unknown
categories become ``None`` rather than failing the whole batch.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tsdiag.diagnostics.models import (
    DiagnosticCategory,
    FileSpan,
    Position,
    RawDiagnostic,
    RawRelatedInformation,
)

_CATEGORIES = {c.value: c for c in DiagnosticCategory}


def _position(data: Any) -> Position | None:
    if not isinstance(data, Mapping):
        return None
    line = data.get("line")
    offset = data.get("offset")
    # bool is an int subclass; reject it explicitly
    if not isinstance(line, int) or isinstance(line, bool):
        return None
    if not isinstance(offset, int) or isinstance(offset, bool):
        return None
    return Position(line=line, offset=offset)


def _category(value: Any) -> DiagnosticCategory | None:
    if not isinstance(value, str):
        return None
    return _CATEGORIES.get(value.lower())


def _code(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _file_span(data: Any) -> FileSpan | None:
    if not isinstance(data, Mapping) or not isinstance(data.get("file"), str):
        return None
    return FileSpan(
        file=data["file"],
        start=_position(data.get("start")),
        end=_position(data.get("end")),
    )


def parse_diagnostic(data: Mapping[str, Any]) -> RawDiagnostic:
    """Parse one backend diagnostic object."""
    related: tuple[RawRelatedInformation, ...] | None = None
    raw_related = data.get("relatedInformation")
    if isinstance(raw_related, list):
        related = tuple(
            RawRelatedInformation(
                span=_file_span(item.get("span")),
                message=str(item.get("message", "")),
            )
            for item in raw_related
            if isinstance(item, Mapping)
        )

    source = data.get("source")
    return RawDiagnostic(
        text=str(data.get("text", "")),
        start=_position(data.get("start")),
        end=_position(data.get("end")),
        category=_category(data.get("category")),
        code=_code(data.get("code")),
        source=source if isinstance(source, str) else None,
        reports_unnecessary=bool(data.get("reportsUnnecessary", False)),
        reports_deprecated=bool(data.get("reportsDeprecated", False)),
        related_information=related,
    )


def parse_diagnostics(items: Iterable[Any]) -> list[RawDiagnostic]:
    """Parse a batch, skipping entries that are not JSON objects."""
    return [parse_diagnostic(item) for item in items if isinstance(item, Mapping)]


@dataclass
class EventParseResult:
    """Result from parsing a diagnostic event body."""

    file: str = ""
    diagnostics: list[RawDiagnostic] = field(default_factory=list)
    parse_error: str | None = None

    @property
    def success(self) -> bool:
        return self.parse_error is None

    @classmethod
    def ok(cls, file: str, diagnostics: list[RawDiagnostic]) -> EventParseResult:
        return cls(file=file, diagnostics=diagnostics)

    @classmethod
    def error(cls, message: str) -> EventParseResult:
        return cls(parse_error=message)


def parse_event_body(body: Mapping[str, Any]) -> EventParseResult:
    """Parse ``{"file": ..., "diagnostics": [...]}``.

    Config-file events name their file ``configFile``; both are accepted.
    """
    file = body.get("file", body.get("configFile"))
    if not isinstance(file, str):
        return EventParseResult.error("Event body has no 'file' or 'configFile'")
    items = body.get("diagnostics", [])
    if not isinstance(items, list):
        return EventParseResult.error("'diagnostics' must be a list")
    return EventParseResult.ok(file, parse_diagnostics(items))


def parse_event(text: str) -> EventParseResult:
    """Parse a JSON diagnostic event.

    Accepts either the bare body or a full event message with a ``body`` key.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return EventParseResult.error(f"Diagnostic event JSON parse error: {e}")
    if not isinstance(data, Mapping):
        return EventParseResult.error("Diagnostic event must be a JSON object")
    body = data.get("body", data)
    if not isinstance(body, Mapping):
        return EventParseResult.error("Diagnostic event body must be a JSON object")
    return parse_event_body(body)
