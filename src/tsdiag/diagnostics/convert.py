"""Backend (1-based line/offset) to display (0-based) coordinate conversion."""

from __future__ import annotations

from tsdiag.diagnostics.models import FileSpan, Location, Position, Range


def to_position(location: Position) -> tuple[int, int]:
    """Convert one backend endpoint to a zero-based (line, character) pair."""
    return location.line - 1, location.offset - 1


def to_zero_based_range(start: Position | None, end: Position | None) -> Range:
    """Convert a backend span to a zero-based, end-exclusive range.

    A span with a missing endpoint becomes ``Range.fallback()`` so a
    malformed record still produces a displayable diagnostic.
    """
    if start is None or end is None:
        return Range.fallback()
    start_line, start_col = to_position(start)
    end_line, end_col = to_position(end)
    return Range(start_line, start_col, end_line, end_col)


def to_location(uri: str, span: FileSpan | None) -> Location:
    if span is None:
        return Location(uri=uri, range=Range.fallback())
    return Location(uri=uri, range=to_zero_based_range(span.start, span.end))
