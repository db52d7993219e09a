"""Backend diagnostic to display diagnostic normalization."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from tsdiag.diagnostics.convert import to_location, to_zero_based_range
from tsdiag.diagnostics.models import (
    DiagnosticTag,
    NormalizedDiagnostic,
    RawDiagnostic,
    RelatedInformation,
)
from tsdiag.diagnostics.severity import ClassifierConfig, classify

# Maps a backend file path to the consumer's resource identity (URI)
FileResolver = Callable[[str], str]


def derive_tags(raw: RawDiagnostic) -> frozenset[DiagnosticTag] | None:
    """Tags for a diagnostic; ``None`` when it has none."""
    tags: set[DiagnosticTag] = set()
    if raw.reports_unnecessary:
        tags.add(DiagnosticTag.UNNECESSARY)
    if raw.reports_deprecated:
        tags.add(DiagnosticTag.DEPRECATED)
    return frozenset(tags) if tags else None


def _related_information(
    raw: RawDiagnostic, resolve_file: FileResolver
) -> tuple[RelatedInformation, ...] | None:
    if raw.related_information is None:
        return None
    related: list[RelatedInformation] = []
    for info in raw.related_information:
        uri = resolve_file(info.span.file) if info.span is not None else ""
        related.append(
            RelatedInformation(location=to_location(uri, info.span), message=info.message)
        )
    return tuple(related)


def normalize(
    raw: RawDiagnostic,
    resolve_file: FileResolver,
    config: ClassifierConfig,
) -> NormalizedDiagnostic:
    """Build the display diagnostic for one backend record."""
    return NormalizedDiagnostic(
        range=to_zero_based_range(raw.start, raw.end),
        message=raw.text,
        severity=classify(raw.code, raw.category, config),
        # code 0 is not a real backend code
        code=raw.code if raw.code else None,
        tags=derive_tags(raw),
        related_information=_related_information(raw, resolve_file),
        source=raw.source,
        reports_unnecessary=raw.reports_unnecessary,
        reports_deprecated=raw.reports_deprecated,
    )


def normalize_all(
    raws: Iterable[RawDiagnostic],
    resolve_file: FileResolver,
    config: ClassifierConfig,
) -> list[NormalizedDiagnostic]:
    return [normalize(raw, resolve_file, config) for raw in raws]
