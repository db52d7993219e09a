"""In-memory diagnostic state per file and backend channel."""

from __future__ import annotations

from tsdiag.diagnostics.models import DiagnosticKind, NormalizedDiagnostic

_KIND_ORDER = (DiagnosticKind.SYNTAX, DiagnosticKind.SEMANTIC, DiagnosticKind.SUGGESTION)


class DiagnosticsManager:
    """Latest delivered diagnostics, per (kind, uri), plus config-file diagnostics.

    A new batch for a (kind, uri) replaces the previous one; batches are
    never merged.
    """

    def __init__(self) -> None:
        self._diagnostics: dict[tuple[DiagnosticKind, str], list[NormalizedDiagnostic]] = {}
        self._config_diagnostics: dict[str, list[NormalizedDiagnostic]] = {}

    def update(
        self, kind: DiagnosticKind, uri: str, diagnostics: list[NormalizedDiagnostic]
    ) -> None:
        self._diagnostics[(kind, uri)] = list(diagnostics)

    def config_file_diagnostics_received(
        self, uri: str, diagnostics: list[NormalizedDiagnostic]
    ) -> None:
        """Store diagnostics for a project config file; an empty list clears them."""
        if diagnostics:
            self._config_diagnostics[uri] = list(diagnostics)
        else:
            self._config_diagnostics.pop(uri, None)

    def get(self, uri: str) -> list[NormalizedDiagnostic]:
        """All diagnostics for a file: syntax, then semantic, then suggestion."""
        result: list[NormalizedDiagnostic] = []
        for kind in _KIND_ORDER:
            result.extend(self._diagnostics.get((kind, uri), []))
        result.extend(self._config_diagnostics.get(uri, []))
        return result

    def delete(self, uri: str) -> None:
        for kind in _KIND_ORDER:
            self._diagnostics.pop((kind, uri), None)
        self._config_diagnostics.pop(uri, None)

    def uris(self) -> list[str]:
        seen = dict.fromkeys(uri for _kind, uri in self._diagnostics)
        seen.update(dict.fromkeys(self._config_diagnostics))
        return list(seen)

    def reinitialize(self) -> None:
        """Drop all state, e.g. before a project reload."""
        self._diagnostics.clear()
        self._config_diagnostics.clear()
