"""Language handler registry.

Handlers claim files and accept their diagnostics. The registry keeps
them in registration order so routing is a deterministic first match:

- PRIMARY: the built-in languages, registered at startup
- PLUGIN_NAMESPACE: one per analysis plugin that declares a config namespace
- PLUGIN_MERGED: one entry collecting the languages of all other plugins
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Protocol
from urllib.parse import unquote, urlparse

import structlog

from tsdiag.diagnostics.manager import DiagnosticsManager
from tsdiag.diagnostics.models import DiagnosticKind, NormalizedDiagnostic

logger = structlog.get_logger(__name__)


# =============================================================================
# Collaborator protocols
# =============================================================================


@dataclass(frozen=True)
class TrackedDocument:
    """An open document known to the analysis backend."""

    uri: str
    language_id: str
    version: int = 0


class AnalysisSession(Protocol):
    """The analysis backend as seen from the diagnostics core."""

    async def get_document(self, uri: str) -> TrackedDocument | None: ...

    def to_resource(self, path: str) -> str: ...

    def tracked_uris(self) -> list[str]: ...

    async def reload_projects(self) -> None: ...

    async def request_diagnostics(self, uris: list[str]) -> None: ...


class LanguageHandler(Protocol):
    """Consumer of diagnostics for the files it claims."""

    def handles(self, uri: str, document: TrackedDocument | None) -> bool: ...

    def deliver(
        self, kind: DiagnosticKind, uri: str, diagnostics: list[NormalizedDiagnostic]
    ) -> None: ...

    async def trigger_all_diagnostics(self) -> None: ...

    def reinitialize(self) -> None: ...

    def dispose(self) -> None: ...


# =============================================================================
# Language descriptions and the default handler
# =============================================================================


@dataclass(frozen=True)
class LanguageDescription:
    id: str
    language_ids: tuple[str, ...]
    diagnostic_source: str
    standard_file_extensions: tuple[str, ...] = ()
    is_external: bool = False


@dataclass(frozen=True)
class PluginDescription:
    """An analysis plugin advertised by the backend."""

    name: str
    languages: tuple[str, ...] = ()
    config_namespace: str | None = None


def standard_language_descriptions() -> list[LanguageDescription]:
    return [
        LanguageDescription(
            id="typescript",
            language_ids=("typescript", "typescriptreact"),
            diagnostic_source="ts",
            standard_file_extensions=("ts", "tsx", "cts", "mts"),
        ),
        LanguageDescription(
            id="javascript",
            language_ids=("javascript", "javascriptreact"),
            diagnostic_source="ts",
            standard_file_extensions=("js", "jsx", "cjs", "mjs", "es6", "pac"),
        ),
    ]


def _extension(uri: str) -> str:
    path = unquote(urlparse(uri).path) if "://" in uri else uri
    return posixpath.splitext(path)[1].lstrip(".").lower()


class LanguageProvider:
    """Default handler: claims files by language id or file extension.

    Delivered diagnostics are stored in the shared DiagnosticsManager;
    diagnostics without a source are attributed to the description's
    diagnostic source.
    """

    def __init__(
        self,
        session: AnalysisSession,
        manager: DiagnosticsManager,
        description: LanguageDescription,
    ) -> None:
        self._session = session
        self._manager = manager
        self.description = description
        self._delivered: set[str] = set()
        self._disposed = False

    @property
    def id(self) -> str:
        return self.description.id

    def handles(self, uri: str, document: TrackedDocument | None) -> bool:
        if document is not None and document.language_id in self.description.language_ids:
            return True
        return _extension(uri) in self.description.standard_file_extensions

    def deliver(
        self, kind: DiagnosticKind, uri: str, diagnostics: list[NormalizedDiagnostic]
    ) -> None:
        if self._disposed:
            return
        source = self.description.diagnostic_source
        stamped = [d if d.source else _with_source(d, source) for d in diagnostics]
        self._manager.update(kind, uri, stamped)
        self._delivered.add(uri)

    async def trigger_all_diagnostics(self) -> None:
        uris: list[str] = []
        for uri in self._session.tracked_uris():
            document = await self._session.get_document(uri)
            if self.handles(uri, document):
                uris.append(uri)
        if uris:
            logger.debug("diagnostics_requested", language=self.id, count=len(uris))
            await self._session.request_diagnostics(uris)

    def reinitialize(self) -> None:
        for uri in self._delivered:
            self._manager.delete(uri)
        self._delivered.clear()

    def dispose(self) -> None:
        self.reinitialize()
        self._disposed = True


def _with_source(diagnostic: NormalizedDiagnostic, source: str) -> NormalizedDiagnostic:
    return replace(diagnostic, source=source)


# =============================================================================
# Registry
# =============================================================================


class HandlerKind(Enum):
    PRIMARY = "primary"
    PLUGIN_NAMESPACE = "plugin_namespace"
    PLUGIN_MERGED = "plugin_merged"


@dataclass
class HandlerEntry:
    id: str
    handler: LanguageHandler
    kind: HandlerKind = HandlerKind.PRIMARY


@dataclass
class HandlerRegistry:
    """Ordered registry of language handlers."""

    _entries: list[HandlerEntry] = field(default_factory=list)

    def register(
        self,
        handler_id: str,
        handler: LanguageHandler,
        kind: HandlerKind = HandlerKind.PRIMARY,
    ) -> HandlerEntry:
        """Register a handler.

        Re-registering an id keeps its position and disposes the handler
        it replaces.
        """
        entry = HandlerEntry(id=handler_id, handler=handler, kind=kind)
        for index, existing in enumerate(self._entries):
            if existing.id == handler_id:
                if existing.handler is not handler:
                    existing.handler.dispose()
                self._entries[index] = entry
                logger.debug("handler_replaced", handler=handler_id, kind=kind.value)
                return entry
        self._entries.append(entry)
        logger.debug("handler_registered", handler=handler_id, kind=kind.value)
        return entry

    def unregister(self, handler_id: str) -> bool:
        for index, existing in enumerate(self._entries):
            if existing.id == handler_id:
                del self._entries[index]
                existing.handler.dispose()
                return True
        return False

    def get(self, handler_id: str) -> LanguageHandler | None:
        for entry in self._entries:
            if entry.id == handler_id:
                return entry.handler
        return None

    def entries(self) -> list[HandlerEntry]:
        return list(self._entries)

    def handlers(self) -> list[LanguageHandler]:
        return [entry.handler for entry in self._entries]

    def of_kind(self, kind: HandlerKind) -> list[HandlerEntry]:
        return [entry for entry in self._entries if entry.kind == kind]

    def clear(self) -> None:
        """Dispose and remove every handler."""
        entries, self._entries = self._entries, []
        for entry in entries:
            entry.handler.dispose()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HandlerEntry]:
        return iter(list(self._entries))


def plugin_descriptions(
    plugins: Sequence[PluginDescription],
    *,
    diagnostic_source: str,
    merged_id: str,
) -> list[tuple[LanguageDescription, HandlerKind]]:
    """Language descriptions to register for the plugins a backend reports.

    Plugins with a config namespace get their own description keyed by the
    namespace; the languages of all other plugins share one merged
    description keyed ``merged_id``.
    """
    result: list[tuple[LanguageDescription, HandlerKind]] = []
    merged: dict[str, None] = {}
    for plugin in plugins:
        if plugin.config_namespace and plugin.languages:
            result.append(
                (
                    LanguageDescription(
                        id=plugin.config_namespace,
                        language_ids=tuple(plugin.languages),
                        diagnostic_source=diagnostic_source,
                        is_external=True,
                    ),
                    HandlerKind.PLUGIN_NAMESPACE,
                )
            )
        else:
            merged.update(dict.fromkeys(plugin.languages))
    if merged:
        result.append(
            (
                LanguageDescription(
                    id=merged_id,
                    language_ids=tuple(merged),
                    diagnostic_source=diagnostic_source,
                    is_external=True,
                ),
                HandlerKind.PLUGIN_MERGED,
            )
        )
    return result
