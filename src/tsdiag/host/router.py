"""Routing of backend diagnostic batches to language handlers."""

from __future__ import annotations

from enum import Enum

import structlog

from tsdiag.core.errors import RoutingError
from tsdiag.diagnostics.format import (
    FormatOptions,
    MarkdownRenderer,
    format_diagnostics,
)
from tsdiag.diagnostics.markdown import render_markdown
from tsdiag.diagnostics.models import DiagnosticKind, RawDiagnostic
from tsdiag.diagnostics.normalize import normalize_all
from tsdiag.diagnostics.severity import ClassifierConfig
from tsdiag.host.registry import AnalysisSession, HandlerEntry, HandlerRegistry

logger = structlog.get_logger(__name__)


class RouteOutcome(Enum):
    """What happened to a routed batch."""

    DELIVERED = "delivered"
    UNMATCHED = "unmatched"  # no handler claims the file
    LOOKUP_FAILED = "lookup_failed"
    DELIVERY_FAILED = "delivery_failed"


class DiagnosticRouter:
    """Delivers each batch to the first registered handler claiming its file.

    Files nobody claims are dropped. A failing lookup or delivery drops
    the batch and is logged; ``route`` itself never raises.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        session: AnalysisSession,
        renderer: MarkdownRenderer = render_markdown,
    ) -> None:
        self._registry = registry
        self._session = session
        self._renderer = renderer

    async def find_handler(self, uri: str) -> HandlerEntry | None:
        """First handler claiming ``uri``.

        Open documents are matched with their tracked document; other
        files by their URI alone.

        Raises:
            RoutingError: If the document lookup or a handler predicate fails.
        """
        try:
            document = await self._session.get_document(uri)
            for entry in self._registry.entries():
                if entry.handler.handles(uri, document):
                    return entry
            return None
        except Exception as e:
            raise RoutingError.lookup_failed(uri, str(e)) from e

    async def route(
        self,
        kind: DiagnosticKind,
        uri: str,
        diagnostics: list[RawDiagnostic],
        config: ClassifierConfig,
        options: FormatOptions,
    ) -> RouteOutcome:
        try:
            entry = await self.find_handler(uri)
        except RoutingError as e:
            logger.warning(
                "diagnostics_dropped",
                reason="lookup_failed",
                uri=uri,
                kind=kind.value,
                count=len(diagnostics),
                error=e.message,
            )
            return RouteOutcome.LOOKUP_FAILED

        if entry is None:
            logger.debug(
                "diagnostics_dropped",
                reason="unmatched",
                uri=uri,
                kind=kind.value,
                count=len(diagnostics),
            )
            return RouteOutcome.UNMATCHED

        # No suspension from here to delivery
        try:
            normalized = normalize_all(diagnostics, self._session.to_resource, config)
            formatted = format_diagnostics(normalized, options, self._renderer)
            entry.handler.deliver(kind, uri, formatted)
        except Exception as e:
            error = RoutingError.delivery_failed(entry.id, uri, str(e))
            logger.error("diagnostics_delivery_failed", kind=kind.value, **error.details)
            return RouteOutcome.DELIVERY_FAILED

        logger.debug(
            "diagnostics_delivered",
            uri=uri,
            kind=kind.value,
            handler=entry.id,
            count=len(diagnostics),
        )
        return RouteOutcome.DELIVERED
