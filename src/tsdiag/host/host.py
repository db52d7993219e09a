"""Diagnostics host - wires the backend session to language handlers.

The host owns the process-wide state of the diagnostics core: the
handler registry, the classifier config and format options (replaced on
configuration change), the diagnostic store, and the reload trigger.
Everything runs on one asyncio event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Iterable, Sequence
from pathlib import Path
from typing import Any

import structlog

from tsdiag.config.constants import (
    MERGED_PLUGINS_ID,
    PACKAGE_MANIFEST_NAME,
    PLUGIN_DIAGNOSTIC_SOURCE,
)
from tsdiag.config.loader import load_config
from tsdiag.config.models import TsDiagConfig
from tsdiag.core.errors import ConfigError, InternalError, RoutingError
from tsdiag.diagnostics.convert import to_zero_based_range
from tsdiag.diagnostics.format import FormatOptions, MarkdownRenderer
from tsdiag.diagnostics.manager import DiagnosticsManager
from tsdiag.diagnostics.markdown import render_markdown
from tsdiag.diagnostics.models import DiagnosticKind, NormalizedDiagnostic, RawDiagnostic
from tsdiag.diagnostics.severity import ClassifierConfig, classify
from tsdiag.host.registry import (
    AnalysisSession,
    HandlerKind,
    HandlerRegistry,
    LanguageDescription,
    LanguageHandler,
    LanguageProvider,
    PluginDescription,
    plugin_descriptions,
    standard_language_descriptions,
)
from tsdiag.host.reload import DebouncedReloadTrigger, Scheduler
from tsdiag.host.router import DiagnosticRouter, RouteOutcome
from tsdiag.host.watcher import ManifestChange, ManifestEvent, ManifestWatcher

logger = structlog.get_logger(__name__)

_Batch = tuple[DiagnosticKind, str, list[RawDiagnostic]]


class DiagnosticsHost:
    """Receives backend diagnostics and events; keeps handlers up to date."""

    def __init__(
        self,
        session: AnalysisSession,
        *,
        descriptions: Sequence[LanguageDescription] | None = None,
        config: TsDiagConfig | None = None,
        config_provider: Callable[[], TsDiagConfig] = load_config,
        manager: DiagnosticsManager | None = None,
        renderer: MarkdownRenderer = render_markdown,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._session = session
        self._config_provider = config_provider
        self._tasks: set[asyncio.Task[Any]] = set()
        self._queue: asyncio.Queue[_Batch] | None = None
        self._worker: asyncio.Task[None] | None = None
        self.manager = manager or DiagnosticsManager()
        self.registry = HandlerRegistry()
        self.router = DiagnosticRouter(self.registry, session, renderer)

        config = config or config_provider()
        self._classifier_config = ClassifierConfig.from_config(config.diagnostics)
        self._format_options = FormatOptions.from_config(config.diagnostics)
        self._manifest_names = config.reload.manifest_names
        self.reload_trigger = DebouncedReloadTrigger(
            on_quiet=lambda: self._spawn(self.trigger_all_diagnostics(), "trigger_all"),
            on_structural=lambda: self._spawn(self.reload_projects(), "reload_projects"),
            window=config.reload.debounce_sec,
            scheduler=scheduler,
        )

        for description in descriptions or standard_language_descriptions():
            self._register(description, HandlerKind.PRIMARY)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def classifier_config(self) -> ClassifierConfig:
        return self._classifier_config

    @property
    def format_options(self) -> FormatOptions:
        return self._format_options

    def configuration_changed(self, sections: Iterable[str] | None = None) -> None:
        """Re-read configuration if any of the affected sections matter.

        Only diagnostics classified after this call see the new values.
        """
        affected = set(sections) if sections is not None else None
        if affected is not None and not affected & {"diagnostics", "reload"}:
            return
        try:
            config = self._config_provider()
        except ConfigError as e:
            # Keep the last good settings until the file is fixed
            logger.warning("configuration_reload_failed", **e.to_dict())
            return
        self._manifest_names = config.reload.manifest_names
        self._classifier_config = ClassifierConfig.from_config(config.diagnostics)
        self._format_options = FormatOptions.from_config(config.diagnostics)
        self.reload_trigger.window = config.reload.debounce_sec
        logger.info(
            "configuration_reloaded",
            style_checks_as_warnings=config.diagnostics.report_style_checks_as_warnings,
            show_link=config.diagnostics.show_link,
            code_block_highlight_type=config.diagnostics.code_block_highlight_type,
        )

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _register(self, description: LanguageDescription, kind: HandlerKind) -> None:
        provider = LanguageProvider(self._session, self.manager, description)
        self.registry.register(description.id, provider, kind)

    def get_provider(self, language_id: str) -> LanguageHandler | None:
        return self.registry.get(language_id)

    def server_ready(self, plugins: Sequence[PluginDescription]) -> None:
        """Register handlers for the languages the backend's plugins claim."""
        for description, kind in plugin_descriptions(
            plugins,
            diagnostic_source=PLUGIN_DIAGNOSTIC_SOURCE,
            merged_id=MERGED_PLUGINS_ID,
        ):
            self._register(description, kind)
            logger.info(
                "plugin_languages_registered",
                handler=description.id,
                kind=kind.value,
                languages=list(description.language_ids),
            )

    def server_started(self) -> None:
        self._spawn(self.trigger_all_diagnostics(), "trigger_all")

    def populate_service(self) -> None:
        """Backend asked for its models again: reset every handler."""
        for handler in self.registry.handlers():
            handler.reinitialize()

    async def handles(self, uri: str) -> bool:
        try:
            return await self.router.find_handler(uri) is not None
        except RoutingError:
            return False

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    async def diagnostics_received(
        self, kind: DiagnosticKind, uri: str, diagnostics: list[RawDiagnostic]
    ) -> RouteOutcome:
        return await self.router.route(
            kind, uri, diagnostics, self._classifier_config, self._format_options
        )

    def submit_diagnostics(
        self, kind: DiagnosticKind, uri: str, diagnostics: list[RawDiagnostic]
    ) -> None:
        """Queue a batch for routing; batches are routed one at a time, in order."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            loop = asyncio.get_running_loop()
            self._worker = loop.create_task(self._route_queued(self._queue))
        self._queue.put_nowait((kind, uri, diagnostics))

    async def drain(self) -> None:
        """Wait until every submitted batch has been routed."""
        if self._queue is not None:
            await self._queue.join()

    async def _route_queued(self, queue: asyncio.Queue[_Batch]) -> None:
        while True:
            kind, uri, diagnostics = await queue.get()
            try:
                await self.diagnostics_received(kind, uri, diagnostics)
            except Exception as e:
                logger.error("diagnostics_batch_failed", uri=uri, error=str(e))
            finally:
                queue.task_done()

    def config_diagnostics_received(
        self, config_file: str, diagnostics: list[RawDiagnostic]
    ) -> None:
        """Store diagnostics about a project config file; empty clears them."""
        uri = self._session.to_resource(config_file)
        converted = [
            NormalizedDiagnostic(
                range=to_zero_based_range(raw.start, raw.end),
                message=raw.text,
                severity=classify(raw.code, raw.category, self._classifier_config),
                code=raw.code,
            )
            for raw in diagnostics
        ]
        self.manager.config_file_diagnostics_received(uri, converted)
        logger.debug("config_diagnostics_received", uri=uri, count=len(converted))

    # -------------------------------------------------------------------------
    # Reload
    # -------------------------------------------------------------------------

    def manifest_changed(self, event: ManifestEvent) -> None:
        if event.change is ManifestChange.CHANGED:
            self.reload_trigger.content_changed()
            return
        # package.json deletion leaves the project layout intact
        if event.change is ManifestChange.DELETED and event.path.name == PACKAGE_MANIFEST_NAME:
            return
        self.reload_trigger.structure_changed()

    def create_manifest_watcher(self, workspace_root: Path) -> ManifestWatcher:
        """Watcher feeding this host with the configured manifest names."""
        return ManifestWatcher(workspace_root, self.manifest_changed, self._manifest_names)

    async def reload_projects(self) -> None:
        self.manager.reinitialize()
        await self._session.reload_projects()
        await self.trigger_all_diagnostics()

    async def trigger_all_diagnostics(self) -> None:
        for entry in self.registry.entries():
            try:
                await entry.handler.trigger_all_diagnostics()
            except Exception as e:
                logger.error("trigger_diagnostics_failed", handler=entry.id, error=str(e))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=f"tsdiag-{name}")
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            error = InternalError.unexpected(str(exc), task=task.get_name())
            logger.error("background_task_failed", **error.to_dict())

    async def wait_idle(self) -> None:
        """Wait for spawned reload/re-diagnosis tasks and queued batches."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.drain()

    def dispose(self) -> None:
        self.reload_trigger.dispose()
        for task in list(self._tasks):
            task.cancel()
        if self._worker is not None:
            self._worker.cancel()
            self._worker = None
        self._queue = None
        self.registry.clear()
        self.manager.reinitialize()
