"""Host module - handler registry, routing, and reload on manifest changes."""

from tsdiag.host.host import DiagnosticsHost
from tsdiag.host.registry import (
    AnalysisSession,
    HandlerEntry,
    HandlerKind,
    HandlerRegistry,
    LanguageDescription,
    LanguageHandler,
    LanguageProvider,
    PluginDescription,
    TrackedDocument,
)
from tsdiag.host.reload import DebouncedReloadTrigger, ReloadState
from tsdiag.host.router import DiagnosticRouter, RouteOutcome
from tsdiag.host.watcher import ManifestChange, ManifestEvent, ManifestWatcher

__all__ = [
    "AnalysisSession",
    "DebouncedReloadTrigger",
    "DiagnosticRouter",
    "DiagnosticsHost",
    "HandlerEntry",
    "HandlerKind",
    "HandlerRegistry",
    "LanguageDescription",
    "LanguageHandler",
    "LanguageProvider",
    "ManifestChange",
    "ManifestEvent",
    "ManifestWatcher",
    "PluginDescription",
    "ReloadState",
    "RouteOutcome",
    "TrackedDocument",
]
