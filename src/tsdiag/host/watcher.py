"""Manifest watcher using watchfiles for async filesystem monitoring.

Only project/package manifests are of interest (tsconfig.json,
jsconfig.json, package.json by default); everything under dependency or
VCS directories is filtered out before events reach the host.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog
from watchfiles import Change, awatch

from tsdiag.config.constants import DEFAULT_MANIFEST_NAMES

logger = structlog.get_logger(__name__)

# Manifests below these directories never describe the workspace's projects
IGNORED_DIRS: frozenset[str] = frozenset(
    {"node_modules", ".git", ".svn", ".hg", ".bzr", ".tsdiag"}
)


class ManifestChange(Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class ManifestEvent:
    change: ManifestChange
    path: Path

    @property
    def is_structural(self) -> bool:
        return self.change in (ManifestChange.CREATED, ManifestChange.DELETED)


_CHANGE_MAP = {
    Change.added: ManifestChange.CREATED,
    Change.modified: ManifestChange.CHANGED,
    Change.deleted: ManifestChange.DELETED,
}


def is_manifest(path: Path, manifest_names: tuple[str, ...] = DEFAULT_MANIFEST_NAMES) -> bool:
    if path.name not in manifest_names:
        return False
    return not any(part in IGNORED_DIRS for part in path.parts[:-1])


def to_manifest_event(
    change: Change,
    path: str,
    manifest_names: tuple[str, ...] = DEFAULT_MANIFEST_NAMES,
) -> ManifestEvent | None:
    """Map a raw filesystem change to a manifest event, or None if irrelevant."""
    p = Path(path)
    if not is_manifest(p, manifest_names):
        return None
    return ManifestEvent(change=_CHANGE_MAP[change], path=p)


@dataclass
class ManifestWatcher:
    """Async watcher emitting ManifestEvents for a workspace."""

    workspace_root: Path
    on_event: Callable[[ManifestEvent], None]
    manifest_names: tuple[str, ...] = DEFAULT_MANIFEST_NAMES

    _watch_task: asyncio.Task[None] | None = field(default=None, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)

    async def start(self) -> None:
        """Start watching for manifest changes."""
        if self._watch_task is not None:
            return
        self._stop_event.clear()
        self._watch_task = asyncio.create_task(self._watch_loop())
        logger.info(
            "manifest_watcher_started",
            workspace_root=str(self.workspace_root),
            manifests=list(self.manifest_names),
        )

    async def stop(self) -> None:
        """Stop watching."""
        self._stop_event.set()
        if self._watch_task is not None:
            self._watch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(self._watch_task, timeout=2.0)
            self._watch_task = None
        logger.info("manifest_watcher_stopped")

    def _filter(self, change: Change, path: str) -> bool:  # noqa: ARG002
        return is_manifest(Path(path), self.manifest_names)

    def _dispatch(self, changes: set[tuple[Change, str]]) -> None:
        # Sort for a stable order within one batch
        for change, path in sorted(changes, key=lambda c: (c[1], c[0].value)):
            event = to_manifest_event(change, path, self.manifest_names)
            if event is None:
                continue
            logger.debug("manifest_event", change=event.change.value, path=str(event.path))
            try:
                self.on_event(event)
            except Exception as e:
                logger.error("manifest_event_handler_failed", path=path, error=str(e))

    async def _watch_loop(self) -> None:
        try:
            async for changes in awatch(
                self.workspace_root,
                watch_filter=self._filter,
                stop_event=self._stop_event,
                ignore_permission_denied=True,
            ):
                self._dispatch(changes)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("manifest_watcher_error", error=str(e))
