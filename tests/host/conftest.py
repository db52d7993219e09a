"""Fixtures for host tests: a fake analysis backend and a virtual clock."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from tsdiag.host.registry import TrackedDocument

TS_URI = "file:///p/a.ts"
JS_URI = "file:///p/b.js"
VUE_URI = "file:///p/App.vue"


class FakeSession:
    """In-memory analysis backend."""

    def __init__(self, documents: list[TrackedDocument] | None = None) -> None:
        self.documents = {d.uri: d for d in documents or []}
        self.requested: list[list[str]] = []
        self.reloads = 0
        self.lookup_error: Exception | None = None
        self.calls: list[str] = []

    async def get_document(self, uri: str) -> TrackedDocument | None:
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.documents.get(uri)

    def to_resource(self, path: str) -> str:
        return "file://" + path

    def tracked_uris(self) -> list[str]:
        return list(self.documents)

    async def reload_projects(self) -> None:
        self.reloads += 1
        self.calls.append("reload_projects")

    async def request_diagnostics(self, uris: list[str]) -> None:
        self.requested.append(list(uris))
        self.calls.append("request_diagnostics")


@dataclass
class FakeTimer:
    when: float
    callback: Callable[[], object]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Virtual clock with asyncio's ``call_later`` signature."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(when=self.now + delay, callback=callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in sorted(self.timers, key=lambda t: t.when):
            if not timer.cancelled and not timer.fired and timer.when <= self.now:
                timer.fired = True
                timer.callback()

    @property
    def armed(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]


@pytest.fixture
def session() -> FakeSession:
    """Backend tracking one TypeScript, one JavaScript and one Vue document."""
    return FakeSession(
        [
            TrackedDocument(uri=TS_URI, language_id="typescript"),
            TrackedDocument(uri=JS_URI, language_id="javascript"),
            TrackedDocument(uri=VUE_URI, language_id="vue"),
        ]
    )


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
