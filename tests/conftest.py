"""Shared fixtures: scripted render engines and an in-memory delivery surface.

Scripted engines take a dict definition:
    {"chunks": [b"..", ...], "delay": 0.01, "pages": [...], "fail": exc,
     "log": list}
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator

import pytest

from pdfbatch.config import Settings
from pdfbatch.delivery.document import Document
from pdfbatch.delivery.surface import HostCapabilities
from pdfbatch.render.engine import RenderEngine


class ScriptedEngine(RenderEngine):
    """Emits pre-set chunks with an optional delay before each one."""

    async def stream(self) -> AsyncIterator[bytes]:
        script = self.definition
        log = script.get("log")
        for chunk in script.get("chunks", []):
            await asyncio.sleep(script.get("delay", 0))
            yield chunk
        if script.get("fail") is not None:
            raise script["fail"]
        self.pages = script.get("pages")
        if log is not None:
            log.append(("rendered", script.get("name")))


class RecordingFactory:
    """Engine factory that remembers every engine it built."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.engines: list[ScriptedEngine] = []

    def __call__(self, definition, fonts, vfs, options) -> ScriptedEngine:
        self.calls.append((definition, fonts, vfs, options))
        engine = ScriptedEngine(definition, fonts, vfs, options)
        self.engines.append(engine)
        return engine


class FakeSurface:
    """Delivery surface that records window operations in a shared log."""

    def __init__(self, log: list | None = None) -> None:
        self.log = log if log is not None else []
        self.blobs: list = []
        self._next = 0

    def open_blank_window(self) -> str:
        self._next += 1
        handle = f"window-{self._next}"
        self.log.append(("open", handle))
        return handle

    def navigate(self, window: Any, url: str) -> None:
        self.log.append(("navigate", window, url))

    def close_window(self, window: Any) -> None:
        self.log.append(("close", window))

    def create_object_url(self, blob) -> str:
        self.blobs.append(blob)
        return f"blob:test/{len(self.blobs)}"

    def cleanup(self) -> None:
        self.log.append(("cleanup",))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(download_dir=tmp_path / "downloads")


@pytest.fixture
def make_document(factory, settings):
    def _make(definition, host: HostCapabilities | None = None, **kwargs) -> Document:
        return Document(
            definition,
            engine_factory=factory,
            host=host or HostCapabilities(),
            settings=settings,
            **kwargs,
        )
    return _make
