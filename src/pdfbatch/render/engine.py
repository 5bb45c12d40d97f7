"""Streaming render engine contract.

An engine is built from one document definition plus the batch's shared
fonts, virtual filesystem and options. Callers subscribe to its events and
then call ``end()``; the engine emits zero or more ``data`` chunks, then a
single ``end`` carrying page metadata, or a single ``error``.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Optional

from pdfbatch.models import FontSet, RenderOptions, VirtualFS

logger = logging.getLogger(__name__)

EVENTS = ("data", "end", "error")

EngineFactory = Callable[[Any, FontSet, VirtualFS, RenderOptions], "RenderEngine"]


class RenderEngine(ABC):
    """Base class for engines that stream a rendered document as bytes."""

    def __init__(
        self,
        definition: Any,
        fonts: FontSet,
        vfs: VirtualFS,
        options: RenderOptions,
    ) -> None:
        self.definition = definition
        self.fonts = fonts
        self.vfs = vfs
        self.options = options
        self.pages: Any = None
        self._handlers: dict[str, list[Callable[..., Any]]] = {name: [] for name in EVENTS}
        self._task: Optional[asyncio.Task] = None

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown engine event: {event!r}")
        self._handlers[event].append(handler)

    def end(self) -> None:
        """Finalize input and start producing output on the running loop."""
        if self._task is not None:
            raise RuntimeError("Engine already finalized")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def finished(self) -> bool:
        return self._task is not None and self._task.done()

    @abstractmethod
    def stream(self) -> AsyncIterator[bytes]:
        """Yield the rendered bytes; set ``self.pages`` before returning."""

    def _emit(self, event: str, *args: Any) -> None:
        for handler in self._handlers[event]:
            handler(*args)

    async def _run(self) -> None:
        try:
            async for chunk in self.stream():
                self._emit("data", chunk)
            self._emit("end", self.pages)
        except asyncio.CancelledError:
            logger.debug("Render cancelled")
            raise
        except Exception as exc:
            logger.debug("Render failed: %s", exc)
            self._emit("error", exc)
