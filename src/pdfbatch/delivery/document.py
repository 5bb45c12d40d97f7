"""Document handle: renders a batch and delivers it to one of several sinks.

Every sink validates its arguments synchronously, then schedules the work on
the running event loop and returns the ``asyncio.Task``. Results reach the
caller only through the callback (or the save/window collaborators); await
the task to observe completion or failure.
"""

from __future__ import annotations

import asyncio
import base64
import functools
import logging
from typing import Any, Callable, Coroutine, Mapping, Optional, Union

from pdfbatch.config import Settings, load_settings
from pdfbatch.delivery.blob import BlobFactory
from pdfbatch.delivery.popup import PopupWindow
from pdfbatch.delivery.surface import FileSaver, HostCapabilities
from pdfbatch.exceptions import DeliveryError, MissingCallbackError
from pdfbatch.models import (
    DATA_URL_PREFIX,
    DEFAULT_CLIENT_FONTS,
    AssembledArtifact,
    DownloadOptions,
    FontSet,
    RenderOptions,
    VirtualFS,
)
from pdfbatch.render.coordinator import RenderCoordinator
from pdfbatch.render.engine import EngineFactory

logger = logging.getLogger(__name__)

OptionsArg = Union[RenderOptions, Mapping[str, Any], None]


def _require_callback(sink: str, callback: Any) -> None:
    if not callable(callback):
        raise MissingCallbackError(f"{sink} is an async method and needs a callback argument")


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Delivery %s failed: %s", task.get_name(), exc)


class Document:
    """One render batch plus its delivery sinks."""

    def __init__(
        self,
        definition: Any,
        fonts: Optional[FontSet] = None,
        vfs: Optional[VirtualFS] = None,
        *,
        engine_factory: EngineFactory,
        host: Optional[HostCapabilities] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.definition = definition
        self.host = host or HostCapabilities()
        self.settings = settings or Settings()
        self._coordinator = RenderCoordinator(
            engine_factory,
            fonts if fonts is not None else DEFAULT_CLIENT_FONTS,
            vfs or {},
        )
        self._blobs = BlobFactory(self.host.create_blob)

    # ── Internals ─────────────────────────────────────────────────────

    async def _create_doc(self, options: OptionsArg = None) -> AssembledArtifact:
        return await self._coordinator.render(self.definition, options)

    def _spawn(self, name: str,
               make_work: Callable[[], Coroutine[Any, Any, Any]]) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        task = loop.create_task(make_work(), name=name)
        task.add_done_callback(_log_task_failure)
        return task

    # ── Data sinks ────────────────────────────────────────────────────

    def get_buffer(self, callback: Optional[Callable[[bytes], Any]] = None,
                   options: OptionsArg = None) -> asyncio.Task:
        _require_callback("get_buffer", callback)

        async def work() -> None:
            artifact = await self._create_doc(options)
            callback(artifact.buffer)

        return self._spawn("get_buffer", work)

    def get_base64(self, callback: Optional[Callable[[str], Any]] = None,
                   options: OptionsArg = None) -> asyncio.Task:
        _require_callback("get_base64", callback)

        async def work() -> None:
            artifact = await self._create_doc(options)
            callback(base64.b64encode(artifact.buffer).decode("ascii"))

        return self._spawn("get_base64", work)

    def get_data_url(self, callback: Optional[Callable[[str], Any]] = None,
                     options: OptionsArg = None) -> asyncio.Task:
        _require_callback("get_data_url", callback)

        async def work() -> None:
            artifact = await self._create_doc(options)
            callback(DATA_URL_PREFIX + base64.b64encode(artifact.buffer).decode("ascii"))

        return self._spawn("get_data_url", work)

    def get_pages(self, callback: Optional[Callable[[Any], Any]] = None,
                  options: OptionsArg = None) -> asyncio.Task:
        """Render and pass only the first document's page metadata."""
        _require_callback("get_pages", callback)

        async def work() -> None:
            artifact = await self._create_doc(options)
            callback(artifact.pages)

        return self._spawn("get_pages", work)

    # ── Download ──────────────────────────────────────────────────────

    def download(self, options: Optional[DownloadOptions] = None) -> asyncio.Task:
        """Render and hand the PDF to the host's save collaborator.

        ``options.filename`` defaults to the configured default filename;
        ``options.on_complete`` is called with no arguments after saving.
        """
        options = options or DownloadOptions()
        filename = options.filename or self.settings.default_filename
        save = self.host.save or FileSaver(self.settings.download_dir).save

        async def work() -> None:
            artifact = await self._create_doc()
            blob = self._blobs.build(artifact.buffer)
            save(blob, filename)
            if options.on_complete is not None:
                options.on_complete()

        return self._spawn("download", work)

    # ── Window sinks ──────────────────────────────────────────────────

    def open(self, options: OptionsArg = None) -> asyncio.Task:
        """Preview the PDF in a new window."""
        return self._open_window("open", options, auto_print=False)

    def print(self, options: OptionsArg = None) -> asyncio.Task:
        """Preview the PDF in a new window and ask the viewer to print it."""
        return self._open_window("print", options, auto_print=True)

    def _open_window(self, sink: str, options: OptionsArg, auto_print: bool) -> asyncio.Task:
        surface = self.host.surface
        if surface is None:
            raise DeliveryError(f"{sink} needs a delivery surface that can open windows")
        render_options = RenderOptions.coerce(options).with_auto_print(auto_print)

        # Open before any awaiting; popup blockers only allow windows
        # opened synchronously from the triggering call.
        window = PopupWindow(surface)
        with window.guard():
            task = self._spawn(sink, functools.partial(
                self._populate_window, window, surface, render_options,
            ))
        # Covers a task cancelled before its first step, when the body never runs.
        task.add_done_callback(lambda _: window.close())
        return task

    async def _populate_window(self, window: PopupWindow, surface: Any,
                               options: RenderOptions) -> None:
        with window.guard():
            artifact = await self._create_doc(options)
            blob = self._blobs.build(artifact.buffer)
            window.populate(surface.create_object_url(blob))


def create_pdf(
    definition: Any,
    host: Optional[HostCapabilities] = None,
    *,
    fonts: Optional[FontSet] = None,
    vfs: Optional[VirtualFS] = None,
    engine_factory: Optional[EngineFactory] = None,
    settings: Optional[Settings] = None,
) -> Optional[Document]:
    """Create a Document, or return None when the host cannot support one."""
    host = host or HostCapabilities()
    if not host.can_create_pdf:
        logger.warning("Host environment does not support PDF creation")
        return None

    if settings is None:
        settings = load_settings()
    if engine_factory is None:
        from pdfbatch.render.pdf_engine import PlaywrightEngine

        engine_factory = functools.partial(PlaywrightEngine, chunk_size=settings.chunk_size)

    return Document(
        definition,
        fonts,
        vfs,
        engine_factory=engine_factory,
        host=host,
        settings=settings,
    )
