"""Batch render coordinator.

Runs one engine per document definition concurrently and folds the streamed
chunks back into a single buffer ordered by batch index.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pdfbatch.exceptions import RenderError
from pdfbatch.fork import fork
from pdfbatch.models import AssembledArtifact, FontSet, RenderOptions, RenderTask, VirtualFS
from pdfbatch.render.engine import EngineFactory

logger = logging.getLogger(__name__)


def normalize_batch(batch: Any) -> list:
    """A list or tuple is a batch; anything else is a single definition."""
    if isinstance(batch, (list, tuple)):
        return list(batch)
    return [batch]


def _freeze(mapping: Optional[Mapping]) -> Mapping:
    """Read-only copy of *mapping*, nested mappings included."""
    if mapping is None:
        return MappingProxyType({})
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, Mapping) else value
        for key, value in mapping.items()
    })


class RenderCoordinator:
    """Fan a batch out to the render engine and assemble the artifact."""

    def __init__(
        self,
        engine_factory: EngineFactory,
        fonts: Optional[FontSet] = None,
        vfs: Optional[VirtualFS] = None,
    ) -> None:
        self._engine_factory = engine_factory
        self.fonts = _freeze(fonts)
        self.vfs = _freeze(vfs)

    async def render(
        self,
        batch: Any,
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
    ) -> AssembledArtifact:
        """Render every definition of *batch* and return the assembled artifact.

        Raises:
            ValueError: If the batch is empty.
            RenderError: If any document fails; sibling renders are cancelled
                and their partial output is discarded.
        """
        definitions = normalize_batch(batch)
        if not definitions:
            raise ValueError("Cannot render an empty batch")
        options = RenderOptions.coerce(options)

        loop = asyncio.get_running_loop()
        finished: asyncio.Future = loop.create_future()
        tasks: list[Optional[RenderTask]] = [None] * len(definitions)

        logger.info("Rendering batch of %d document(s)", len(definitions))

        def start(index: int):
            def operation(done, fail) -> None:
                engine = self._engine_factory(definitions[index], self.fonts, self.vfs, options)
                task = RenderTask(index=index, engine=engine)
                tasks[index] = task

                def on_end(pages: Any) -> None:
                    task.pages = pages
                    logger.debug("Document %d finished: %d chunk(s)", index, len(task.chunks))
                    done(task)

                engine.on("data", task.chunks.append)
                engine.on("end", on_end)
                engine.on("error", fail)
                engine.end()
            return operation

        def on_complete(results: list[tuple]) -> None:
            if not finished.done():
                finished.set_result([result[0] for result in results])

        def on_error(index: int, exc: BaseException) -> None:
            logger.error("Document %d failed to render: %s", index, exc)
            self._cancel(tasks)
            if not finished.done():
                error = RenderError(f"Document {index} failed to render: {exc}", index=index)
                error.__cause__ = exc
                finished.set_exception(error)

        fork([start(i) for i in range(len(definitions))], on_complete, on_error)

        try:
            completed: list[RenderTask] = await finished
        except asyncio.CancelledError:
            self._cancel(tasks)
            raise

        buffer = b"".join(chunk for task in completed for chunk in task.chunks)
        logger.info("Assembled %d bytes from %d document(s)", len(buffer), len(completed))
        return AssembledArtifact(buffer=buffer, pages=completed[0].pages)

    @staticmethod
    def _cancel(tasks: list[Optional[RenderTask]]) -> None:
        for task in tasks:
            if task is not None:
                task.engine.cancel()
