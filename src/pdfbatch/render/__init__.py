"""Render package: batch coordination and the bundled Playwright engine."""

from __future__ import annotations

from pdfbatch.render.coordinator import RenderCoordinator, normalize_batch
from pdfbatch.render.engine import RenderEngine
from pdfbatch.render.pdf_engine import PlaywrightEngine

__all__ = [
    "RenderCoordinator",
    "RenderEngine",
    "PlaywrightEngine",
    "normalize_batch",
]
