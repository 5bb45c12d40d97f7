"""Playwright-based render engine that streams PDF bytes."""

from __future__ import annotations

import asyncio
import io
import logging
import os
import sys
from typing import Any, AsyncIterator, Iterator, Optional

from pdfbatch.config import DEFAULT_CHUNK_SIZE
from pdfbatch.models import FontSet, RenderOptions, VirtualFS
from pdfbatch.render.engine import RenderEngine
from pdfbatch.render.filters import build_document_html, normalize_definition

logger = logging.getLogger(__name__)

# When running as a PyInstaller bundle, tell Playwright where to find
# the bundled Chromium browser (installed with PLAYWRIGHT_BROWSERS_PATH=0).
if getattr(sys, "frozen", False):
    os.environ.setdefault("PLAYWRIGHT_BROWSERS_PATH", "0")

MARGINS_DEFAULT = {
    "top": "0.5in",
    "bottom": "0.5in",
    "left": "0.5in",
    "right": "0.5in",
}

DEFAULT_PAGE_SIZE = "Letter"

AUTO_PRINT_JS = "this.print({bUI: true, bSilent: false, bShrinkToFit: true});"


async def render_to_pdf(
    html_string: str,
    *,
    margins: Optional[dict] = None,
    page_size: str | dict = DEFAULT_PAGE_SIZE,
    pdf_options: Optional[dict] = None,
) -> bytes:
    """Render an HTML string to PDF bytes via headless Chromium (Playwright).

    Args:
        html_string: Complete HTML document string.
        margins: Dict with top/bottom/left/right as CSS length strings.
        page_size: Page format string (e.g. "Letter") or dict with
            "width" and "height" CSS lengths.
        pdf_options: Extra keyword arguments for ``page.pdf`` (scale,
            landscape, ...). They override the defaults built here.

    Returns:
        The PDF document as bytes.
    """
    from playwright.async_api import async_playwright

    pdf_opts: dict[str, Any] = {
        "print_background": True,
        "margin": margins or MARGINS_DEFAULT,
    }
    if isinstance(page_size, dict):
        pdf_opts["width"] = page_size["width"]
        pdf_opts["height"] = page_size["height"]
    else:
        pdf_opts["format"] = page_size
    pdf_opts.update(pdf_options or {})

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            await page.set_content(html_string, wait_until="networkidle")
            pdf_bytes = await page.pdf(**pdf_opts)
        finally:
            await browser.close()

    logger.debug("Chromium produced %d bytes", len(pdf_bytes))
    return pdf_bytes


def describe_pages(pdf_bytes: bytes) -> list[dict]:
    """Return ``{"number", "width", "height"}`` (points) for each page."""
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(pdf_bytes))
    pages = []
    for number, page in enumerate(reader.pages, start=1):
        box = page.mediabox
        pages.append({
            "number": number,
            "width": float(box.width),
            "height": float(box.height),
        })
    return pages


def add_auto_print(pdf_bytes: bytes) -> bytes:
    """Attach document-open JavaScript that opens the print dialog."""
    from pypdf import PdfReader, PdfWriter

    writer = PdfWriter(clone_from=PdfReader(io.BytesIO(pdf_bytes)))
    writer.add_js(AUTO_PRINT_JS)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def iter_chunks(data: bytes, chunk_size: int) -> Iterator[bytes]:
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


class PlaywrightEngine(RenderEngine):
    """Renders one HTML document definition with headless Chromium.

    Recognized definition keys: ``content``, ``title``, ``styles``,
    ``font``, ``page_size``, ``margins``. ``RenderOptions.extra`` is passed
    through to ``page.pdf``.
    """

    def __init__(
        self,
        definition: Any,
        fonts: FontSet,
        vfs: VirtualFS,
        options: RenderOptions,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        super().__init__(definition, fonts, vfs, options)
        self.chunk_size = chunk_size

    async def stream(self) -> AsyncIterator[bytes]:
        doc = normalize_definition(self.definition)
        html = build_document_html(doc, self.fonts, self.vfs)
        pdf_bytes = await render_to_pdf(
            html,
            margins=doc.get("margins"),
            page_size=doc.get("page_size", DEFAULT_PAGE_SIZE),
            pdf_options=self.options.extra,
        )
        if self.options.auto_print:
            pdf_bytes = add_auto_print(pdf_bytes)
        self.pages = describe_pages(pdf_bytes)
        logger.info("Rendered %d page(s), %d bytes", len(self.pages), len(pdf_bytes))

        for chunk in iter_chunks(pdf_bytes, self.chunk_size):
            yield chunk
            await asyncio.sleep(0)
