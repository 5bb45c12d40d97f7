"""Command-line entry point: render HTML files into one PDF and deliver it."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from pdfbatch.config import Settings, load_settings
from pdfbatch.delivery import Document, FileSaver, HostCapabilities, WebviewSurface, create_pdf
from pdfbatch.exceptions import PdfBatchError
from pdfbatch.models import DEFAULT_CLIENT_FONTS, DownloadOptions
from pdfbatch.version import __version__

logger = logging.getLogger(__name__)

FONT_SUFFIXES = (".ttf", ".otf", ".woff", ".woff2")

STATUS_HTML = "<p style='font-family: sans-serif'>Rendering PDF&hellip;</p>"


def load_vfs(directory: Path) -> dict[str, bytes]:
    """Read every font file in *directory* into a virtual filesystem dict."""
    vfs = {}
    for path in sorted(Path(directory).iterdir()):
        if path.is_file() and path.suffix.lower() in FONT_SUFFIXES:
            vfs[path.name] = path.read_bytes()
    logger.debug("Loaded %d font file(s) from %s", len(vfs), directory)
    return vfs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfbatch",
        description="Render HTML documents into a single PDF.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="HTML files, one document each")
    parser.add_argument("-o", "--output", type=Path, help="Where to save the PDF")
    sink = parser.add_mutually_exclusive_group()
    sink.add_argument("--base64", action="store_true", help="Print the PDF as base64")
    sink.add_argument("--data-url", action="store_true", help="Print the PDF as a data URL")
    sink.add_argument("--open", action="store_true", help="Preview the PDF in a window")
    sink.add_argument("--print", action="store_true", help="Preview and print the PDF")
    parser.add_argument("--fonts-dir", type=Path, help="Directory holding the Roboto font files to embed")
    parser.add_argument("--env-file", type=Path, help="Alternate .env file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _read_definitions(paths: list[Path]) -> list[dict]:
    return [
        {"title": path.stem, "content": path.read_text(encoding="utf-8")}
        for path in paths
    ]


async def deliver(doc: Document, args: argparse.Namespace, settings: Settings) -> None:
    """Run the sink selected on the command line."""
    if args.base64:
        await doc.get_base64(print)
    elif args.data_url:
        await doc.get_data_url(print)
    elif args.open:
        await doc.open()
    elif args.print:
        await doc.print()
    else:
        filename = args.output.name if args.output else settings.default_filename
        await doc.download(DownloadOptions(
            filename=filename,
            on_complete=lambda: logger.info("Saved %s", filename),
        ))


def _run_preview(doc: Document, args: argparse.Namespace, settings: Settings,
                 surface: WebviewSurface) -> None:
    """Run a window sink inside pywebview's event thread."""
    import webview

    # pywebview needs a window before start(); it doubles as a status window.
    webview.create_window(title="pdfbatch", html=STATUS_HTML, width=320, height=120)

    failure: Optional[PdfBatchError] = None

    def worker() -> None:
        nonlocal failure
        try:
            asyncio.run(deliver(doc, args, settings))
        except PdfBatchError as e:
            failure = e

    try:
        webview.start(worker, debug=settings.debug)
    finally:
        surface.cleanup()

    # The worker runs on pywebview's thread; re-raise here so main() sees it.
    if failure is not None:
        raise failure


def main(argv: Optional[list[str]] = None) -> int:
    """Launch the pdfbatch command."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except PdfBatchError as e:
        print(f"pdfbatch: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if args.output:
        settings.download_dir = args.output.resolve().parent

    surface = WebviewSurface() if (args.open or args.print) else None
    host = HostCapabilities(
        surface=surface,
        save=FileSaver(settings.download_dir).save,
    )
    vfs = load_vfs(args.fonts_dir) if args.fonts_dir else {}

    doc = create_pdf(
        _read_definitions(args.inputs),
        host,
        fonts=DEFAULT_CLIENT_FONTS if vfs else {},
        vfs=vfs,
        settings=settings,
    )
    if doc is None:
        logger.error("PDF creation is not supported in this environment")
        return 1

    try:
        if surface is not None:
            _run_preview(doc, args, settings, surface)
        else:
            asyncio.run(deliver(doc, args, settings))
    except PdfBatchError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
