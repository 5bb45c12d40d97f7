"""
Generate a sample three-document batch into output/.

Usage:
    source venv/bin/activate
    python scripts/generate_sample.py

Renders three HTML documents concurrently with headless Chromium and
saves them as one PDF, then prints the page metadata of the first one.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pdfbatch import DownloadOptions, HostCapabilities, create_pdf
from pdfbatch.config import load_settings
from pdfbatch.delivery import FileSaver

OUTPUT_DIR = Path(__file__).resolve().parents[1] / "output"

STYLES = """
h1 { font-size: 20pt; border-bottom: 1pt solid black; }
p { font-size: 11pt; line-height: 1.4; }
"""

DOCUMENTS = [
    {
        "title": "Cover",
        "styles": STYLES,
        "content": "<h1>Quarterly Summary</h1><p>Prepared for the board.</p>",
    },
    {
        "title": "Figures",
        "styles": STYLES,
        "content": "<h1>Figures</h1>" + "".join(
            f"<p>Line item {n}: {n * 125} units</p>" for n in range(1, 60)
        ),
        "page_size": "A4",
    },
    {
        "title": "Appendix",
        "styles": STYLES,
        "content": "<h1>Appendix</h1><p>Methodology notes.</p>",
        "margins": {"top": "1in", "bottom": "1in", "left": "1in", "right": "1in"},
    },
]


async def generate() -> None:
    settings = load_settings()
    doc = create_pdf(
        DOCUMENTS,
        HostCapabilities(save=FileSaver(OUTPUT_DIR).save),
        fonts={},
        settings=settings,
    )

    await doc.download(DownloadOptions(filename="sample-batch.pdf"))
    await doc.get_pages(lambda pages: print(f"   First document pages: {pages}"))


def main():
    OUTPUT_DIR.mkdir(exist_ok=True)

    print("=" * 60)
    print(f"Rendering {len(DOCUMENTS)} documents")
    print("=" * 60)

    asyncio.run(generate())

    print("\n" + "=" * 60)
    print(f"Done! File in: {OUTPUT_DIR / 'sample-batch.pdf'}")
    print("=" * 60)


if __name__ == "__main__":
    main()
