"""pdfbatch: render batches of documents into one PDF and deliver it."""

from __future__ import annotations

from pdfbatch.delivery import Document, HostCapabilities, create_pdf
from pdfbatch.models import AssembledArtifact, Blob, DownloadOptions, RenderOptions
from pdfbatch.version import __version__

__all__ = [
    "AssembledArtifact",
    "Blob",
    "Document",
    "DownloadOptions",
    "HostCapabilities",
    "RenderOptions",
    "__version__",
    "create_pdf",
]
