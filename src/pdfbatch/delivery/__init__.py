"""Delivery package: sinks, blob construction and host collaborators."""

from __future__ import annotations

from pdfbatch.delivery.blob import BlobFactory, BlobStrategy
from pdfbatch.delivery.document import Document, create_pdf
from pdfbatch.delivery.popup import PopupWindow, WindowState
from pdfbatch.delivery.surface import (
    DeliverySurface,
    FileSaver,
    HostCapabilities,
    WebviewSurface,
)

__all__ = [
    "BlobFactory",
    "BlobStrategy",
    "DeliverySurface",
    "Document",
    "FileSaver",
    "HostCapabilities",
    "PopupWindow",
    "WebviewSurface",
    "WindowState",
    "create_pdf",
]
