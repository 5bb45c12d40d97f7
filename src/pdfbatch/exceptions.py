"""Custom exception hierarchy for pdfbatch."""

from __future__ import annotations


class PdfBatchError(Exception):
    """Base exception for all pdfbatch errors."""


class ConfigError(PdfBatchError):
    """Invalid configuration values in the environment or .env file."""


class MissingCallbackError(PdfBatchError, TypeError):
    """A callback-based sink was called without its callback."""


class RenderError(PdfBatchError):
    """A document of a batch failed to render.

    ``index`` is the batch position of the first document that failed; the
    engine's own exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class ResourceNotFoundError(PdfBatchError):
    """A file referenced by a document was not found in the virtual filesystem."""


class InvalidStateError(PdfBatchError):
    """Raised by a host blob constructor that rejects raw buffer input."""


class BlobConstructionError(PdfBatchError):
    """Neither blob construction path produced a binary object."""


class DeliveryError(PdfBatchError):
    """Window or delivery-surface misuse."""
