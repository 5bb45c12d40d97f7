"""Binary-object construction with a fallback for hosts that reject raw buffers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from pdfbatch.exceptions import BlobConstructionError, InvalidStateError
from pdfbatch.models import PDF_MEDIA_TYPE, Blob

logger = logging.getLogger(__name__)

BlobConstructor = Callable[[list, str], Blob]

_PROBE = b"%PDF-"


class BlobStrategy(Enum):
    DIRECT = "direct"          # hand the raw buffer to the host
    BYTE_ARRAY = "byte_array"  # copy into a bytearray view first


def _byte_array_storage(buffer: bytes) -> bytearray:
    view = memoryview(bytearray(buffer))
    return view.obj


class BlobFactory:
    """Builds PDF blobs through a host constructor.

    The construction strategy is detected once, on first use, and cached.
    """

    def __init__(self, create_blob: BlobConstructor = Blob.from_parts) -> None:
        self._create_blob = create_blob
        self._strategy: Optional[BlobStrategy] = None

    @property
    def strategy(self) -> BlobStrategy:
        if self._strategy is None:
            self._strategy = self._detect()
        return self._strategy

    def _detect(self) -> BlobStrategy:
        try:
            self._create_blob([_PROBE], PDF_MEDIA_TYPE)
        except InvalidStateError:
            logger.info("Host rejects raw buffers; using byte-array blob construction")
            return BlobStrategy.BYTE_ARRAY
        except Exception as exc:
            raise BlobConstructionError("Could not generate blob") from exc
        return BlobStrategy.DIRECT

    def build(self, buffer: bytes) -> Blob:
        """Return a PDF blob for *buffer*.

        Raises:
            BlobConstructionError: If no construction path succeeds.
        """
        if self.strategy is BlobStrategy.DIRECT:
            try:
                return self._create_blob([buffer], PDF_MEDIA_TYPE)
            except InvalidStateError:
                logger.info("Raw buffer rejected; switching to byte-array blob construction")
                self._strategy = BlobStrategy.BYTE_ARRAY
            except Exception as exc:
                raise BlobConstructionError("Could not generate blob") from exc

        try:
            return self._create_blob([_byte_array_storage(buffer)], PDF_MEDIA_TYPE)
        except Exception as exc:
            raise BlobConstructionError("Could not generate blob") from exc
