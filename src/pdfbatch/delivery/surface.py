"""Host collaborators: preview windows, object URLs and saving to disk."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from pdfbatch.models import Blob

logger = logging.getLogger(__name__)


class DeliverySurface(Protocol):
    def open_blank_window(self) -> Any: ...

    def navigate(self, window: Any, url: str) -> None: ...

    def close_window(self, window: Any) -> None: ...

    def create_object_url(self, blob: Blob) -> str: ...


class WebviewSurface:
    """Preview windows backed by pywebview.

    Object URLs are ``file://`` URIs of temporary PDF files. Call
    ``cleanup()`` once the windows are gone; otherwise the files are
    removed when the surface is garbage collected or at interpreter exit.
    """

    def __init__(self, title: str = "PDF Preview", width: int = 900,
                 height: int = 700) -> None:
        self.title = title
        self.width = width
        self.height = height
        self._temp_dir: Optional[Path] = None
        self._finalizer: Optional[weakref.finalize] = None

    def open_blank_window(self) -> Any:
        import webview

        return webview.create_window(
            title=self.title,
            html="",
            width=self.width,
            height=self.height,
        )

    def navigate(self, window: Any, url: str) -> None:
        window.load_url(url)

    def close_window(self, window: Any) -> None:
        window.destroy()

    def create_object_url(self, blob: Blob) -> str:
        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix="pdfbatch-"))
            self._finalizer = weakref.finalize(
                self, shutil.rmtree, self._temp_dir, ignore_errors=True,
            )
        fd, path = tempfile.mkstemp(dir=self._temp_dir, suffix=".pdf")
        with os.fdopen(fd, "wb") as f:
            f.write(blob.data)
        logger.debug("Wrote %d bytes to %s", blob.size, path)
        return Path(path).as_uri()

    def cleanup(self) -> None:
        if self._finalizer is not None:
            self._finalizer()
            self._finalizer = None
            self._temp_dir = None


class FileSaver:
    """Save-to-disk collaborator used by ``download``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def save(self, blob: Blob, filename: str) -> Path:
        """Write *blob* as *filename* under the download directory.

        Only the final path component of *filename* is used. The file is
        written to a temp file first and renamed into place.
        """
        target = self.directory / Path(filename).name
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".tmp_{target.name}_")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(blob.data)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info("Saved %s (%d bytes)", target, blob.size)
        return target


@dataclass(frozen=True)
class HostCapabilities:
    """What the hosting environment can do, injected into ``create_pdf``."""
    object_reflection: bool = True
    surface: Optional[DeliverySurface] = None
    save: Optional[Callable[[Blob, str], Any]] = None
    create_blob: Callable[[list, str], Blob] = field(default=Blob.from_parts)

    @property
    def can_create_pdf(self) -> bool:
        return self.object_reflection
