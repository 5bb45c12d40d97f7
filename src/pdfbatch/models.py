"""Data models shared by the render and delivery layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

PDF_MEDIA_TYPE = "application/pdf"
DATA_URL_PREFIX = f"data:{PDF_MEDIA_TYPE};base64,"
DEFAULT_FILENAME = "file.pdf"

# family -> variant (normal, bold, italics, bolditalics) -> vfs file name
FontSet = Mapping[str, Mapping[str, str]]
# vfs file name -> raw bytes or base64 text
VirtualFS = Mapping[str, Union[bytes, str]]

FONT_VARIANTS = ("normal", "bold", "italics", "bolditalics")

DEFAULT_CLIENT_FONTS: dict[str, dict[str, str]] = {
    "Roboto": {
        "normal": "Roboto-Regular.ttf",
        "bold": "Roboto-Medium.ttf",
        "italics": "Roboto-Italic.ttf",
        "bolditalics": "Roboto-Italic.ttf",
    },
}


@dataclass
class RenderOptions:
    """Options for one render call.

    Only ``auto_print`` is interpreted here; everything else travels in
    ``extra`` and is handed to the engine untouched.
    """
    auto_print: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, options: Union[RenderOptions, Mapping[str, Any], None]) -> RenderOptions:
        """Build RenderOptions from None, an instance, or a plain mapping.

        Mappings may use either ``auto_print`` or ``autoPrint``.
        """
        if options is None:
            return cls()
        if isinstance(options, RenderOptions):
            return cls(auto_print=options.auto_print, extra=dict(options.extra))
        extra = dict(options)
        auto_print = extra.pop("auto_print", None)
        legacy = extra.pop("autoPrint", None)
        if auto_print is None:
            auto_print = legacy
        return cls(auto_print=bool(auto_print), extra=extra)

    def with_auto_print(self, auto_print: bool) -> RenderOptions:
        return RenderOptions(auto_print=auto_print, extra=dict(self.extra))


@dataclass
class RenderTask:
    """One in-flight render within a batch."""
    index: int
    engine: Any                                      # exclusively owned RenderEngine
    chunks: list[bytes] = field(default_factory=list)
    pages: Any = None                                # set once by the "end" event


@dataclass(frozen=True)
class AssembledArtifact:
    """Output of a completed batch.

    ``buffer`` holds every task's bytes in batch-index order; ``pages`` is
    the metadata of the first document only.
    """
    buffer: bytes
    pages: Any = None

    def __len__(self) -> int:
        return len(self.buffer)


@dataclass(frozen=True)
class Blob:
    data: bytes
    content_type: str = PDF_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_parts(cls, parts: list, content_type: str = PDF_MEDIA_TYPE) -> Blob:
        """Default host blob constructor: concatenate buffer-like parts."""
        return cls(data=b"".join(bytes(part) for part in parts), content_type=content_type)


@dataclass
class DownloadOptions:
    filename: Optional[str] = None
    on_complete: Optional[Callable[[], None]] = None
