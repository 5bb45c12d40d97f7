"""Jinja2 environment and HTML page assembly for the Playwright engine."""

from __future__ import annotations

import base64
import binascii
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader

from pdfbatch.exceptions import ResourceNotFoundError
from pdfbatch.models import FONT_VARIANTS, FontSet, VirtualFS

logger = logging.getLogger(__name__)

if getattr(sys, "frozen", False):
    TEMPLATE_DIR = Path(sys._MEIPASS) / "pdfbatch" / "render" / "templates" / "html"
else:
    TEMPLATE_DIR = Path(__file__).resolve().parent / "templates" / "html"

DOCUMENT_TEMPLATE = "document.html"

# variant -> (font-weight, font-style)
_VARIANT_STYLES = {
    "normal": ("normal", "normal"),
    "bold": ("bold", "normal"),
    "italics": ("normal", "italic"),
    "bolditalics": ("bold", "italic"),
}

# suffix -> (MIME type, CSS format hint)
_FONT_FORMATS = {
    ".ttf": ("font/ttf", "truetype"),
    ".otf": ("font/otf", "opentype"),
    ".woff": ("font/woff", "woff"),
    ".woff2": ("font/woff2", "woff2"),
}


@dataclass(frozen=True)
class FontFace:
    family: str
    src: str
    format: str
    weight: str
    style: str


def read_vfs_file(vfs: VirtualFS, name: str) -> bytes:
    """Return the bytes stored under *name*.

    String payloads are treated as base64, the way bundled font packs ship.
    """
    if name not in vfs:
        raise ResourceNotFoundError(f"File '{name}' not found in virtual file system")
    payload = vfs[name]
    if isinstance(payload, str):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ResourceNotFoundError(f"File '{name}' is not valid base64") from exc
    return bytes(payload)


def data_url(payload: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def build_font_faces(fonts: FontSet, vfs: VirtualFS) -> list[FontFace]:
    """Build @font-face entries for every font variant present in *vfs*.

    Variants whose file is missing are skipped with a warning so the
    browser falls back to its own fonts.
    """
    faces = []
    for family, variants in fonts.items():
        for variant in FONT_VARIANTS:
            name = variants.get(variant)
            if not name:
                continue
            try:
                payload = read_vfs_file(vfs, name)
            except ResourceNotFoundError as exc:
                logger.warning("Skipping %s %s: %s", family, variant, exc)
                continue
            mime_type, css_format = _FONT_FORMATS.get(
                Path(name).suffix.lower(), ("font/ttf", "truetype")
            )
            weight, style = _VARIANT_STYLES[variant]
            faces.append(FontFace(
                family=family,
                src=data_url(payload, mime_type),
                format=css_format,
                weight=weight,
                style=style,
            ))
    return faces


def normalize_definition(definition: Any) -> dict:
    """Accept an HTML string or a dict with a ``content`` key."""
    if isinstance(definition, str):
        return {"content": definition}
    if isinstance(definition, Mapping):
        if "content" not in definition:
            raise ValueError("Document definition needs a 'content' entry")
        return dict(definition)
    raise TypeError(
        f"Document definition must be a str or mapping, not {type(definition).__name__}"
    )


def setup_jinja_env() -> Environment:
    """Create and configure the Jinja2 template environment."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,  # content is caller-supplied HTML
    )
    return env


def build_document_html(definition: Any, fonts: FontSet, vfs: VirtualFS) -> str:
    """Render a document definition into a complete HTML page."""
    doc = normalize_definition(definition)
    font = doc.get("font")
    if font is None and fonts:
        font = next(iter(fonts))
    template = setup_jinja_env().get_template(DOCUMENT_TEMPLATE)
    return template.render(
        title=doc.get("title", ""),
        content=doc["content"],
        styles=doc.get("styles", ""),
        font=font,
        font_faces=build_font_faces(fonts, vfs),
    )
