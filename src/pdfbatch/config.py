"""Runtime settings read from the environment / .env."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pdfbatch.exceptions import ConfigError
from pdfbatch.models import DEFAULT_FILENAME

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _default_download_dir() -> Path:
    return Path.home() / "Downloads"


@dataclass
class Settings:
    download_dir: Path = field(default_factory=_default_download_dir)
    default_filename: str = DEFAULT_FILENAME
    chunk_size: int = DEFAULT_CHUNK_SIZE
    debug: bool = False


def _is_truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_chunk_size(raw: str) -> int:
    try:
        size = int(raw)
    except ValueError:
        raise ConfigError(f"PDFBATCH_CHUNK_SIZE must be an integer, got {raw!r}") from None
    if size <= 0:
        raise ConfigError(f"PDFBATCH_CHUNK_SIZE must be positive, got {size}")
    return size


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from the process environment.

    A ``.env`` file (or *env_file*) is read first via python-dotenv; values
    already present in the environment win.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    settings = Settings()

    download_dir = os.environ.get("PDFBATCH_DOWNLOAD_DIR", "")
    if download_dir:
        settings.download_dir = Path(download_dir).expanduser()

    filename = os.environ.get("PDFBATCH_DEFAULT_FILENAME", "").strip()
    if filename:
        settings.default_filename = filename

    chunk_size = os.environ.get("PDFBATCH_CHUNK_SIZE", "").strip()
    if chunk_size:
        settings.chunk_size = _parse_chunk_size(chunk_size)

    settings.debug = _is_truthy(os.environ.get("PDFBATCH_DEBUG", "")) or _is_truthy(
        os.environ.get("DEBUG", "")
    )

    logger.debug("Loaded settings: %s", settings)
    return settings
