"""Popup window opened ahead of an asynchronous render.

Hosts that block script-opened windows only allow them while handling a
user gesture, so the window is opened synchronously when the sink is
called and filled in once the PDF is ready.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

from pdfbatch.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class WindowState(Enum):
    OPENED = "opened"
    POPULATED = "populated"
    CLOSED = "closed"


class PopupWindow:
    def __init__(self, surface: Any) -> None:
        self._surface = surface
        self.handle = surface.open_blank_window()
        self.state = WindowState.OPENED
        logger.debug("Opened blank window %r", self.handle)

    def populate(self, url: str) -> None:
        if self.state is not WindowState.OPENED:
            raise DeliveryError(f"Cannot populate a window that is {self.state.value}")
        self._surface.navigate(self.handle, url)
        self.state = WindowState.POPULATED

    def close(self) -> None:
        """Close the window unless it already shows content."""
        if self.state is not WindowState.OPENED:
            return
        self._surface.close_window(self.handle)
        self.state = WindowState.CLOSED
        logger.debug("Closed window %r", self.handle)

    @contextmanager
    def guard(self) -> Iterator[PopupWindow]:
        """Close the window if anything inside the block fails, then re-raise."""
        try:
            yield self
        except BaseException:
            self.close()
            raise
