"""Clipboard contract and adapters.

The runner only depends on the ``Clipboard`` protocol. ``MemoryClipboard``
keeps content in process and ``SystemClipboard`` talks to the desktop
clipboard through pyperclip (text) and Pillow's ImageGrab (image read).
"""

import threading
from typing import Any, Optional, Protocol

import pyperclip
from PIL import Image, ImageGrab

from .definitions import ClipboardType
from .errors import ClipboardError


class Clipboard(Protocol):
    """Typed clipboard contract.

    ``read_image`` returns a new handle owned by the caller. ``write_image``
    takes ownership of the handle only when it returns normally; on error the
    caller still owns it and must close it.
    """

    def detect_type(self) -> ClipboardType: ...

    def read_text(self) -> str: ...

    def read_image(self) -> Optional[Any]: ...

    def write_text(self, text: str) -> None: ...

    def write_image(self, image: Any) -> None: ...


class MemoryClipboard:
    """Process-local clipboard."""

    def __init__(self, text: str = "", image: Optional[Image.Image] = None) -> None:
        self._lock = threading.Lock()
        self._text = text
        self._image = image

    def detect_type(self) -> ClipboardType:
        with self._lock:
            if self._text:
                return ClipboardType.TEXT
            if self._image is not None:
                return ClipboardType.IMAGE
            return ClipboardType.NONE

    def read_text(self) -> str:
        with self._lock:
            return self._text

    def read_image(self) -> Optional[Image.Image]:
        with self._lock:
            return self._image.copy() if self._image is not None else None

    def write_text(self, text: str) -> None:
        with self._lock:
            self._clear()
            self._text = text

    def write_image(self, image: Image.Image) -> None:
        with self._lock:
            self._clear()
            self._image = image

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    def _clear(self) -> None:
        if self._image is not None:
            self._image.close()
        self._image = None
        self._text = ""


class SystemClipboard:
    """Desktop clipboard.

    Writing images is not supported by the underlying libraries and raises
    ``ClipboardError``.
    """

    def detect_type(self) -> ClipboardType:
        if self.read_text():
            return ClipboardType.TEXT
        image = self.read_image()
        if image is not None:
            image.close()
            return ClipboardType.IMAGE
        return ClipboardType.NONE

    def read_text(self) -> str:
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Cannot read clipboard text: {e}", kind="text") from e

    def read_image(self) -> Optional[Image.Image]:
        try:
            grabbed = ImageGrab.grabclipboard()
        except (OSError, NotImplementedError):
            return None
        if isinstance(grabbed, Image.Image):
            return grabbed
        return None

    def write_text(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Cannot write clipboard text: {e}", kind="text") from e

    def write_image(self, image: Any) -> None:
        raise ClipboardError("Writing images to the system clipboard is not supported", kind="image")
