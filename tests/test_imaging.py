"""Tests for the image codec and the in-memory clipboard."""

import base64
from typing import Any

import pytest
from PIL import Image

from cbfilter.clipboard import MemoryClipboard, SystemClipboard
from cbfilter.definitions import ClipboardType
from cbfilter.errors import ClipboardError
from cbfilter.imaging import PNG_DATA_URL_PREFIX, base64_to_image, image_to_base64_png, to_data_url


class TestImaging:
    """Tests for PNG base64 conversion."""

    def test_png_encoding_decodes_back(self) -> None:
        encoded = image_to_base64_png(Image.new("RGBA", (5, 7), (10, 20, 30, 255)))

        assert base64.b64decode(encoded).startswith(b"\x89PNG")
        decoded = base64_to_image(encoded)
        assert decoded is not None
        assert decoded.size == (5, 7)
        assert decoded.getpixel((0, 0)) == (10, 20, 30, 255)

    def test_data_url(self) -> None:
        assert to_data_url("QUJD") == PNG_DATA_URL_PREFIX + "QUJD"
        assert to_data_url("") == ""

    @pytest.mark.parametrize("value", ["", "%%%not-base64", base64.b64encode(b"not an image").decode("ascii")])
    def test_undecodable_data(self, value: str) -> None:
        assert base64_to_image(value) is None


class TestMemoryClipboard:
    """Tests for MemoryClipboard."""

    def test_detect_type(self) -> None:
        assert MemoryClipboard().detect_type() == ClipboardType.NONE
        assert MemoryClipboard(text="hi").detect_type() == ClipboardType.TEXT
        assert MemoryClipboard(image=Image.new("RGB", (1, 1))).detect_type() == ClipboardType.IMAGE

    def test_read_image_returns_copy(self) -> None:
        clipboard = MemoryClipboard(image=Image.new("RGB", (2, 2)))

        copy = clipboard.read_image()
        copy.close()

        assert clipboard.image is not None
        assert clipboard.image.size == (2, 2)

    def test_write_replaces_and_releases_previous_image(self, image_factory: Any) -> None:
        previous = image_factory()
        clipboard = MemoryClipboard(image=previous)

        clipboard.write_text("done")

        assert previous.close_count == 1
        assert clipboard.image is None
        assert clipboard.read_text() == "done"
        assert clipboard.detect_type() == ClipboardType.TEXT


def test_system_clipboard_refuses_image_writes() -> None:
    with pytest.raises(ClipboardError):
        SystemClipboard().write_image(Image.new("RGB", (1, 1)))
