"""Conversion between image handles and base64 PNG text.

Image handles are Pillow images. ``close()`` is the release primitive and
the caller owns every handle returned from here.
"""

import base64
import binascii
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .logging import get_logger

logger = get_logger(__name__)

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def image_to_base64_png(image: Image.Image) -> str:
    """Encode ``image`` as base64 PNG.

    Raises:
        OSError: If Pillow cannot write the image as PNG
        ValueError: If the image mode cannot be stored as PNG
    """
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    data = buffer.getvalue()
    if not data:
        raise ValueError("PNG encoder produced no data")
    return base64.b64encode(data).decode("ascii")


def to_data_url(image_b64: str) -> str:
    return PNG_DATA_URL_PREFIX + image_b64 if image_b64 else ""


def base64_to_image(image_b64: str) -> Optional[Image.Image]:
    """Decode base64 image data into a loaded image, or None on failure."""
    try:
        raw = base64.b64decode(image_b64)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Invalid base64 image data: {e}")
        return None
    if not raw:
        return None

    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Cannot decode image data: {e}")
        return None
    return image
