from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from .models.party import DEFAULT_PRIMARY_COLOR

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, str, Path]

# Every 10th pixel; 4 bytes per RGBA pixel.
_SAMPLE_STRIDE = 40
_ALPHA_THRESHOLD = 128


def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, bytes):
        return Image.open(io.BytesIO(source))
    return Image.open(source)


def extract_dominant_color(source: ImageSource) -> str:
    """Average colour of the opaque pixels of an image as ``#rrggbb``.

    Pixels with alpha at or below 128 are ignored. Unreadable images and
    images without opaque pixels yield the default brand colour.
    """
    try:
        with _open(source) as im:
            data = im.convert("RGBA").tobytes()
    except (OSError, UnidentifiedImageError, ValueError):
        logger.warning("Failed to read image for colour extraction", exc_info=True)
        return DEFAULT_PRIMARY_COLOR

    r = g = b = count = 0
    for i in range(0, len(data), _SAMPLE_STRIDE):
        if data[i + 3] > _ALPHA_THRESHOLD:
            r += data[i]
            g += data[i + 1]
            b += data[i + 2]
            count += 1

    if count == 0:
        return DEFAULT_PRIMARY_COLOR

    return f"#{r // count:02x}{g // count:02x}{b // count:02x}"


def to_data_url(raw: bytes, content_type: str | None = None) -> str:
    """Inline an uploaded file as a ``data:`` URL."""
    if not content_type:
        try:
            with Image.open(io.BytesIO(raw)) as im:
                content_type = Image.MIME.get(im.format or "", "application/octet-stream")
        except (OSError, UnidentifiedImageError):
            content_type = "application/octet-stream"
    return f"data:{content_type};base64,{base64.b64encode(raw).decode('ascii')}"


__all__ = ["extract_dominant_color", "to_data_url"]
