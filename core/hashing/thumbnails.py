# Path: core/hashing/thumbnails.py
# Purpose: Encode bounded-size preview bytes for image clips.
# Layer: core/hashing.
# Details: Thumbnails are opaque to the rest of the core; only their size bound matters.

from __future__ import annotations

import io
from typing import Optional

from PIL import Image


def thumbnailize(image: Image.Image, size: int = 256, fmt: str = "JPEG", quality: int = 85) -> bytes:
    """Return ``image`` shrunk to fit a ``size`` x ``size`` box, encoded as ``fmt``."""

    preview = image.convert("RGB")
    preview.thumbnail((size, size))
    buffer = io.BytesIO()
    preview.save(buffer, format=fmt, quality=quality)
    return buffer.getvalue()


def open_thumbnail(data: bytes) -> Optional[Image.Image]:
    """Decode thumbnail bytes, returning None for empty or unreadable payloads."""

    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.copy()
    except OSError:
        return None
