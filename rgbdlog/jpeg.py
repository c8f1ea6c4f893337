"""Decoding of JPEG colour images into reversed-channel pixel arrays."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image


class JPEGDecodeError(ValueError):
    """Raised when bytes cannot be decoded as a JPEG image."""


def decode_jpeg(data: bytes) -> np.ndarray:
    """Decode JPEG bytes into an (height, width, 3) uint8 array.

    The channel order of the decoded image is reversed, so a JPEG stored
    as RGB comes back as BGR and vice versa.
    """
    try:
        with Image.open(io.BytesIO(bytes(data))) as image:
            image_format = image.format
            pixels = np.asarray(image.convert("RGB"), dtype=np.uint8)
    except (OSError, ValueError, SyntaxError) as exc:
        raise JPEGDecodeError(f"JPEG decoding error: {exc}") from exc
    if image_format != "JPEG":
        raise JPEGDecodeError(f"expected JPEG data, got {image_format}")
    return np.ascontiguousarray(pixels[:, :, ::-1])