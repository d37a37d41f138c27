# src/hybridimg/image/ops.py
"""Canvas helpers: half-size reduction, blank canvas and blitting."""
from __future__ import annotations

import numpy as np
from PIL import Image

from hybridimg.errors import DimensionMismatch
from hybridimg.image.planes import ChannelImage

__all__ = [
    "half_size",
    "blank_canvas",
    "draw_image",
]


def _resize_plane(plane: np.ndarray, height: int, width: int) -> np.ndarray:
    # Pillow resamples 32-bit float ("F") images without quantizing
    im = Image.fromarray(np.ascontiguousarray(plane, dtype=np.float32))
    im = im.resize((width, height), resample=Image.Resampling.BILINEAR)
    # np.array copies: Pillow hands out a read-only buffer
    return np.array(im, dtype=np.float32).astype(plane.dtype, copy=False)


def half_size(image: ChannelImage) -> ChannelImage:
    """
    Reduce an image to half its width and height (floored, at least 1 pixel).

    Each plane is resampled independently with bilinear filtering.
    """
    h = max(1, image.height // 2)
    w = max(1, image.width // 2)
    return image.map_planes(lambda p: _resize_plane(p, h, w))


def blank_canvas(height: int, width: int, channels: int = 3, dtype=np.float32) -> ChannelImage:
    """All-zero (black) canvas."""
    return ChannelImage.zeros(height, width, channels, dtype=dtype)


def draw_image(dest: ChannelImage, src: ChannelImage, x: int, y: int) -> None:
    """
    Copy `src` into `dest` with its top-left corner at column `x`, row `y`.

    Parts of `src` falling outside `dest` are dropped. `dest` is modified in
    place.
    """
    if dest.channels != src.channels:
        raise DimensionMismatch(
            f"cannot draw {src.channels}-channel image on {dest.channels}-channel canvas"
        )

    y0, x0 = max(0, y), max(0, x)
    y1 = min(dest.height, y + src.height)
    x1 = min(dest.width, x + src.width)
    if y1 <= y0 or x1 <= x0:
        return

    for d, s in zip(dest.planes, src.planes):
        d[y0:y1, x0:x1] = s[y0 - y : y1 - y, x0 - x : x1 - x]
