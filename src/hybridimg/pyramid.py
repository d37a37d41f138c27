# src/hybridimg/pyramid.py
"""Side-by-side visualisation of an image at successive half scales."""
from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple, Union

import numpy as np

from hybridimg.errors import InvalidArgument
from hybridimg.image.ops import blank_canvas, draw_image, half_size
from hybridimg.image.planes import ChannelImage, as_channel_image

__all__ = [
    "scaled_images",
    "pyramid_layout",
    "generate_scaled_images",
]

logger = logging.getLogger(__name__)

Reducer = Callable[[ChannelImage], ChannelImage]
Blitter = Callable[[ChannelImage, ChannelImage, int, int], None]


def scaled_images(
    image: Union[ChannelImage, np.ndarray],
    levels: int = 4,
    reduce: Reducer = half_size,
) -> List[ChannelImage]:
    """
    ``[clone(image), reduce(...), reduce(reduce(...)), ...]`` with `levels`
    entries in total.
    """
    if levels < 1:
        raise InvalidArgument(f"levels must be >= 1, got {levels}")
    current = as_channel_image(image).clone()
    out = [current]
    for _ in range(levels - 1):
        current = reduce(current)
        out.append(current)
    return out


def pyramid_layout(sizes: Sequence[Tuple[int, int]]) -> Tuple[int, int, List[Tuple[int, int]]]:
    """
    Bottom-aligned left-to-right placement for (height, width) sizes.

    Returns
    -------
    canvas_height, canvas_width, offsets
        `offsets` holds the (x, y) top-left corner of every entry.
    """
    canvas_h = max((h for h, _ in sizes), default=0)
    canvas_w = sum(w for _, w in sizes)
    offsets = []
    x = 0
    for h, w in sizes:
        offsets.append((x, canvas_h - h))
        x += w
    return canvas_h, canvas_w, offsets


def generate_scaled_images(
    image: Union[ChannelImage, np.ndarray],
    levels: int = 4,
    reduce: Reducer = half_size,
    blit: Blitter = draw_image,
) -> ChannelImage:
    """
    Draw `image` and its successive reductions on one canvas.

    With the default 4 levels the canvas shows scales 1, 1/2, 1/4 and 1/8,
    left to right, each touching the bottom edge. The canvas width is the sum
    of the widths and its height the tallest image.

    Parameters
    ----------
    image : ChannelImage or ndarray
        Source image; not modified.
    levels : int
        Number of images on the canvas (including the original).
    reduce : callable
        Half-size operator, ``reduce(img) -> img``.
    blit : callable
        Drawing primitive, ``blit(canvas, img, x, y)``.
    """
    images = scaled_images(image, levels=levels, reduce=reduce)
    canvas_h, canvas_w, offsets = pyramid_layout([(im.height, im.width) for im in images])
    logger.debug("pyramid canvas=%dx%d levels=%d", canvas_h, canvas_w, len(images))

    first = images[0]
    canvas = blank_canvas(canvas_h, canvas_w, first.channels, dtype=first.dtype)
    for im, (x, y) in zip(images, offsets):
        blit(canvas, im, x, y)
    return canvas
