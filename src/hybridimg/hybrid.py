# src/hybridimg/hybrid.py
"""Hybrid images: low-pass of one image plus high-pass of another."""
from __future__ import annotations

import logging
from typing import Union

import numpy as np

from hybridimg.conv2d.kernels import gaussian_kernel
from hybridimg.conv2d.spatial import convolve_inplace
from hybridimg.errors import DimensionMismatch
from hybridimg.image.planes import ChannelImage, as_channel_image

__all__ = [
    "make_low_pass",
    "make_high_pass",
    "make_hybrid",
    "display_high_pass",
    "HIGH_PASS_OFFSET",
]

logger = logging.getLogger(__name__)

ImageLike = Union[ChannelImage, np.ndarray]

# Shift that brings zero-centred high-pass values into a viewable range.
HIGH_PASS_OFFSET = 0.5


def make_low_pass(image: ImageLike, sigma: float, *, workers: int = 1) -> ChannelImage:
    """
    Gaussian-blurred copy of `image`.

    Every channel of a clone is convolved in place with
    ``gaussian_kernel(sigma)``; `image` itself is not modified.
    """
    low = as_channel_image(image).clone()
    kernel = gaussian_kernel(sigma)
    logger.debug("low-pass sigma=%g kernel=%s image=%s", sigma, kernel.shape, low.shape)
    for plane in low.planes:
        convolve_inplace(plane, kernel, workers=workers)
    return low


def make_high_pass(image: ImageLike, sigma: float, *, workers: int = 1) -> ChannelImage:
    """
    Fine detail of `image`: ``image - make_low_pass(image, sigma)``.

    The result is centred near zero and may be negative.
    """
    img = as_channel_image(image)
    return img.subtract(make_low_pass(img, sigma, workers=workers))


def make_hybrid(
    low_image: ImageLike,
    low_sigma: float,
    high_image: ImageLike,
    high_sigma: float,
    *,
    workers: int = 1,
) -> ChannelImage:
    """
    Fuse the coarse structure of `low_image` with the detail of `high_image`.

    Parameters
    ----------
    low_image, high_image : ChannelImage or ndarray
        Must have the same height, width and channel count.
    low_sigma, high_sigma : float
        Gaussian sigmas of the low-pass and high-pass filters.
    workers : int
        Threads per convolution.

    Returns
    -------
    ChannelImage
        ``make_low_pass(low_image, low_sigma) + make_high_pass(high_image, high_sigma)``

    Raises
    ------
    DimensionMismatch
        If the two images differ in shape. Checked before any filtering.
    InvalidArgument
        If a sigma is not positive.
    """
    low_img = as_channel_image(low_image)
    high_img = as_channel_image(high_image)
    if low_img.shape != high_img.shape:
        raise DimensionMismatch(
            f"hybrid inputs differ in shape: {low_img.shape} vs {high_img.shape}"
        )

    low = make_low_pass(low_img, low_sigma, workers=workers)
    high = make_high_pass(high_img, high_sigma, workers=workers)
    return low.add(high)


def display_high_pass(high_pass: ImageLike) -> ChannelImage:
    """Return `high_pass` shifted by +0.5 per channel for viewing."""
    return as_channel_image(high_pass).add_scalar(HIGH_PASS_OFFSET)
