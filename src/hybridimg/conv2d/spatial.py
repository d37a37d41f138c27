# src/hybridimg/conv2d/spatial.py
"""Spatial 2D convolution with zero-padded borders."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple, Union

import numpy as np
from tqdm import tqdm

from hybridimg.conv2d.kernels import KernelLike, flip_kernel
from hybridimg.errors import InvalidArgument
from hybridimg.image.planes import ChannelImage, as_channel_image

__all__ = [
    "convolve",
    "convolve_inplace",
    "convolve_image",
    "row_bands",
]

logger = logging.getLogger(__name__)

ArrayLike = np.ndarray


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _ensure_plane(x: ArrayLike) -> ArrayLike:
    x = np.asarray(x)
    if x.ndim != 2:
        raise InvalidArgument(f"Expected 2D plane for conv, got shape {x.shape}")
    return x


def _work_dtype(plane: ArrayLike) -> np.dtype:
    # accumulate at the sample precision; integer planes go to float64
    if np.issubdtype(plane.dtype, np.floating):
        return plane.dtype
    return np.dtype(np.float64)


def row_bands(height: int, workers: int) -> List[Tuple[int, int]]:
    """
    Split ``range(height)`` into at most `workers` contiguous (start, stop)
    bands of near-equal size.
    """
    if workers < 1:
        raise InvalidArgument(f"workers must be >= 1, got {workers}")
    n = max(1, min(workers, height))
    edges = np.linspace(0, height, n + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def _convolve_band(
    padded: ArrayLike,
    ker_inv: ArrayLike,
    out: ArrayLike,
    start: int,
    stop: int,
) -> None:
    """
    Fill ``out[start:stop]`` from the zero-padded snapshot.

    `padded` carries ``kH - 1 - kH//2`` extra rows below and ``kH//2`` rows
    above the image (same for columns), so window row ``dy`` of output row
    ``r`` sits at padded row ``r + dy``. Contributions are accumulated in
    (dy, dx) order for every pixel, matching a per-pixel loop.
    """
    kH, kW = ker_inv.shape
    W = out.shape[1]
    acc = np.zeros((stop - start, W), dtype=out.dtype)
    for dy in range(kH):
        rows = padded[start + dy : stop + dy]
        for dx in range(kW):
            acc += ker_inv[dy, dx] * rows[:, dx : dx + W]
    out[start:stop] = acc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def convolve(
    plane: ArrayLike,
    kernel: KernelLike,
    *,
    workers: int = 1,
) -> ArrayLike:
    """
    Convolve a single-channel plane with an arbitrary 2D kernel.

    Parameters
    ----------
    plane : ndarray, shape (H, W)
        Input samples. Not modified.
    kernel : ndarray or sequence of rows, shape (kH, kW)
        Convolution weights. Any size >= 1x1; even sizes put the extra
        window cell above/left of the anchor.
    workers : int
        Number of threads. Output rows are split into disjoint bands; every
        band reads the same read-only snapshot.

    Returns
    -------
    out : ndarray, shape (H, W)
        ``out[r, c] = sum_{dy,dx} k_inv[dy, dx] * src[r - kH//2 + dy, c - kW//2 + dx]``
        where ``k_inv`` is the kernel rotated by 180 degrees and samples
        outside the plane are 0. No clipping is applied.

    Raises
    ------
    InvalidArgument
        For a non-2D plane, a malformed kernel or ``workers < 1``.
    """
    plane = _ensure_plane(plane)
    dtype = _work_dtype(plane)
    ker_inv = flip_kernel(kernel).astype(dtype, copy=False)

    # Snapshot: every read in this pass comes from `padded`.
    kH, kW = ker_inv.shape
    top, left = kH // 2, kW // 2
    bottom, right = kH - 1 - top, kW - 1 - left
    padded = np.pad(
        plane.astype(dtype, copy=True),
        ((top, bottom), (left, right)),
        mode="constant",
        constant_values=0,
    )
    padded.setflags(write=False)

    H, W = plane.shape
    out = np.empty((H, W), dtype=dtype)
    bands = row_bands(H, workers)
    logger.debug(
        "convolve plane=%dx%d kernel=%dx%d bands=%d", H, W, kH, kW, len(bands)
    )

    if len(bands) <= 1:
        _convolve_band(padded, ker_inv, out, 0, H)
        return out

    with ThreadPoolExecutor(max_workers=len(bands)) as pool:
        futures = [
            pool.submit(_convolve_band, padded, ker_inv, out, start, stop)
            for start, stop in bands
        ]
        for fut in futures:
            fut.result()
    return out


def convolve_inplace(
    plane: ArrayLike,
    kernel: KernelLike,
    *,
    workers: int = 1,
) -> None:
    """
    Convolve `plane` and write the result back into it.

    `plane` must be a writable floating-point ndarray owned by the caller.
    """
    if not isinstance(plane, np.ndarray) or not np.issubdtype(plane.dtype, np.floating):
        raise InvalidArgument("convolve_inplace needs a floating-point ndarray")
    plane[...] = convolve(plane, kernel, workers=workers)


def convolve_image(
    image: Union[ChannelImage, ArrayLike],
    kernel: KernelLike,
    *,
    workers: int = 1,
    progress: bool = False,
) -> ChannelImage:
    """
    Apply the same kernel to every channel of an image.

    Parameters
    ----------
    image : ChannelImage or ndarray (H, W) / (H, W, C)
    kernel : 2D kernel
    workers : int
        Threads per channel, see `convolve`.
    progress : bool
        Show a tqdm bar over channels.

    Returns
    -------
    ChannelImage
        New image; the input is left untouched.
    """
    img = as_channel_image(image)
    planes = tqdm(
        img.planes,
        total=img.channels,
        desc="convolve",
        unit="channel",
        disable=not progress,
    )
    return ChannelImage([convolve(p, kernel, workers=workers) for p in planes], copy=False)
