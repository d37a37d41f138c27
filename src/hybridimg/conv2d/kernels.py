# src/hybridimg/conv2d/kernels.py
"""2D convolution kernels: Gaussian generator and kernel validation."""
from __future__ import annotations

import logging
import math
from typing import Sequence, Union

import numpy as np

from hybridimg.errors import InvalidArgument

__all__ = [
    "gaussian_kernel_size",
    "gaussian_kernel",
    "validate_kernel",
    "flip_kernel",
]

logger = logging.getLogger(__name__)

ArrayLike = np.ndarray
KernelLike = Union[np.ndarray, Sequence[Sequence[float]]]


# ---------------------------------------------------------------------------
# Gaussian kernels
# ---------------------------------------------------------------------------

def _check_sigma(sigma: float) -> float:
    try:
        s = float(sigma)
    except (TypeError, ValueError):
        raise InvalidArgument(f"sigma must be a number, got {sigma!r}") from None
    if not math.isfinite(s) or s <= 0:
        raise InvalidArgument(f"sigma must be positive and finite, got {sigma!r}")
    return s


def gaussian_kernel_size(sigma: float) -> int:
    """
    Side length of the Gaussian kernel generated for `sigma`.

    The size is ``floor(8 * sigma + 1)``, bumped to the next odd number when
    even. Note this is wider than the common ``6 * sigma`` rule; kernel sizes
    elsewhere in the package depend on it.
    """
    s = _check_sigma(sigma)
    size = int(math.floor(8.0 * s + 1.0))
    if size % 2 == 0:
        size += 1
    return size


def gaussian_kernel(sigma: float, dtype: Union[np.dtype, str] = np.float64) -> ArrayLike:
    """
    Square, odd-sized, normalized 2D Gaussian kernel.

    Parameters
    ----------
    sigma : float
        Standard deviation in pixels. Must be > 0.
    dtype : numpy dtype or str
        Output dtype.

    Returns
    -------
    k : ndarray, shape (size, size)
        Weights ``exp(-(x**2 + y**2) / (2 * sigma**2))`` centred on
        ``size // 2`` and divided by their sum.

    Raises
    ------
    InvalidArgument
        If sigma is not a positive finite number.
    """
    s = _check_sigma(sigma)
    size = gaussian_kernel_size(s)
    half = size // 2

    offsets = np.arange(size, dtype=np.float64) - half
    x, y = np.meshgrid(offsets, offsets, indexing="ij")
    k = np.exp(-(x ** 2 + y ** 2) / (2.0 * s * s))
    k /= k.sum()

    logger.debug("gaussian kernel sigma=%g size=%d", s, size)
    return k.astype(dtype, copy=False)


# ---------------------------------------------------------------------------
# Kernel checks
# ---------------------------------------------------------------------------

def validate_kernel(kernel: KernelLike) -> ArrayLike:
    """
    Return `kernel` as a 2D float array, or raise InvalidArgument.

    Accepts an ndarray or a sequence of rows. Rows must all have the width of
    the first row and both dimensions must be at least 1.
    """
    if isinstance(kernel, np.ndarray):
        arr = kernel
    else:
        try:
            rows = [list(r) for r in kernel]
        except TypeError:
            raise InvalidArgument("kernel must be a 2D array or a sequence of rows") from None
        if not rows:
            raise InvalidArgument("kernel has no rows")
        width = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != width:
                raise InvalidArgument(
                    f"ragged kernel: row {i} has width {len(row)}, expected {width}"
                )
        try:
            arr = np.asarray(rows, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"kernel weights must be numbers: {exc}") from None

    if arr.ndim != 2:
        raise InvalidArgument(f"Expected 2D kernel, got shape {arr.shape}")
    if arr.shape[0] < 1 or arr.shape[1] < 1:
        raise InvalidArgument(f"kernel dimensions must be >= 1, got {arr.shape}")
    if arr.dtype == np.bool_:
        # same as nested lists of True/False: weights 1.0 / 0.0
        arr = arr.astype(np.float64)
    if not np.issubdtype(arr.dtype, np.number) or np.iscomplexobj(arr):
        raise InvalidArgument(f"kernel must hold real numbers, got dtype {arr.dtype}")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgument("kernel contains non-finite weights")

    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr


def flip_kernel(kernel: KernelLike) -> ArrayLike:
    """
    Rotate a kernel by 180 degrees: ``out[i, j] = k[kH-1-i, kW-1-j]``.

    Applying the flipped kernel as a sliding window turns correlation into
    true convolution.
    """
    k = validate_kernel(kernel)
    return np.ascontiguousarray(k[::-1, ::-1])
