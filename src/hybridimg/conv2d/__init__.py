"""
hybridimg.conv2d
================

2D convolution for single-channel planes and multi-channel images.

Submodules
----------
- :mod:`hybridimg.conv2d.kernels` : Gaussian kernel generator, kernel checks.
- :mod:`hybridimg.conv2d.spatial` : Zero-padded spatial convolution.
"""

from .kernels import (
    gaussian_kernel,
    gaussian_kernel_size,
    validate_kernel,
    flip_kernel,
)
from .spatial import convolve, convolve_inplace, convolve_image

__all__ = [
    # kernels
    "gaussian_kernel",
    "gaussian_kernel_size",
    "validate_kernel",
    "flip_kernel",
    # convolution
    "convolve",
    "convolve_inplace",
    "convolve_image",
]
