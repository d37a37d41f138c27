"""
hybridimg
Spatial convolution, hybrid images and scale pyramids.
"""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("hybridimg")
except _metadata.PackageNotFoundError:
    # Not installed (dev mode)
    __version__ = "0.0.0.dev0"

from . import conv2d, image, io  # noqa: E402
from .errors import HybridImageError, InvalidArgument, DimensionMismatch  # noqa: E402
from .hybrid import (  # noqa: E402
    make_low_pass,
    make_high_pass,
    make_hybrid,
    display_high_pass,
)
from .pyramid import generate_scaled_images  # noqa: E402

__all__ = [
    "conv2d",
    "image",
    "io",
    "HybridImageError",
    "InvalidArgument",
    "DimensionMismatch",
    "make_low_pass",
    "make_high_pass",
    "make_hybrid",
    "display_high_pass",
    "generate_scaled_images",
    "__version__",
]
