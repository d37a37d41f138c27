"""
hybridimg.io
============

Image read/write and dtype conversion helpers (Pillow based).
"""

from .image import (
    read_image,
    write_image,
    as_float32,
    as_uint8,
)

__all__ = [
    "read_image",
    "write_image",
    "as_float32",
    "as_uint8",
]
