"""
hybridimg.image
===============

Multi-channel image container and canvas helpers.
"""

from .planes import ChannelImage, as_channel_image
from .ops import half_size, blank_canvas, draw_image

__all__ = [
    "ChannelImage",
    "as_channel_image",
    "half_size",
    "blank_canvas",
    "draw_image",
]
