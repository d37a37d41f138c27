# hybridimg/io/image.py
"""
Image I/O utilities using Pillow."""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Union, Optional

import numpy as np
from PIL import Image

from hybridimg.errors import InvalidArgument
from hybridimg.image.planes import ChannelImage, as_channel_image

ArrayLike = np.ndarray
PathLike = Union[str, Path]
ImageMode = Literal["L", "RGB", "RGBA", "keep"]

__all__ = [
    "read_image",
    "write_image",
    "as_float32",
    "as_uint8",
]


def _pathify(path: PathLike) -> str:
    return str(Path(path))


def read_image(
    path: PathLike,
    *,
    mode: ImageMode = "RGB",
) -> ChannelImage:
    """
    Read an image via Pillow into float32 planes.

    Parameters
    ----------
    path : str or Path
        Input image path.
    mode : {"L", "RGB", "RGBA", "keep"}, default="RGB"
        - "keep": use the file's native mode.
        - otherwise: convert via Pillow's .convert(mode).

    Returns
    -------
    img : ChannelImage
        One plane per channel, values scaled to [0, 1] for 8-bit files.
    """
    p = _pathify(path)
    with Image.open(p) as im:
        if mode != "keep":
            im = im.convert(mode)
        arr = np.asarray(im)

    return ChannelImage.from_array(as_float32(arr))


def as_float32(x: ArrayLike) -> np.ndarray:
    """
    Convert image-like array to float32 in a reasonable normalized range.

    Rules
    -----
    - bool: 0.0 / 1.0
    - uint8: scaled to [0, 1] by dividing 255
    - other unsigned ints: scaled by max value to [0, 1]
    - signed ints: scaled by max(|min|, |max|) to [-1, 1]
    - floats: cast to float32 without rescaling
    """
    arr = np.asarray(x)

    if arr.dtype == np.bool_:
        return arr.astype(np.float32)

    if np.issubdtype(arr.dtype, np.floating):
        return arr.astype(np.float32, copy=False)

    if arr.dtype == np.uint8:
        return (arr.astype(np.float32) / 255.0).astype(np.float32)

    if np.issubdtype(arr.dtype, np.unsignedinteger):
        info = np.iinfo(arr.dtype)
        return (arr.astype(np.float32) / float(info.max)).astype(np.float32)

    if np.issubdtype(arr.dtype, np.signedinteger):
        info = np.iinfo(arr.dtype)
        scale = float(max(abs(info.min), abs(info.max)))
        return (arr.astype(np.float32) / scale).astype(np.float32)

    return arr.astype(np.float32)


def as_uint8(x: ArrayLike) -> np.ndarray:
    """
    Convert a float array in [0, 1] to uint8 for deterministic saving.

    Values outside [0, 1] are clipped (hybrid and high-pass images may
    overshoot). NaNs become 0.
    """
    arr = np.asarray(x)

    if arr.dtype == np.uint8:
        return arr.copy()

    arr_f = np.nan_to_num(arr.astype(np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    arr_f = np.clip(arr_f, 0.0, 1.0) * 255.0
    return np.rint(arr_f).astype(np.uint8)


def write_image(
    path: PathLike,
    data: Union[ChannelImage, ArrayLike],
    *,
    mode: Optional[str] = None,
) -> None:
    """
    Save an image via Pillow with deterministic uint8 conversion.

    Parameters
    ----------
    path : str or Path
        Output file path (extension decides format). Parent folders are
        created.
    data : ChannelImage or ndarray
        Float samples in [0, 1].
    mode : str or None
        Pillow image mode. If None, deduced from the channel count:
        1 → "L", 3 → "RGB", 4 → "RGBA".
    """
    img = as_channel_image(data)
    arr = img.to_array()

    c = img.channels
    if c == 1:
        img_mode = "L"
    elif c == 3:
        img_mode = "RGB"
    elif c == 4:
        img_mode = "RGBA"
    else:
        raise InvalidArgument(f"Unsupported channel count {c}")

    if mode is not None:
        img_mode = mode

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    arr_u8 = as_uint8(arr)
    pil = Image.fromarray(arr_u8)
    if pil.mode != img_mode:
        pil = pil.convert(img_mode)
    pil.save(_pathify(out))
