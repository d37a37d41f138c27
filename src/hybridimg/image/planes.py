# src/hybridimg/image/planes.py
"""Multi-channel float image made of independent 2D planes."""
from __future__ import annotations

from typing import Callable, Iterator, Sequence, Tuple, Union

import numpy as np

from hybridimg.errors import DimensionMismatch, InvalidArgument

ArrayLike = np.ndarray

__all__ = [
    "ChannelImage",
    "as_channel_image",
]


def _as_plane(x: ArrayLike, dtype=None, copy: bool = True) -> ArrayLike:
    arr = np.array(x, copy=copy) if copy else np.asarray(x)
    if arr.ndim != 2:
        raise InvalidArgument(f"Expected 2D plane, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidArgument(f"plane must be at least 1x1, got shape {arr.shape}")
    if dtype is not None:
        arr = arr.astype(dtype, copy=False)
    elif not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr


class ChannelImage:
    """
    Ordered, fixed set of float planes sharing one (height, width).

    Arithmetic (`add`, `subtract`, `add_scalar`) is applied channel by channel
    and returns a new image. Only `set_plane` and `add_scalar_inplace` mutate.
    """

    __slots__ = ("_planes",)

    def __init__(self, planes: Sequence[ArrayLike], *, copy: bool = True):
        planes = [_as_plane(p, copy=copy) for p in planes]
        if not planes:
            raise InvalidArgument("ChannelImage needs at least one plane")
        shape = planes[0].shape
        for c, p in enumerate(planes[1:], start=1):
            if p.shape != shape:
                raise DimensionMismatch(
                    f"plane {c} has shape {p.shape}, expected {shape}"
                )
        self._planes = planes

    # -- construction -------------------------------------------------------

    @classmethod
    def from_array(cls, arr: ArrayLike, dtype=None) -> "ChannelImage":
        """Build from an (H, W) or (H, W, C) array; planes are copied."""
        a = np.asarray(arr)
        if dtype is None and not np.issubdtype(a.dtype, np.floating):
            dtype = np.float64
        if dtype is not None:
            a = a.astype(dtype)
        if a.ndim == 2:
            return cls([a])
        if a.ndim == 3:
            return cls([a[..., c] for c in range(a.shape[2])])
        raise InvalidArgument(f"Expected 2D or 3D image array, got shape {a.shape}")

    @classmethod
    def zeros(cls, height: int, width: int, channels: int = 3, dtype=np.float32) -> "ChannelImage":
        if height < 1 or width < 1 or channels < 1:
            raise InvalidArgument(
                f"image size must be positive, got {height}x{width}x{channels}"
            )
        return cls(
            [np.zeros((height, width), dtype=dtype) for _ in range(channels)],
            copy=False,
        )

    def to_array(self) -> ArrayLike:
        """Stack planes into (H, W, C); single-channel images give (H, W)."""
        if len(self._planes) == 1:
            return self._planes[0].copy()
        return np.stack(self._planes, axis=-1)

    # -- shape --------------------------------------------------------------

    @property
    def planes(self) -> Tuple[ArrayLike, ...]:
        return tuple(self._planes)

    @property
    def height(self) -> int:
        return self._planes[0].shape[0]

    @property
    def width(self) -> int:
        return self._planes[0].shape[1]

    @property
    def channels(self) -> int:
        return len(self._planes)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def dtype(self) -> np.dtype:
        return self._planes[0].dtype

    def __len__(self) -> int:
        return len(self._planes)

    def __iter__(self) -> Iterator[ArrayLike]:
        return iter(self._planes)

    def __repr__(self) -> str:
        return (
            f"ChannelImage(height={self.height}, width={self.width}, "
            f"channels={self.channels}, dtype={self.dtype})"
        )

    # -- access -------------------------------------------------------------

    def plane(self, channel: int) -> ArrayLike:
        return self._planes[channel]

    def set_plane(self, channel: int, plane: ArrayLike) -> None:
        p = _as_plane(plane)
        if p.shape != (self.height, self.width):
            raise DimensionMismatch(
                f"plane shape {p.shape} does not match image {(self.height, self.width)}"
            )
        self._planes[channel] = p

    def pixel(self, row: int, col: int) -> Tuple[float, ...]:
        return tuple(float(p[row, col]) for p in self._planes)

    # -- value semantics ----------------------------------------------------

    def clone(self) -> "ChannelImage":
        return ChannelImage(self._planes, copy=True)

    def map_planes(self, fn: Callable[[ArrayLike], ArrayLike]) -> "ChannelImage":
        """New image with `fn` applied to every plane."""
        return ChannelImage([fn(p) for p in self._planes], copy=False)

    def _check_same(self, other: "ChannelImage", op: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatch(
                f"cannot {op} images of shape {self.shape} and {other.shape}"
            )

    def add(self, other: "ChannelImage") -> "ChannelImage":
        self._check_same(other, "add")
        return ChannelImage([a + b for a, b in zip(self._planes, other.planes)], copy=False)

    def subtract(self, other: "ChannelImage") -> "ChannelImage":
        self._check_same(other, "subtract")
        return ChannelImage([a - b for a, b in zip(self._planes, other.planes)], copy=False)

    def add_scalar(self, value: float) -> "ChannelImage":
        return ChannelImage([p + p.dtype.type(value) for p in self._planes], copy=False)

    def add_scalar_inplace(self, value: float) -> "ChannelImage":
        for p in self._planes:
            p += p.dtype.type(value)
        return self

    def __add__(self, other: Union["ChannelImage", float]) -> "ChannelImage":
        if isinstance(other, ChannelImage):
            return self.add(other)
        if isinstance(other, (int, float, np.number)):
            return self.add_scalar(float(other))
        return NotImplemented

    def __sub__(self, other: Union["ChannelImage", float]) -> "ChannelImage":
        if isinstance(other, ChannelImage):
            return self.subtract(other)
        if isinstance(other, (int, float, np.number)):
            return self.add_scalar(-float(other))
        return NotImplemented


def as_channel_image(x: Union[ChannelImage, ArrayLike]) -> ChannelImage:
    """Pass ChannelImage through; wrap (H, W) / (H, W, C) arrays."""
    if isinstance(x, ChannelImage):
        return x
    return ChannelImage.from_array(x)
