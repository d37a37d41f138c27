# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from hybridimg.image import ChannelImage


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def rgb_image(rng) -> ChannelImage:
    """Random 3-channel float64 image, 24x30, values in [0.1, 1)."""
    arr = 0.1 + 0.9 * rng.random((24, 30, 3))
    return ChannelImage.from_array(arr)


def _write_png(path: Path, arr: np.ndarray) -> Path:
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def png_pair(tmp_path: Path, rng) -> tuple[Path, Path]:
    """Two 32x40 RGB PNG files of the same size."""
    a = (rng.random((32, 40, 3)) * 255).astype(np.uint8)
    b = (rng.random((32, 40, 3)) * 255).astype(np.uint8)
    return _write_png(tmp_path / "low.png", a), _write_png(tmp_path / "high.png", b)


@pytest.fixture
def png_square(tmp_path: Path) -> Path:
    """64x64 RGB gradient PNG."""
    x = np.linspace(20, 235, 64, dtype=np.float64)
    g = np.add.outer(x, x) / 2.0
    arr = np.stack([g, g[::-1], g.T], axis=-1).astype(np.uint8)
    return _write_png(tmp_path / "square.png", arr)
