from pathlib import Path

import numpy as np

from hybridimg.image import ChannelImage
from hybridimg.io.image import (
    read_image,
    write_image,
    as_float32,
    as_uint8,
)


def test_dtype_conversions():
    # uint8 → float32 → uint8 roundtrip
    arr_u8 = np.array([[0, 128, 255]], dtype=np.uint8)
    arr_f = as_float32(arr_u8)
    assert arr_f.dtype == np.float32
    assert arr_f.min() >= 0.0
    assert arr_f.max() <= 1.0 + 1e-6

    arr_u8_rt = as_uint8(arr_f)
    assert arr_u8_rt.dtype == np.uint8
    np.testing.assert_array_equal(arr_u8_rt, arr_u8)


def test_as_uint8_clips_out_of_range():
    arr = np.array([[-0.3, 0.5, 1.7, np.nan]])
    np.testing.assert_array_equal(as_uint8(arr), [[0, 128, 255, 0]])


def test_image_roundtrip_small(tmp_path: Path):
    h, w = 8, 8
    x = np.linspace(0.0, 1.0, h * w, dtype=np.float32).reshape(h, w)
    rgb = ChannelImage.from_array(np.stack([x, x**2, x[::-1]], axis=-1))

    out_path = tmp_path / "nested" / "test.png"
    write_image(out_path, rgb)

    y = read_image(out_path, mode="RGB")
    assert y.shape == (h, w, 3)
    assert y.dtype == np.float32
    np.testing.assert_allclose(y.to_array(), rgb.to_array(), atol=1.0 / 255.0)


def test_grayscale_roundtrip(tmp_path: Path):
    gray = ChannelImage([np.linspace(0.0, 1.0, 20).reshape(4, 5)])
    out_path = tmp_path / "gray.png"
    write_image(out_path, gray)

    y = read_image(out_path, mode="keep")
    assert y.channels == 1
    np.testing.assert_allclose(y.plane(0), gray.plane(0), atol=1.0 / 255.0)
