# tests/test_hybrid.py
import numpy as np
import pytest

from hybridimg.conv2d import convolve, gaussian_kernel
from hybridimg.errors import DimensionMismatch, InvalidArgument
from hybridimg.hybrid import display_high_pass, make_high_pass, make_hybrid, make_low_pass
from hybridimg.image import ChannelImage


def test_low_pass_blurs_every_channel(rgb_image):
    sigma = 1.0
    low = make_low_pass(rgb_image, sigma)

    assert low.shape == rgb_image.shape
    k = gaussian_kernel(sigma)
    for c in range(3):
        np.testing.assert_allclose(low.plane(c), convolve(rgb_image.plane(c), k))
    # blur reduces variance away from the borders
    inner = (slice(6, -6), slice(6, -6))
    assert low.plane(0)[inner].std() < rgb_image.plane(0)[inner].std()


def test_low_pass_leaves_input_alone(rgb_image):
    before = rgb_image.to_array()
    make_low_pass(rgb_image, 2.0)
    np.testing.assert_array_equal(rgb_image.to_array(), before)


def test_high_pass_is_residual(rgb_image):
    sigma = 1.5
    high = make_high_pass(rgb_image, sigma)
    low = make_low_pass(rgb_image, sigma)
    np.testing.assert_allclose(high.to_array(), rgb_image.to_array() - low.to_array())
    assert high.to_array().min() < 0.0


def test_high_pass_of_constant_interior_is_zero():
    img = ChannelImage([np.full((30, 30), 0.5)])
    high = make_high_pass(img, 1.0)
    # far enough from the zero-padded border
    np.testing.assert_allclose(high.plane(0)[5:-5, 5:-5], 0.0, atol=1e-12)


@pytest.mark.parametrize("sigma", [0.5, 1.0, 2.5])
def test_identity_hybrid(rgb_image, sigma):
    out = make_hybrid(rgb_image, sigma, rgb_image, sigma)
    np.testing.assert_allclose(out.to_array(), rgb_image.to_array(), atol=1e-12)


def test_identity_hybrid_float32(rng):
    img = ChannelImage.from_array(rng.random((20, 16, 3)).astype(np.float32))
    out = make_hybrid(img, 2.0, img, 2.0)
    assert out.dtype == np.float32
    np.testing.assert_allclose(out.to_array(), img.to_array(), atol=1e-5)


def test_hybrid_is_low_plus_high(rng):
    a = ChannelImage.from_array(rng.random((18, 22, 3)))
    b = ChannelImage.from_array(rng.random((18, 22, 3)))
    out = make_hybrid(a, 2.0, b, 1.0)
    expected = make_low_pass(a, 2.0).to_array() + make_high_pass(b, 1.0).to_array()
    np.testing.assert_allclose(out.to_array(), expected)


def test_hybrid_accepts_arrays_and_workers(rng):
    a = rng.random((15, 12, 3))
    b = rng.random((15, 12, 3))
    single = make_hybrid(a, 1.0, b, 0.5)
    threaded = make_hybrid(a, 1.0, b, 0.5, workers=4)
    np.testing.assert_array_equal(single.to_array(), threaded.to_array())


def test_hybrid_dimension_mismatch(rng):
    a = ChannelImage.from_array(rng.random((10, 10, 3)))
    b = ChannelImage.from_array(rng.random((10, 12, 3)))
    with pytest.raises(DimensionMismatch):
        make_hybrid(a, 1.0, b, 1.0)
    with pytest.raises(DimensionMismatch):
        make_hybrid(a, 1.0, ChannelImage.from_array(rng.random((10, 10))), 1.0)


@pytest.mark.parametrize("sigma", [0.0, -2.0])
def test_bad_sigma(rgb_image, sigma):
    with pytest.raises(InvalidArgument):
        make_low_pass(rgb_image, sigma)
    with pytest.raises(InvalidArgument):
        make_hybrid(rgb_image, 1.0, rgb_image, sigma)


def test_display_high_pass_shifts_by_half(rgb_image):
    high = make_high_pass(rgb_image, 1.0)
    before = high.to_array()

    shown = display_high_pass(high)

    np.testing.assert_array_equal(shown.to_array(), before + 0.5)
    np.testing.assert_array_equal(high.to_array(), before)
