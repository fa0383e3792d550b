import numpy as np
import pytest

from imgretrieve.color_histogram import ColorHistogram
from imgretrieve.features import EmptyImageError


def _random_image(seed=0, shape=(16, 12, 3)):
    return np.random.default_rng(seed).integers(0, 256, shape, dtype=np.uint8)


def test_extract_shape_and_peak():
    extractor = ColorHistogram(8, True)
    feats = extractor.extract(_random_image())
    assert feats.shape == (8**3,)
    assert feats.dtype == np.float32
    assert feats.max() == pytest.approx(1.0)
    assert feats.min() >= 0.0
    assert extractor.feature_dimension == 8 * 3
    assert extractor.method_name == "ColorHistogram"


def test_uniform_image_has_single_bin():
    img = np.full((6, 6, 3), (40, 150, 220), np.uint8)
    feats = ColorHistogram(4, True).extract(img)
    assert np.count_nonzero(feats) == 1
    assert feats.sum() == pytest.approx(1.0)


def test_red_hsv_bin_position():
    img = np.full((5, 5, 3), (0, 0, 255), np.uint8)
    feats = ColorHistogram(2, True).extract(img)
    assert feats[3] == pytest.approx(1.0)
    assert feats.sum() == pytest.approx(1.0)


def test_bgr_black_and_white_bins():
    extractor = ColorHistogram(8, False)
    black = extractor.extract(np.zeros((4, 4, 3), np.uint8))
    white = extractor.extract(np.full((4, 4, 3), 255, np.uint8))
    assert black[0] == pytest.approx(1.0) and black.sum() == pytest.approx(1.0)
    assert white[-1] == pytest.approx(1.0) and white.sum() == pytest.approx(1.0)


def test_half_and_half_image_two_equal_peaks():
    img = np.zeros((4, 4, 3), np.uint8)
    img[:, 2:] = 255
    feats = ColorHistogram(8, False).extract(img)
    assert feats[0] == pytest.approx(1.0)
    assert feats[-1] == pytest.approx(1.0)
    assert np.count_nonzero(feats) == 2


def test_compare_identical_and_symmetric():
    extractor = ColorHistogram()
    a = extractor.extract(_random_image(1))
    b = extractor.extract(_random_image(2))
    assert extractor.compare(a, a) == 0.0
    assert extractor.compare(a, b) == pytest.approx(extractor.compare(b, a))
    assert extractor.compare(a, b) > 0.0


def test_empty_image_raises():
    with pytest.raises(EmptyImageError):
        ColorHistogram().extract(np.zeros((0, 0, 3), np.uint8))


def test_grayscale_input_rejected_without_hsv():
    with pytest.raises(ValueError):
        ColorHistogram(8, False).extract(np.zeros((4, 4), np.uint8))


def test_invalid_bins():
    with pytest.raises(ValueError):
        ColorHistogram(0)