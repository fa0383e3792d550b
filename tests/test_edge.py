import numpy as np
import pytest

from imgretrieve.edge import EdgeFeatureExtractor
from imgretrieve.features import EmptyImageError


def _step(vertical=True, reverse=False, size=10):
    img = np.zeros((size, size), np.uint8)
    if vertical:
        img[:, size // 2:] = 255
    else:
        img[size // 2:, :] = 255
    return 255 - img if reverse else img


def test_uniform_image_has_no_edges():
    feats = EdgeFeatureExtractor().extract(np.full((8, 8), 120, np.uint8))
    assert feats.shape == (8,)
    assert (feats == 0).all()


def test_dark_to_bright_left_to_right_is_first_bin():
    feats = EdgeFeatureExtractor().extract(_step(vertical=True))
    assert feats[0] == pytest.approx(1.0)
    assert feats[1:].sum() == pytest.approx(0.0)


def test_bright_to_dark_left_to_right_is_opposite_bin():
    feats = EdgeFeatureExtractor().extract(_step(vertical=True, reverse=True))
    assert feats[4] == pytest.approx(1.0)
    assert feats.sum() == pytest.approx(1.0)


def test_dark_to_bright_top_to_bottom_is_quarter_turn():
    feats = EdgeFeatureExtractor().extract(_step(vertical=False))
    assert feats[2] == pytest.approx(1.0)
    assert feats.sum() == pytest.approx(1.0)


def test_random_image_histogram_sums_to_one():
    img = np.random.default_rng(11).integers(0, 256, (16, 16, 3), dtype=np.uint8)
    feats = EdgeFeatureExtractor().extract(img)
    assert feats.dtype == np.float32
    assert feats.min() >= 0
    assert feats.sum() == pytest.approx(1.0, abs=1e-5)


def test_colour_image_matches_its_gray_copy():
    gray = np.random.default_rng(2).integers(0, 256, (12, 9), dtype=np.uint8)
    colour = np.repeat(gray[:, :, None], 3, axis=2)
    extractor = EdgeFeatureExtractor()
    np.testing.assert_array_equal(extractor.extract(colour), extractor.extract(gray))


def test_compare_mismatched_lengths():
    extractor = EdgeFeatureExtractor()
    assert extractor.compare([0.1, 0.2], [0.1]) == 9999.0


def test_compare_identical_and_symmetric():
    extractor = EdgeFeatureExtractor()
    a = extractor.extract(_step(vertical=True))
    b = extractor.extract(_step(vertical=False))
    assert extractor.compare(a, a) == 0.0
    assert extractor.compare(a, b) == pytest.approx(extractor.compare(b, a))
    assert extractor.compare(a, b) > 0.0
    assert extractor.method_name == "Edge_Canny"


def test_empty_image_raises():
    with pytest.raises(EmptyImageError):
        EdgeFeatureExtractor().extract(np.zeros((0, 4), np.uint8))