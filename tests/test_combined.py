import numpy as np
import pytest

from imgretrieve.color_histogram import ColorHistogram
from imgretrieve.combined import CombinedFeature
from imgretrieve.edge import EdgeFeatureExtractor
from imgretrieve.features import EmptyImageError, FeatureExtractor, to_grayscale
from imgretrieve.texture import TextureFeature


class _Probe(FeatureExtractor):
    feature_dimension = 1

    def __init__(self, name):
        self.method_name = name
        self.seen_ndim = None

    def extract(self, image):
        self.seen_ndim = np.asarray(image).ndim
        return np.array([float(self.seen_ndim)], dtype=np.float32)

    def compare(self, feat1, feat2):
        return abs(float(feat1[0]) - float(feat2[0]))


@pytest.fixture
def colour_image():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(24, 20, 3), dtype=np.uint8)


def test_requires_extractors():
    with pytest.raises(ValueError):
        CombinedFeature([], [])


def test_weights_must_match():
    with pytest.raises(ValueError):
        CombinedFeature([TextureFeature()], [0.5, 0.5])


def test_method_name_joins_parts():
    combined = CombinedFeature([EdgeFeatureExtractor(), TextureFeature()], [0.5, 0.5])
    assert combined.method_name == "Combined_Edge_Canny+Texture_LBP"


def test_feature_dimension_is_sum():
    edge, tex = EdgeFeatureExtractor(), TextureFeature()
    combined = CombinedFeature([edge, tex], [0.3, 0.7])
    assert combined.feature_dimension == edge.feature_dimension + tex.feature_dimension


def test_extract_concatenates_grayscale_features(colour_image):
    edge, tex = EdgeFeatureExtractor(), TextureFeature()
    combined = CombinedFeature([edge, tex], [0.5, 0.5])
    features = combined.extract(colour_image)
    gray = to_grayscale(colour_image)
    expected = np.concatenate([edge.extract(gray), tex.extract(gray)])
    assert features.shape == expected.shape
    assert np.allclose(features, expected)


def test_colour_extractor_gets_colour_image(colour_image):
    hist = ColorHistogram(4, True)
    combined = CombinedFeature([hist], [1.0])
    assert np.allclose(combined.extract(colour_image), hist.extract(colour_image))


def test_only_colour_named_extractors_keep_channels(colour_image):
    plain = _Probe("Plain")
    colour = _Probe("ColorProbe")
    combined = CombinedFeature([plain, colour], [1.0, 1.0])
    combined.extract(colour_image)
    assert plain.seen_ndim == 2
    assert colour.seen_ndim == 3


def test_empty_image_rejected():
    combined = CombinedFeature([TextureFeature()], [1.0])
    with pytest.raises(EmptyImageError):
        combined.extract(np.zeros((0, 0, 3), dtype=np.uint8))


def test_compare_identical_is_zero(colour_image):
    combined = CombinedFeature([EdgeFeatureExtractor(), TextureFeature()], [0.5, 0.5])
    features = combined.extract(colour_image)
    assert combined.compare(features, features) == pytest.approx(0.0)


def test_compare_is_weighted_sum(colour_image):
    edge, tex = EdgeFeatureExtractor(), TextureFeature()
    combined = CombinedFeature([edge, tex], [0.25, 0.75])
    other = np.full((24, 20, 3), 90, dtype=np.uint8)
    other[:, 10:] = 200
    f1 = combined.extract(colour_image)
    f2 = combined.extract(other)
    weighted = 0.25 * edge.compare(f1[:8], f2[:8]) + 0.75 * tex.compare(f1[8:], f2[8:])
    assert combined.compare(f1, f2) == pytest.approx(weighted)
    assert combined.compare(f1, f2) > 0


def test_compare_rejects_short_vectors():
    combined = CombinedFeature([EdgeFeatureExtractor(), TextureFeature()], [0.5, 0.5])
    with pytest.raises(ValueError):
        combined.compare(np.zeros(16), np.zeros(10))