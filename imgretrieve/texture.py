"""Local binary pattern texture features."""

from __future__ import annotations

import numpy as np

from .features import FeatureExtractor, _as_image, euclidean_distance, to_grayscale

_HIST_BINS = 8
_BIN_SHIFT = 5  # 256 byte values spread over 8 bins

# (row offset, column offset, bit) for the eight neighbours, clockwise from top-left.
_NEIGHBOURS = (
    (-1, -1, 7),
    (-1, 0, 6),
    (-1, 1, 5),
    (0, 1, 4),
    (1, 1, 3),
    (1, 0, 2),
    (1, -1, 1),
    (0, -1, 0),
)


def compute_lbp(image) -> np.ndarray:
    """Return the 8-neighbour LBP codes of a grayscale image.

    The code of interior pixel (i, j) is stored at (i-1, j-1); the last two
    rows and columns stay zero.
    """
    src = _as_image(image)
    if src.ndim != 2:
        raise ValueError("compute_lbp expects a grayscale image")
    rows, cols = src.shape
    dst = np.zeros((rows, cols), dtype=np.uint8)
    if rows < 3 or cols < 3:
        return dst
    center = src[1:-1, 1:-1]
    code = np.zeros(center.shape, dtype=np.uint8)
    for dy, dx, bit in _NEIGHBOURS:
        neighbour = src[1 + dy:rows - 1 + dy, 1 + dx:cols - 1 + dx]
        code |= (neighbour > center).astype(np.uint8) << np.uint8(bit)
    dst[: rows - 2, : cols - 2] = code
    return dst


class TextureFeature(FeatureExtractor):
    """Eight-bin histogram of LBP codes, normalised to sum to 1."""

    method_name = "Texture_LBP"
    feature_dimension = _HIST_BINS

    def extract(self, image) -> np.ndarray:
        lbp = compute_lbp(to_grayscale(image))
        hist = np.bincount((lbp >> _BIN_SHIFT).ravel(), minlength=_HIST_BINS)
        total = float(hist.sum())
        return (hist.astype(np.float64) * (1.0 / total)).astype(np.float32)

    def compare(self, feat1, feat2) -> float:
        return euclidean_distance(feat1, feat2)