"""Three-dimensional colour histogram features."""

from __future__ import annotations

import numpy as np

from .features import FeatureExtractor, _as_image, bgr_to_hsv, euclidean_distance

_HUE_RANGE = (0, 180)
_BYTE_RANGE = (0, 256)


def _bin_lookup(bins: int, low: float, high: float) -> np.ndarray:
    """Map every byte value to a histogram bin, or -1 when it lies outside the range."""
    scale = bins / (high - low)
    offset = -scale * low
    values = np.arange(256, dtype=np.float64)
    idx = np.clip(np.floor(values * scale + offset).astype(np.int64), 0, bins - 1)
    inside = (values >= low) & (values < high)
    return np.where(inside, idx, -1)


class ColorHistogram(FeatureExtractor):
    """Joint histogram over three colour channels, scaled so its peak is 1."""

    method_name = "ColorHistogram"

    def __init__(self, bins: int = 8, hsv: bool = True):
        if bins <= 0:
            raise ValueError("bins must be positive")
        self.bins = bins
        self.hsv = hsv
        self.feature_dimension = bins * 3

    def extract(self, image) -> np.ndarray:
        arr = _as_image(image)
        if self.hsv:
            arr = bgr_to_hsv(arr)
        elif arr.ndim != 3 or arr.shape[2] < 3:
            raise ValueError("expected a 3-channel BGR image")

        bins = self.bins
        ranges = (_HUE_RANGE if self.hsv else _BYTE_RANGE, _BYTE_RANGE, _BYTE_RANGE)
        indices = [
            _bin_lookup(bins, low, high)[arr[:, :, channel]]
            for channel, (low, high) in enumerate(ranges)
        ]
        valid = np.logical_and.reduce([idx >= 0 for idx in indices])
        flat = (indices[0] * bins + indices[1]) * bins + indices[2]
        hist = np.bincount(flat[valid], minlength=bins**3).astype(np.float32)

        peak = float(hist.max())
        if peak > 0:
            hist = (hist.astype(np.float64) * (1.0 / peak)).astype(np.float32)
        return hist

    def compare(self, feat1, feat2) -> float:
        return euclidean_distance(feat1, feat2)