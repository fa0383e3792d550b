"""Colour auto-correlogram features."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .features import FeatureExtractor, _as_image, bgr_to_hsv, euclidean_distance

_DIRECTIONS = ((0, 1), (1, 0), (0, -1), (-1, 0))
_DBL_EPSILON = float(np.finfo(np.float64).eps)
_LEVELS = 4


def _minmax_to_uint8(channel: np.ndarray, top: int) -> np.ndarray:
    """Stretch a channel linearly onto 0..top and round to bytes."""
    smin = float(channel.min())
    smax = float(channel.max())
    span = smax - smin
    scale = top / span if span > _DBL_EPSILON else 0.0
    shift = -smin * scale
    scaled = channel.astype(np.float32) * np.float32(scale) + np.float32(shift)
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


def _pairs(q: np.ndarray, dx: int, dy: int):
    rows, cols = q.shape
    y0, y1 = max(0, -dy), rows - max(0, dy)
    x0, x1 = max(0, -dx), cols - max(0, dx)
    if y1 <= y0 or x1 <= x0:
        return None
    return q[y0:y1, x0:x1], q[y0 + dy:y1 + dy, x0 + dx:x1 + dx]


class ColorCorrelogram(FeatureExtractor):
    """Probability that pixels at given distances share the same quantized colour."""

    method_name = "ColorCorrelogram"

    def __init__(self, bins: int = 8, distances: Sequence[int] = (1, 3, 5), hsv: bool = True):
        if bins <= 0:
            raise ValueError("bins must be positive")
        self.bins = bins
        self.distances = tuple(distances)
        self.hsv = hsv
        self.feature_dimension = bins * 3

    @property
    def num_colors(self) -> int:
        """Number of distinct quantized colours."""
        if self.hsv:
            return self.bins * _LEVELS * _LEVELS
        return self.bins**3

    def quantize(self, image) -> np.ndarray:
        """Map each pixel to a single colour code as an int32 array."""
        arr = _as_image(image)
        top = self.bins - 1
        if self.hsv:
            hsv = bgr_to_hsv(arr)
            hue = _minmax_to_uint8(hsv[:, :, 0], top).astype(np.int64)
            sat = _minmax_to_uint8(hsv[:, :, 1], _LEVELS - 1).astype(np.int64)
            val = _minmax_to_uint8(hsv[:, :, 2], _LEVELS - 1).astype(np.int64)
            codes = hue + sat * self.bins + val * self.bins * _LEVELS
            return np.minimum(codes, 255).astype(np.int32)

        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError("expected a 3-channel BGR image")
        c0, c1, c2 = (_minmax_to_uint8(arr[:, :, i], top).astype(np.int64) for i in range(3))
        return (c0 + c1 * self.bins + c2 * self.bins * self.bins).astype(np.int32)

    def auto_correlogram(self, quantized) -> np.ndarray:
        """Return a (colours, distances) float32 matrix of same-colour pair rates."""
        q = np.asarray(quantized, dtype=np.int64)
        if q.ndim != 2:
            raise ValueError("quantized image must be two-dimensional")
        n = self.num_colors
        if q.size and (q.min() < 0 or q.max() >= n):
            raise ValueError(f"colour codes must lie in 0..{n - 1}")

        result = np.zeros((n, len(self.distances)), dtype=np.float32)
        total = np.float32(q.shape[0] * q.shape[1] * 4.0)
        for column, distance in enumerate(self.distances):
            counts = np.zeros(n, dtype=np.int64)
            for dx, dy in _DIRECTIONS:
                pair = _pairs(q, dx * distance, dy * distance)
                if pair is None:
                    continue
                current, neighbour = pair
                counts += np.bincount(current[current == neighbour], minlength=n)
            result[:, column] = counts.astype(np.float32) / total
        return result

    def extract(self, image) -> np.ndarray:
        correlogram = self.auto_correlogram(self.quantize(image))
        norm = float(np.abs(correlogram.astype(np.float64)).sum())
        scale = 1.0 / norm if norm > _DBL_EPSILON else 0.0
        return (correlogram.astype(np.float64) * scale).astype(np.float32).ravel()

    def compare(self, feat1, feat2) -> float:
        return euclidean_distance(feat1, feat2)