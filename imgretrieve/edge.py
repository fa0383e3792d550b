"""Gradient orientation histogram features."""

from __future__ import annotations

import numpy as np

from .features import FeatureExtractor, euclidean_distance, to_grayscale

_BINS = 8
_MISMATCH_DISTANCE = 9999.0

_DEG = np.float32(180.0 / np.pi)
_P1 = np.float32(0.9997878412794807) * _DEG
_P3 = np.float32(-0.3258083974640975) * _DEG
_P5 = np.float32(0.1555786518463281) * _DEG
_P7 = np.float32(-0.04432655554792128) * _DEG
_ATAN_EPS = np.float32(np.finfo(np.float64).eps)


def _gaussian_blur3(gray: np.ndarray) -> np.ndarray:
    """3x3 binomial blur with reflected borders, rounded back to bytes."""
    p = np.pad(gray.astype(np.int32), 1, mode="reflect")
    horiz = p[:, :-2] + 2 * p[:, 1:-1] + p[:, 2:]
    total = horiz[:-2] + 2 * horiz[1:-1] + horiz[2:]
    return ((total + 8) >> 4).astype(np.uint8)


def _sobel3(gray: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    p = np.pad(gray.astype(np.int32), 1, mode="reflect")
    vert = p[:-2] + 2 * p[1:-1] + p[2:]
    grad_x = vert[:, 2:] - vert[:, :-2]
    horiz = p[:, :-2] + 2 * p[:, 1:-1] + p[:, 2:]
    grad_y = horiz[2:] - horiz[:-2]
    return grad_x.astype(np.float32), grad_y.astype(np.float32)


def _fast_atan2_degrees(y: np.ndarray, x: np.ndarray) -> np.ndarray:
    """Polynomial atan2 in degrees over 0..360, accurate to about 0.3 degrees."""
    ax, ay = np.abs(x), np.abs(y)
    steep = ax < ay
    c = np.where(steep, ax, ay) / (np.where(steep, ay, ax) + _ATAN_EPS)
    c2 = c * c
    a = (((_P7 * c2 + _P5) * c2 + _P3) * c2 + _P1) * c
    a = np.where(steep, np.float32(90.0) - a, a)
    a = np.where(x < 0, np.float32(180.0) - a, a)
    a = np.where(y < 0, np.float32(360.0) - a, a)
    return a.astype(np.float32)


class EdgeFeatureExtractor(FeatureExtractor):
    """Eight-bin histogram of gradient directions weighted by gradient magnitude."""

    method_name = "Edge_Canny"
    feature_dimension = _BINS

    def __init__(self, threshold1: float = 100, threshold2: float = 200):
        self.threshold1 = threshold1
        self.threshold2 = threshold2

    def extract(self, image) -> np.ndarray:
        gray = _gaussian_blur3(to_grayscale(image))
        grad_x, grad_y = _sobel3(gray)
        magnitude = np.sqrt(grad_x * grad_x + grad_y * grad_y)
        angle = _fast_atan2_degrees(grad_y, grad_x)

        bins = (angle.astype(np.float64) / 360.0 * _BINS).astype(np.int64) % _BINS
        hist = np.bincount(
            bins.ravel(), weights=magnitude.astype(np.float64).ravel(), minlength=_BINS
        ).astype(np.float32)
        total = hist.sum(dtype=np.float32)
        if total > 0:
            hist = hist / total
        return hist

    def compare(self, feat1, feat2) -> float:
        if len(feat1) != len(feat2):
            return _MISMATCH_DISTANCE
        return euclidean_distance(feat1, feat2)