"""Feature extractor interface and shared image helpers.

Images are numpy ``uint8`` arrays: ``(rows, cols)`` for grayscale and
``(rows, cols, 3)`` in BGR channel order for colour images.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from os import PathLike

import numpy as np
from PIL import Image

_YUV_SHIFT = 14
_R2Y, _G2Y, _B2Y = 4899, 9617, 1868

_HSV_SHIFT = 12
_HSV_ROUND = 1 << (_HSV_SHIFT - 1)
_HUE_RANGE = 180

_divisors = np.arange(1, 256, dtype=np.float64)
_SDIV = np.concatenate(([0.0], np.rint((255 << _HSV_SHIFT) / _divisors))).astype(np.int64)
_HDIV = np.concatenate(
    ([0.0], np.rint((_HUE_RANGE << _HSV_SHIFT) / (6.0 * _divisors)))
).astype(np.int64)


class EmptyImageError(ValueError):
    """Raised when an image with no pixels is given to an extractor."""


class FeatureExtractor(abc.ABC):
    """Turns an image into a feature vector and measures distances between vectors."""

    method_name: str = ""
    feature_dimension: int = 0

    @abc.abstractmethod
    def extract(self, image) -> np.ndarray:
        """Return the feature vector of ``image`` as a float32 array."""

    @abc.abstractmethod
    def compare(self, feat1, feat2) -> float:
        """Return the distance between two feature vectors; smaller is closer."""


def _as_image(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.size == 0:
        raise EmptyImageError("image has no pixels")
    if arr.ndim not in (2, 3):
        raise ValueError(f"expected a 2-D or 3-D image array, got {arr.ndim} dimensions")
    return arr.astype(np.uint8, copy=False)


def features_to_string(features: Iterable[float]) -> str:
    """Render a feature vector as comma-separated values with six significant digits."""
    values = np.asarray(list(features) if not isinstance(features, np.ndarray) else features,
                        dtype=np.float32).ravel()
    return ",".join(format(float(v), "g") for v in values)


def string_to_features(text: str) -> np.ndarray:
    """Parse comma-separated values back into a float32 feature vector."""
    if not text:
        return np.zeros(0, dtype=np.float32)
    parts = text.split(",")
    if parts[-1] == "":
        parts.pop()
    try:
        values = [float(part) for part in parts]
    except ValueError as exc:
        raise ValueError(f"malformed feature string: {text!r}") from exc
    return np.array(values, dtype=np.float32)


def euclidean_distance(feat1, feat2) -> float:
    """Euclidean distance over the length of ``feat1``."""
    a = np.asarray(feat1, dtype=np.float64).ravel()
    b = np.asarray(feat2, dtype=np.float64).ravel()
    if b.size < a.size:
        raise ValueError(
            f"second feature vector is shorter than the first ({b.size} < {a.size})"
        )
    diff = a - b[: a.size]
    return float(np.sqrt(np.sum(diff * diff)))


def to_grayscale(image) -> np.ndarray:
    """Convert a BGR image to 8-bit luma; grayscale input is returned unchanged."""
    arr = _as_image(image)
    if arr.ndim == 2:
        return arr
    channels = arr.shape[2]
    if channels == 1:
        return arr[:, :, 0]
    if channels not in (3, 4):
        raise ValueError(f"cannot convert a {channels}-channel image to grayscale")
    b, g, r = (arr[:, :, i].astype(np.int32) for i in range(3))
    gray = (b * _B2Y + g * _G2Y + r * _R2Y + (1 << (_YUV_SHIFT - 1))) >> _YUV_SHIFT
    return gray.astype(np.uint8)


def bgr_to_hsv(image) -> np.ndarray:
    """Convert a BGR image to 8-bit HSV with hue in 0..179."""
    arr = _as_image(image)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError("expected a 3-channel BGR image")
    b, g, r = (arr[:, :, i].astype(np.int64) for i in range(3))
    v = np.maximum(np.maximum(b, g), r)
    vmin = np.minimum(np.minimum(b, g), r)
    diff = v - vmin
    s = (diff * _SDIV[v] + _HSV_ROUND) >> _HSV_SHIFT
    h = np.where(v == r, g - b, np.where(v == g, b - r + 2 * diff, r - g + 4 * diff))
    h = (h * _HDIV[diff] + _HSV_ROUND) >> _HSV_SHIFT
    h = np.where(h < 0, h + _HUE_RANGE, h)
    return np.stack([h, s, v], axis=-1).astype(np.uint8)


def load_image(path: str | PathLike) -> np.ndarray:
    """Read an image file as a BGR ``uint8`` array; raises ``OSError`` if unreadable."""
    with Image.open(path) as img:
        rgb = np.asarray(img.convert("RGB"), dtype=np.uint8)
    return np.ascontiguousarray(rgb[:, :, ::-1])