"""Weighted combination of several feature extractors."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from .features import FeatureExtractor, _as_image, to_grayscale


class CombinedFeature(FeatureExtractor):
    """Concatenates the features of several extractors and sums their weighted distances.

    Extractors whose method name does not contain ``"Color"`` receive a
    grayscale copy of a colour image.
    """

    def __init__(self, extractors: Iterable[FeatureExtractor], weights: Sequence[float]):
        self.extractors = list(extractors)
        self.weights = [float(w) for w in weights]
        if not self.extractors:
            raise ValueError("At least one extractor must be provided")
        if len(self.extractors) != len(self.weights):
            raise ValueError("Number of extractors must match number of weights")
        self.feature_dims = [int(ext.feature_dimension) for ext in self.extractors]

    @property
    def method_name(self) -> str:  # type: ignore[override]
        return "Combined_" + "+".join(ext.method_name for ext in self.extractors)

    @property
    def feature_dimension(self) -> int:  # type: ignore[override]
        return sum(self.feature_dims)

    def extract(self, image) -> np.ndarray:
        arr = _as_image(image)
        is_colour = arr.ndim == 3 and arr.shape[2] > 1
        parts = []
        for extractor in self.extractors:
            if is_colour and "Color" not in extractor.method_name:
                processed = to_grayscale(arr)
            else:
                processed = arr.copy()
            features = np.asarray(extractor.extract(processed), dtype=np.float32).ravel()
            parts.append(features)
        return np.concatenate(parts).astype(np.float32, copy=False)

    def compare(self, feat1, feat2) -> float:
        a = np.asarray(feat1, dtype=np.float32).ravel()
        b = np.asarray(feat2, dtype=np.float32).ravel()
        total = 0.0
        start = 0
        for extractor, weight, size in zip(self.extractors, self.weights, self.feature_dims):
            end = start + size
            if end > a.size or end > b.size:
                raise ValueError(
                    "feature vector size mismatch or an extractor returned fewer "
                    "features than expected"
                )
            total += weight * extractor.compare(a[start:end], b[start:end])
            start = end
        return total