"""Feature database: build, persist, load and query image features."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path

import numpy as np

from .features import FeatureExtractor, features_to_string, load_image, string_to_features

logger = logging.getLogger(__name__)

_HEADER = "image_path,feature_method,features"


def database_path(method: str, dataset_path: str, base_dir: str | PathLike = "build/database") -> Path:
    """Return the CSV file that caches features of ``dataset_path`` for ``method``."""
    digest = hashlib.sha1(str(dataset_path).encode("utf-8")).hexdigest()[:16]
    return Path(base_dir) / f"{method}_{digest}_features.csv"


def image_class(filename: str, dataset_type: int, queryfix: bool = True) -> str:
    """Return the class label encoded at a fixed position near the end of a file name."""
    name = str(filename)
    if dataset_type == 1:
        back, width = 9, 3
    elif queryfix:
        back, width = 6, 2
    else:
        back, width = 8, 2
    if len(name) < back:
        raise ValueError(f"file name too short to hold a class label: {name!r}")
    start = len(name) - back
    return name[start:start + width]


class DatabaseManager:
    """Maps image paths to feature vectors produced by one extractor."""

    def __init__(self, extractor: FeatureExtractor):
        self.extractor = extractor
        self.features: dict[str, np.ndarray] = {}

    def __len__(self) -> int:
        return len(self.features)

    def _entries(self):
        return sorted(self.features.items())

    def build(self, image_paths: Iterable[str | PathLike]) -> None:
        """Extract features for every readable image, replacing the current contents."""
        self.features.clear()
        for path in image_paths:
            try:
                image = load_image(path)
            except OSError:
                logger.warning("could not read image %s - skipping", path)
                continue
            self.features[str(path)] = np.asarray(self.extractor.extract(image), dtype=np.float32)

    def save(self, path: str | PathLike) -> None:
        """Write the database as CSV, creating parent directories as needed."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        name = self.extractor.method_name
        with target.open("w", encoding="utf-8", newline="\n") as out:
            out.write(_HEADER + "\n")
            for image_path, features in self._entries():
                out.write(f"{image_path},{name},{features_to_string(features)}\n")

    def load(self, path: str | PathLike) -> int:
        """Load entries written with the current extractor's method; return their count."""
        with Path(path).open("r", encoding="utf-8", newline="") as src:
            header = src.readline()
            if not header:
                raise ValueError(f"database file has no header: {path}")
            self.features.clear()
            name = self.extractor.method_name
            for raw in src:
                line = raw.rstrip("\r\n")
                fields = line.split(",", 2)
                if len(fields) < 3:
                    continue
                image_path, method, feature_text = fields
                if method == name:
                    self.features[image_path] = string_to_features(feature_text)
        return len(self.features)

    def _ranked(self, query_image) -> list[tuple[str, float]]:
        query_features = np.asarray(self.extractor.extract(query_image), dtype=np.float32)
        results = [
            (image_path, float(self.extractor.compare(query_features, features)))
            for image_path, features in self._entries()
        ]
        results.sort(key=lambda item: item[1])
        return results

    def query(self, query_image, top_k: int = 5) -> list[tuple[str, float]]:
        """Return (path, distance) pairs by increasing distance, at most ``top_k`` if positive."""
        results = self._ranked(query_image)
        if top_k > 0:
            results = results[:top_k]
        return results

    def query_with_map(
        self,
        query_image,
        query_image_path: str,
        dataset_type: int,
        k_values: Sequence[int],
    ) -> tuple[list[tuple[str, float]], list[float]]:
        """Rank the whole database and compute average precision at each k."""
        results = self._ranked(query_image)
        query_class = image_class(query_image_path, dataset_type)
        total_relevant = sum(
            1 for image_path in self.features
            if image_class(image_path, dataset_type, False) == query_class
        )
        scores = []
        for k in k_values:
            ap = 0.0
            hits = 0
            for rank, (image_path, _) in enumerate(results[:max(k, 0)], start=1):
                if image_class(image_path, dataset_type, False) == query_class:
                    hits += 1
                    ap += hits / rank
            if total_relevant > 0:
                ap /= total_relevant
            logger.debug("MAP@%d = %f", k, ap)
            scores.append(ap)
        return results, scores