"""Command-line front end: build or load a feature database and query it."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from .color_correlogram import ColorCorrelogram
from .color_histogram import ColorHistogram
from .combined import CombinedFeature
from .database import DatabaseManager, database_path
from .edge import EdgeFeatureExtractor
from .features import FeatureExtractor, load_image
from .texture import TextureFeature

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_DIR = "build/database"
DEFAULT_K_VALUES = (3, 5, 11, 21)
DEFAULT_TOP_K = 12
IMAGE_EXTENSIONS = frozenset({".jpg", ".png", ".jpeg"})
_TMBUD_SUFFIX = "TMBuD-main/images"
_TMBUD_DATASET = 1
_GENERIC_DATASET = 0

# Extractor codes used when building combined extractors.
_COLOR_HISTOGRAM, _COLOR_CORRELOGRAM, _SIFT, _ORB, _TEXTURE, _EDGE = range(6)
_CODE_NAMES = {
    _COLOR_HISTOGRAM: "ColorHistogram",
    _COLOR_CORRELOGRAM: "ColorCorrelogram",
    _SIFT: "SIFT",
    _ORB: "ORB",
    _TEXTURE: "Texture_LBP",
    _EDGE: "Edge",
}
_SINGLE_METHODS = {name: code for code, name in _CODE_NAMES.items()}
COMBINED_METHODS = {
    "Combined_ColorHist+Edge": (_COLOR_HISTOGRAM, _EDGE),
    "Combined_ColorHist+SIFT": (_COLOR_HISTOGRAM, _SIFT),
    "Combined_SIFT+Edge": (_SIFT, _EDGE),
    "Combined_ColorHist+SIFT+Edge": (_COLOR_HISTOGRAM, _SIFT, _EDGE),
}
_KEYPOINT_CODES = frozenset({_SIFT, _ORB})


def _single_extractor(code: int) -> FeatureExtractor:
    if code == _COLOR_HISTOGRAM:
        return ColorHistogram(8, True)
    if code == _COLOR_CORRELOGRAM:
        return ColorCorrelogram(8, (1, 3, 5))
    if code == _TEXTURE:
        return TextureFeature()
    if code == _EDGE:
        return EdgeFeatureExtractor()
    if code in _KEYPOINT_CODES:
        raise ValueError(
            f"feature extractor {_CODE_NAMES[code]} needs a keypoint detector, which is not available"
        )
    raise ValueError(f"Unknown feature extractor method: {code}")


def _is_available(method: str) -> bool:
    if method in _SINGLE_METHODS:
        return _SINGLE_METHODS[method] not in _KEYPOINT_CODES
    if method in COMBINED_METHODS:
        return not _KEYPOINT_CODES.intersection(COMBINED_METHODS[method])
    return False


AVAILABLE_METHODS = tuple(
    name for name in (*_SINGLE_METHODS, *COMBINED_METHODS) if _is_available(name)
)


def create_combined_extractor(methods: Sequence[int]) -> CombinedFeature:
    """Combine extractors by code, using the fixed weights for known pairings."""
    codes = list(methods)
    if not codes:
        raise ValueError("At least one extractor must be provided")
    extractors = [_single_extractor(code) for code in codes]
    weights = [1.0 / len(codes)] * len(codes)
    if codes[0] == _COLOR_HISTOGRAM and len(codes) == 2:
        weights = [0.15, 0.85]
    elif codes[0] == _COLOR_HISTOGRAM and len(codes) == 3:
        weights = [0.2, 0.5, 0.3]
    elif codes[0] == _SIFT and len(codes) == 2:
        weights = [0.7, 0.3]
    return CombinedFeature(extractors, weights)


def create_extractor(method: str) -> FeatureExtractor:
    """Return the extractor configured for a method name."""
    if method in _SINGLE_METHODS:
        return _single_extractor(_SINGLE_METHODS[method])
    if method in COMBINED_METHODS:
        return create_combined_extractor(COMBINED_METHODS[method])
    raise ValueError(f"Unknown method: {method}")


def detect_dataset_type(gallery_path: str | PathLike) -> int:
    """Return 1 for a TMBuD image folder, 0 otherwise."""
    text = os.fspath(gallery_path)
    if isinstance(text, bytes):
        text = os.fsdecode(text)
    tail = text[-len(_TMBUD_SUFFIX):]
    if tail == _TMBUD_SUFFIX:
        return _TMBUD_DATASET
    return _GENERIC_DATASET


def gallery_images(gallery_path: str | PathLike) -> list[str]:
    """Return the readable image files of a folder, sorted by path."""
    paths = []
    skipped = 0
    for entry in sorted(Path(gallery_path).iterdir()):
        if not entry.is_file() or entry.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        try:
            load_image(entry)
        except OSError:
            logger.warning("could not read image %s - skipping", entry)
            skipped += 1
            continue
        paths.append(str(entry))
    logger.info("found %d valid images (%d files skipped)", len(paths), skipped)
    return paths


def prepare_database(
    method: str,
    gallery_path: str | PathLike,
    database_dir: str | PathLike = DEFAULT_DATABASE_DIR,
) -> DatabaseManager:
    """Load the cached database for a gallery, or build and save it."""
    manager = DatabaseManager(create_extractor(method))
    cache = database_path(method, str(gallery_path), database_dir)
    if cache.exists():
        logger.info("loading existing database for method %s", method)
        manager.load(cache)
        return manager

    logger.info("creating new database for method %s", method)
    paths = gallery_images(gallery_path)
    if not paths:
        raise ValueError(f"No valid images found in gallery path: {gallery_path}")
    manager.build(paths)
    manager.save(cache)
    logger.info("database created with %d entries", len(manager))
    return manager


@dataclass
class QueryOutcome:
    """Ranked results of a query with the average precision at each cut-off."""

    results: list[tuple[str, float]]
    map_scores: list[float]
    k_values: list[int] = field(default_factory=list)
    elapsed_ms: int = 0


def run_query(
    manager: DatabaseManager,
    query_path: str | PathLike,
    dataset_type: int,
    k_values: Sequence[int] = DEFAULT_K_VALUES,
    top_k: int = DEFAULT_TOP_K,
) -> QueryOutcome:
    """Score the query against the database and keep the ``top_k`` closest images."""
    query_image = load_image(query_path)
    start = time.perf_counter()
    _, scores = manager.query_with_map(query_image, str(query_path), dataset_type, k_values)
    results = manager.query(query_image, top_k)
    elapsed = int((time.perf_counter() - start) * 1000)
    return QueryOutcome(results, scores, list(k_values), elapsed)


def format_map_results(map_scores: Sequence[float], k_values: Sequence[int]) -> str:
    """Render MAP scores as a titled block, one line per cut-off."""
    lines = ["MAP Evaluation Results"]
    lines.extend(f"MAP@ {k}: {score:.6f}" for k, score in zip(k_values, map_scores))
    return "\n".join(lines)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgretrieve", description="Retrieve the gallery images closest to a query image."
    )
    parser.add_argument("query", help="path of the query image")
    parser.add_argument("gallery", help="folder holding the gallery images")
    parser.add_argument(
        "-m", "--method", default="ColorHistogram", choices=AVAILABLE_METHODS,
        help="feature extraction method (default: ColorHistogram)",
    )
    parser.add_argument(
        "--database-dir", default=DEFAULT_DATABASE_DIR,
        help=f"where feature databases are cached (default: {DEFAULT_DATABASE_DIR})",
    )
    parser.add_argument(
        "-k", "--top-k", type=int, default=DEFAULT_TOP_K,
        help=f"number of results to show (default: {DEFAULT_TOP_K})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one retrieval from the command line; return the exit status."""
    args = _parser().parse_args(argv)
    try:
        manager = prepare_database(args.method, args.gallery, args.database_dir)
        outcome = run_query(
            manager, args.query, detect_dataset_type(args.gallery), DEFAULT_K_VALUES, args.top_k
        )
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Method: {args.method}")
    print(format_map_results(outcome.map_scores, outcome.k_values))
    for path, distance in outcome.results:
        print(f"{path}  Dist: {distance:.2f}")
    print(f"Query time: {outcome.elapsed_ms} ms")
    return 0