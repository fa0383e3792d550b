# imgretrieve

Content-based image retrieval. Every image in a gallery folder is described
by a feature vector, the vectors are cached in a CSV file, and a query image
is ranked against the gallery by distance. Retrieval quality is reported as
average precision at several cut-offs.

## Feature extractors

| Class                  | Module                          | `method_name`      | What it measures                                     |
|------------------------|---------------------------------|--------------------|------------------------------------------------------|
| `ColorHistogram`       | `imgretrieve.color_histogram`   | `ColorHistogram`   | Joint 3-D colour histogram (HSV or BGR), peak scaled to 1 |
| `ColorCorrelogram`     | `imgretrieve.color_correlogram` | `ColorCorrelogram` | Same-colour pair rates at several pixel distances    |
| `TextureFeature`       | `imgretrieve.texture`           | `Texture_LBP`      | 8-bin histogram of local binary pattern codes        |
| `EdgeFeatureExtractor` | `imgretrieve.edge`              | `Edge_Canny`       | 8-bin gradient direction histogram weighted by magnitude |
| `CombinedFeature`      | `imgretrieve.combined`          | `Combined_...`     | Concatenated features, weighted sum of distances     |

All extractors derive from `imgretrieve.features.FeatureExtractor` and have
`extract(image)`, returning a float32 NumPy array, and `compare(feat1, feat2)`,
returning a distance where smaller means more similar. Images are `uint8`
arrays, `(rows, cols)` for grayscale or `(rows, cols, 3)` in BGR order, as
returned by `imgretrieve.features.load_image`. An image with no pixels raises
`imgretrieve.features.EmptyImageError`.

`imgretrieve.features` also provides `to_grayscale`, `bgr_to_hsv`,
`euclidean_distance`, `features_to_string` and `string_to_features`.

## Installation

```
pip install .
```

## Command line

```
imgretrieve QUERY GALLERY [-m METHOD] [--database-dir DIR] [-k TOP_K]
imgretrieve --help
```

The command loads the cached feature database for `GALLERY` from
`--database-dir` (default `build/database`), or builds it from the `.jpg`,
`.jpeg` and `.png` files in the folder and saves it. It then ranks the gallery
against `QUERY`, prints the MAP scores at k = 3, 5, 11 and 21, the `TOP_K`
closest images (default 12) with their distances, and the query time.
It exits with status 1 on an unreadable file or an empty gallery.

Methods accepted by `-m/--method`: `ColorHistogram` (the default),
`ColorCorrelogram`, `Texture_LBP`, `Edge` and `Combined_ColorHist+Edge`.

## Library use

```python
from imgretrieve.features import load_image
from imgretrieve.color_histogram import ColorHistogram
from imgretrieve.database import DatabaseManager, database_path

manager = DatabaseManager(ColorHistogram(bins=8, hsv=True))
manager.build(["gallery/a.png", "gallery/b.png", "gallery/c.png"])
manager.save(database_path("ColorHistogram", "gallery", "build/database"))

query = load_image("query/a.png")
for path, distance in manager.query(query, top_k=5):
    print(f"{distance:.4f}  {path}")
```

`DatabaseManager.load(path)` reads a saved CSV back, keeping only the rows
written with the current extractor's `method_name`, and returns how many it
kept. `len(manager)` gives the number of entries. Images that cannot be read
are skipped by `build`.

Several extractors can be combined with fixed weights:

```python
from imgretrieve.combined import CombinedFeature
from imgretrieve.color_histogram import ColorHistogram
from imgretrieve.edge import EdgeFeatureExtractor

extractor = CombinedFeature([ColorHistogram(), EdgeFeatureExtractor()], [0.15, 0.85])
```

Extractors whose `method_name` does not contain `Color` receive a grayscale
copy of a colour image.

`imgretrieve.app` holds the ready-made configurations: `create_extractor`
builds one by method name, `create_combined_extractor` by a list of extractor
codes, and `prepare_database` and `run_query` do what the command does.
`format_map_results` renders the MAP scores as text.

## Evaluation

`DatabaseManager.query_with_map(query_image, query_image_path, dataset_type, k_values)`
ranks the whole database and returns the ranking together with one
average-precision score per cut-off. The class of an image is read from fixed
positions at the end of its file name by `imgretrieve.database.image_class`:
for dataset type 1, three characters starting nine from the end; otherwise two
characters starting six from the end for the query and eight from the end for
gallery entries. `imgretrieve.app.detect_dataset_type` returns 1 for a gallery
path ending in `TMBuD-main/images` and 0 otherwise.

## What this package does not do

- There are no keypoint-based extractors. The method names `SIFT`, `ORB` and
  the combined methods that include `SIFT` are recognised by
  `create_extractor`, but it raises `ValueError` for them.
- Results are printed as text; there is no window or image display of the
  query and its matches.

## Running the tests

```
pip install .[test]
pytest
```