[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imgretrieve"
version = "0.1.0"
description = "Content-based image retrieval with colour, texture and edge features and MAP evaluation"
requires-python = ">=3.10"
keywords = [
    "image retrieval",
    "cbir",
    "color histogram",
    "color correlogram",
    "local binary pattern",
    "edge histogram",
    "mean average precision",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
    "pillow",
]

[project.scripts]
imgretrieve = "imgretrieve.app:main"

[tool.hatch.build.targets.wheel]
packages = ["imgretrieve"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
