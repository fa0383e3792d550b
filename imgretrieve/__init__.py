"""Content-based image retrieval with colour, texture and edge features and a CSV feature cache."""

__version__ = "0.1.0"