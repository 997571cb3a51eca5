"""Section segmentation of parsed documentation."""

from .segmenter import segment

__all__ = ["segment"]
