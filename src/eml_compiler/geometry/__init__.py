"""Geometry transforms for EML geographic coverage."""

from .transform import bounding_box, extract_rings, synthesize_polygon

__all__ = [
    "bounding_box",
    "extract_rings",
    "synthesize_polygon",
]
