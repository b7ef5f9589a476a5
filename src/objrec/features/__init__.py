"""Local feature detection and simple image statistics."""

from .color_histogram import N_COLOR_BINS, color_histogram, rgb_to_bin, write_color_histogram
from .detector import DESCRIPTOR_DIM, FeatureDetector, Features, laplacian_signs, read_image

__all__ = [
    "DESCRIPTOR_DIM",
    "FeatureDetector",
    "Features",
    "laplacian_signs",
    "read_image",
    # Colour histogram
    "N_COLOR_BINS",
    "color_histogram",
    "rgb_to_bin",
    "write_color_histogram",
]
