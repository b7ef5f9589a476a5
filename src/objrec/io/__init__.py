"""I/O for reference tables, images and delimited text files."""

from .image_source import (
    IMAGE_EXTENSIONS,
    ImageDirectory,
    collect_descriptors,
    iter_image_descriptors,
)
from .reference_tables import (
    build_reference_tables,
    load,
    load_descriptions,
    load_object_catalog,
    write_descriptions,
    write_object_catalog,
)

__all__ = [
    # Reference tables
    "load",
    "load_object_catalog",
    "load_descriptions",
    "write_object_catalog",
    "write_descriptions",
    "build_reference_tables",
    # Images
    "IMAGE_EXTENSIONS",
    "ImageDirectory",
    "collect_descriptors",
    "iter_image_descriptors",
]
