"""Image directory reader feeding the detector."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

import numpy as np

from ..errors import BuildError
from ..features.detector import FeatureDetector

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".pgm", ".ppm", ".tif", ".tiff")


class ImageDirectory:
    """Images of one directory, in file name order."""

    def __init__(
        self,
        path: str | Path,
        extensions: Iterable[str] = IMAGE_EXTENSIONS,
    ) -> None:
        """Initialize reader with path to an image directory.

        Args:
            path: Directory containing image files (not searched recursively)
            extensions: File suffixes treated as images (case-insensitive)

        Raises:
            FileNotFoundError: If the directory doesn't exist
            ValueError: If it contains no image files
        """
        self.path = Path(path)

        if not self.path.is_dir():
            raise FileNotFoundError(f"Image directory does not exist: {self.path}")

        suffixes = {ext.lower() for ext in extensions}
        self._paths = sorted(
            p for p in self.path.iterdir() if p.is_file() and p.suffix.lower() in suffixes
        )

        if not self._paths:
            raise ValueError(f"No images found in {self.path}")

    @property
    def paths(self) -> list[Path]:
        """Image file paths, sorted by file name."""
        return list(self._paths)

    def __len__(self) -> int:
        """Return number of images in the directory."""
        return len(self._paths)


def iter_image_descriptors(
    image_paths: Iterable[str | Path],
    detector: FeatureDetector,
) -> Iterator[tuple[str, np.ndarray]]:
    """Lazily detect features image by image.

    Yields:
        (image_id, descriptors) with the image path as id
    """
    for path in image_paths:
        yield str(path), detector.detect_file(path).descriptors


def collect_descriptors(
    image_paths: Iterable[str | Path],
    detector: FeatureDetector,
    verbose: bool = False,
) -> np.ndarray:
    """Extract and stack the descriptors of every image.

    Args:
        image_paths: Images forming the vocabulary corpus
        detector: Feature detector
        verbose: Print the descriptor count of every image

    Returns:
        Stacked descriptors, shape (total_descriptors, DIM)

    Raises:
        DetectorError: If an image cannot be read
        BuildError: If no image produced any descriptor
    """
    all_descriptors: list[np.ndarray] = []
    image_count = 0

    for image_id, descriptors in iter_image_descriptors(image_paths, detector):
        image_count += 1
        if verbose:
            print(f"[Corpus] {image_id}\t{len(descriptors)}")
        if len(descriptors) > 0:
            all_descriptors.append(descriptors)

    if not all_descriptors:
        raise BuildError(f"No descriptors found in {image_count} images")

    stacked = np.vstack(all_descriptors)
    if verbose:
        print(f"[Corpus] Total descriptors: {len(stacked)} from {image_count} images")
    return stacked
