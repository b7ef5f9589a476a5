"""Bag of visual words histograms.

Each descriptor of an image votes for its nearest visual word; the counts are
divided by the number of descriptors so every non-empty image yields a
histogram summing to 1. Nearest-word lookup goes through an exact kd-tree
built once over the vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator

import numpy as np
from scipy.spatial import cKDTree

from ..errors import LoadError, OperationCancelled, QuantizeError
from ..io.tables import format_float, parse_floats, read_rows, write_rows
from .vocabulary import Vocabulary


@dataclass
class ImageHistogram:
    """Normalized visual word histogram of one image.

    Attributes:
        image_id: Identifier of the source image (usually its path)
        bins: Word frequencies, shape (n_words,), sum 1 or all zeros
        total: Number of descriptors the histogram was built from,
            None when read back from a file
    """

    image_id: str
    bins: np.ndarray  # (n_words,) float64
    total: int | None = None

    @property
    def n_words(self) -> int:
        return len(self.bins)

    def to_line(self, delimiter: str = "\t") -> str:
        """Format as ``image_id`` followed by every bin value."""
        return delimiter.join([self.image_id] + [format_float(v) for v in self.bins])

    def __len__(self) -> int:
        return len(self.bins)


class HistogramQuantizer:
    """Quantizes descriptor sets against a fixed vocabulary.

    Lookups are exact (kd-tree queried with eps=0). When a descriptor is
    exactly equidistant from several words the tree decides which one
    receives it.
    """

    def __init__(self, vocabulary: Vocabulary, leaf_size: int = 16) -> None:
        """Build the nearest-word index.

        Args:
            vocabulary: Visual words to quantize against
            leaf_size: kd-tree leaf size

        Raises:
            QuantizeError: If the vocabulary has no words
        """
        if vocabulary.n_words == 0:
            raise QuantizeError("Vocabulary is empty")

        self._vocabulary = vocabulary
        self._tree = cKDTree(vocabulary.words, leafsize=leaf_size)

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    @property
    def n_words(self) -> int:
        return self._vocabulary.n_words

    def nearest_words(self, descriptors: np.ndarray | None) -> np.ndarray:
        """Return the nearest word index of every descriptor, shape (N,)."""
        return self._nearest(self._validate(descriptors))

    def _nearest(self, descriptors: np.ndarray) -> np.ndarray:
        if len(descriptors) == 0:
            return np.empty(0, dtype=np.intp)

        _, indices = self._tree.query(descriptors, k=1)
        return np.asarray(indices, dtype=np.intp).reshape(-1)

    def quantize(self, descriptors: np.ndarray | None, image_id: str = "") -> ImageHistogram:
        """Build the normalized histogram of one image.

        Args:
            descriptors: Image descriptors, shape (N, dim); None or empty
                gives an all-zero histogram
            image_id: Identifier stored on the histogram

        Returns:
            ImageHistogram with n_words bins

        Raises:
            QuantizeError: If the descriptor dimension differs from the words
                or a descriptor holds NaN or inf
        """
        words = self._nearest(self._validate(descriptors, image_id))
        bins = np.bincount(words, minlength=self.n_words).astype(np.float64)
        if len(words) > 0:
            bins /= len(words)
        return ImageHistogram(image_id=image_id, bins=bins, total=len(words))

    def quantize_images(
        self,
        images: Iterable[tuple[str, np.ndarray]],
        cancel: Callable[[], bool] | None = None,
    ) -> Iterator[ImageHistogram]:
        """Quantize images one at a time.

        Args:
            images: (image_id, descriptors) pairs
            cancel: Called before each image; returning True stops the batch

        Yields:
            One ImageHistogram per image, in input order
        """
        for count, (image_id, descriptors) in enumerate(images):
            if cancel is not None and cancel():
                raise OperationCancelled(f"Quantization cancelled after {count} images")
            yield self.quantize(descriptors, image_id=image_id)

    def _validate(self, descriptors: np.ndarray | None, image_id: str = "") -> np.ndarray:
        dim = self._vocabulary.dim
        source = f" of image '{image_id}'" if image_id else ""
        if descriptors is None:
            return np.empty((0, dim), dtype=np.float64)

        descriptors = np.asarray(descriptors, dtype=np.float64)
        if descriptors.size == 0:
            return descriptors.reshape(0, dim)
        if descriptors.ndim == 1:
            descriptors = descriptors.reshape(1, -1)
        if descriptors.ndim != 2 or descriptors.shape[1] != dim:
            raise QuantizeError(
                f"Descriptors{source} must be (N, {dim}) to match the vocabulary, "
                f"got {descriptors.shape}"
            )
        if not np.all(np.isfinite(descriptors)):
            bad_rows = np.flatnonzero(~np.isfinite(descriptors).all(axis=1))
            raise QuantizeError(
                f"Descriptors{source} hold non-finite values in rows {bad_rows.tolist()}"
            )
        return descriptors


def quantize(descriptors: np.ndarray | None, vocabulary: Vocabulary) -> ImageHistogram:
    """Histogram of ``descriptors`` over ``vocabulary``.

    Builds a fresh index; use HistogramQuantizer to reuse one across images.
    """
    return HistogramQuantizer(vocabulary).quantize(descriptors)


def write_histograms(
    path: str | Path, histograms: Iterable[ImageHistogram], delimiter: str = "\t"
) -> int:
    """Write one line per image: image id followed by its bins.

    Returns:
        Number of histograms written
    """
    rows = (
        [histogram.image_id] + [format_float(v) for v in histogram.bins]
        for histogram in histograms
    )
    return write_rows(path, rows, delimiter)


def read_histograms(path: str | Path, delimiter: str = "\t") -> list[ImageHistogram]:
    """Read histograms written by ``write_histograms``.

    Raises:
        LoadError: If the file is missing, a row has no bins, rows differ in
            length, or a bin is not numeric
    """
    histograms: list[ImageHistogram] = []
    n_words: int | None = None

    for line_number, fields in read_rows(path, delimiter):
        if len(fields) < 2:
            raise LoadError(f"{path}:{line_number}: expected image id and bins")
        if n_words is None:
            n_words = len(fields) - 1
        elif len(fields) - 1 != n_words:
            raise LoadError(
                f"{path}:{line_number}: expected {n_words} bins, got {len(fields) - 1}"
            )
        bins = np.array(parse_floats(fields[1:], path, line_number), dtype=np.float64)
        histograms.append(ImageHistogram(image_id=fields[0], bins=bins))

    return histograms
