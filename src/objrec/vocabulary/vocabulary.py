"""Visual vocabulary (codebook) of k-means centroids.

A visual vocabulary turns any image into a fixed-length vector by:
1. Clustering a large descriptor corpus into K "visual words" (offline)
2. Assigning each descriptor of an image to its nearest word
3. Counting word occurrences into a normalized histogram

The vocabulary is built once, saved as a flat text table, and shared
read-only by every later quantization run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import numpy as np

from ..errors import LoadError
from ..io.tables import format_float, parse_floats, read_rows, write_rows
from .kmeans import KMeansConfig, kmeans


@dataclass
class Vocabulary:
    """Ordered set of visual words.

    Attributes:
        words: Cluster centers, shape (n_words, dim); word i is row i
    """

    words: np.ndarray  # (n_words, dim) float64

    def __post_init__(self) -> None:
        """Validate shape and freeze the words."""
        words = np.array(self.words, dtype=np.float64)
        if words.size == 0 and words.ndim < 2:
            words = words.reshape(0, 0)
        if words.ndim != 2:
            raise ValueError(f"Words must be (n_words, dim), got {words.shape}")
        words.flags.writeable = False
        self.words = words

    @property
    def n_words(self) -> int:
        """Number of visual words."""
        return self.words.shape[0]

    @property
    def dim(self) -> int:
        """Dimension of each visual word."""
        return self.words.shape[1]

    def __len__(self) -> int:
        return self.n_words

    def save(self, path: str | Path, delimiter: str = "\t") -> None:
        """Save vocabulary as text, one word per line.

        Args:
            path: Output file path
            delimiter: Field separator
        """
        write_rows(path, ([format_float(v) for v in word] for word in self.words), delimiter)

    @classmethod
    def load(
        cls, path: str | Path, dim: int | None = None, delimiter: str = "\t"
    ) -> Vocabulary:
        """Load vocabulary written by ``save``.

        Args:
            path: Input file path
            dim: Expected word dimension, or None to accept the file's
            delimiter: Field separator

        Returns:
            Loaded vocabulary (empty if the file has no rows)

        Raises:
            LoadError: If the file is missing, rows differ in length, a value
                is not numeric, or the dimension is not ``dim``
        """
        words: list[list[float]] = []
        for line_number, fields in read_rows(path, delimiter):
            expected = dim if dim is not None else (len(words[0]) if words else len(fields))
            if len(fields) != expected:
                raise LoadError(
                    f"{path}:{line_number}: expected {expected} components, got {len(fields)}"
                )
            words.append(parse_floats(fields, path, line_number))

        if not words:
            return cls(np.empty((0, dim or 0), dtype=np.float64))
        return cls(np.array(words, dtype=np.float64))


def build_vocabulary(
    corpus: np.ndarray,
    k: int,
    config: KMeansConfig | None = None,
    cancel: Callable[[], bool] | None = None,
) -> Vocabulary:
    """Cluster a descriptor corpus into a vocabulary of k visual words.

    Only the final centroids are kept; cluster assignments are discarded.

    Args:
        corpus: Descriptors, shape (n, dim)
        k: Vocabulary size
        config: k-means parameters
        cancel: Checked once per k-means iteration

    Returns:
        Vocabulary with exactly k words

    Raises:
        BuildError: If the corpus is empty or k is not in [1, n]
    """
    config = config or KMeansConfig()
    if config.verbose:
        print(f"[Vocabulary] Clustering {len(corpus)} descriptors into {k} words")

    result = kmeans(corpus, k, config, cancel=cancel)

    if config.verbose:
        status = "converged" if result.converged else "stopped at max_iterations"
        print(
            f"[Vocabulary] {status} after {result.n_iter} iterations, "
            f"inertia={result.inertia:.4e}"
        )

    return Vocabulary(result.centroids)
