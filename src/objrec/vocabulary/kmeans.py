"""Lloyd's k-means clustering used to build visual vocabularies.

Each iteration runs two steps:
1. Assignment: every vector goes to its nearest centroid (squared Euclidean)
2. Update: every centroid becomes the mean of its assigned vectors

The update step is a full reduction over the corpus and finishes before the
next assignment starts. Iteration stops once no centroid moves further than
the tolerance, or after the configured number of iterations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.cluster import kmeans_plusplus

from ..errors import BuildError, OperationCancelled

INIT_METHODS = ("random", "k-means++")
EMPTY_CLUSTER_STRATEGIES = ("farthest", "keep")


@dataclass
class KMeansConfig:
    """Configuration for k-means clustering."""

    max_iterations: int = 10  # Hard bound on Lloyd iterations
    tolerance: float = 1e-3  # Converged when no centroid moves further than this
    init: str = "k-means++"  # "random" or "k-means++"
    seed: int = 0  # Seed for initialization
    empty_cluster: str = "farthest"  # "farthest" or "keep"
    chunk_size: int = 4096  # Corpus rows per distance block
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.init not in INIT_METHODS:
            raise ValueError(f"init must be one of {INIT_METHODS}, got '{self.init}'")
        if self.empty_cluster not in EMPTY_CLUSTER_STRATEGIES:
            raise ValueError(
                f"empty_cluster must be one of {EMPTY_CLUSTER_STRATEGIES}, "
                f"got '{self.empty_cluster}'"
            )
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")


@dataclass
class KMeansResult:
    """Result of k-means clustering.

    Attributes:
        centroids: Final cluster centers, shape (k, dim)
        labels: Cluster index of every corpus vector, shape (n,)
        n_iter: Iterations run
        converged: Whether the tolerance was reached before max_iterations
        inertia: Sum of squared distances to the assigned centroids
    """

    centroids: np.ndarray
    labels: np.ndarray
    n_iter: int
    converged: bool
    inertia: float


def assign_clusters(
    data: np.ndarray, centroids: np.ndarray, chunk_size: int = 4096
) -> tuple[np.ndarray, np.ndarray]:
    """Assign every vector to its nearest centroid.

    Ties go to the lowest centroid index.

    Args:
        data: Vectors, shape (n, dim)
        centroids: Cluster centers, shape (k, dim)
        chunk_size: Rows per distance block, bounds memory to chunk_size x k

    Returns:
        Tuple of (labels (n,), squared distances to assigned centroid (n,))
    """
    n = len(data)
    labels = np.empty(n, dtype=np.intp)
    sq_distances = np.empty(n, dtype=np.float64)

    for start in range(0, n, chunk_size):
        stop = min(start + chunk_size, n)
        block = cdist(data[start:stop], centroids, "sqeuclidean")
        nearest = np.argmin(block, axis=1)
        labels[start:stop] = nearest
        sq_distances[start:stop] = block[np.arange(stop - start), nearest]

    return labels, sq_distances


def _initial_centroids(data: np.ndarray, k: int, config: KMeansConfig) -> np.ndarray:
    if config.init == "random":
        rng = np.random.default_rng(config.seed)
        indices = rng.choice(len(data), size=k, replace=False)
        return data[np.sort(indices)].copy()

    centers, _ = kmeans_plusplus(data, n_clusters=k, random_state=config.seed)
    return np.asarray(centers, dtype=np.float64)


def _update_centroids(
    data: np.ndarray,
    labels: np.ndarray,
    sq_distances: np.ndarray,
    centroids: np.ndarray,
    empty_cluster: str,
) -> tuple[np.ndarray, int]:
    """Recompute centroids as member means.

    Returns:
        Tuple of (new centroids, number of clusters that were empty)
    """
    k, dim = centroids.shape
    counts = np.bincount(labels, minlength=k)
    sums = np.zeros((k, dim), dtype=np.float64)
    np.add.at(sums, labels, data)

    new_centroids = centroids.copy()
    filled = counts > 0
    new_centroids[filled] = sums[filled] / counts[filled, np.newaxis]

    empty = np.flatnonzero(~filled)
    if len(empty) > 0 and empty_cluster == "farthest":
        # Farthest points first; stable sort keeps corpus order among equals
        farthest = np.argsort(-sq_distances, kind="stable")
        for cluster, point in zip(empty, farthest):
            new_centroids[cluster] = data[point]

    return new_centroids, len(empty)


def kmeans(
    data: np.ndarray,
    k: int,
    config: KMeansConfig | None = None,
    cancel: Callable[[], bool] | None = None,
) -> KMeansResult:
    """Cluster vectors into k groups with Lloyd's algorithm.

    Deterministic for a fixed ``config.seed``. A cluster that ends up with
    no members is either re-seeded from the point farthest from its centroid
    or left where it was (``config.empty_cluster``); k never shrinks.

    Args:
        data: Corpus, shape (n, dim)
        k: Number of clusters
        config: Clustering parameters
        cancel: Called before each iteration; returning True stops clustering

    Returns:
        KMeansResult with the final centroids

    Raises:
        BuildError: If the corpus is empty or not 2-D, or k is not in [1, n]
        OperationCancelled: If ``cancel`` returned True
    """
    config = config or KMeansConfig()
    data = np.asarray(data, dtype=np.float64)

    if data.ndim != 2:
        raise BuildError(f"Corpus must be (n, dim), got shape {data.shape}")
    if len(data) == 0:
        raise BuildError("Corpus is empty")
    if k < 1:
        raise BuildError(f"Number of clusters must be >= 1, got {k}")
    if k > len(data):
        raise BuildError(f"Number of clusters ({k}) exceeds corpus size ({len(data)})")

    centroids = _initial_centroids(data, k, config)
    converged = False
    n_iter = 0

    for n_iter in range(1, config.max_iterations + 1):
        if cancel is not None and cancel():
            raise OperationCancelled(f"k-means cancelled before iteration {n_iter}")

        labels, sq_distances = assign_clusters(data, centroids, config.chunk_size)
        new_centroids, n_empty = _update_centroids(
            data, labels, sq_distances, centroids, config.empty_cluster
        )
        shift = float(np.max(np.linalg.norm(new_centroids - centroids, axis=1)))
        centroids = new_centroids

        if config.verbose:
            print(
                f"[KMeans] iter {n_iter}: inertia={sq_distances.sum():.4e} "
                f"shift={shift:.4e} empty={n_empty}"
            )

        if shift <= config.tolerance:
            converged = True
            break

    labels, sq_distances = assign_clusters(data, centroids, config.chunk_size)

    return KMeansResult(
        centroids=centroids,
        labels=labels,
        n_iter=n_iter,
        converged=converged,
        inertia=float(sq_distances.sum()),
    )
