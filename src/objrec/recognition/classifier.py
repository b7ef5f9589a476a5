"""Object recognition by 1-NN descriptor matching and per-object voting.

For every query descriptor the reference database is scanned for the closest
descriptor (Euclidean distance) among those with the same tag. The object
that owns that reference descriptor receives one vote, and the object with
the most votes is the recognition result.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from ..errors import LoadError, OperationCancelled
from .database import ObjectCatalog, ReferenceDatabase

VOTE_THRESHOLD = 50


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two vectors of equal length."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vector shapes differ: {a.shape} vs {b.shape}")
    diff = a - b
    return float(np.sqrt(np.dot(diff, diff)))


class VoteTally:
    """Vote counter with one slot per object id.

    Sized once from the object ids it is created with; voting for an id
    outside that set is an error rather than a resize.
    """

    def __init__(self, object_ids: Iterable[int]) -> None:
        ids = sorted({int(i) for i in object_ids})
        if not ids:
            raise ValueError("VoteTally needs at least one object id")
        self._object_ids = np.array(ids, dtype=np.int64)
        self._slots = {object_id: slot for slot, object_id in enumerate(ids)}
        self._votes = np.zeros(len(ids), dtype=np.int64)

    @classmethod
    def for_catalog(cls, catalog: Mapping[int, str]) -> VoteTally:
        """Create an empty tally covering every object in ``catalog``."""
        return cls(catalog.keys())

    def reset(self) -> None:
        """Zero every count."""
        self._votes[:] = 0

    def add(self, object_id: int, count: int = 1) -> None:
        """Add votes for an object.

        Raises:
            KeyError: If the object id has no slot in this tally
        """
        try:
            slot = self._slots[object_id]
        except KeyError:
            raise KeyError(f"Object id {object_id} is not in the tally") from None
        self._votes[slot] += count

    def votes(self, object_id: int) -> int:
        """Return the vote count of an object."""
        return int(self._votes[self._slots[object_id]])

    def winner(self) -> int:
        """Object id with the most votes; the lowest id wins ties."""
        # argmax returns the first maximum and slots are in ascending id order
        return int(self._object_ids[int(np.argmax(self._votes))])

    @property
    def object_ids(self) -> tuple[int, ...]:
        """Object ids in slot order (ascending)."""
        return tuple(int(i) for i in self._object_ids)

    @property
    def max_votes(self) -> int:
        """Highest vote count of any object."""
        return int(self._votes.max())

    @property
    def total_votes(self) -> int:
        """Number of votes cast."""
        return int(self._votes.sum())

    def as_dict(self) -> dict[int, int]:
        """Return {object_id: votes} in ascending id order."""
        return {int(i): int(v) for i, v in zip(self._object_ids, self._votes)}

    def __len__(self) -> int:
        return len(self._object_ids)


@dataclass
class ClassificationResult:
    """Outcome of classifying one query image.

    Attributes:
        object_id: Winning object id
        name: Display name of the winning object
        votes: Vote count per object id, ascending id order
        max_votes: Votes of the winning object
        total_votes: Votes cast over all objects
        num_descriptors: Number of query descriptors
    """

    object_id: int
    name: str
    votes: dict[int, int]
    max_votes: int
    total_votes: int
    num_descriptors: int

    @property
    def has_votes(self) -> bool:
        """False when no query descriptor found a same-tag reference."""
        return self.total_votes > 0

    @property
    def confidence(self) -> float:
        """Fraction of votes won by the winner, 0.0 without votes."""
        if self.total_votes == 0:
            return 0.0
        return self.max_votes / self.total_votes

    def is_confident(self, vote_threshold: int = VOTE_THRESHOLD) -> bool:
        """Return True if the winner collected at least ``vote_threshold`` votes."""
        return self.max_votes >= vote_threshold


class NearestNeighborClassifier:
    """Brute-force 1-NN classifier over a reference database.

    The database and catalog are treated as read-only for the lifetime of
    the classifier. Classification is O(Q x R x DIM) for Q query and R
    reference descriptors.
    """

    def __init__(self, database: ReferenceDatabase, catalog: ObjectCatalog) -> None:
        """Initialize classifier.

        Args:
            database: Reference descriptors
            catalog: Names of the objects referenced by ``database``

        Raises:
            LoadError: If the catalog is empty or the database uses object
                ids that the catalog does not list
        """
        if len(catalog) == 0:
            raise LoadError("Object catalog is empty")
        missing = database.missing_ids(catalog)
        if missing:
            raise LoadError(
                f"Reference database uses object ids missing from the catalog: "
                f"{sorted(missing)}"
            )

        self._database = database
        self._catalog = catalog

        # Row indices per tag, in database order
        self._rows_by_tag: dict[int, np.ndarray] = {
            int(tag): np.flatnonzero(database.tags == tag)
            for tag in np.unique(database.tags)
        }

    @property
    def database(self) -> ReferenceDatabase:
        return self._database

    @property
    def catalog(self) -> ObjectCatalog:
        return self._catalog

    @property
    def num_objects(self) -> int:
        """Number of objects in the catalog."""
        return len(self._catalog)

    def new_tally(self) -> VoteTally:
        """Return an empty tally sized for this classifier's catalog."""
        return VoteTally.for_catalog(self._catalog)

    def search_nn(self, vector: np.ndarray, tag: int) -> int | None:
        """Find the object owning the nearest same-tag reference descriptor.

        Reference rows with a different tag are never compared. Among rows at
        the same minimum distance, the first in database order wins.

        Args:
            vector: Query feature vector, shape (DIM,)
            tag: Query descriptor tag

        Returns:
            Object id of the nearest reference descriptor, or None if no
            reference descriptor has this tag
        """
        rows = self._rows_by_tag.get(int(tag))
        if rows is None:
            return None

        candidates = self._database.descriptors[rows]
        diff = np.subtract(candidates, vector, dtype=np.float64)
        distances = np.sqrt(np.einsum("ij,ij->i", diff, diff))
        nearest = rows[int(np.argmin(distances))]
        return int(self._database.object_ids[nearest])

    def vote(
        self,
        descriptors: np.ndarray | None,
        tags: np.ndarray | None,
        tally: VoteTally | None = None,
        cancel: Callable[[], bool] | None = None,
    ) -> ClassificationResult:
        """Classify a query image and report its vote counts.

        Args:
            descriptors: Query descriptors, shape (Q, DIM). None or an empty
                array is a valid query that casts no votes.
            tags: Query tags, shape (Q,)
            tally: Caller-owned tally to reuse; it is reset before voting.
                Must cover exactly this classifier's catalog.
            cancel: Called before each query descriptor; returning True
                stops classification

        Returns:
            ClassificationResult with the winner (lowest id among ties,
            lowest catalog id when no votes were cast)

        Raises:
            ValueError: If descriptor dimension or tag count is wrong
            OperationCancelled: If ``cancel`` returned True
        """
        descriptors, tags = self._validate_query(descriptors, tags)

        if tally is None:
            tally = self.new_tally()
        elif tally.object_ids != self._catalog.ids:
            raise ValueError("Tally does not match the classifier's object catalog")
        tally.reset()

        for i, (vector, tag) in enumerate(zip(descriptors, tags)):
            if cancel is not None and cancel():
                raise OperationCancelled(
                    f"Classification cancelled after {i} of {len(descriptors)} descriptors"
                )
            object_id = self.search_nn(vector, tag)
            if object_id is not None:
                tally.add(object_id)

        winner = tally.winner()
        return ClassificationResult(
            object_id=winner,
            name=self._catalog.name(winner),
            votes=tally.as_dict(),
            max_votes=tally.max_votes,
            total_votes=tally.total_votes,
            num_descriptors=len(descriptors),
        )

    def classify(
        self,
        descriptors: np.ndarray | None,
        tags: np.ndarray | None,
        cancel: Callable[[], bool] | None = None,
    ) -> int:
        """Return the object id recognised from the query descriptors."""
        return self.vote(descriptors, tags, cancel=cancel).object_id

    def classify_features(
        self, features, cancel: Callable[[], bool] | None = None
    ) -> ClassificationResult:
        """Classify a detector ``Features`` result."""
        return self.vote(features.descriptors, features.tags, cancel=cancel)

    def _validate_query(
        self, descriptors: np.ndarray | None, tags: np.ndarray | None
    ) -> tuple[np.ndarray, np.ndarray]:
        """Normalise query arrays to (Q, DIM) float32 and (Q,) int64."""
        dim = self._database.dim

        if descriptors is None:
            descriptors = np.empty((0, dim), dtype=np.float32)
        descriptors = np.asarray(descriptors, dtype=np.float32)
        if descriptors.size == 0:
            descriptors = descriptors.reshape(0, dim)

        if tags is None:
            tags = np.empty(0, dtype=np.int64)
        tags = np.asarray(tags, dtype=np.int64).reshape(-1)

        if descriptors.ndim != 2 or descriptors.shape[1] != dim:
            raise ValueError(
                f"Query descriptors must be (Q, {dim}), got {descriptors.shape}"
            )
        if len(tags) != len(descriptors):
            raise ValueError(
                f"Got {len(tags)} tags for {len(descriptors)} query descriptors"
            )

        return descriptors, tags
