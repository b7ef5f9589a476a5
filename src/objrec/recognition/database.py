"""Reference descriptors and the object catalog used for recognition.

Both structures are built once (normally by ``objrec.io.load``) and are
read-only afterwards: the underlying numpy arrays are flagged non-writeable,
so they can be shared by any number of readers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np


@dataclass(frozen=True)
class LabeledDescriptor:
    """One reference descriptor and the object it was extracted from.

    Attributes:
        vector: Feature vector, shape (DIM,)
        tag: Detector tag (Laplacian sign); only equal tags are compared
        object_id: Catalog id of the source object
    """

    vector: np.ndarray
    tag: int
    object_id: int


class ObjectCatalog(Mapping):
    """Read-only mapping from object id to display name.

    Iterates in ascending object id order.
    """

    def __init__(self, names: Mapping[int, str]) -> None:
        catalog: dict[int, str] = {}
        for object_id in sorted(names):
            if object_id < 0:
                raise ValueError(f"Object ids must be non-negative, got {object_id}")
            catalog[int(object_id)] = str(names[object_id])
        self._names = catalog

    def __getitem__(self, object_id: int) -> str:
        return self._names[object_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ObjectCatalog({len(self)} objects)"

    def name(self, object_id: int) -> str:
        """Return the display name of an object.

        Raises:
            KeyError: If the id is not in the catalog
        """
        try:
            return self._names[object_id]
        except KeyError:
            raise KeyError(f"Object id {object_id} is not in the catalog") from None

    @property
    def ids(self) -> tuple[int, ...]:
        """Object ids in ascending order."""
        return tuple(self._names)


@dataclass
class ReferenceDatabase:
    """Labeled reference descriptors stored as one row per descriptor.

    Attributes:
        descriptors: Feature vectors, shape (R, DIM) float32
        tags: Detector tag per row, shape (R,)
        object_ids: Source object id per row, shape (R,)
    """

    descriptors: np.ndarray  # (R, DIM) float32
    tags: np.ndarray  # (R,) int64
    object_ids: np.ndarray  # (R,) int64

    def __post_init__(self) -> None:
        """Validate shapes and freeze the arrays."""
        descriptors = np.array(self.descriptors, dtype=np.float32)
        tags = np.array(self.tags, dtype=np.int64).reshape(-1)
        object_ids = np.array(self.object_ids, dtype=np.int64).reshape(-1)

        if descriptors.ndim != 2:
            raise ValueError(f"Descriptors must be (R, DIM), got {descriptors.shape}")
        if len(tags) != len(descriptors) or len(object_ids) != len(descriptors):
            raise ValueError(
                f"Row count mismatch: {len(descriptors)} descriptors, "
                f"{len(tags)} tags, {len(object_ids)} object ids"
            )

        for array in (descriptors, tags, object_ids):
            array.flags.writeable = False

        self.descriptors = descriptors
        self.tags = tags
        self.object_ids = object_ids

    @classmethod
    def from_descriptors(cls, rows: Iterable[LabeledDescriptor]) -> ReferenceDatabase:
        """Build a database from labeled descriptors, keeping their order."""
        rows = list(rows)
        if not rows:
            raise ValueError("Cannot build a reference database without descriptors")
        return cls(
            descriptors=np.stack([np.asarray(row.vector, dtype=np.float32) for row in rows]),
            tags=np.array([row.tag for row in rows]),
            object_ids=np.array([row.object_id for row in rows]),
        )

    @property
    def dim(self) -> int:
        """Feature vector dimension."""
        return self.descriptors.shape[1]

    def missing_ids(self, catalog: Mapping[int, str]) -> set[int]:
        """Return object ids used by the database but absent from ``catalog``."""
        return {int(i) for i in np.unique(self.object_ids) if int(i) not in catalog}

    def __len__(self) -> int:
        return len(self.descriptors)

    def __getitem__(self, index: int) -> LabeledDescriptor:
        return LabeledDescriptor(
            vector=self.descriptors[index],
            tag=int(self.tags[index]),
            object_id=int(self.object_ids[index]),
        )

    def __iter__(self) -> Iterator[LabeledDescriptor]:
        for index in range(len(self)):
            yield self[index]
