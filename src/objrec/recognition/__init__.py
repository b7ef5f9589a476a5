"""Object recognition against a reference descriptor database.

Key components:
- ReferenceDatabase: labeled reference descriptors (read-only)
- ObjectCatalog: object id -> display name
- NearestNeighborClassifier: tag-filtered 1-NN search with per-object voting
"""

from .classifier import (
    VOTE_THRESHOLD,
    ClassificationResult,
    NearestNeighborClassifier,
    VoteTally,
    euclidean_distance,
)
from .database import LabeledDescriptor, ObjectCatalog, ReferenceDatabase

__all__ = [
    # Database
    "LabeledDescriptor",
    "ObjectCatalog",
    "ReferenceDatabase",
    # Classifier
    "ClassificationResult",
    "NearestNeighborClassifier",
    "VoteTally",
    "VOTE_THRESHOLD",
    "euclidean_distance",
]
