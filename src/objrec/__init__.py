"""Python ObjRec - object recognition and visual words from local features."""

__version__ = "0.1.0"

# Re-export main classes for convenient imports
from .config import Config, DetectorConfig, RecognitionConfig, VocabularyConfig, load_config
from .errors import (
    BuildError,
    ConfigError,
    DetectorError,
    LoadError,
    ObjrecError,
    OperationCancelled,
    QuantizeError,
)
from .features import DESCRIPTOR_DIM, FeatureDetector, Features, color_histogram
from .io import ImageDirectory, build_reference_tables, collect_descriptors, load
from .recognition import (
    ClassificationResult,
    LabeledDescriptor,
    NearestNeighborClassifier,
    ObjectCatalog,
    ReferenceDatabase,
    VoteTally,
    euclidean_distance,
)
from .vocabulary import (
    HistogramQuantizer,
    ImageHistogram,
    KMeansConfig,
    Vocabulary,
    build_vocabulary,
    kmeans,
    quantize,
)

__all__ = [
    "__version__",
    # Configuration
    "Config",
    "DetectorConfig",
    "RecognitionConfig",
    "VocabularyConfig",
    "KMeansConfig",
    "load_config",
    # Errors
    "ObjrecError",
    "LoadError",
    "BuildError",
    "QuantizeError",
    "DetectorError",
    "OperationCancelled",
    "ConfigError",
    # Features
    "DESCRIPTOR_DIM",
    "FeatureDetector",
    "Features",
    "color_histogram",
    # I/O
    "load",
    "build_reference_tables",
    "ImageDirectory",
    "collect_descriptors",
    # Recognition
    "LabeledDescriptor",
    "ObjectCatalog",
    "ReferenceDatabase",
    "VoteTally",
    "ClassificationResult",
    "NearestNeighborClassifier",
    "euclidean_distance",
    # Vocabulary
    "kmeans",
    "Vocabulary",
    "build_vocabulary",
    "HistogramQuantizer",
    "ImageHistogram",
    "quantize",
]
