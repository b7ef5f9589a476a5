"""Visual vocabulary construction and histogram quantization.

Key components:
- kmeans: Lloyd's k-means used to find the visual words
- Vocabulary: ordered visual words, saved as a text table
- HistogramQuantizer: nearest-word kd-tree and normalized histograms
"""

from .kmeans import KMeansConfig, KMeansResult, assign_clusters, kmeans
from .quantizer import (
    HistogramQuantizer,
    ImageHistogram,
    quantize,
    read_histograms,
    write_histograms,
)
from .vocabulary import Vocabulary, build_vocabulary

__all__ = [
    # Clustering
    "KMeansConfig",
    "KMeansResult",
    "assign_clusters",
    "kmeans",
    # Vocabulary
    "Vocabulary",
    "build_vocabulary",
    # Histograms
    "HistogramQuantizer",
    "ImageHistogram",
    "quantize",
    "read_histograms",
    "write_histograms",
]
