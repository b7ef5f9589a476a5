"""SIFT feature detection with Laplacian-sign descriptor tags."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

from ..errors import DetectorError

DESCRIPTOR_DIM = 128


def read_image(path: str | Path, grayscale: bool = True) -> np.ndarray:
    """Decode an image file.

    Args:
        path: Image file path
        grayscale: Load as single-channel uint8 (otherwise BGR)

    Returns:
        Decoded image array

    Raises:
        DetectorError: If the file does not exist or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise DetectorError(f"Image not found: {path}")

    flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    image = cv2.imread(str(path), flags)
    if image is None:
        raise DetectorError(f"Failed to decode image: {path}")
    return image


@dataclass
class Features:
    """Local features detected in one image.

    Attributes:
        keypoints: Tuple of OpenCV KeyPoint objects
        descriptors: Nx128 array of SIFT descriptors (float32)
        tags: (N,) array of Laplacian signs (+1 / -1), one per descriptor
    """

    keypoints: tuple[cv2.KeyPoint, ...]
    descriptors: np.ndarray  # (N, 128) float32
    tags: np.ndarray  # (N,) int32

    @classmethod
    def empty(cls, dim: int = DESCRIPTOR_DIM) -> Features:
        """Return a feature set with no keypoints."""
        return cls(
            keypoints=(),
            descriptors=np.empty((0, dim), dtype=np.float32),
            tags=np.empty(0, dtype=np.int32),
        )

    def __len__(self) -> int:
        """Return number of detected features."""
        return len(self.descriptors)


def laplacian_signs(image: np.ndarray, keypoints: tuple[cv2.KeyPoint, ...]) -> np.ndarray:
    """Compute the sign of the Laplacian at each keypoint.

    SIFT keypoints carry no polarity, so the tag is recovered the way SURF
    defines it: the sign of the trace of the Hessian of the image smoothed
    at the keypoint's scale. Bright blobs on a dark background get -1,
    dark blobs on a bright background get +1.

    Args:
        image: Grayscale image
        keypoints: Keypoints detected in ``image``

    Returns:
        (N,) int32 array of +1 / -1
    """
    height, width = image.shape[:2]
    source = image.astype(np.float32)
    tags = np.empty(len(keypoints), dtype=np.int32)

    # Laplacian responses keyed by smoothing scale, rounded to half pixels
    responses: dict[float, np.ndarray] = {}

    for i, kp in enumerate(keypoints):
        # OpenCV reports the keypoint diameter; the detection scale is half of it
        sigma = max(0.5, round(kp.size) / 2.0)
        response = responses.get(sigma)
        if response is None:
            smoothed = cv2.GaussianBlur(source, (0, 0), sigma)
            response = cv2.Laplacian(smoothed, cv2.CV_32F)
            responses[sigma] = response

        x = min(max(int(round(kp.pt[0])), 0), width - 1)
        y = min(max(int(round(kp.pt[1])), 0), height - 1)
        tags[i] = 1 if response[y, x] > 0 else -1

    return tags


class FeatureDetector:
    """SIFT detector producing 128-D descriptors and a polarity tag each.

    The tag partitions descriptors into two families that never match each
    other, which halves the reference scan and removes a class of false
    correspondences.
    """

    def __init__(
        self,
        n_features: int = 0,
        contrast_threshold: float = 0.04,
        edge_threshold: float = 10.0,
        sigma: float = 1.6,
    ) -> None:
        """Initialize SIFT detector.

        Args:
            n_features: Maximum number of features to retain (0 = no limit)
            contrast_threshold: Minimum DoG contrast for a keypoint. Higher
                values keep fewer, more stable keypoints.
            edge_threshold: Rejects edge-like responses; higher keeps more
            sigma: Gaussian sigma of the first pyramid octave
        """
        self._sift = cv2.SIFT_create(
            nfeatures=n_features,
            contrastThreshold=contrast_threshold,
            edgeThreshold=edge_threshold,
            sigma=sigma,
        )
        self._n_features = n_features

    @classmethod
    def from_config(cls, config) -> FeatureDetector:
        """Create a detector from a DetectorConfig."""
        return cls(
            n_features=config.n_features,
            contrast_threshold=config.contrast_threshold,
            edge_threshold=config.edge_threshold,
            sigma=config.sigma,
        )

    def detect(self, image: np.ndarray, mask: np.ndarray | None = None) -> Features:
        """Detect SIFT features in an image.

        Args:
            image: Grayscale image (uint8). BGR images are converted.
            mask: Optional binary mask where 255 = detect, 0 = ignore

        Returns:
            Features with descriptors and tags; empty when nothing is found
        """
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

        keypoints, descriptors = self._sift.detectAndCompute(image, mask)

        if descriptors is None or len(keypoints) == 0:
            return Features.empty()

        keypoints = tuple(keypoints)
        return Features(
            keypoints=keypoints,
            descriptors=descriptors.astype(np.float32),
            tags=laplacian_signs(image, keypoints),
        )

    def detect_file(self, path: str | Path) -> Features:
        """Load an image as grayscale and detect features in it.

        Raises:
            DetectorError: If the image cannot be read
        """
        return self.detect(read_image(path, grayscale=True))

    @property
    def n_features(self) -> int:
        """Return maximum number of features to detect."""
        return self._n_features
