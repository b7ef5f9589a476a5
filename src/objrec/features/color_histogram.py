"""64-colour histogram (4 levels per RGB channel)."""

from __future__ import annotations

from pathlib import Path

import numpy as np

N_COLOR_BINS = 64


def rgb_to_bin(red, green, blue):
    """Map RGB values (0-255 each) to their 64-colour bin index.

    Works on plain ints and elementwise on integer numpy arrays.
    """
    return 16 * (red // 64) + 4 * (green // 64) + blue // 64


def color_histogram(image: np.ndarray) -> np.ndarray:
    """Count pixels per 64-colour bin.

    Args:
        image: BGR uint8 image, shape (H, W, 3), as returned by cv2.imread

    Returns:
        (64,) int64 pixel counts
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected a BGR image of shape (H, W, 3), got {image.shape}")

    pixels = image.reshape(-1, 3).astype(np.int64)
    bins = rgb_to_bin(pixels[:, 2], pixels[:, 1], pixels[:, 0])
    return np.bincount(bins, minlength=N_COLOR_BINS)


def write_color_histogram(path: str | Path, histogram: np.ndarray) -> None:
    """Write one bin count per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for count in histogram:
            f.write(f"{int(count)}\n")
