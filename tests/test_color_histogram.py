"""Tests for the 64-colour histogram."""

from pathlib import Path

import numpy as np
import pytest

from objrec.features import N_COLOR_BINS, color_histogram, rgb_to_bin, write_color_histogram


class TestColorHistogram:
    """Test suite for colour histograms."""

    @pytest.mark.parametrize(
        "rgb, expected",
        [
            ((0, 0, 0), 0),
            ((255, 255, 255), 63),
            ((64, 0, 0), 16),
            ((0, 64, 0), 4),
            ((0, 0, 64), 1),
            ((63, 127, 191), 0 + 4 + 2),
        ],
    )
    def test_rgb_to_bin(self, rgb, expected):
        assert rgb_to_bin(*rgb) == expected

    def test_counts(self):
        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)  # BGR pure blue
        image[0, 1] = (0, 0, 255)  # BGR pure red

        histogram = color_histogram(image)

        assert histogram.shape == (N_COLOR_BINS,)
        assert histogram.sum() == 6
        assert histogram[0] == 4
        assert histogram[rgb_to_bin(0, 0, 255)] == 1
        assert histogram[rgb_to_bin(255, 0, 0)] == 1

    def test_every_pixel_lands_in_its_bin(self):
        rng = np.random.default_rng(4)
        image = rng.integers(0, 256, size=(5, 7, 3), dtype=np.uint8)

        histogram = color_histogram(image)

        expected = np.zeros(N_COLOR_BINS, dtype=np.int64)
        for blue, green, red in image.reshape(-1, 3):
            expected[rgb_to_bin(int(red), int(green), int(blue))] += 1
        np.testing.assert_array_equal(histogram, expected)

    def test_rgb_to_bin_on_arrays(self):
        bins = rgb_to_bin(np.array([0, 255]), np.array([0, 255]), np.array([64, 255]))
        np.testing.assert_array_equal(bins, [1, 63])

    def test_rejects_grayscale(self):
        with pytest.raises(ValueError, match="BGR image"):
            color_histogram(np.zeros((4, 4), dtype=np.uint8))

    def test_write(self, tmp_path: Path):
        histogram = color_histogram(np.full((2, 2, 3), 255, dtype=np.uint8))
        path = tmp_path / "out" / "histogram.txt"

        write_color_histogram(path, histogram)

        lines = path.read_text().splitlines()
        assert len(lines) == N_COLOR_BINS
        assert lines[63] == "4"
        assert lines[0] == "0"
