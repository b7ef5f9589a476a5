#!/usr/bin/env python3
"""Compute the 64-colour histogram of an image.

Each RGB channel is reduced to 4 levels (4 x 4 x 4 = 64 colours) and the
pixel count of every colour is written to the output file, one per line.

Usage:
    uv run python scripts/color_histogram.py image.jpg image_hist.txt
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objrec import DetectorError
from objrec.features import color_histogram, read_image, write_color_histogram


def main() -> None:
    parser = argparse.ArgumentParser(description="64-colour histogram of an image")
    parser.add_argument("image", type=Path, help="Input image file")
    parser.add_argument("histogram", type=Path, help="Output histogram file")
    args = parser.parse_args()

    print(f"{args.image} -> {args.histogram}", end="")

    try:
        image = read_image(args.image, grayscale=False)
    except DetectorError as e:
        print()
        print(f"Error: {e}")
        sys.exit(1)

    write_color_histogram(args.histogram, color_histogram(image))
    print(" ... OK")


if __name__ == "__main__":
    main()
