#!/usr/bin/env python3
"""Build the reference tables used for object recognition.

Each image in the directory is one reference object: its SIFT descriptors
and Laplacian-sign tags are written to the descriptions table, and its file
name to the objects table.

Usage:
    uv run python scripts/build_reference_db.py data/caltech10
    uv run python scripts/build_reference_db.py data/caltech10 \\
        --catalog data/objects.txt --descriptions data/descriptions.txt
"""

import argparse
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objrec import Config, FeatureDetector, ImageDirectory, ObjrecError, load_config
from objrec.io import build_reference_tables, write_descriptions, write_object_catalog


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Extract reference descriptors, one object per image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("image_dir", type=Path, help="Directory of reference images")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument(
        "--catalog",
        type=Path,
        default=Path("objects.txt"),
        help="Objects table output (default: objects.txt)",
    )
    parser.add_argument(
        "--descriptions",
        type=Path,
        default=Path("descriptions.txt"),
        help="Descriptions table output (default: descriptions.txt)",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config) if args.config else Config()
        images = ImageDirectory(args.image_dir)
    except (FileNotFoundError, ValueError, ObjrecError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    detector = FeatureDetector.from_config(config.detector)
    delimiter = config.recognition.delimiter

    print(f"Describing {len(images)} reference images in {args.image_dir}...")
    start_time = time.time()

    try:
        database, catalog = build_reference_tables(images.paths, detector, verbose=True)
    except ObjrecError as e:
        print(f"Error: {e}")
        sys.exit(1)

    write_object_catalog(args.catalog, catalog, delimiter=delimiter)
    write_descriptions(args.descriptions, database, delimiter=delimiter)

    elapsed = time.time() - start_time
    print()
    print(f"Objects: {len(catalog)} -> {args.catalog}")
    print(f"Descriptors: {len(database)} -> {args.descriptions}")
    print(f"Elapsed: {elapsed:.1f}s")


if __name__ == "__main__":
    main()
