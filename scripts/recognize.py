#!/usr/bin/env python3
"""Recognize objects in query images against the reference tables.

Loads the objects and descriptions tables once, then classifies each query
image by 1-NN voting over its SIFT descriptors. Queries given on the command
line are classified in order; without any, an interactive prompt reads file
names until EOF or "quit".

Usage:
    uv run python scripts/recognize.py --image-dir data/caltech10 image_0001.jpg
    uv run python scripts/recognize.py --catalog data/objects.txt \\
        --descriptions data/descriptions.txt --image-dir data/caltech10
"""

import argparse
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objrec import (
    Config,
    FeatureDetector,
    NearestNeighborClassifier,
    ObjrecError,
    load,
    load_config,
)


def recognize(
    classifier: NearestNeighborClassifier,
    detector: FeatureDetector,
    query_path: Path,
    vote_threshold: int,
) -> None:
    """Classify one query image and print the result."""
    start_time = time.time()

    features = detector.detect_file(query_path)
    print(f"Query keypoints: {len(features)}")

    result = classifier.classify_features(features)

    elapsed_ms = (time.time() - start_time) * 1000.0
    print(f"Result: {result.name} (object {result.object_id})")
    print(f"  Votes: {result.max_votes}/{result.total_votes}")
    if not result.has_votes:
        print("  No votes cast; result is the default object")
    elif not result.is_confident(vote_threshold):
        print(f"  Low confidence (fewer than {vote_threshold} votes)")
    print(f"Recognition Time = {elapsed_ms:.1f}ms")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Recognize objects by local feature voting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("queries", nargs="*", help="Query image file names")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument(
        "--catalog",
        type=Path,
        default=Path("objects.txt"),
        help="Objects table (default: objects.txt)",
    )
    parser.add_argument(
        "--descriptions",
        type=Path,
        default=Path("descriptions.txt"),
        help="Descriptions table (default: descriptions.txt)",
    )
    parser.add_argument(
        "--image-dir",
        type=Path,
        default=Path("."),
        help="Directory that query file names are relative to (default: .)",
    )
    args = parser.parse_args()

    start_time = time.time()

    try:
        config = load_config(args.config) if args.config else Config()

        print("Loading object catalog and reference descriptors ... ", end="", flush=True)
        database, catalog = load(
            args.catalog,
            args.descriptions,
            dim=config.recognition.dim,
            delimiter=config.recognition.delimiter,
        )
        classifier = NearestNeighborClassifier(database, catalog)
        print("OK")
    except (FileNotFoundError, ObjrecError) as e:
        print()
        print(f"Error: {e}")
        sys.exit(1)

    detector = FeatureDetector.from_config(config.detector)
    vote_threshold = config.recognition.vote_threshold

    elapsed_ms = (time.time() - start_time) * 1000.0
    print(f"Objects in database: {len(catalog)}")
    print(f"Keypoints in database: {len(database)}")
    print(f"Loading Models Time = {elapsed_ms:.1f}ms")

    if args.queries:
        failures = 0
        for query in args.queries:
            query_path = args.image_dir / query
            print(query_path)
            try:
                recognize(classifier, detector, query_path, vote_threshold)
            except ObjrecError as e:
                print(f"Error: {e}")
                failures += 1
        sys.exit(1 if failures else 0)

    while True:
        try:
            query = input("query? > ").strip()
        except EOFError:
            print()
            break

        if not query:
            continue
        if query in ("quit", "exit"):
            break

        query_path = args.image_dir / query
        print(query_path)
        try:
            recognize(classifier, detector, query_path, vote_threshold)
        except ObjrecError as e:
            print(f"Error: {e}")


if __name__ == "__main__":
    main()
