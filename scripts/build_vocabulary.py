#!/usr/bin/env python3
"""Build a visual vocabulary and the visual word histogram of every image.

This script:
1. Extracts SIFT descriptors from every image in a directory
2. Runs k-means clustering to find the visual words
3. Quantizes each image against the vocabulary into a normalized histogram

Usage:
    uv run python scripts/build_vocabulary.py data/caltech10
    uv run python scripts/build_vocabulary.py data/caltech10 --n-words 500 --seed 1
    uv run python scripts/build_vocabulary.py data/caltech10 --reuse-vocabulary

The vocabulary is written to vocabulary.txt (one word per line) and the
histograms to histograms.txt (image path followed by the bins) by default.
"""

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objrec import Config, FeatureDetector, ImageDirectory, ObjrecError, load_config
from objrec.io import collect_descriptors, iter_image_descriptors
from objrec.vocabulary import HistogramQuantizer, Vocabulary, build_vocabulary, write_histograms


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build a visual vocabulary and per-image histograms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("image_dir", type=Path, help="Directory of images")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument(
        "--n-words",
        type=int,
        default=None,
        help="Number of visual words (default: 500 or config value)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum k-means iterations (default: 10 or config value)",
    )
    parser.add_argument("--seed", type=int, default=None, help="k-means seed")
    parser.add_argument(
        "--vocabulary",
        type=Path,
        default=Path("vocabulary.txt"),
        help="Vocabulary file (default: vocabulary.txt)",
    )
    parser.add_argument(
        "--histograms",
        type=Path,
        default=Path("histograms.txt"),
        help="Histogram output file (default: histograms.txt)",
    )
    parser.add_argument(
        "--reuse-vocabulary",
        action="store_true",
        help="Load the vocabulary file instead of clustering",
    )
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    args = parser.parse_args()

    try:
        config = load_config(args.config) if args.config else Config()
    except (FileNotFoundError, ObjrecError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    kmeans_config = config.vocabulary.kmeans
    overrides = {}
    if args.max_iterations is not None:
        overrides["max_iterations"] = args.max_iterations
    if args.seed is not None:
        overrides["seed"] = args.seed
    try:
        kmeans_config = replace(kmeans_config, verbose=not args.quiet, **overrides)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    n_words = args.n_words if args.n_words is not None else config.vocabulary.n_words
    delimiter = config.recognition.delimiter
    verbose = not args.quiet

    try:
        images = ImageDirectory(args.image_dir)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    detector = FeatureDetector.from_config(config.detector)

    print("=" * 60)
    print("Visual Words")
    print("=" * 60)
    print(f"Image directory: {args.image_dir} ({len(images)} images)")
    print(f"Vocabulary file: {args.vocabulary}")
    print(f"Histogram file: {args.histograms}")
    if not args.reuse_vocabulary:
        print(f"Visual words: {n_words}")
    print()

    start_time = time.time()

    try:
        if args.reuse_vocabulary:
            print("Load Vocabulary ...")
            vocabulary = Vocabulary.load(
                args.vocabulary, dim=config.recognition.dim, delimiter=delimiter
            )
        else:
            print("Load Descriptors ...")
            corpus = collect_descriptors(images.paths, detector, verbose=verbose)

            print("Clustering ...")
            vocabulary = build_vocabulary(corpus, n_words, kmeans_config)
            vocabulary.save(args.vocabulary, delimiter=delimiter)

        print("Calc Histograms ...")
        quantizer = HistogramQuantizer(vocabulary)
        histograms = quantizer.quantize_images(iter_image_descriptors(images.paths, detector))
        count = write_histograms(args.histograms, histograms, delimiter=delimiter)
    except ObjrecError as e:
        print(f"Error: {e}")
        sys.exit(1)

    elapsed = time.time() - start_time

    print()
    print("=" * 60)
    print(f"Vocabulary: {vocabulary.n_words} words of dimension {vocabulary.dim}")
    print(f"Histograms written: {count} -> {args.histograms}")
    print(f"Elapsed: {elapsed:.1f}s")
    print("=" * 60)


if __name__ == "__main__":
    main()
