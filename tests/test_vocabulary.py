"""Tests for Vocabulary construction and persistence."""

from pathlib import Path

import numpy as np
import pytest

from objrec.errors import BuildError, LoadError
from objrec.vocabulary import KMeansConfig, Vocabulary, build_vocabulary, quantize

CLUSTER_A = np.array(
    [
        [0.0, 0.0, 0.0, 0.0],
        [0.1, 0.0, 0.0, 0.0],
        [0.0, 0.1, 0.0, 0.0],
    ]
)
CLUSTER_B = np.array(
    [
        [5.0, 5.0, 5.0, 5.0],
        [5.1, 5.0, 5.0, 5.0],
        [5.0, 5.1, 5.0, 5.0],
    ]
)


class TestBuildVocabulary:
    """Test suite for build_vocabulary."""

    def test_two_obvious_clusters(self):
        corpus = np.vstack([CLUSTER_A, CLUSTER_B])

        vocabulary = build_vocabulary(corpus, 2, KMeansConfig(max_iterations=20, seed=0))

        assert vocabulary.n_words == 2
        assert vocabulary.dim == 4

        # Map cluster A to its vocabulary index
        distances = np.linalg.norm(vocabulary.words - CLUSTER_A.mean(axis=0), axis=1)
        word_a = int(np.argmin(distances))
        np.testing.assert_allclose(vocabulary.words[word_a], CLUSTER_A.mean(axis=0))
        np.testing.assert_allclose(vocabulary.words[1 - word_a], CLUSTER_B.mean(axis=0))

        histogram = quantize(np.array([[0.05, 0.05, 0.0, 0.0]]), vocabulary)
        assert histogram.bins[word_a] == 1.0
        assert histogram.bins[1 - word_a] == 0.0

    def test_vocabulary_size_is_exact(self):
        rng = np.random.default_rng(1)
        corpus = rng.normal(size=(50, 4))

        vocabulary = build_vocabulary(corpus, 7, KMeansConfig(init="random", seed=2))

        assert vocabulary.n_words == 7

    def test_empty_corpus(self):
        with pytest.raises(BuildError, match="Corpus is empty"):
            build_vocabulary(np.empty((0, 4)), 2)

    def test_k_exceeds_corpus(self):
        with pytest.raises(BuildError, match="exceeds corpus size"):
            build_vocabulary(CLUSTER_A, 4)


class TestVocabulary:
    """Test suite for Vocabulary."""

    def test_words_are_read_only(self):
        vocabulary = Vocabulary(np.ones((2, 3)))

        with pytest.raises(ValueError):
            vocabulary.words[0, 0] = 5.0

    def test_invalid_shape(self):
        with pytest.raises(ValueError, match="must be"):
            Vocabulary(np.ones(3))

    def test_save_and_load(self, tmp_path: Path):
        vocabulary = Vocabulary(np.vstack([CLUSTER_A.mean(axis=0), CLUSTER_B.mean(axis=0)]))
        path = tmp_path / "vocab" / "vocabulary.txt"

        vocabulary.save(path)
        loaded = Vocabulary.load(path, dim=4)

        assert path.read_text().count("\n") == 2
        np.testing.assert_array_equal(loaded.words, vocabulary.words)

    def test_load_empty_file(self, tmp_path: Path):
        path = tmp_path / "vocabulary.txt"
        path.write_text("")

        vocabulary = Vocabulary.load(path, dim=4)

        assert vocabulary.n_words == 0
        assert vocabulary.dim == 4

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(LoadError, match="Table not found"):
            Vocabulary.load(tmp_path / "nonexistent.txt")

    def test_load_ragged(self, tmp_path: Path):
        path = tmp_path / "vocabulary.txt"
        path.write_text("1\t2\t3\n4\t5\n")

        with pytest.raises(LoadError, match=r":2: expected 3 components, got 2"):
            Vocabulary.load(path)

    def test_load_wrong_dimension(self, tmp_path: Path):
        path = tmp_path / "vocabulary.txt"
        path.write_text("1\t2\t3\n")

        with pytest.raises(LoadError, match="expected 4 components"):
            Vocabulary.load(path, dim=4)

    def test_load_non_numeric(self, tmp_path: Path):
        path = tmp_path / "vocabulary.txt"
        path.write_text("1\tfoo\t3\n")

        with pytest.raises(LoadError, match="non-numeric value 'foo'"):
            Vocabulary.load(path)
