"""Tests for reference table loading, writing and building."""

from pathlib import Path

import numpy as np
import pytest

from objrec.errors import BuildError, LoadError
from objrec.features import Features
from objrec.io import (
    build_reference_tables,
    load,
    load_descriptions,
    load_object_catalog,
    write_descriptions,
    write_object_catalog,
)
from objrec.recognition import NearestNeighborClassifier

DIM = 4


@pytest.fixture
def tables(tmp_path: Path) -> tuple[Path, Path]:
    """Write a 3-object catalog and 6 descriptors of dimension 4.

    Args:
        tmp_path: Pytest temporary directory fixture

    Returns:
        Tuple of (catalog path, descriptions path)
    """
    catalog_path = tmp_path / "objects.txt"
    catalog_path.write_text("0\tcup.jpg\n1\tbook.jpg\n2\tphone.jpg\n")

    descriptions_path = tmp_path / "descriptions.txt"
    descriptions_path.write_text(
        "0\t1\t0.0\t0.0\t0.0\t0.0\n"
        "0\t-1\t0.0\t0.0\t0.0\t1.0\n"
        "1\t1\t10.0\t0.0\t0.0\t0.0\n"
        "1\t-1\t10.0\t0.0\t0.0\t1.0\n"
        "2\t1\t0.0\t10.0\t0.0\t0.0\n"
        "2\t-1\t0.0\t10.0\t0.0\t1.0\n"
    )
    return catalog_path, descriptions_path


class FakeDetector:
    """Detector returning canned features per file name."""

    def __init__(self, features: dict[str, Features]) -> None:
        self._features = features

    def detect_file(self, path) -> Features:
        return self._features[Path(path).name]


def make_features(vectors: list[list[float]], tags: list[int]) -> Features:
    return Features(
        keypoints=(),
        descriptors=np.array(vectors, dtype=np.float32).reshape(-1, DIM),
        tags=np.array(tags, dtype=np.int32),
    )


class TestLoad:
    """Test suite for loading the reference tables."""

    def test_load(self, tables: tuple[Path, Path]):
        database, catalog = load(*tables, dim=DIM)

        assert len(database) == 6
        assert database.dim == DIM
        assert list(database.object_ids) == [0, 0, 1, 1, 2, 2]
        assert list(database.tags) == [1, -1, 1, -1, 1, -1]
        np.testing.assert_array_equal(database.descriptors[3], [10.0, 0.0, 0.0, 1.0])
        assert dict(catalog) == {0: "cup.jpg", 1: "book.jpg", 2: "phone.jpg"}

    def test_loaded_database_is_read_only(self, tables: tuple[Path, Path]):
        database, _ = load(*tables, dim=DIM)

        with pytest.raises(ValueError):
            database.descriptors[0, 0] = 1.0

    def test_loaded_tables_classify(self, tables: tuple[Path, Path]):
        database, catalog = load(*tables, dim=DIM)
        classifier = NearestNeighborClassifier(database, catalog)

        result = classifier.vote(np.array([[9.0, 0.0, 0.0, 1.0]]), np.array([-1]))
        assert result.name == "book.jpg"

    def test_trailing_delimiter_and_blank_lines(self, tmp_path: Path):
        catalog_path = tmp_path / "objects.txt"
        catalog_path.write_text("0\tcup\t\n\n1\tbook\n")
        descriptions_path = tmp_path / "descriptions.txt"
        descriptions_path.write_text("0\t1\t1\t2\t3\t4\t\n\n1\t1\t5\t6\t7\t8\n")

        database, catalog = load(catalog_path, descriptions_path, dim=DIM)

        assert len(database) == 2
        assert catalog.name(0) == "cup"

    def test_missing_catalog(self, tmp_path: Path, tables: tuple[Path, Path]):
        with pytest.raises(LoadError, match="Table not found"):
            load(tmp_path / "nonexistent.txt", tables[1], dim=DIM)

    def test_missing_descriptions(self, tmp_path: Path, tables: tuple[Path, Path]):
        with pytest.raises(LoadError, match="Table not found"):
            load(tables[0], tmp_path / "nonexistent.txt", dim=DIM)

    def test_short_row(self, tmp_path: Path):
        path = tmp_path / "descriptions.txt"
        path.write_text("0\t1\t1\t2\t3\t4\n0\t1\t1\t2\t3\n")

        with pytest.raises(LoadError, match=r":2: expected 6 fields"):
            load_descriptions(path, dim=DIM)

    def test_long_row(self, tmp_path: Path):
        path = tmp_path / "descriptions.txt"
        path.write_text("0\t1\t1\t2\t3\t4\t5\n")

        with pytest.raises(LoadError, match="got 7"):
            load_descriptions(path, dim=DIM)

    def test_non_numeric_component(self, tmp_path: Path):
        path = tmp_path / "descriptions.txt"
        path.write_text("0\t1\t1\t2\tabc\t4\n")

        with pytest.raises(LoadError, match="non-numeric value 'abc' in column 3"):
            load_descriptions(path, dim=DIM)

    def test_non_integer_tag(self, tmp_path: Path):
        path = tmp_path / "descriptions.txt"
        path.write_text("0\tx\t1\t2\t3\t4\n")

        with pytest.raises(LoadError, match="invalid tag 'x'"):
            load_descriptions(path, dim=DIM)

    def test_empty_descriptions(self, tmp_path: Path):
        path = tmp_path / "descriptions.txt"
        path.write_text("\n")

        with pytest.raises(LoadError, match="No descriptors found"):
            load_descriptions(path, dim=DIM)

    def test_object_missing_from_catalog(self, tmp_path: Path, tables: tuple[Path, Path]):
        catalog_path = tmp_path / "short_catalog.txt"
        catalog_path.write_text("0\tcup.jpg\n1\tbook.jpg\n")

        with pytest.raises(LoadError, match=r"object ids \[2\] are not listed"):
            load(catalog_path, tables[1], dim=DIM)

    def test_catalog_wrong_field_count(self, tmp_path: Path):
        path = tmp_path / "objects.txt"
        path.write_text("0\tcup\n1\n")

        with pytest.raises(LoadError, match=r":2: expected 2 fields"):
            load_object_catalog(path)

    def test_catalog_duplicate_id(self, tmp_path: Path):
        path = tmp_path / "objects.txt"
        path.write_text("0\tcup\n0\tbook\n")

        with pytest.raises(LoadError, match="duplicate object id 0"):
            load_object_catalog(path)

    def test_catalog_negative_id(self, tmp_path: Path):
        path = tmp_path / "objects.txt"
        path.write_text("-1\tcup\n")

        with pytest.raises(LoadError, match="negative object id"):
            load_object_catalog(path)

    def test_catalog_empty(self, tmp_path: Path):
        path = tmp_path / "objects.txt"
        path.write_text("")

        with pytest.raises(LoadError, match="No objects found"):
            load_object_catalog(path)


class TestWrite:
    """Test suite for writing reference tables."""

    def test_written_tables_load_back(self, tmp_path: Path, tables: tuple[Path, Path]):
        database, catalog = load(*tables, dim=DIM)
        catalog_path = tmp_path / "out" / "objects.txt"
        descriptions_path = tmp_path / "out" / "descriptions.txt"

        assert write_object_catalog(catalog_path, catalog) == 3
        assert write_descriptions(descriptions_path, database) == 6

        reloaded, reloaded_catalog = load(catalog_path, descriptions_path, dim=DIM)
        np.testing.assert_array_equal(reloaded.descriptors, database.descriptors)
        np.testing.assert_array_equal(reloaded.tags, database.tags)
        np.testing.assert_array_equal(reloaded.object_ids, database.object_ids)
        assert dict(reloaded_catalog) == dict(catalog)


class TestBuildReferenceTables:
    """Test suite for build_reference_tables."""

    def test_one_object_per_image(self):
        detector = FakeDetector(
            {
                "a.png": make_features([[1, 0, 0, 0], [2, 0, 0, 0]], [1, -1]),
                "b.png": make_features([], []),
                "c.png": make_features([[0, 3, 0, 0]], [1]),
            }
        )

        database, catalog = build_reference_tables(["x/a.png", "x/b.png", "x/c.png"], detector)

        assert dict(catalog) == {0: "a.png", 1: "b.png", 2: "c.png"}
        assert list(database.object_ids) == [0, 0, 2]
        assert list(database.tags) == [1, -1, 1]
        assert database.dim == DIM

    def test_no_descriptors(self):
        detector = FakeDetector({"a.png": make_features([], [])})

        with pytest.raises(BuildError, match="No descriptors found"):
            build_reference_tables(["a.png"], detector)
