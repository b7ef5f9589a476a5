"""Tests for ReferenceDatabase and ObjectCatalog."""

import numpy as np
import pytest

from objrec.recognition import LabeledDescriptor, ObjectCatalog, ReferenceDatabase


class TestObjectCatalog:
    """Test suite for ObjectCatalog."""

    def test_sorted_iteration(self):
        catalog = ObjectCatalog({3: "c", 0: "a", 1: "b"})

        assert list(catalog) == [0, 1, 3]
        assert catalog.ids == (0, 1, 3)
        assert len(catalog) == 3
        assert catalog[3] == "c"

    def test_unknown_id(self):
        catalog = ObjectCatalog({0: "a"})

        assert 1 not in catalog
        with pytest.raises(KeyError, match="not in the catalog"):
            catalog.name(1)

    def test_negative_id(self):
        with pytest.raises(ValueError, match="non-negative"):
            ObjectCatalog({-1: "a"})


class TestReferenceDatabase:
    """Test suite for ReferenceDatabase."""

    def test_rows(self):
        database = ReferenceDatabase(
            descriptors=[[1.0, 2.0], [3.0, 4.0]],
            tags=[1, -1],
            object_ids=[0, 5],
        )

        assert len(database) == 2
        assert database.dim == 2
        assert database.descriptors.dtype == np.float32

        entry = database[1]
        assert entry.tag == -1
        assert entry.object_id == 5
        np.testing.assert_array_equal(entry.vector, [3.0, 4.0])
        assert [e.object_id for e in database] == [0, 5]

    def test_read_only(self):
        database = ReferenceDatabase(descriptors=[[1.0, 2.0]], tags=[0], object_ids=[0])

        with pytest.raises(ValueError):
            database.tags[0] = 3

    def test_source_array_is_copied(self):
        source = np.array([[1.0, 2.0]], dtype=np.float32)
        database = ReferenceDatabase(descriptors=source, tags=[0], object_ids=[0])

        source[0, 0] = 9.0
        assert database.descriptors[0, 0] == 1.0

    def test_row_count_mismatch(self):
        with pytest.raises(ValueError, match="Row count mismatch"):
            ReferenceDatabase(descriptors=[[1.0], [2.0]], tags=[0], object_ids=[0, 0])

    def test_not_two_dimensional(self):
        with pytest.raises(ValueError, match="must be"):
            ReferenceDatabase(descriptors=[1.0, 2.0], tags=[0, 0], object_ids=[0, 0])

    def test_from_descriptors(self):
        database = ReferenceDatabase.from_descriptors(
            [
                LabeledDescriptor(vector=np.array([0.0, 1.0]), tag=1, object_id=2),
                LabeledDescriptor(vector=np.array([1.0, 0.0]), tag=-1, object_id=0),
            ]
        )

        assert list(database.object_ids) == [2, 0]
        assert database.missing_ids(ObjectCatalog({0: "a"})) == {2}

    def test_from_descriptors_empty(self):
        with pytest.raises(ValueError, match="without descriptors"):
            ReferenceDatabase.from_descriptors([])
