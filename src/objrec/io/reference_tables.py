"""Reference database tables: loading, writing and building from images.

Two tab-separated tables describe the reference objects:

    objects table (one line per object):
        <object_id> TAB <name>

    descriptions table (one line per reference descriptor):
        <object_id> TAB <tag> TAB <v_1> TAB ... TAB <v_DIM>

Each table is parsed in a single streaming pass. Any malformed row fails the
whole load; no partially loaded database is ever returned.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import numpy as np

from ..errors import BuildError, LoadError
from ..features.detector import DESCRIPTOR_DIM, FeatureDetector
from ..recognition.database import ObjectCatalog, ReferenceDatabase
from .tables import format_float, parse_floats, parse_int, read_rows, write_rows


def load_object_catalog(path: str | Path, delimiter: str = "\t") -> ObjectCatalog:
    """Parse the objects table.

    Args:
        path: Objects table path
        delimiter: Field separator

    Returns:
        Catalog of object id -> name

    Raises:
        LoadError: If the file is missing, empty, or has a malformed or
            duplicate row
    """
    names: dict[int, str] = {}

    for line_number, fields in read_rows(path, delimiter):
        if len(fields) != 2:
            raise LoadError(
                f"{path}:{line_number}: expected 2 fields (object id, name), "
                f"got {len(fields)}"
            )

        object_id = parse_int(fields[0], path, line_number, "object id")
        if object_id < 0:
            raise LoadError(f"{path}:{line_number}: negative object id {object_id}")
        if object_id in names:
            raise LoadError(f"{path}:{line_number}: duplicate object id {object_id}")

        name = fields[1].strip()
        if not name:
            raise LoadError(f"{path}:{line_number}: empty name for object {object_id}")

        names[object_id] = name

    if not names:
        raise LoadError(f"No objects found in {path}")

    return ObjectCatalog(names)


def load_descriptions(
    path: str | Path,
    dim: int = DESCRIPTOR_DIM,
    delimiter: str = "\t",
) -> ReferenceDatabase:
    """Parse the descriptions table.

    Args:
        path: Descriptions table path
        dim: Expected feature vector dimension
        delimiter: Field separator

    Returns:
        Reference database in file row order

    Raises:
        LoadError: If the file is missing, empty, or any row has the wrong
            field count or a non-numeric field
    """
    expected_fields = 2 + dim
    object_ids: list[int] = []
    tags: list[int] = []
    vectors: list[list[float]] = []

    for line_number, fields in read_rows(path, delimiter):
        if len(fields) != expected_fields:
            raise LoadError(
                f"{path}:{line_number}: expected {expected_fields} fields "
                f"(object id, tag, {dim} components), got {len(fields)}"
            )

        object_ids.append(parse_int(fields[0], path, line_number, "object id"))
        tags.append(parse_int(fields[1], path, line_number, "tag"))
        vectors.append(parse_floats(fields[2:], path, line_number))

    if not vectors:
        raise LoadError(f"No descriptors found in {path}")

    return ReferenceDatabase(
        descriptors=np.array(vectors, dtype=np.float32),
        tags=np.array(tags, dtype=np.int64),
        object_ids=np.array(object_ids, dtype=np.int64),
    )


def load(
    catalog_path: str | Path,
    descriptions_path: str | Path,
    dim: int = DESCRIPTOR_DIM,
    delimiter: str = "\t",
) -> tuple[ReferenceDatabase, ObjectCatalog]:
    """Load the reference database and its object catalog.

    Args:
        catalog_path: Objects table path
        descriptions_path: Descriptions table path
        dim: Expected feature vector dimension
        delimiter: Field separator of both tables

    Returns:
        Tuple of (database, catalog)

    Raises:
        LoadError: If either table is missing or malformed, or the
            descriptions reference an object id the catalog does not have
    """
    catalog = load_object_catalog(catalog_path, delimiter)
    database = load_descriptions(descriptions_path, dim, delimiter)

    missing = database.missing_ids(catalog)
    if missing:
        raise LoadError(
            f"{descriptions_path}: object ids {sorted(missing)} "
            f"are not listed in {catalog_path}"
        )

    return database, catalog


def write_object_catalog(
    path: str | Path, catalog: ObjectCatalog, delimiter: str = "\t"
) -> int:
    """Write the objects table. Returns the number of rows written."""
    return write_rows(
        path,
        ([str(object_id), catalog[object_id]] for object_id in catalog),
        delimiter,
    )


def write_descriptions(
    path: str | Path, database: ReferenceDatabase, delimiter: str = "\t"
) -> int:
    """Write the descriptions table. Returns the number of rows written."""
    rows = (
        [str(entry.object_id), str(entry.tag)]
        + [format_float(v) for v in entry.vector]
        for entry in database
    )
    return write_rows(path, rows, delimiter)


def build_reference_tables(
    image_paths: Iterable[str | Path],
    detector: FeatureDetector,
    verbose: bool = False,
) -> tuple[ReferenceDatabase, ObjectCatalog]:
    """Describe one image per object with ``detector``.

    Object ids are assigned from 0 in input order and each object is named
    after its image file.

    Args:
        image_paths: One image per reference object
        detector: Feature detector producing descriptors and tags
        verbose: Print per-image descriptor counts

    Returns:
        Tuple of (database, catalog)

    Raises:
        DetectorError: If an image cannot be read
        BuildError: If no image produced any descriptor
    """
    names: dict[int, str] = {}
    descriptors: list[np.ndarray] = []
    tags: list[np.ndarray] = []
    object_ids: list[np.ndarray] = []

    for object_id, image_path in enumerate(image_paths):
        image_path = Path(image_path)
        features = detector.detect_file(image_path)
        names[object_id] = image_path.name

        if verbose:
            print(f"[Reference] {object_id}\t{image_path}\t{len(features)}")

        if len(features) == 0:
            continue
        descriptors.append(features.descriptors)
        tags.append(features.tags)
        object_ids.append(np.full(len(features), object_id, dtype=np.int64))

    if not descriptors:
        raise BuildError("No descriptors found in any reference image")

    database = ReferenceDatabase(
        descriptors=np.vstack(descriptors),
        tags=np.concatenate(tags),
        object_ids=np.concatenate(object_ids),
    )
    return database, ObjectCatalog(names)
