"""Delimited text tables shared by the reference, vocabulary and histogram files.

Every table is plain text, one record per line, fields separated by a single
delimiter (tab by default). Blank lines are ignored and a single trailing
delimiter is tolerated (older histogram files end every line with one).
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from ..errors import LoadError


def read_rows(path: str | Path, delimiter: str = "\t") -> Iterator[tuple[int, list[str]]]:
    """Stream the records of a table.

    Args:
        path: Table file path
        delimiter: Field separator

    Yields:
        (line_number, fields) for every non-blank line, line numbers from 1

    Raises:
        LoadError: If the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f"Table not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            if line.endswith(delimiter):
                line = line[: -len(delimiter)]
            yield line_number, line.split(delimiter)


def parse_int(value: str, path: str | Path, line_number: int, what: str) -> int:
    """Parse an integer field, raising LoadError with the row location."""
    try:
        return int(value.strip())
    except ValueError as e:
        raise LoadError(f"{path}:{line_number}: invalid {what} '{value}'") from e


def parse_floats(values: Sequence[str], path: str | Path, line_number: int) -> list[float]:
    """Parse finite float fields, raising LoadError with the row location."""
    parsed = []
    for column, value in enumerate(values, start=1):
        try:
            number = float(value)
        except ValueError as e:
            raise LoadError(
                f"{path}:{line_number}: non-numeric value '{value}' in column {column}"
            ) from e
        if not math.isfinite(number):
            raise LoadError(
                f"{path}:{line_number}: non-finite value '{value}' in column {column}"
            )
        parsed.append(number)
    return parsed


def format_float(value: float) -> str:
    """Shortest text that reads back to the same float."""
    return repr(float(value))


def write_rows(
    path: str | Path,
    rows: Iterable[Sequence[str]],
    delimiter: str = "\t",
) -> int:
    """Write records to a table, creating parent directories.

    Rows go to a temporary file beside ``path`` that replaces it only once
    every row is written. If ``rows`` raises, the temporary file is removed
    and ``path`` is left as it was.

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = path.with_name(path.name + ".partial")

    count = 0
    try:
        with open(partial_path, "w", encoding="utf-8") as f:
            for row in rows:
                f.write(delimiter.join(row))
                f.write("\n")
                count += 1
    except BaseException:
        partial_path.unlink(missing_ok=True)
        raise

    partial_path.replace(path)
    return count
