"""
Dataset & Cell — the immutable input handed to the quality engine.

A Dataset is an ordered list of headers plus an ordered list of row records
keyed by header. Each raw cell is read through ``Cell.of`` which tags it as
NULL / NUMBER / TEXT / BOOLEAN so the rest of the engine never has to guess
at Python's implicit coercions (``True == 1``, ``1 == 1.0`` …).
"""

from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence


class CellKind(str, Enum):
    NULL = "null"
    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Cell:
    """A tagged cell value."""
    kind: CellKind
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> "Cell":
        if raw is None:
            return cls(CellKind.NULL)
        # bool first: it is an int subclass
        if isinstance(raw, bool):
            return cls(CellKind.BOOLEAN, raw)
        if isinstance(raw, numbers.Real):
            if math.isnan(raw):
                return cls(CellKind.NULL)
            return cls(CellKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(CellKind.TEXT, raw)
        # Anything else (dates, decimals …) is treated as its text form
        return cls(CellKind.TEXT, str(raw))

    @property
    def is_missing(self) -> bool:
        if self.kind is CellKind.NULL:
            return True
        return self.kind is CellKind.TEXT and self.value.strip() == ""

    def as_text(self) -> str:
        """Render the cell the way a spreadsheet user would read it."""
        if self.kind is CellKind.NULL:
            return ""
        if self.kind is CellKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is CellKind.NUMBER:
            return format_number(self.value)
        return self.value

    def token(self) -> str:
        """Canonical serialisation used for fingerprints and distinct counts."""
        if self.kind is CellKind.NULL:
            return "null"
        if self.kind is CellKind.TEXT:
            return json.dumps(self.value, ensure_ascii=False)
        return self.as_text()


def format_number(value: float) -> str:
    """1.0 -> '1', 2.5 -> '2.5', inf -> 'Infinity'."""
    if isinstance(value, float):
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def is_missing(raw: Any) -> bool:
    """Null / absent, NaN, empty string or whitespace-only string."""
    return Cell.of(raw).is_missing


@dataclass(frozen=True, init=False)
class Dataset:
    """
    Immutable tabular input.

    ``rows`` are stored as read-only mappings; a key absent from a row reads
    as a missing value rather than raising.
    """
    headers: tuple
    rows: tuple

    def __init__(self, headers: Sequence[str], rows: Sequence[Mapping[str, Any]] = ()):
        object.__setattr__(self, "headers", tuple(headers))
        object.__setattr__(
            self, "rows", tuple(MappingProxyType(dict(row)) for row in rows)
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def total_cells(self) -> int:
        return self.row_count * self.column_count

    def column(self, header: str) -> list:
        """Raw values of one column in row order (absent keys -> None)."""
        return [row.get(header) for row in self.rows]

    def columns(self) -> Iterator[tuple[str, list]]:
        for header in self.headers:
            yield header, self.column(header)

    def row_values(self, index: int) -> list:
        row = self.rows[index]
        return [row.get(header) for header in self.headers]

    def row_dict(self, index: int) -> dict:
        return dict(self.rows[index])
