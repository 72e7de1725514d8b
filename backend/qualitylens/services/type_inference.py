"""
Type inference — classifies each column's dominant value type.

Every non-missing cell goes through an ordered predicate chain:

    boolean  →  number  →  date  →  string (fallback)

The first predicate that accepts the value wins. Tallies are then reduced to
a dominant type; ties resolve by TYPE_ORDER (first maximum wins).
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Tuple

from qualitylens.services.dataset import Cell, CellKind, Dataset

logger = logging.getLogger(__name__)


TYPE_ORDER = ("number", "string", "boolean", "date")

BOOLEAN_TOKENS = {"true", "false", "yes", "no", "1", "0"}

# Plain decimal / scientific notation. No thousands separators, no currency.
NUMERIC_RE = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$")

# (pattern, strptime format); strptime rejects impossible calendar dates
DATE_FORMATS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),   # YYYY-MM-DD
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),   # MM/DD/YYYY
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "%d-%m-%Y"),   # DD-MM-YYYY
]


@dataclass
class ColumnTypeInfo:
    """Result of type inference for a single column."""
    type: str
    confidence: float  # 0.0 - 1.0
    nullable: bool
    mixed_types: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "nullable": self.nullable,
            "mixedTypes": self.mixed_types,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────────────────────────

def looks_boolean(cell: Cell) -> bool:
    if cell.kind is CellKind.BOOLEAN:
        return True
    return cell.kind is CellKind.TEXT and cell.value.lower() in BOOLEAN_TOKENS


def looks_numeric(cell: Cell) -> bool:
    if cell.kind is CellKind.NUMBER:
        return True
    return cell.kind is CellKind.TEXT and bool(NUMERIC_RE.match(cell.value))


def looks_date(cell: Cell) -> bool:
    if cell.kind is not CellKind.TEXT:
        return False
    for pattern, fmt in DATE_FORMATS:
        if pattern.match(cell.value):
            try:
                datetime.strptime(cell.value, fmt)
                return True
            except ValueError:
                continue
    return False


PREDICATE_CHAIN: List[Tuple[str, Callable[[Cell], bool]]] = [
    ("boolean", looks_boolean),
    ("number", looks_numeric),
    ("date", looks_date),
]


def classify_cell(cell: Cell) -> str:
    for type_name, predicate in PREDICATE_CHAIN:
        if predicate(cell):
            return type_name
    return "string"


def classify_value(raw) -> str:
    """Classify a single non-missing value; falls through to 'string'."""
    return classify_cell(Cell.of(raw))


def parse_number(raw):
    """Float value of a cell, or None when it cannot be coerced."""
    cell = Cell.of(raw)
    if cell.kind is CellKind.NUMBER:
        return float(cell.value)
    if cell.kind is CellKind.TEXT and NUMERIC_RE.match(cell.value):
        return float(cell.value)
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Column-level inference
# ─────────────────────────────────────────────────────────────────────────────

def detect_data_type(values: list) -> ColumnTypeInfo:
    """Infer the dominant type for one column's raw values."""
    cells = [Cell.of(v) for v in values]
    present = [c for c in cells if not c.is_missing]

    if not present:
        return ColumnTypeInfo(type="empty", confidence=1.0, nullable=True)

    counts: Dict[str, int] = {name: 0 for name in TYPE_ORDER}
    for cell in present:
        counts[classify_cell(cell)] += 1

    total = len(present)
    dominant = TYPE_ORDER[0]
    for name in TYPE_ORDER[1:]:
        if counts[name] > counts[dominant]:
            dominant = name

    return ColumnTypeInfo(
        type=dominant,
        confidence=counts[dominant] / total,
        nullable=len(cells) > total,
        mixed_types=sum(1 for n in counts.values() if n > 0) > 1,
    )


def analyze_data_types(dataset: Dataset) -> Dict[str, ColumnTypeInfo]:
    types = {header: detect_data_type(values) for header, values in dataset.columns()}
    logger.debug("Inferred types for %d columns", len(types))
    return types
