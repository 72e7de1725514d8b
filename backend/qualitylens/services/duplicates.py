"""
Duplicate detection — duplicate rows plus a low-cardinality penalty.

Row fingerprint: the row's values under every header, each rendered as a
canonical token, *sorted*, then serialised. Sorting makes the fingerprint
blind to which column a value sits in, so ``{a: 1, b: 2}`` and
``{a: 2, b: 1}`` collapse into one class. Known hazard, tracked as an open
question in DESIGN.md.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from qualitylens.services.dataset import Cell, Dataset

logger = logging.getLogger(__name__)

CARDINALITY_THRESHOLD = 0.8
CARDINALITY_PENALTY_SCALE = 10.0


@dataclass
class DuplicateRow:
    original_row: int
    duplicate_row: int
    data: dict

    def to_dict(self) -> dict:
        return {"originalRow": self.original_row, "duplicateRow": self.duplicate_row, "data": self.data}


@dataclass
class DuplicateReport:
    count: int
    percentage: float
    duplicates: List[DuplicateRow] = field(default_factory=list)
    uniqueness_score: float = 100.0

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "percentage": self.percentage,
            "duplicates": [d.to_dict() for d in self.duplicates],
            "uniquenessScore": self.uniqueness_score,
        }


def row_fingerprint(values: list) -> str:
    tokens = sorted(Cell.of(v).token() for v in values)
    return json.dumps(tokens, ensure_ascii=False)


def distinct_present(values: list) -> int:
    """Number of distinct non-missing values (1 and '1' are distinct, 1 and 1.0 are not)."""
    cells = [Cell.of(v) for v in values]
    return len({c.token() for c in cells if not c.is_missing})


def cardinality_penalty(dataset: Dataset) -> float:
    """Σ (0.8 − ratio) × 10 over columns whose unique/non-missing ratio is below 0.8."""
    penalty = 0.0
    for _, values in dataset.columns():
        present = [v for v in values if not Cell.of(v).is_missing]
        if not present:
            continue
        ratio = distinct_present(present) / len(present)
        if ratio < CARDINALITY_THRESHOLD:
            penalty += (CARDINALITY_THRESHOLD - ratio) * CARDINALITY_PENALTY_SCALE
    return penalty


def find_duplicates(dataset: Dataset) -> DuplicateReport:
    """First row of each fingerprint class is the original; later rows reference it."""
    seen: Dict[str, int] = {}
    duplicates: List[DuplicateRow] = []

    for index in range(dataset.row_count):
        fingerprint = row_fingerprint(dataset.row_values(index))
        if fingerprint in seen:
            duplicates.append(
                DuplicateRow(
                    original_row=seen[fingerprint],
                    duplicate_row=index,
                    data=dataset.row_dict(index),
                )
            )
        else:
            seen[fingerprint] = index

    rows = dataset.row_count
    percentage = (len(duplicates) / rows) * 100 if rows > 0 else 0.0
    penalty = cardinality_penalty(dataset)
    uniqueness = max(0.0, 100.0 - percentage - penalty)

    logger.debug(
        "Duplicates: %d of %d rows, cardinality penalty %.2f", len(duplicates), rows, penalty
    )
    return DuplicateReport(
        count=len(duplicates),
        percentage=percentage,
        duplicates=duplicates,
        uniqueness_score=uniqueness,
    )
