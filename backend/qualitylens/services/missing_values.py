"""Missing-value analysis — per-column / per-row tallies and completeness score."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from qualitylens.services.dataset import Dataset, is_missing

logger = logging.getLogger(__name__)

# Max points lost for missingness spread across every column
COLUMN_BREADTH_PENALTY = 15.0


@dataclass
class ColumnMissing:
    count: int = 0
    percentage: float = 0.0
    positions: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"count": self.count, "percentage": self.percentage, "positions": list(self.positions)}


@dataclass
class RowMissing:
    row_index: int
    missing_count: int
    percentage: float

    def to_dict(self) -> dict:
        return {
            "rowIndex": self.row_index,
            "missingCount": self.missing_count,
            "percentage": self.percentage,
        }


@dataclass
class MissingReport:
    by_column: Dict[str, ColumnMissing]
    by_row: List[RowMissing]
    total: int
    percentage: float
    completeness_score: float

    @property
    def columns_with_missing(self) -> int:
        return sum(1 for col in self.by_column.values() if col.count > 0)

    def to_dict(self) -> dict:
        return {
            "byColumn": {name: col.to_dict() for name, col in self.by_column.items()},
            "byRow": [row.to_dict() for row in self.by_row],
            "total": self.total,
            "percentage": self.percentage,
            "completenessScore": self.completeness_score,
        }


def _pct(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def find_missing_values(dataset: Dataset) -> MissingReport:
    """
    Tally null-like cells.

    completeness = 100 − % missing overall − (columns with any missing / columns) × 15
    The second term penalises *breadth*: the same number of holes spread over
    many columns costs more than if they sit in one.
    """
    headers = dataset.headers
    by_column: Dict[str, ColumnMissing] = {h: ColumnMissing() for h in headers}
    by_row: List[RowMissing] = []

    for row_index in range(dataset.row_count):
        missing_in_row = 0
        for header, value in zip(headers, dataset.row_values(row_index)):
            if is_missing(value):
                by_column[header].count += 1
                by_column[header].positions.append(row_index)
                missing_in_row += 1
        if missing_in_row > 0:
            by_row.append(
                RowMissing(
                    row_index=row_index,
                    missing_count=missing_in_row,
                    percentage=_pct(missing_in_row, len(headers)),
                )
            )

    for col in by_column.values():
        col.percentage = _pct(col.count, dataset.row_count)

    total_missing = sum(col.count for col in by_column.values())
    percent_missing = _pct(total_missing, dataset.total_cells)
    columns_with_missing = sum(1 for col in by_column.values() if col.count > 0)
    breadth_penalty = (columns_with_missing / len(headers)) * COLUMN_BREADTH_PENALTY if headers else 0.0

    report = MissingReport(
        by_column=by_column,
        by_row=by_row,
        total=total_missing,
        percentage=percent_missing,
        completeness_score=max(0.0, 100.0 - percent_missing - breadth_penalty),
    )
    logger.debug(
        "Missing values: %d cells (%.1f%%) across %d columns",
        total_missing, percent_missing, columns_with_missing,
    )
    return report
