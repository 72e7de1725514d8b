"""
Quality score aggregation — produces a 0-100 composite score.

Four dimensions, weighted:

    Completeness  40% — missing-value volume and breadth
    Uniqueness    30% — duplicate rows and low-cardinality columns
    Validity      20% — string-format homogeneity, null-token consistency
    Consistency   10% — mixed-type columns, mixed number formatting

Two penalties are then taken off the weighted base: one for the share of
columns with any missing value, one per numeric column whose values are only
partly symbol-formatted.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from qualitylens.services.dataset import Cell, Dataset
from qualitylens.services.duplicates import DuplicateReport
from qualitylens.services.missing_values import MissingReport
from qualitylens.services.type_inference import ColumnTypeInfo

logger = logging.getLogger(__name__)

WEIGHTS = {
    "completeness": 0.40,
    "uniqueness": 0.30,
    "validity": 0.20,
    "consistency": 0.10,
}

MIXED_FORMAT_POINTS = 2          # validity: >1 string format in a column
NULL_TOKEN_POINTS = 1            # validity: null tokens mixed with real values
NUMBER_FORMAT_CONSISTENCY_POINTS = 3
MISSING_COLUMNS_PENALTY = 20.0
FORMAT_ISSUES_POINTS = 5

NULL_TOKENS = {"", "null", "NULL", "N/A", "n/a", "-"}
NUMBER_SYMBOL_RE = re.compile(r"[$,()]")

# Checked in order; first match wins.
STRING_FORMATS: List[Tuple[str, re.Pattern]] = [
    ("numeric", re.compile(r"^[0-9]+$")),
    ("lowercase", re.compile(r"^[a-z]+$")),
    ("uppercase", re.compile(r"^[A-Z]+$")),
    ("lowercase-phrase", re.compile(r"^[a-z][a-z\s]*$")),
    ("titlecase-phrase", re.compile(r"^[A-Z][a-z\s]*$")),
]


@dataclass
class QualityScores:
    completeness: float
    uniqueness: float
    validity: float
    consistency: float

    def to_dict(self) -> dict:
        return {
            "completeness": self.completeness,
            "uniqueness": self.uniqueness,
            "validity": self.validity,
            "consistency": self.consistency,
        }


@dataclass
class ScoreBreakdown:
    """Final scores plus the penalty intermediates the issue generator reuses."""
    scores: QualityScores
    base_score: float
    missing_columns_penalty: float
    format_issues_penalty: float
    overall_score: float
    number_format_splits: Dict[str, Tuple[int, int]]  # column -> (formatted, plain)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def present_cells(values: list) -> List[Cell]:
    return [c for c in (Cell.of(v) for v in values) if not c.is_missing]


def string_format(text: str) -> str:
    for name, pattern in STRING_FORMATS:
        if pattern.match(text):
            return name
    return "mixed"


def number_format_split(values: list) -> Tuple[int, int]:
    """(symbol-decorated, plain) counts over a column's non-missing values."""
    formatted = 0
    plain = 0
    for cell in present_cells(values):
        if NUMBER_SYMBOL_RE.search(cell.as_text()):
            formatted += 1
        else:
            plain += 1
    return formatted, plain


def column_validity_issues(values: list, type_info: ColumnTypeInfo) -> int:
    cells = present_cells(values)
    if not cells:
        return 0

    issues = 0
    if type_info.type == "string":
        formats = {string_format(c.as_text()) for c in cells}
        if len(formats) > 1:
            issues += MIXED_FORMAT_POINTS

    null_like = sum(1 for c in cells if c.as_text() in NULL_TOKENS)
    if 0 < null_like < len(cells):
        issues += NULL_TOKEN_POINTS
    return issues


# ─────────────────────────────────────────────────────────────────────────────
# Dimensions
# ─────────────────────────────────────────────────────────────────────────────

def validity_score(dataset: Dataset, types: Dict[str, ColumnTypeInfo]) -> float:
    issues = sum(column_validity_issues(values, types[h]) for h, values in dataset.columns())
    return float(max(0, 100 - issues))


def consistency_score(
    dataset: Dataset,
    types: Dict[str, ColumnTypeInfo],
    splits: Dict[str, Tuple[int, int]],
) -> float:
    if not dataset.headers:
        return 100.0
    mixed = sum(1 for info in types.values() if info.mixed_types)
    mixed_penalty = (mixed / len(dataset.headers)) * 100
    format_penalty = sum(
        NUMBER_FORMAT_CONSISTENCY_POINTS
        for formatted, plain in splits.values()
        if formatted > 0 and plain > 0
    )
    return max(0.0, 100.0 - mixed_penalty - format_penalty)


def numeric_format_splits(dataset: Dataset, types: Dict[str, ColumnTypeInfo]) -> Dict[str, Tuple[int, int]]:
    return {
        header: number_format_split(values)
        for header, values in dataset.columns()
        if types[header].type == "number"
    }


def aggregate_scores(
    dataset: Dataset,
    types: Dict[str, ColumnTypeInfo],
    missing: MissingReport,
    duplicates: DuplicateReport,
) -> ScoreBreakdown:
    splits = numeric_format_splits(dataset, types)

    scores = QualityScores(
        completeness=missing.completeness_score,
        uniqueness=duplicates.uniqueness_score,
        validity=validity_score(dataset, types),
        consistency=consistency_score(dataset, types, splits),
    )
    base = sum(getattr(scores, name) * weight for name, weight in WEIGHTS.items())

    columns = len(dataset.headers)
    missing_columns_penalty = (
        (missing.columns_with_missing / columns) * MISSING_COLUMNS_PENALTY if columns else 0.0
    )
    format_issues_penalty = float(sum(
        FORMAT_ISSUES_POINTS
        for formatted, plain in splits.values()
        if formatted > 0 and plain > 0
    ))
    overall = max(0.0, base - missing_columns_penalty - format_issues_penalty)

    logger.debug(
        "Scores %s base=%.2f penalties=(%.2f, %.2f) overall=%.2f",
        scores.to_dict(), base, missing_columns_penalty, format_issues_penalty, overall,
    )
    return ScoreBreakdown(
        scores=scores,
        base_score=base,
        missing_columns_penalty=missing_columns_penalty,
        format_issues_penalty=format_issues_penalty,
        overall_score=min(overall, 100.0),
        number_format_splits=splits,
    )
