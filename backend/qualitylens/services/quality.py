"""
Quality analysis engine — runs every detector over a Dataset and assembles
the QualityAnalysis handed to the explanation, report, history and insight
collaborators.

Per-column profiling (type, statistics, outliers) is independent per column
and can be fanned out over a thread pool; the duplicate pass is row-global.
All results are joined before scoring.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from qualitylens.services.dataset import Cell, Dataset
from qualitylens.services.duplicates import DuplicateReport, distinct_present, find_duplicates
from qualitylens.services.explanations import generate_explanations, generate_recommendations
from qualitylens.services.issues import Issue, generate_issues
from qualitylens.services.missing_values import ColumnMissing, MissingReport, find_missing_values
from qualitylens.services.scoring import QualityScores, aggregate_scores
from qualitylens.services.statistics import (
    ColumnStatistics,
    OutlierReport,
    calculate_statistics,
    detect_outliers,
)
from qualitylens.services.type_inference import ColumnTypeInfo, detect_data_type

logger = logging.getLogger(__name__)


@dataclass
class ColumnProfile:
    type: ColumnTypeInfo
    missing: Optional[ColumnMissing] = None
    unique: int = 0
    unique_percentage: float = 0.0
    statistics: Optional[ColumnStatistics] = None
    outliers: Optional[OutlierReport] = None

    def to_dict(self) -> dict:
        data = {
            "type": self.type.to_dict(),
            "missing": self.missing.to_dict() if self.missing else None,
            "unique": self.unique,
            "uniquePercentage": self.unique_percentage,
        }
        if self.type.type == "number":
            data["statistics"] = self.statistics.to_dict() if self.statistics else None
            data["outliers"] = self.outliers.to_dict() if self.outliers else None
        return data


@dataclass
class QualityAnalysis:
    overall_score: float
    scores: QualityScores
    missing_values: MissingReport
    duplicates: DuplicateReport
    data_types: Dict[str, ColumnTypeInfo]
    column_stats: Dict[str, ColumnProfile]
    issues: List[Issue]
    summary: dict
    explanations: List[dict] = field(default_factory=list)
    recommendations: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Stable, JSON-serialisable camelCase form."""
        return {
            "overallScore": self.overall_score,
            "scores": self.scores.to_dict(),
            "missingValues": self.missing_values.to_dict(),
            "duplicates": self.duplicates.to_dict(),
            "dataTypes": {col: info.to_dict() for col, info in self.data_types.items()},
            "columnStats": {col: prof.to_dict() for col, prof in self.column_stats.items()},
            "issues": [issue.to_dict() for issue in self.issues],
            "explanations": list(self.explanations),
            "recommendations": list(self.recommendations),
            "summary": dict(self.summary),
        }


def profile_column(values: list) -> ColumnProfile:
    """Type, cardinality and (for numeric columns) statistics + outliers."""
    type_info = detect_data_type(values)
    profile = ColumnProfile(
        type=type_info,
        unique=distinct_present(values),
        unique_percentage=(
            len({Cell.of(v).token() for v in values}) / len(values) * 100 if values else 0.0
        ),
    )
    if type_info.type == "number":
        profile.statistics = calculate_statistics(values)
        profile.outliers = detect_outliers(values, profile.statistics)
    return profile


def _profile_columns(dataset: Dataset, max_workers: Optional[int]) -> Dict[str, ColumnProfile]:
    columns = list(dataset.columns())
    if max_workers and max_workers > 1 and len(columns) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            profiles = list(pool.map(lambda item: profile_column(item[1]), columns))
    else:
        profiles = [profile_column(values) for _, values in columns]
    return {header: profile for (header, _), profile in zip(columns, profiles)}


def analyze_data_quality(
    dataset: Dataset,
    max_workers: Optional[int] = None,
    include_guidance: bool = True,
) -> QualityAnalysis:
    """
    Full quality analysis of a Dataset.

    Never raises for a structurally valid Dataset: zero rows, all-missing
    columns and header/row-key mismatches all produce defined values.
    """
    headers = list(dataset.headers)

    # ── Column-wise passes (parallelisable) ──────────────────────────
    column_stats = _profile_columns(dataset, max_workers)
    data_types = {h: column_stats[h].type for h in headers}

    # ── Row-global passes ────────────────────────────────────────────
    missing = find_missing_values(dataset)
    duplicates = find_duplicates(dataset)
    for header in headers:
        column_stats[header].missing = missing.by_column[header]

    # ── Scores ───────────────────────────────────────────────────────
    breakdown = aggregate_scores(dataset, data_types, missing, duplicates)

    # ── Issues ───────────────────────────────────────────────────────
    outliers = {h: p.outliers for h, p in column_stats.items() if p.outliers is not None}
    issues = generate_issues(
        headers,
        data_types,
        missing,
        duplicates,
        breakdown.number_format_splits,
        outliers,
    )

    analysis = QualityAnalysis(
        overall_score=breakdown.overall_score,
        scores=breakdown.scores,
        missing_values=missing,
        duplicates=duplicates,
        data_types=data_types,
        column_stats=column_stats,
        issues=issues,
        summary={
            "totalRows": dataset.row_count,
            "totalColumns": dataset.column_count,
            "totalCells": dataset.total_cells,
            "missingCells": missing.total,
            "duplicateRows": duplicates.count,
            "issueCount": len(issues),
        },
    )

    if include_guidance:
        issue_dicts = [issue.to_dict() for issue in issues]
        stats_dicts = {col: prof.to_dict() for col, prof in column_stats.items()}
        analysis.explanations = generate_explanations(issue_dicts, stats_dicts)
        analysis.recommendations = generate_recommendations(issue_dicts, stats_dicts)

    logger.info(
        "Analysed %d rows × %d columns: overall %.1f, %d issues",
        dataset.row_count, dataset.column_count, analysis.overall_score, len(issues),
    )
    return analysis


def calculate_quality_score(dataset: Dataset) -> float:
    """Composite 0-100 score rounded to two decimals."""
    return round(analyze_data_quality(dataset, include_guidance=False).overall_score, 2)
