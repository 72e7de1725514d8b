"""
Issue generation — turns detector output into an ordered issue list.

Emission order is fixed and part of the contract:

    1. missing       (header order)
    2. duplicate     (at most one)
    3. inconsistent  (mixed types, header order)
    4. format        (partial number formatting, header order)
    5. outlier       (header order)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from qualitylens.services.duplicates import DuplicateReport
from qualitylens.services.missing_values import MissingReport
from qualitylens.services.statistics import OutlierReport
from qualitylens.services.type_inference import ColumnTypeInfo

ISSUE_TYPES = ("missing", "duplicate", "inconsistent", "format", "outlier")


@dataclass
class Issue:
    type: str
    severity: str  # low | medium | high
    description: str
    column: Optional[str] = None
    count: Optional[int] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        data = {"type": self.type, "severity": self.severity}
        if self.column is not None:
            data["column"] = self.column
        data["description"] = self.description
        if self.count is not None:
            data["count"] = self.count
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


def missing_severity(percentage: float) -> str:
    if percentage > 25:
        return "high"
    if percentage > 10:
        return "medium"
    return "low"


def outlier_severity(percentage: float) -> str:
    if percentage > 5:
        return "high"
    if percentage > 2:
        return "medium"
    return "low"


def generate_issues(
    headers: List[str],
    types: Dict[str, ColumnTypeInfo],
    missing: MissingReport,
    duplicates: DuplicateReport,
    number_format_splits: Dict[str, Tuple[int, int]],
    outliers: Dict[str, OutlierReport],
) -> List[Issue]:
    issues: List[Issue] = []

    for column in headers:
        data = missing.by_column[column]
        if data.count > 0:
            issues.append(Issue(
                type="missing",
                severity=missing_severity(data.percentage),
                column=column,
                description=f"{column} has {data.count} missing values ({data.percentage:.1f}%)",
                count=data.count,
            ))

    if duplicates.count > 0:
        issues.append(Issue(
            type="duplicate",
            severity="high",
            description=f"Found {duplicates.count} duplicate rows ({duplicates.percentage:.1f}%)",
            count=duplicates.count,
        ))

    for column in headers:
        info = types[column]
        if info.mixed_types:
            issues.append(Issue(
                type="inconsistent",
                severity="high" if info.confidence < 0.75 else "medium",
                column=column,
                description=f"{column} has mixed data types ({info.confidence * 100:.0f}% {info.type})",
                confidence=info.confidence,
            ))

    for column in headers:
        if column not in number_format_splits:
            continue
        formatted, plain = number_format_splits[column]
        if formatted > 0 and plain > 0:
            issues.append(Issue(
                type="format",
                severity="low",
                column=column,
                description=(
                    f"{column} has inconsistent number formatting "
                    f"({formatted} formatted, {plain} unformatted)"
                ),
                count=formatted + plain,
            ))

    for column in headers:
        report = outliers.get(column)
        if report is not None and report.count > 0:
            issues.append(Issue(
                type="outlier",
                severity=outlier_severity(report.percentage),
                column=column,
                description=f"{column} has {report.count} outliers ({report.percentage:.1f}%)",
                count=report.count,
            ))

    return issues
