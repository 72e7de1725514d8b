"""
Explanation & recommendation templates — plain-language text and example SQL
for every issue type. Pure functions, no I/O.
"""

import re
from typing import Any, Dict, List, Optional

TABLE_NAME = "dataset_table"


def _humanize_column(column: Optional[str]) -> str:
    return f'Column "{column}"'


def _parenthetical(description: str) -> str:
    match = re.search(r"\((.*)\)", description or "")
    return match.group(1) if match else ""


def explain_issue(issue: Dict[str, Any]) -> Dict[str, str]:
    kind = issue.get("type")
    col = _humanize_column(issue.get("column"))
    count = issue.get("count")

    if kind == "missing":
        return {
            "title": f"{col} has missing values",
            "text": (
                f"{col} is missing {count} value(s) ({_parenthetical(issue.get('description', ''))}). "
                "These missing values can cause incomplete analysis and errors."
            ),
        }
    if kind == "duplicate":
        return {
            "title": "Duplicate rows detected",
            "text": (
                f"The dataset contains {count} duplicate row(s). "
                "Duplicate rows can bias aggregates and reporting."
            ),
        }
    if kind == "inconsistent":
        confidence = round((issue.get("confidence") or 0) * 100)
        return {
            "title": f"{col} has mixed data types",
            "text": (
                f"{col} contains values of different types or formats which reduces "
                f"reliability (confidence {confidence}%)."
            ),
        }
    if kind == "format":
        return {
            "title": f"{col} has inconsistent formatting",
            "text": (
                f"{col} shows mixed formatting (e.g. some values use currency symbols or commas). "
                "This makes numeric aggregation unreliable."
            ),
        }
    if kind == "outlier":
        return {
            "title": f"Outliers in {issue.get('column')}",
            "text": (
                f"{col} has {count} outlier(s) ({issue.get('description', '')}). "
                "Outliers can skew averages and should be reviewed."
            ),
        }
    return {
        "title": kind or "Issue",
        "text": issue.get("description") or "An issue was detected.",
    }


def generate_explanations(
    issues: List[Dict[str, Any]], column_stats: Optional[Dict[str, Any]] = None
) -> List[Dict[str, str]]:
    """One {title, text} explanation per issue, in issue order."""
    return [explain_issue(issue) for issue in issues]


def _recommend(issue: Dict[str, Any]) -> Optional[Dict[str, str]]:
    kind = issue.get("type")
    col = issue.get("column")

    if kind == "missing":
        sql = (
            f"UPDATE {TABLE_NAME}\n"
            f"SET \"{col}\" = 'UNKNOWN'\n"
            f"WHERE \"{col}\" IS NULL;"
        )
        return {
            "title": f"Fill or handle missing values in {col}",
            "recommendation": (
                "Decide on a strategy: remove rows, fill with a default, or impute values. "
                f"Example SQL to set NULLs to a default:\n\n{sql}"
            ),
            "sql": f"-- Replace NULLs in {col}\n{sql}",
        }

    if kind == "duplicate":
        return {
            "title": "Remove duplicate rows",
            "recommendation": (
                "Identify and remove duplicates based on a primary key or by exact-match. "
                "Example (Postgres):\n\n"
                "WITH dedup AS (\n"
                "  SELECT ctid, ROW_NUMBER() OVER (PARTITION BY t.*) AS rn\n"
                f"  FROM {TABLE_NAME} t\n"
                ")\n"
                f"DELETE FROM {TABLE_NAME}\n"
                "WHERE ctid IN (SELECT ctid FROM dedup WHERE rn > 1);"
            ),
            "sql": (
                "-- Remove exact duplicate rows (example approach, adapt for your DB)\n"
                f"DELETE FROM {TABLE_NAME} a\n"
                f"USING {TABLE_NAME} b\n"
                "WHERE a.ctid < b.ctid\n"
                "  AND a.col1 = b.col1\n"
                "  AND a.col2 = b.col2;"
            ),
        }

    if kind in ("inconsistent", "format"):
        return {
            "title": f"Standardize {col} formatting",
            "recommendation": (
                "Normalize values (remove currency symbols, trim whitespace, unify date formats). "
                "Example SQL to strip symbols and cast to numeric:\n\n"
                f"UPDATE {TABLE_NAME}\n"
                f"SET \"{col}\" = REPLACE(REPLACE(\"{col}\", '$', ''), ',', '')::numeric\n"
                f"WHERE \"{col}\" IS NOT NULL;"
            ),
            "sql": (
                "-- Strip currency symbols and cast to numeric\n"
                f"UPDATE {TABLE_NAME}\n"
                f"SET \"{col}\" = CAST(REGEXP_REPLACE(\"{col}\", '[^0-9.-]', '', 'g') AS NUMERIC)\n"
                f"WHERE \"{col}\" IS NOT NULL;"
            ),
        }

    if kind == "outlier":
        return {
            "title": f"Review outliers in {col}",
            "recommendation": (
                "Inspect and decide to cap, remove, or keep outliers. "
                "Example SQL to find extreme values:\n\n"
                f"SELECT * FROM {TABLE_NAME}\n"
                f"ORDER BY \"{col}\" DESC\n"
                "LIMIT 50;"
            ),
            "sql": (
                f"-- Select potential outliers in {col}\n"
                f"SELECT * FROM {TABLE_NAME}\n"
                f"WHERE \"{col}\" IS NOT NULL\n"
                f"ORDER BY \"{col}\" DESC\n"
                "LIMIT 100;"
            ),
        }

    return None


GENERAL_CLEANUP = {
    "title": "General cleanup",
    "recommendation": (
        "Run a schema validation and normalize formats. Consider using a staging table "
        "to transform and validate before inserting into the production table."
    ),
    "sql": "-- Example: create staging table, load raw data, run transformations, then insert into final table",
}


def generate_recommendations(
    issues: List[Dict[str, Any]], column_stats: Optional[Dict[str, Any]] = None
) -> List[Dict[str, str]]:
    """Remediation steps with example SQL; a general cleanup entry when nothing applies."""
    recommendations = [rec for rec in (_recommend(issue) for issue in issues) if rec]
    if not recommendations:
        recommendations.append(dict(GENERAL_CLEANUP))
    return recommendations
