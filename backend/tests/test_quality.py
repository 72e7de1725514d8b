"""
Tests for the end-to-end quality analysis.

Run with:
    pytest backend/tests/test_quality.py -v
"""

from __future__ import annotations

import sys
import os

# ── Make the backend package importable without installing it ──────────────
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json

import pytest

from qualitylens.services.dataset import Dataset
from qualitylens.services.quality import (
    analyze_data_quality,
    calculate_quality_score,
    profile_column,
)


def small_dataset() -> Dataset:
    return Dataset(
        ["id", "age"],
        [{"id": 1, "age": 30}, {"id": 2, "age": None}, {"id": 1, "age": 30}],
    )


# ═════════════════════════════════════════════════════════════════════════════
# End-to-end
# ═════════════════════════════════════════════════════════════════════════════

class TestAnalyzeDataQuality:

    def test_missing_values(self):
        result = analyze_data_quality(small_dataset())
        age = result.missing_values.by_column["age"]
        assert age.count == 1
        assert age.percentage == pytest.approx(100 / 3)

    def test_duplicates(self):
        result = analyze_data_quality(small_dataset())
        assert result.duplicates.count == 1
        assert result.duplicates.duplicates[0].original_row == 0
        assert result.duplicates.duplicates[0].duplicate_row == 2

    def test_missing_issue_precedes_duplicate_issue(self):
        issues = analyze_data_quality(small_dataset()).issues
        assert [(i.type, i.column, i.severity) for i in issues] == [
            ("missing", "age", "high"),
            ("duplicate", None, "high"),
        ]

    def test_scores(self):
        result = analyze_data_quality(small_dataset())
        assert result.scores.completeness == pytest.approx(100 - 100 / 6 - 7.5)
        assert result.scores.uniqueness == pytest.approx(100 - 100 / 3 - (0.8 - 2 / 3) * 10 - 3.0)
        assert result.scores.validity == 100.0
        assert result.scores.consistency == 100.0
        assert result.overall_score == pytest.approx(69.0333, abs=1e-3)

    def test_summary(self):
        summary = analyze_data_quality(small_dataset()).summary
        assert summary == {
            "totalRows": 3,
            "totalColumns": 2,
            "totalCells": 6,
            "missingCells": 1,
            "duplicateRows": 1,
            "issueCount": 2,
        }

    def test_column_stats(self):
        stats = analyze_data_quality(small_dataset()).column_stats
        assert stats["id"].type.type == "number"
        assert stats["id"].unique == 2
        assert stats["age"].missing.count == 1
        assert stats["age"].statistics.mean == pytest.approx(30.0)
        assert stats["age"].outliers.count == 0

    def test_guidance_follows_issues(self):
        result = analyze_data_quality(small_dataset())
        assert len(result.explanations) == len(result.issues)
        assert result.explanations[0]["title"] == 'Column "age" has missing values'
        assert result.recommendations[1]["title"] == "Remove duplicate rows"

    def test_guidance_can_be_skipped(self):
        result = analyze_data_quality(small_dataset(), include_guidance=False)
        assert result.explanations == []
        assert result.recommendations == []

    def test_is_deterministic(self):
        first = analyze_data_quality(small_dataset()).to_dict()
        second = analyze_data_quality(small_dataset()).to_dict()
        assert first == second

    def test_parallel_profiling_matches_sequential(self):
        ds = Dataset(
            ["a", "b", "c"],
            [{"a": i, "b": f"v{i % 3}", "c": i * 1.5 if i % 4 else None} for i in range(40)],
        )
        assert analyze_data_quality(ds, max_workers=4).to_dict() == analyze_data_quality(ds).to_dict()


class TestEdgeCases:

    def test_zero_rows(self):
        result = analyze_data_quality(Dataset(["a", "b"], []))
        assert result.overall_score == pytest.approx(100.0)
        assert result.issues == []
        assert result.data_types["a"].type == "empty"

    def test_no_headers(self):
        result = analyze_data_quality(Dataset([], []))
        assert result.summary["totalCells"] == 0
        assert result.overall_score == pytest.approx(100.0)

    def test_all_missing_column(self):
        ds = Dataset(["a", "b"], [{"a": 1, "b": None}, {"a": 2, "b": ""}])
        result = analyze_data_quality(ds)
        assert result.data_types["b"].type == "empty"
        assert result.column_stats["b"].statistics is None
        assert 0.0 <= result.overall_score <= 100.0

    def test_rows_with_extra_keys(self):
        ds = Dataset(["a"], [{"a": 1, "zzz": "ignored"}, {"a": 2}])
        result = analyze_data_quality(ds)
        assert result.summary["totalCells"] == 2
        assert result.missing_values.total == 0


# ═════════════════════════════════════════════════════════════════════════════
# Serialisation
# ═════════════════════════════════════════════════════════════════════════════

class TestToDict:

    def test_camel_case_keys(self):
        data = analyze_data_quality(small_dataset()).to_dict()
        assert set(data) == {
            "overallScore", "scores", "missingValues", "duplicates", "dataTypes",
            "columnStats", "issues", "explanations", "recommendations", "summary",
        }
        assert data["missingValues"]["byColumn"]["age"]["count"] == 1

    def test_is_json_serialisable(self):
        json.dumps(analyze_data_quality(small_dataset()).to_dict())

    def test_statistics_only_for_numeric_columns(self):
        assert "statistics" in profile_column([1, 2, 3]).to_dict()
        assert "statistics" not in profile_column(["a", "b"]).to_dict()


def test_calculate_quality_score_is_rounded():
    assert calculate_quality_score(small_dataset()) == 69.03


# ═════════════════════════════════════════════════════════════════════════════
# Score bounds over degenerate inputs
# ═════════════════════════════════════════════════════════════════════════════

DEGENERATE = {
    "zero_rows": Dataset(["a", "b"], []),
    "no_headers": Dataset([], [{"x": 1}]),
    "single_cell": Dataset(["a"], [{"a": 1}]),
    "all_missing": Dataset(["a", "b"], [{"a": None, "b": ""} for _ in range(5)]),
    "all_formatted": Dataset(["price"], [{"price": f"${i},000"} for i in range(6)]),
    "partly_formatted": Dataset(["price"], [{"price": "$1,000"}] + [{"price": str(i)} for i in range(5)]),
    "all_duplicate": Dataset(["a", "b"], [{"a": 1, "b": "x"} for _ in range(8)]),
    "null_tokens": Dataset(["a"], [{"a": t} for t in ("N/A", "null", "-", "NULL", "n/a")]),
    "mixed_types": Dataset(["m"], [{"m": v} for v in (1, "a", True, "2024-01-01", None, 2.5)]),
    "extreme_numbers": Dataset(["n"], [{"n": v} for v in (1e12, -1e12, 0, 5)]),
    "many_sparse_columns": Dataset(
        [f"c{i}" for i in range(10)],
        [{f"c{i}": (i if (i + r) % 3 == 0 else None) for i in range(10)} for r in range(6)],
    ),
}


@pytest.mark.parametrize("name", sorted(DEGENERATE))
def test_every_score_stays_within_bounds(name):
    result = analyze_data_quality(DEGENERATE[name])
    for dimension, value in result.scores.to_dict().items():
        assert 0.0 <= value <= 100.0, dimension
    assert 0.0 <= result.overall_score <= 100.0
    json.dumps(result.to_dict())
