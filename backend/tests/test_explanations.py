"""
Tests for explanation and recommendation templates.

Run with:
    pytest backend/tests/test_explanations.py -v
"""

from __future__ import annotations

import sys
import os

# ── Make the backend package importable without installing it ──────────────
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from qualitylens.services.explanations import (
    GENERAL_CLEANUP,
    TABLE_NAME,
    explain_issue,
    generate_explanations,
    generate_recommendations,
)


MISSING = {
    "type": "missing", "severity": "high", "column": "age",
    "description": "age has 1 missing values (33.3%)", "count": 1,
}
DUPLICATE = {"type": "duplicate", "severity": "high", "description": "Found 2 duplicate rows (10.0%)", "count": 2}
FORMAT = {"type": "format", "severity": "low", "column": "price", "description": "...", "count": 4}
OUTLIER = {"type": "outlier", "severity": "high", "column": "amount", "description": "...", "count": 1}


# ═════════════════════════════════════════════════════════════════════════════
# Explanations
# ═════════════════════════════════════════════════════════════════════════════

class TestExplanations:

    def test_missing_mentions_percentage(self):
        explanation = explain_issue(MISSING)
        assert explanation["title"] == 'Column "age" has missing values'
        assert "33.3%" in explanation["text"]

    def test_duplicate(self):
        explanation = explain_issue(DUPLICATE)
        assert explanation["title"] == "Duplicate rows detected"
        assert "2 duplicate" in explanation["text"]

    def test_inconsistent_reports_confidence(self):
        issue = {"type": "inconsistent", "column": "x", "confidence": 0.6, "description": "..."}
        assert "confidence 60%" in explain_issue(issue)["text"]

    def test_unknown_type_falls_back_to_description(self):
        explanation = explain_issue({"type": "weird", "description": "Something odd"})
        assert explanation == {"title": "weird", "text": "Something odd"}

    def test_one_per_issue_in_order(self):
        titles = [e["title"] for e in generate_explanations([DUPLICATE, OUTLIER])]
        assert titles == ["Duplicate rows detected", "Outliers in amount"]


# ═════════════════════════════════════════════════════════════════════════════
# Recommendations
# ═════════════════════════════════════════════════════════════════════════════

class TestRecommendations:

    def test_titles(self):
        recs = generate_recommendations([MISSING, DUPLICATE, FORMAT, OUTLIER])
        assert [r["title"] for r in recs] == [
            "Fill or handle missing values in age",
            "Remove duplicate rows",
            "Standardize price formatting",
            "Review outliers in amount",
        ]

    def test_sql_targets_the_column(self):
        rec = generate_recommendations([MISSING])[0]
        assert TABLE_NAME in rec["sql"]
        assert '"age" IS NULL' in rec["sql"]

    def test_no_issues_gives_general_cleanup(self):
        assert generate_recommendations([]) == [GENERAL_CLEANUP]

    def test_unknown_issues_only_gives_general_cleanup(self):
        assert generate_recommendations([{"type": "weird"}])[0]["title"] == "General cleanup"
