"""
Tests for duplicate-row detection and the uniqueness score.

Run with:
    pytest backend/tests/test_duplicates.py -v
"""

from __future__ import annotations

import sys
import os

# ── Make the backend package importable without installing it ──────────────
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from qualitylens.services.dataset import Dataset
from qualitylens.services.duplicates import (
    cardinality_penalty,
    distinct_present,
    find_duplicates,
    row_fingerprint,
)


# ═════════════════════════════════════════════════════════════════════════════
# Fingerprints
# ═════════════════════════════════════════════════════════════════════════════

class TestFingerprint:

    def test_int_and_integral_float_match(self):
        assert row_fingerprint([1, "a"]) == row_fingerprint([1.0, "a"])

    def test_number_and_text_differ(self):
        assert row_fingerprint([1, "a"]) != row_fingerprint(["1", "a"])

    def test_null_and_empty_string_differ(self):
        assert row_fingerprint([None]) != row_fingerprint([""])

    def test_column_placement_is_ignored(self):
        # Known behaviour: values are sorted before serialising
        assert row_fingerprint([1, 2]) == row_fingerprint([2, 1])


# ═════════════════════════════════════════════════════════════════════════════
# Duplicate rows
# ═════════════════════════════════════════════════════════════════════════════

class TestFindDuplicates:

    def test_later_rows_reference_first_occurrence(self):
        ds = Dataset(
            ["id", "v"],
            [{"id": 1, "v": "x"}, {"id": 2, "v": "y"}, {"id": 1, "v": "x"}, {"id": 1, "v": "x"}],
        )
        report = find_duplicates(ds)
        assert report.count == 2
        assert [(d.original_row, d.duplicate_row) for d in report.duplicates] == [(0, 2), (0, 3)]
        assert report.duplicates[0].data == {"id": 1, "v": "x"}
        assert report.percentage == pytest.approx(50.0)

    def test_swapped_values_collapse_into_one_class(self):
        ds = Dataset(["a", "b"], [{"a": 1, "b": 2}, {"a": 2, "b": 1}])
        report = find_duplicates(ds)
        assert report.count == 1
        assert report.duplicates[0].original_row == 0
        assert report.duplicates[0].duplicate_row == 1

    def test_no_rows(self):
        report = find_duplicates(Dataset(["a"], []))
        assert report.count == 0
        assert report.percentage == 0.0
        assert report.uniqueness_score == 100.0

    def test_to_dict_uses_camel_case(self):
        ds = Dataset(["a"], [{"a": 1}, {"a": 1}])
        data = find_duplicates(ds).to_dict()
        assert data["duplicates"][0] == {"originalRow": 0, "duplicateRow": 1, "data": {"a": 1}}
        assert "uniquenessScore" in data


# ═════════════════════════════════════════════════════════════════════════════
# Cardinality & uniqueness score
# ═════════════════════════════════════════════════════════════════════════════

class TestUniqueness:

    def test_distinct_present_ignores_missing(self):
        assert distinct_present([1, 1.0, "1", None, ""]) == 2

    def test_high_cardinality_column_has_no_penalty(self):
        ds = Dataset(["a"], [{"a": i} for i in range(10)])
        assert cardinality_penalty(ds) == 0.0

    def test_constant_column_penalty(self):
        ds = Dataset(["a"], [{"a": "x"} for _ in range(4)])
        # ratio 1/4 -> (0.8 - 0.25) * 10
        assert cardinality_penalty(ds) == pytest.approx(5.5)

    def test_all_missing_column_is_skipped(self):
        ds = Dataset(["a"], [{"a": None}, {"a": ""}])
        assert cardinality_penalty(ds) == 0.0

    def test_score_combines_duplicates_and_cardinality(self):
        ds = Dataset(["a"], [{"a": "x"}, {"a": "x"}, {"a": "y"}, {"a": "z"}])
        report = find_duplicates(ds)
        # 1 duplicate of 4 rows, ratio 3/4 -> (0.8 - 0.75) * 10
        assert report.uniqueness_score == pytest.approx(100 - 25 - 0.5)

    def test_score_is_floored_at_zero(self):
        ds = Dataset(["a", "b"], [{"a": 1, "b": 1} for _ in range(20)])
        assert find_duplicates(ds).uniqueness_score == 0.0
