"""
Tests for the four quality dimensions and the weighted overall score.

Run with:
    pytest backend/tests/test_scoring.py -v
"""

from __future__ import annotations

import sys
import os

# ── Make the backend package importable without installing it ──────────────
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from qualitylens.services.dataset import Dataset
from qualitylens.services.duplicates import find_duplicates
from qualitylens.services.missing_values import find_missing_values
from qualitylens.services.scoring import (
    WEIGHTS,
    aggregate_scores,
    number_format_split,
    string_format,
)
from qualitylens.services.type_inference import analyze_data_types


def score(ds: Dataset):
    types = analyze_data_types(ds)
    return aggregate_scores(ds, types, find_missing_values(ds), find_duplicates(ds))


def column(name: str, values: list) -> Dataset:
    return Dataset([name], [{name: v} for v in values])


# ═════════════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════════════

class TestHelpers:

    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    @pytest.mark.parametrize("text,expected", [
        ("123", "numeric"),
        ("abc", "lowercase"),
        ("ABC", "uppercase"),
        ("new york", "lowercase-phrase"),
        ("New york", "titlecase-phrase"),
        ("New York", "mixed"),
    ])
    def test_string_format(self, text, expected):
        assert string_format(text) == expected

    def test_number_format_split_ignores_missing(self):
        assert number_format_split(["$1,000", "500", None, "(20)", 7]) == (2, 2)


# ═════════════════════════════════════════════════════════════════════════════
# Dimensions
# ═════════════════════════════════════════════════════════════════════════════

class TestValidity:

    def test_uniform_strings_are_valid(self):
        assert score(column("c", ["apple", "pear", "plum"])).scores.validity == 100.0

    def test_mixed_string_formats_cost_two_points(self):
        assert score(column("c", ["apple", "Banana", "cherry"])).scores.validity == 98.0

    def test_null_tokens_mixed_with_values_cost_one_more_point(self):
        assert score(column("c", ["N/A", "x", "y"])).scores.validity == 97.0

    def test_column_of_only_null_tokens_is_not_penalised(self):
        assert score(column("c", ["N/A", "N/A"])).scores.validity == 100.0

    def test_numeric_columns_skip_the_format_check(self):
        assert score(column("n", [1, 2.5, 300])).scores.validity == 100.0


class TestConsistency:

    def test_clean_numeric_column(self):
        assert score(column("n", [1, 2, 3])).scores.consistency == 100.0

    def test_mixed_types_and_partial_formatting(self):
        breakdown = score(column("price", ["$1,000", "500", "200"]))
        assert breakdown.number_format_splits == {"price": (1, 2)}
        # 100% of columns mixed, minus 3 for formatting, floored at 0
        assert breakdown.scores.consistency == 0.0

    def test_no_headers(self):
        assert score(Dataset([], [])).scores.consistency == 100.0


# ═════════════════════════════════════════════════════════════════════════════
# Overall score
# ═════════════════════════════════════════════════════════════════════════════

class TestOverall:

    def test_perfect_dataset(self):
        ds = Dataset(["id", "name"], [{"id": i, "name": n} for i, n in enumerate(["ann", "bob", "cy"])])
        breakdown = score(ds)
        assert breakdown.overall_score == pytest.approx(100.0)
        assert breakdown.missing_columns_penalty == 0.0
        assert breakdown.format_issues_penalty == 0.0

    def test_format_penalty_is_taken_off_the_base(self):
        breakdown = score(column("price", ["$1,000", "500", "200"]))
        assert breakdown.base_score == pytest.approx(90.0)
        assert breakdown.format_issues_penalty == 5.0
        assert breakdown.overall_score == pytest.approx(85.0)

    def test_missing_columns_penalty(self):
        ds = Dataset(["a", "b"], [{"a": 1, "b": None}, {"a": 2, "b": 5}, {"a": 3, "b": 6}])
        assert score(ds).missing_columns_penalty == pytest.approx(10.0)

    def test_scores_stay_within_bounds(self):
        ds = Dataset(
            ["a", "b", "c"],
            [{"a": "x", "b": None, "c": "$1"} for _ in range(10)] + [{"a": 1, "b": "", "c": 2}],
        )
        breakdown = score(ds)
        for value in breakdown.scores.to_dict().values():
            assert 0.0 <= value <= 100.0
        assert 0.0 <= breakdown.overall_score <= 100.0
