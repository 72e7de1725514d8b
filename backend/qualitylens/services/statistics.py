"""
Descriptive statistics and IQR outlier detection for numeric columns.

Quartiles use the non-interpolated index method, ``sorted[floor(N × p)]``,
not numpy/pandas percentile interpolation. Variance is the population
variance (÷ N).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from qualitylens.services.type_inference import parse_number

logger = logging.getLogger(__name__)

IQR_MULTIPLIER = 1.5


@dataclass
class ColumnStatistics:
    count: int
    min: float
    max: float
    mean: float
    median: float
    mode: float
    std_dev: float
    variance: float
    q1: float
    q2: float
    q3: float
    range: float

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "mode": self.mode,
            "stdDev": self.std_dev,
            "variance": self.variance,
            "q1": self.q1,
            "q2": self.q2,
            "q3": self.q3,
            "range": self.range,
        }


@dataclass
class Outlier:
    index: int
    value: float
    type: str  # low | high

    def to_dict(self) -> dict:
        return {"index": self.index, "value": self.value, "type": self.type}


@dataclass
class OutlierReport:
    outliers: List[Outlier] = field(default_factory=list)
    count: int = 0
    percentage: float = 0.0
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "outliers": [o.to_dict() for o in self.outliers],
            "count": self.count,
            "percentage": self.percentage,
            "lowerBound": self.lower_bound,
            "upperBound": self.upper_bound,
        }


def numeric_values(values: list) -> List[float]:
    """Coercible numeric values in row order; missing and non-numeric cells are dropped."""
    result = []
    for value in values:
        number = parse_number(value)
        if number is not None:
            result.append(number)
    return result


def calculate_mode(values: List[float]) -> Optional[float]:
    """
    Running-tally mode: the value that first reaches the highest frequency.
    [1, 2, 2, 1] -> 2 (2 hits frequency 2 before 1 does).
    """
    frequency = {}
    max_freq = 0
    mode = None
    for value in values:
        frequency[value] = frequency.get(value, 0) + 1
        if frequency[value] > max_freq:
            max_freq = frequency[value]
            mode = value
    return mode


def quartile(sorted_values: List[float], p: float) -> float:
    return sorted_values[math.floor(len(sorted_values) * p)]


def calculate_statistics(values: list) -> Optional[ColumnStatistics]:
    """Descriptive statistics, or None when the column has no numeric values."""
    numbers = numeric_values(values)
    if not numbers:
        return None

    arr = np.asarray(numbers, dtype=float)
    ordered = sorted(numbers)
    q2 = quartile(ordered, 0.5)

    return ColumnStatistics(
        count=len(numbers),
        min=ordered[0],
        max=ordered[-1],
        mean=float(arr.mean()),
        median=q2,
        mode=calculate_mode(numbers),
        std_dev=float(arr.std()),
        variance=float(arr.var()),
        q1=quartile(ordered, 0.25),
        q2=q2,
        q3=quartile(ordered, 0.75),
        range=ordered[-1] - ordered[0],
    )


def detect_outliers(values: list, stats: Optional[ColumnStatistics] = None) -> OutlierReport:
    """
    Flag values strictly outside [q1 − 1.5·IQR, q3 + 1.5·IQR].

    ``index`` is the row index within ``values``; the percentage is taken over
    every row of the column, missing cells included.
    """
    if stats is None:
        stats = calculate_statistics(values)
    if stats is None:
        return OutlierReport()

    iqr = stats.q3 - stats.q1
    lower = stats.q1 - IQR_MULTIPLIER * iqr
    upper = stats.q3 + IQR_MULTIPLIER * iqr

    outliers = []
    for index, value in enumerate(values):
        number = parse_number(value)
        if number is None:
            continue
        if number < lower:
            outliers.append(Outlier(index=index, value=number, type="low"))
        elif number > upper:
            outliers.append(Outlier(index=index, value=number, type="high"))

    percentage = (len(outliers) / len(values)) * 100 if values else 0.0
    if outliers:
        logger.debug("%d outliers outside [%s, %s]", len(outliers), lower, upper)
    return OutlierReport(
        outliers=outliers,
        count=len(outliers),
        percentage=percentage,
        lower_bound=lower,
        upper_bound=upper,
    )
