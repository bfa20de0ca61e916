"""
Distribution summaries: numeric column statistics, categorical top values
and an IQR outlier count.
"""
import math
from typing import Any, Dict, List, Optional, Sequence

import polars as pl

from config import AnalysisPolicy
from models.statistics import (
    CategoricalSummary,
    ColumnProfile,
    ColumnType,
    DistributionStats,
    NumericalSummary,
    ValueCount,
)
from services.bias import value_counts
from services.column_types import to_number


def numeric_values(values: Sequence[Any]) -> List[float]:
    return [n for n in (to_number(v) for v in values) if n is not None]


def numeric_series(values: Sequence[Any]) -> pl.Series:
    """Parsed numbers of a column as a sorted Float64 series"""
    return pl.Series(numeric_values(values), dtype=pl.Float64).sort()


def _at_fraction(series: pl.Series, fraction: float) -> float:
    """Order statistic at floor(n * fraction) of a sorted series"""
    index = min(int(math.floor(series.len() * fraction)), series.len() - 1)
    return series[index]


def summarize_numeric(values: Sequence[Any]) -> Optional[NumericalSummary]:
    col = numeric_series(values)
    if col.is_empty():
        return None

    return NumericalSummary(
        count=col.len(),
        mean=col.mean(),
        median=_at_fraction(col, 0.5),
        min=col.min(),
        max=col.max(),
    )


def count_outliers(values: Sequence[Any], multiplier: float) -> int:
    """Values outside the Tukey fences [Q1 - k*IQR, Q3 + k*IQR]"""
    col = numeric_series(values)
    if col.len() < 4:
        return 0

    q1 = _at_fraction(col, 0.25)
    q3 = _at_fraction(col, 0.75)
    iqr = q3 - q1
    outside = (col < q1 - multiplier * iqr) | (col > q3 + multiplier * iqr)
    return int(outside.sum())


def summarize_categorical(values: Sequence[Any], unique_count: int, limit: int) -> CategoricalSummary:
    counts = value_counts(values)
    # sorted() is stable, so ties keep first-encountered order
    top = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]

    return CategoricalSummary(
        unique_values=unique_count,
        top_values=[ValueCount(value=label, count=count) for label, count in top],
    )


def summarize_distributions(
    rows: Sequence[Dict[str, Any]],
    profiles: Sequence[ColumnProfile],
    policy: Optional[AnalysisPolicy] = None,
) -> DistributionStats:
    policy = policy or AnalysisPolicy()
    numerical_summary: Dict[str, NumericalSummary] = {}
    categorical_summary: Dict[str, CategoricalSummary] = {}
    outlier_count = 0

    for profile in profiles:
        values = [row.get(profile.name) for row in rows]

        if profile.type == ColumnType.NUMERIC:
            summary = summarize_numeric(values)
            if summary is not None:
                numerical_summary[profile.name] = summary
            outlier_count += count_outliers(values, policy.outlier_iqr_multiplier)

        elif profile.type == ColumnType.CATEGORICAL:
            categorical_summary[profile.name] = summarize_categorical(
                values, profile.unique_count, policy.top_values_limit
            )

    return DistributionStats(
        numerical_summary=numerical_summary,
        categorical_summary=categorical_summary,
        outlier_count=outlier_count,
    )
