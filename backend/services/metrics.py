"""
Column profiles, basic metrics and quality scores
"""
import math
from typing import Any, Dict, List, Optional, Sequence

import polars as pl

from config import AnalysisPolicy
from models.statistics import BasicMetrics, ColumnProfile, QualityAssessment
from services.column_types import distinct_key, infer_column_type, is_null
from services.privacy import is_potential_identifier, mean_uniqueness


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: int) -> int:
    return max(0, min(100, value))


def profile_column(
    name: str,
    values: Sequence[Any],
    policy: Optional[AnalysisPolicy] = None,
) -> ColumnProfile:
    """Type, null and unique counts for one column"""
    policy = policy or AnalysisPolicy()
    total_rows = len(values)
    present = [v for v in values if not is_null(v)]
    unique_count = len({distinct_key(v) for v in present})

    return ColumnProfile(
        name=name,
        type=infer_column_type(values, policy),
        null_count=total_rows - len(present),
        unique_count=unique_count,
        total_rows=total_rows,
        potential_identifier=is_potential_identifier(name, unique_count, total_rows, policy),
    )


def _row_key(row: Dict[str, Any]) -> tuple:
    """Field-order independent identity of a row; None equals None"""
    return tuple((column, distinct_key(row[column])) for column in sorted(row))


def count_duplicate_rows(rows: Sequence[Dict[str, Any]]) -> int:
    distinct = {_row_key(row) for row in rows}
    return len(rows) - len(distinct)


def compute_basic_metrics(
    rows: Sequence[Dict[str, Any]],
    profiles: Sequence[ColumnProfile],
    file_size: int,
) -> BasicMetrics:
    column_types: Dict[str, int] = {}
    for profile in profiles:
        column_types[profile.type.value] = column_types.get(profile.type.value, 0) + 1

    return BasicMetrics(
        total_rows=len(rows),
        total_columns=len(profiles),
        column_types=column_types,
        missing_values={p.name: p.null_count for p in profiles},
        duplicate_rows=count_duplicate_rows(rows),
        file_size=file_size,
    )


def consistency_score(
    profiles: Sequence[ColumnProfile],
    policy: Optional[AnalysisPolicy] = None,
) -> int:
    """
    Mean per-column score: 100 minus a penalty proportional to
    nulls / (unique + nulls). Sparse, low-diversity columns lose the most.
    """
    policy = policy or AnalysisPolicy()
    if not profiles:
        return 0

    counts = pl.DataFrame(
        {
            "nulls": [p.null_count for p in profiles],
            "uniques": [p.unique_count for p in profiles],
        },
        schema={"nulls": pl.Int64, "uniques": pl.Int64},
    )
    null_rate = pl.col("nulls") / pl.max_horizontal(pl.col("uniques") + pl.col("nulls"), pl.lit(1))
    scores = counts.select(
        (100 - null_rate * policy.consistency_null_penalty).clip(lower_bound=0).alias("score")
    )["score"]

    return clamp_score(round_half_up(scores.mean()))


def assess_quality(
    metrics: BasicMetrics,
    profiles: Sequence[ColumnProfile],
    policy: Optional[AnalysisPolicy] = None,
) -> QualityAssessment:
    total_cells = metrics.total_rows * metrics.total_columns
    missing_cells = sum(metrics.missing_values.values())
    completeness = (
        round_half_up((total_cells - missing_cells) / total_cells * 100) if total_cells else 0
    )

    return QualityAssessment(
        completeness_score=clamp_score(completeness),
        consistency_score=consistency_score(profiles, policy),
        uniqueness_ratio=mean_uniqueness(profiles, metrics.total_rows),
    )


def column_values(rows: Sequence[Dict[str, Any]], column: str) -> List[Any]:
    return [row.get(column) for row in rows]
