"""
Tests for column profiles, basic metrics and quality scores
"""
from models.statistics import ColumnType
from services.metrics import (
    assess_quality,
    compute_basic_metrics,
    consistency_score,
    count_duplicate_rows,
    profile_column,
    round_half_up,
)


def _analyze(rows):
    columns = list(rows[0])
    profiles = [profile_column(c, [r[c] for r in rows]) for c in columns]
    metrics = compute_basic_metrics(rows, profiles, file_size=123)
    return profiles, metrics


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_profile_column_counts():
    profile = profile_column("score", [1, 2, 2, None, ""])

    assert profile.type == ColumnType.NUMERIC
    assert profile.null_count == 2
    assert profile.unique_count == 2
    assert profile.total_rows == 5


def test_basic_metrics():
    rows = [
        {"a": 1, "b": "x"},
        {"a": 1, "b": "x"},
        {"a": 2, "b": None},
    ]
    _, metrics = _analyze(rows)

    assert metrics.total_rows == 3
    assert metrics.total_columns == 2
    assert metrics.missing_values == {"a": 0, "b": 1}
    assert metrics.duplicate_rows == 1
    assert metrics.file_size == 123
    assert sum(metrics.column_types.values()) == 2


def test_duplicates_ignore_field_order_and_treat_none_as_equal():
    rows = [{"a": None, "b": 1}, {"b": 1, "a": None}, {"a": True, "b": 1}, {"a": 1, "b": 1}]
    assert count_duplicate_rows(rows) == 1


def test_duplicate_count_is_monotonic():
    rows = [{"a": i % 7, "b": "x"} for i in range(20)]
    previous = count_duplicate_rows(rows)
    for extra in range(5):
        rows.append(dict(rows[extra]))
        current = count_duplicate_rows(rows)
        assert current >= previous
        assert len(rows) - current == 7
        previous = current


def test_completeness_and_bounds():
    rows = [{"a": 1, "b": None}, {"a": 2, "b": "y"}, {"a": 3, "b": "z"}, {"a": None, "b": None}]
    profiles, metrics = _analyze(rows)
    quality = assess_quality(metrics, profiles)

    # 5 of 8 cells present
    assert quality.completeness_score == 63
    assert 0 <= quality.consistency_score <= 100
    assert 0 <= quality.uniqueness_ratio <= 1


def test_consistency_score_formula():
    # a: 3 unique, 1 null -> 100 - 0.25 * 30 = 92.5
    # b: 2 unique, 2 null -> 100 - 0.5 * 30 = 85
    rows = [{"a": 1, "b": None}, {"a": 2, "b": "y"}, {"a": 3, "b": "z"}, {"a": None, "b": None}]
    profiles, _ = _analyze(rows)
    assert consistency_score(profiles) == 89


def test_all_null_column_scores():
    rows = [{"a": None}, {"a": None}]
    profiles, metrics = _analyze(rows)
    quality = assess_quality(metrics, profiles)

    assert quality.completeness_score == 0
    assert quality.consistency_score == 70
