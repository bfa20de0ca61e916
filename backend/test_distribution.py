"""
Tests for distribution summaries
"""
from services.distribution import count_outliers, summarize_categorical, summarize_distributions, summarize_numeric
from services.metrics import profile_column


def test_summarize_numeric():
    summary = summarize_numeric([3, "1", None, 2, 10, "n/a"])

    assert summary.count == 4
    assert summary.mean == 4.0
    assert summary.median == 3.0  # upper middle for even counts
    assert summary.min == 1.0
    assert summary.max == 10.0


def test_summarize_numeric_without_numbers():
    assert summarize_numeric([None, "x"]) is None


def test_count_outliers():
    assert count_outliers([1, 2, 3, 4, 5, 6, 7, 100], 1.5) == 1
    assert count_outliers([1, 2, 3, 4, 5, 6, 7, 8], 1.5) == 0
    assert count_outliers([1, 100, 1000], 1.5) == 0


def test_top_values_ties_keep_first_seen_order():
    values = ["c", "a", "b", "a", "b", "d", "e", "f", "g"]
    summary = summarize_categorical(values, unique_count=7, limit=5)

    assert summary.unique_values == 7
    assert [(v.value, v.count) for v in summary.top_values] == [
        ("a", 2), ("b", 2), ("c", 1), ("d", 1), ("e", 1),
    ]


def test_summarize_distributions_by_column_type():
    rows = [{"plan": ["basic", "pro"][i % 2], "spend": i, "note": f"n{i}"} for i in range(40)]
    profiles = [profile_column(c, [r[c] for r in rows]) for c in rows[0]]

    stats = summarize_distributions(rows, profiles)

    assert list(stats.numerical_summary) == ["spend"]
    assert list(stats.categorical_summary) == ["plan"]
    assert stats.categorical_summary["plan"].top_values[0].count == 20
    assert stats.outlier_count == 0


def test_order_statistics_use_floor_index():
    # n = 10: median is sorted[5]
    summary = summarize_numeric([10, 9, 8, 7, 6, 5, 4, 3, 2, 1])
    assert summary.median == 6.0
    assert summary.mean == 5.5

    # n = 21: Q1 = sorted[5] = 6, Q3 = sorted[15] = 16, fences [-9, 31]
    values = list(range(1, 21))
    assert count_outliers(values + [31], 1.5) == 0
    assert count_outliers(values + [32], 1.5) == 1
    assert count_outliers(values + [100, -100], 1.5) == 2


def test_huge_integers_are_left_out_of_summaries():
    summary = summarize_numeric([1, int("9" * 400), 3])
    assert summary.count == 2
    assert summary.max == 3.0
