"""
Demographic representation checks.

Surfaces *possible* imbalance for human review: categorical columns whose
names suggest a demographic attribute get a full value distribution, and
very small or overwhelmingly dominant groups are called out. No statistical
testing and no protected-attribute inference beyond name matching.
"""
import re
from typing import Any, Dict, List, Optional, Sequence

from config import AnalysisPolicy
from models.statistics import BiasIndicators, ColumnProfile, ColumnType, GroupShare
from services.column_types import is_null


UNKNOWN_LABEL = "unknown"


def value_label(value: Any) -> str:
    """Display label for a cell; missing cells share the 'unknown' bucket"""
    if is_null(value):
        return UNKNOWN_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def value_counts(values: Sequence[Any]) -> Dict[str, int]:
    """Counts per label, in first-encountered order"""
    counts: Dict[str, int] = {}
    for value in values:
        label = value_label(value)
        counts[label] = counts.get(label, 0) + 1
    return counts


def is_demographic_column(profile: ColumnProfile, policy: AnalysisPolicy) -> bool:
    return (
        profile.type == ColumnType.CATEGORICAL
        and re.search(policy.demographic_pattern, profile.name, re.IGNORECASE) is not None
    )


def group_distribution(values: Sequence[Any]) -> List[GroupShare]:
    counts = value_counts(values)
    total = sum(counts.values())
    return [
        GroupShare(value=label, count=count, percentage=count / total * 100)
        for label, count in counts.items()
    ]


def detect_bias(
    rows: Sequence[Dict[str, Any]],
    profiles: Sequence[ColumnProfile],
    policy: Optional[AnalysisPolicy] = None,
) -> BiasIndicators:
    policy = policy or AnalysisPolicy()
    demographic_balance: Dict[str, List[GroupShare]] = {}
    small_group_sizes: List[str] = []
    representation_concerns: List[str] = []

    for profile in profiles:
        if not is_demographic_column(profile, policy):
            continue

        distribution = group_distribution([row.get(profile.name) for row in rows])
        demographic_balance[profile.name] = distribution

        for group in distribution:
            if group.percentage <= policy.small_group_percent:
                small_group_sizes.append(
                    f'{profile.name}: "{group.value}" ({group.percentage:.1f}%)'
                )

        # Only the first dominant group is reported, even if several qualify
        dominant = next(
            (g for g in distribution if g.percentage > policy.dominant_group_percent), None
        )
        if dominant is not None:
            representation_concerns.append(
                f'{profile.name}: Heavily skewed toward "{dominant.value}"'
            )

    return BiasIndicators(
        demographic_balance=demographic_balance,
        small_group_sizes=small_group_sizes,
        representation_concerns=representation_concerns,
    )
