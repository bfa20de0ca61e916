"""
Privacy risk heuristics.

Flags columns that look like direct identifiers (by name or near-uniqueness)
and quasi-identifiers (moderately unique). This is a high-false-positive
pre-filter: results are pattern-flagged, never confirmed PII.
"""
import re
from typing import List, Optional, Sequence

from config import AnalysisPolicy
from models.statistics import ColumnProfile, PrivacyRisks


def uniqueness_ratio(unique_count: int, total_rows: int) -> float:
    return unique_count / total_rows if total_rows > 0 else 0.0


def is_potential_identifier(
    column_name: str,
    unique_count: int,
    total_rows: int,
    policy: Optional[AnalysisPolicy] = None,
) -> bool:
    """Name-pattern and uniqueness triggers are independent; either suffices"""
    policy = policy or AnalysisPolicy()
    if any(re.search(pattern, column_name, re.IGNORECASE) for pattern in policy.identifier_patterns):
        return True
    return uniqueness_ratio(unique_count, total_rows) > policy.identifier_uniqueness


def mean_uniqueness(profiles: Sequence[ColumnProfile], total_rows: int) -> float:
    if not profiles:
        return 0.0
    return sum(uniqueness_ratio(p.unique_count, total_rows) for p in profiles) / len(profiles)


def assess_privacy_risks(
    profiles: Sequence[ColumnProfile],
    total_rows: int,
    policy: Optional[AnalysisPolicy] = None,
) -> PrivacyRisks:
    policy = policy or AnalysisPolicy()
    potential_identifiers: List[str] = []
    quasi_identifiers: List[str] = []

    for profile in profiles:
        ratio = uniqueness_ratio(profile.unique_count, total_rows)
        if profile.potential_identifier:
            potential_identifiers.append(profile.name)
        elif policy.quasi_identifier_lower < ratio < policy.quasi_identifier_upper:
            quasi_identifiers.append(profile.name)

    return PrivacyRisks(
        potential_identifiers=potential_identifiers,
        quasi_identifiers=quasi_identifiers,
        uniqueness_ratio=mean_uniqueness(profiles, total_rows),
    )
