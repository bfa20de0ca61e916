"""
Column type inference

Classifies a column from its raw values alone. Rules, first match wins:
all-null -> text; mostly numbers -> numeric; few distinct values ->
categorical; anything else -> text.
"""
import math
from typing import Any, List, Optional, Sequence

from config import AnalysisPolicy
from models.statistics import ColumnType


def is_null(value: Any) -> bool:
    """Missing cell: None or empty string"""
    return value is None or value == ""


def to_number(value: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings ("1,234", " 5 "), else None"""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            cleaned = "".join(value.replace(",", "").split())
            if not cleaned:
                return None
            number = float(cleaned)
        else:
            return None
    except (ValueError, OverflowError):
        # Unparseable, or an integer beyond float range
        return None
    return number if math.isfinite(number) else None


def non_null(values: Sequence[Any]) -> List[Any]:
    return [v for v in values if not is_null(v)]


def distinct_key(value: Any) -> Any:
    """Hashable identity for a cell; booleans never collide with 0/1"""
    return (isinstance(value, bool), value)


def infer_column_type(values: Sequence[Any], policy: Optional[AnalysisPolicy] = None) -> ColumnType:
    policy = policy or AnalysisPolicy()
    present = non_null(values)

    if not present:
        return ColumnType.TEXT

    numeric = sum(1 for v in present if to_number(v) is not None)
    if numeric / len(present) >= policy.numeric_ratio:
        return ColumnType.NUMERIC

    unique = len({distinct_key(v) for v in present})
    if unique / len(present) < policy.categorical_unique_ratio and unique < policy.categorical_max_unique:
        return ColumnType.CATEGORICAL

    return ColumnType.TEXT
