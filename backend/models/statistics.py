"""
Dataset statistics models - the result of one analysis run
"""
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FrozenModel(BaseModel):
    """Immutable model serialized with camelCase keys"""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ColumnType(str, Enum):
    """Inferred column semantics"""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATETIME = "datetime"
    TEXT = "text"
    BOOLEAN = "boolean"


class ColumnProfile(FrozenModel):
    """Per-column profile, derived once from all rows"""
    name: str
    type: ColumnType
    null_count: int
    unique_count: int
    total_rows: int
    potential_identifier: bool


class BasicMetrics(FrozenModel):
    total_rows: int
    total_columns: int
    column_types: Dict[str, int]
    missing_values: Dict[str, int]
    duplicate_rows: int
    file_size: int


class QualityAssessment(FrozenModel):
    completeness_score: int  # 0-100
    consistency_score: int  # 0-100
    uniqueness_ratio: float  # 0-1


class PrivacyRisks(FrozenModel):
    """Pattern-flagged columns - a heuristic pre-filter, not confirmed PII"""
    potential_identifiers: List[str]
    quasi_identifiers: List[str]
    uniqueness_ratio: float


class GroupShare(FrozenModel):
    value: str
    count: int
    percentage: float


class BiasIndicators(FrozenModel):
    demographic_balance: Dict[str, List[GroupShare]]
    small_group_sizes: List[str]
    representation_concerns: List[str]


class NumericalSummary(FrozenModel):
    count: int
    mean: float
    median: float
    min: float
    max: float


class ValueCount(FrozenModel):
    value: str
    count: int


class CategoricalSummary(FrozenModel):
    unique_values: int
    top_values: List[ValueCount]


class DistributionStats(FrozenModel):
    numerical_summary: Dict[str, NumericalSummary]
    categorical_summary: Dict[str, CategoricalSummary]
    outlier_count: int


class DatasetStatistics(FrozenModel):
    """Aggregate root of an analysis run. Superseded, never mutated."""
    basic_metrics: BasicMetrics
    column_analysis: List[ColumnProfile]
    distribution_stats: DistributionStats
    quality_assessment: QualityAssessment
    bias_indicators: BiasIndicators
    privacy_risks: PrivacyRisks

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys"""
        return self.model_dump(mode="json", by_alias=True)


class FormatDetection(FrozenModel):
    """What an uploaded file looks like and how far we can analyze it"""
    detected_format: str
    extension: str
    confidence: str  # "high" | "low"
    support_level: str  # "full" | "partial" | "manual" | "unsupported"
    suggestions: List[str] = []

    @property
    def analyzable(self) -> bool:
        return self.support_level in ("full", "partial")


class FileInfo(FrozenModel):
    name: str
    size: int
