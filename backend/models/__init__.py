"""
Result models package
"""
from models.statistics import (
    BasicMetrics,
    BiasIndicators,
    CategoricalSummary,
    ColumnProfile,
    ColumnType,
    DatasetStatistics,
    DistributionStats,
    FileInfo,
    FormatDetection,
    GroupShare,
    NumericalSummary,
    PrivacyRisks,
    QualityAssessment,
    ValueCount,
)
from models.ethics import (
    AnalysisResult,
    BiasAssessment,
    DataSuitabilityCheck,
    EthicalAnalysis,
    PrivacyEvaluation,
)

__all__ = [
    "BasicMetrics", "BiasIndicators", "CategoricalSummary", "ColumnProfile",
    "ColumnType", "DatasetStatistics", "DistributionStats", "FileInfo",
    "FormatDetection", "GroupShare", "NumericalSummary", "PrivacyRisks",
    "QualityAssessment", "ValueCount",
    "AnalysisResult", "BiasAssessment", "DataSuitabilityCheck",
    "EthicalAnalysis", "PrivacyEvaluation",
]
