"""
Ethical analysis and suitability models
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from models.statistics import DatasetStatistics, FileInfo, FormatDetection, FrozenModel


RiskLevel = Literal["low", "medium", "high"]
Answer = Literal["yes", "no", "unknown"]


class PrivacyEvaluation(FrozenModel):
    risk_level: RiskLevel
    concerns: List[str] = []
    assessment_reasoning: Optional[str] = None


class BiasAssessment(FrozenModel):
    level: RiskLevel
    concerns: List[str] = []


class EthicalAnalysis(FrozenModel):
    """Qualitative assessment returned by the ethical analysis service"""
    suitability_score: int = Field(ge=0, le=100)
    overall_risk_level: RiskLevel
    overall_recommendation: str = ""
    privacy_evaluation: PrivacyEvaluation
    bias_assessment: BiasAssessment
    recommendations: List[str] = []
    scoring_breakdown: Optional[Dict[str, Any]] = None


class DataSuitabilityCheck(FrozenModel):
    id: str
    question: str
    answer: Answer
    description: str


class AnalysisResult(FrozenModel):
    """Everything one upload produced: statistics, optional AI view, checks"""
    file_info: FileInfo
    format_detection: FormatDetection
    statistics: DatasetStatistics
    suitability_checks: List[DataSuitabilityCheck]
    statistics_only: bool
    ethical_analysis: Optional[EthicalAnalysis] = None
    size_warning: Optional[str] = None
    superseded: bool = False
    note: Optional[str] = None
