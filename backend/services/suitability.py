"""
Suitability checks for the scoping wizard.

Built from the statistics alone, or from statistics plus an AI ethical
analysis when the service answered.
"""
from typing import List

from models.ethics import Answer, DataSuitabilityCheck, EthicalAnalysis
from models.statistics import DatasetStatistics


def risk_level_to_answer(risk_level: str) -> Answer:
    if risk_level == "low":
        return "yes"
    if risk_level == "medium":
        return "unknown"
    return "no"


def _completeness_check(statistics: DatasetStatistics) -> DataSuitabilityCheck:
    quality = statistics.quality_assessment
    completeness = quality.completeness_score
    return DataSuitabilityCheck(
        id="data_completeness",
        question="Data completeness and quality assessment",
        answer="yes" if completeness >= 80 else "unknown" if completeness >= 60 else "no",
        description=(
            f"Statistical analysis: Completeness: {completeness}%, "
            f"Quality Score: {quality.consistency_score}%"
        ),
    )


def _sufficiency_check(statistics: DatasetStatistics) -> DataSuitabilityCheck:
    metrics = statistics.basic_metrics
    completeness = statistics.quality_assessment.completeness_score
    if metrics.total_rows >= 1000 and completeness >= 80:
        answer = "yes"
    elif metrics.total_rows >= 500:
        answer = "unknown"
    else:
        answer = "no"
    return DataSuitabilityCheck(
        id="quality_sufficiency",
        question="Data volume and quality sufficiency",
        answer=answer,
        description=(
            f"Statistical analysis: {metrics.total_rows:,} rows, "
            f"{metrics.total_columns} columns analyzed"
        ),
    )


def statistics_only_checks(statistics: DatasetStatistics) -> List[DataSuitabilityCheck]:
    """Checks used when no ethical analysis is available"""
    concerns = len(statistics.bias_indicators.representation_concerns)
    flagged = len(statistics.privacy_risks.potential_identifiers)
    return [
        _completeness_check(statistics),
        DataSuitabilityCheck(
            id="population_representativeness",
            question="Population representation and bias assessment",
            answer="unknown",
            description=(
                f"Statistical analysis: {concerns} representation concerns "
                "identified through statistical analysis"
            ),
        ),
        DataSuitabilityCheck(
            id="privacy_ethics",
            question="Privacy and ethical considerations",
            answer="unknown",
            description=(
                f"Statistical analysis: {flagged} columns flagged by pattern detection. "
                "Comprehensive privacy assessment requires additional analysis."
            ),
        ),
        _sufficiency_check(statistics),
    ]


def ai_assisted_checks(
    statistics: DatasetStatistics,
    analysis: EthicalAnalysis,
) -> List[DataSuitabilityCheck]:
    """Checks combining the statistics with the ethical analysis"""
    bias = analysis.bias_assessment
    privacy = analysis.privacy_evaluation
    score = analysis.suitability_score
    return [
        _completeness_check(statistics),
        DataSuitabilityCheck(
            id="population_representativeness",
            question="Population representation and bias assessment",
            answer=risk_level_to_answer(bias.level),
            description=(
                f"AI analysis: Bias level: {bias.level}. "
                f"{len(bias.concerns)} concerns identified."
            ),
        ),
        DataSuitabilityCheck(
            id="privacy_ethics",
            question="Privacy and ethical considerations",
            answer=risk_level_to_answer(privacy.risk_level),
            description=(
                f"AI analysis: Privacy risk: {privacy.risk_level}. "
                "Context-aware assessment completed."
            ),
        ),
        _sufficiency_check(statistics),
        DataSuitabilityCheck(
            id="ai_overall_score",
            question="AI-powered overall assessment",
            answer="yes" if score >= 70 else "unknown" if score >= 50 else "no",
            description=f"AI analysis overall score: {score}%",
        ),
    ]
