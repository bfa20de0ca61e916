"""
Shared test fixtures
"""
from services.data_formats import DatasetFile


ETHICS_URL = "http://ethics.test/analyze"

ETHICS_RESPONSE = {
    "suitability_score": 82,
    "overall_risk_level": "low",
    "overall_recommendation": "Suitable with minor mitigations",
    "privacy_evaluation": {"risk_level": "low", "concerns": []},
    "bias_assessment": {"level": "medium", "concerns": ["Outcome imbalance"]},
    "recommendations": ["Drop the id column before training"],
}


def make_file(text: str, filename: str = "data.csv") -> DatasetFile:
    return DatasetFile(filename=filename, content=text.encode("utf-8"))


def scenario_csv(rows: int = 100) -> str:
    """id,age,gender,outcome with unique ids, no gaps and a 50/50 gender split"""
    lines = ["id,age,gender,outcome"]
    for i in range(rows):
        gender = "M" if i % 2 == 0 else "F"
        outcome = "approved" if i % 3 else "denied"
        lines.append(f"{i + 1},{20 + i % 40},{gender},{outcome}")
    return "\n".join(lines) + "\n"
