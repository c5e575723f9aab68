"""
Risk Scoring Engine — Scores and classifies historical-context risks.

Risk Score = severity × likelihood × relevance   (1-125 for 1-5 ratings)

Classification (canonical thresholds, used everywhere a tier is shown):
    score >= 90 → Critical
    score >= 40 → Elevated
    score >= 15 → Moderate
    otherwise   → Low

Inputs are not clamped; range checks belong to the input layer.
"""

from __future__ import annotations

from app.core.numbers import round_half_up
from app.models.audit_models import RiskClassification, RiskMatrixEntry
from app.models.risk_models import RiskScoreResult

RISK_THRESHOLDS: tuple[tuple[float, RiskClassification], ...] = (
    (90, RiskClassification.CRITICAL),
    (40, RiskClassification.ELEVATED),
    (15, RiskClassification.MODERATE),
)

RISK_THRESHOLD_LEGEND: dict[RiskClassification, str] = {
    RiskClassification.CRITICAL: "Critical (Score >= 90)",
    RiskClassification.ELEVATED: "Elevated (Score >= 40)",
    RiskClassification.MODERATE: "Moderate (Score >= 15)",
    RiskClassification.LOW: "Low (Score < 15)",
}

# Stock risks offered when seeding a new risk matrix.
RISK_TEMPLATES: list[dict[str, str | int]] = [
    {"risk": "Algorithm relies on flawed or unvalidated assumptions", "severity": 3, "likelihood": 3, "relevance": 3},
    {"risk": "Training data underrepresents affected groups", "severity": 3, "likelihood": 3, "relevance": 3},
    {"risk": "Disproportionate negative outcomes for vulnerable populations", "severity": 4, "likelihood": 3, "relevance": 3},
    {"risk": "Insufficient human oversight of automated decisions", "severity": 3, "likelihood": 3, "relevance": 3},
    {"risk": "No adequate appeal or redress mechanism", "severity": 3, "likelihood": 3, "relevance": 3},
]


def calculate_risk_score(severity: float, likelihood: float, relevance: float) -> float:
    """Product of the three ratings, rounded to 2 decimals."""
    return round_half_up(severity * likelihood * relevance, 2)


def classify_risk(score: float) -> RiskClassification:
    for threshold, classification in RISK_THRESHOLDS:
        if score >= threshold:
            return classification
    return RiskClassification.LOW


def score_risk(severity: float, likelihood: float, relevance: float) -> RiskScoreResult:
    """Score plus classification in one explainable result."""
    score = calculate_risk_score(severity, likelihood, relevance)
    return RiskScoreResult(
        severity=severity,
        likelihood=likelihood,
        relevance=relevance,
        score=score,
        classification=classify_risk(score),
    )


def create_risk_entry(
    entry_id: str,
    risk: str,
    severity: float = 1,
    likelihood: float = 1,
    relevance: float = 1,
) -> RiskMatrixEntry:
    score = calculate_risk_score(severity, likelihood, relevance)
    return RiskMatrixEntry(
        id=entry_id,
        risk=risk,
        severity=severity,
        likelihood=likelihood,
        relevance=relevance,
        score=score,
        classification=classify_risk(score),
    )


def rescore_risk_entry(entry: RiskMatrixEntry) -> RiskMatrixEntry:
    """Return a copy of `entry` with score and classification re-derived from its ratings."""
    score = calculate_risk_score(entry.severity, entry.likelihood, entry.relevance)
    return entry.model_copy(update={"score": score, "classification": classify_risk(score)})


def sort_risk_matrix(matrix: list[RiskMatrixEntry]) -> list[RiskMatrixEntry]:
    """Highest score first; ties keep their original order."""
    return sorted(matrix, key=lambda r: r.score, reverse=True)


def count_by_classification(matrix: list[RiskMatrixEntry]) -> dict[RiskClassification, int]:
    counts = {c: 0 for c in RiskClassification}
    for entry in matrix:
        counts[entry.classification] += 1
    return counts
