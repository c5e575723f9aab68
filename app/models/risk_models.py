"""
Scoring Data Models — Weight profiles and explainable scoring results.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.audit_models import BiasDimensions, BiasPriority, RiskClassification


class DimensionWeights(BaseModel):
    """Per-dimension weights for bias scoring."""

    severity: float
    scope: float
    persistence: float
    historical_alignment: float
    feasibility: float

    @property
    def total(self) -> float:
        return (
            self.severity
            + self.scope
            + self.persistence
            + self.historical_alignment
            + self.feasibility
        )


class WeightOverrides(BaseModel):
    """Partial weight set; unset dimensions keep their base weight."""

    severity: float | None = None
    scope: float | None = None
    persistence: float | None = None
    historical_alignment: float | None = None
    feasibility: float | None = None


class AdaptiveWeights(BaseModel):
    """Weights resolved for a primary fairness definition, plus the reason shown to the auditor."""

    weights: DimensionWeights
    rationale: str
    profile: str | None = Field(
        default=None, description="Matched profile name, None when base weights are used"
    )


class RiskScoreResult(BaseModel):
    """Score and tier for one severity × likelihood × relevance rating."""

    severity: float
    likelihood: float
    relevance: float
    score: float
    classification: RiskClassification
    formula: str = Field(default="score = severity × likelihood × relevance")


class BiasScoreResult(BaseModel):
    """Weighted score and priority for one set of bias dimensions."""

    dimensions: BiasDimensions
    weights: DimensionWeights
    weighted_score: float
    priority: BiasPriority
    rationale: str = ""
    formula: str = Field(default="score = Σ(dimension × weight)")


class RecommendedMetric(BaseModel):
    """A fairness metric suggested by an identified bias source."""

    metric: str
    formula: str
    reason: str
    bias_source: str
