"""
Scoring Routes — Stateless calculators.

  POST /scoring/risk        severity × likelihood × relevance → score + tier
  POST /scoring/bias        five dimensions (+ definition) → weighted score + priority
  GET  /scoring/weights     adaptive weight profile for a primary definition
  POST /scoring/interpret   metric value → plain-language sentence
  GET  /scoring/thresholds  risk tier legend
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.core.bias_scorer import (
    calculate_weighted_score,
    classify_bias_priority,
    get_adaptive_weights,
    merge_weights,
    score_dimensions,
)
from app.core.metrics import interpret_metric
from app.core.risk_scorer import RISK_TEMPLATES, RISK_THRESHOLD_LEGEND, score_risk
from app.models.audit_models import BiasDimensions
from app.models.risk_models import (
    AdaptiveWeights,
    BiasScoreResult,
    RiskScoreResult,
    WeightOverrides,
)

router = APIRouter(prefix="/scoring", tags=["scoring"])


class RiskScoreRequest(BaseModel):
    severity: float = Field(..., ge=1, le=5)
    likelihood: float = Field(..., ge=1, le=5)
    relevance: float = Field(..., ge=1, le=5)


class BiasScoreRequest(BaseModel):
    dimensions: BiasDimensions
    primary_definition: str = Field(default="", description="Selects the adaptive weight profile")
    weights: Optional[WeightOverrides] = Field(
        default=None, description="Explicit overrides; takes precedence over primary_definition"
    )


class InterpretRequest(BaseModel):
    metric_name: str
    value: float
    group_a: str
    group_b: str
    threshold: float = 0.05


@router.post("/risk", response_model=RiskScoreResult)
async def risk_score(req: RiskScoreRequest):
    return score_risk(req.severity, req.likelihood, req.relevance)


@router.post("/bias", response_model=BiasScoreResult)
async def bias_score(req: BiasScoreRequest):
    if req.weights is None:
        return score_dimensions(req.dimensions, req.primary_definition)

    weighted = calculate_weighted_score(req.dimensions, req.weights)
    return BiasScoreResult(
        dimensions=req.dimensions,
        weights=merge_weights(req.weights),
        weighted_score=weighted,
        priority=classify_bias_priority(weighted),
        rationale="Using explicit weight overrides.",
    )


@router.get("/weights", response_model=AdaptiveWeights)
async def adaptive_weights(definition: str = ""):
    return get_adaptive_weights(definition)


@router.post("/interpret")
async def interpret(req: InterpretRequest):
    return {
        "metric_name": req.metric_name,
        "interpretation": interpret_metric(
            req.metric_name, req.value, req.group_a, req.group_b, req.threshold
        ),
    }


@router.get("/thresholds")
async def thresholds():
    return {
        "risk": {c.value: label for c, label in RISK_THRESHOLD_LEGEND.items()},
        "templates": RISK_TEMPLATES,
    }
