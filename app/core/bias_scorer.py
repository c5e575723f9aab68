"""
Bias Prioritisation Engine — Weighted five-dimension scoring of bias sources.

Weighted Score = Σ(dimension × weight), rounded to 1 decimal

Base weights: severity 30%, scope 20%, persistence 20%,
historical alignment 20%, feasibility 10%.

The primary fairness definition chosen in Component 2 selects an adaptive
profile that overrides some of these weights. Profiles are merged onto the
base set as-is and are NOT renormalised: four of the five profiles sum to
1.05. Displayed scores depend on that, so it must stay that way.
"""

from __future__ import annotations

from app.core.numbers import round_half_up
from app.models.audit_models import BiasDimensions, BiasPriority, BiasSource, BiasType
from app.models.risk_models import (
    AdaptiveWeights,
    BiasScoreResult,
    DimensionWeights,
    RecommendedMetric,
    WeightOverrides,
)

BASE_WEIGHTS = DimensionWeights(
    severity=0.30,
    scope=0.20,
    persistence=0.20,
    historical_alignment=0.20,
    feasibility=0.10,
)

DEFAULT_RATIONALE = "Using default weights — no definition-specific adjustments."

# Keyed by exact definition name (case-sensitive).
ADAPTIVE_WEIGHT_PROFILES: dict[str, tuple[WeightOverrides, str]] = {
    "Calibration": (
        WeightOverrides(severity=0.35, scope=0.15, historical_alignment=0.25),
        "Calibration prioritises severity and historical alignment — a miscalibrated "
        "system that replicates historical patterns is the primary risk.",
    ),
    "Demographic Parity": (
        WeightOverrides(scope=0.30, feasibility=0.05),
        "Demographic Parity focuses on scope — how many groups are affected matters "
        "most when the goal is equal outcome rates.",
    ),
    "Equal Opportunity": (
        WeightOverrides(severity=0.35, scope=0.15, persistence=0.25),
        "Equal Opportunity emphasises severity and persistence — persistent errors in "
        "detecting true positives across groups are the key concern.",
    ),
    "Equalized Odds": (
        WeightOverrides(
            severity=0.30, scope=0.25, persistence=0.20, historical_alignment=0.15, feasibility=0.10
        ),
        "Equalized Odds balances severity and scope — both false positive and false "
        "negative disparities must be tracked broadly.",
    ),
    "Predictive Parity": (
        WeightOverrides(severity=0.35, historical_alignment=0.25, scope=0.15),
        "Predictive Parity focuses on whether predictions mean the same thing across "
        "groups — severity and historical patterns drive miscalibration.",
    ),
}

PRIORITY_THRESHOLDS: tuple[tuple[float, BiasPriority], ...] = (
    (3.5, BiasPriority.HIGH),
    (2.5, BiasPriority.MEDIUM),
)


def merge_weights(overrides: WeightOverrides | None = None) -> DimensionWeights:
    """Base weights with any set override values replacing them."""
    if overrides is None:
        return BASE_WEIGHTS.model_copy()
    return BASE_WEIGHTS.model_copy(update=overrides.model_dump(exclude_none=True))


def get_adaptive_weights(primary_definition: str) -> AdaptiveWeights:
    """Resolve the weight set for the selected primary definition; unknown names get the base set."""
    profile = ADAPTIVE_WEIGHT_PROFILES.get(primary_definition)
    if profile is None:
        return AdaptiveWeights(weights=merge_weights(), rationale=DEFAULT_RATIONALE)

    overrides, rationale = profile
    return AdaptiveWeights(
        weights=merge_weights(overrides),
        rationale=rationale,
        profile=primary_definition,
    )


def calculate_weighted_score(
    dimensions: BiasDimensions,
    weight_overrides: WeightOverrides | DimensionWeights | dict[str, float] | None = None,
) -> float:
    if isinstance(weight_overrides, dict):
        weight_overrides = WeightOverrides(**weight_overrides)

    if isinstance(weight_overrides, DimensionWeights):
        w = weight_overrides
    else:
        w = merge_weights(weight_overrides)

    score = (
        dimensions.severity * w.severity
        + dimensions.scope * w.scope
        + dimensions.persistence * w.persistence
        + dimensions.historical_alignment * w.historical_alignment
        + dimensions.feasibility * w.feasibility
    )
    return round_half_up(score, 1)


def classify_bias_priority(weighted_score: float) -> BiasPriority:
    for threshold, priority in PRIORITY_THRESHOLDS:
        if weighted_score >= threshold:
            return priority
    return BiasPriority.LOW


def score_dimensions(dimensions: BiasDimensions, primary_definition: str = "") -> BiasScoreResult:
    """Explainable score for one dimension set under the definition's weight profile."""
    adaptive = get_adaptive_weights(primary_definition)
    weighted = calculate_weighted_score(dimensions, adaptive.weights)
    return BiasScoreResult(
        dimensions=dimensions,
        weights=adaptive.weights,
        weighted_score=weighted,
        priority=classify_bias_priority(weighted),
        rationale=adaptive.rationale,
    )


def score_bias_source(source: BiasSource, weights: DimensionWeights) -> BiasSource:
    """Return a copy of `source` with weighted_score and priority re-derived together."""
    weighted = calculate_weighted_score(source.dimensions, weights)
    return source.model_copy(
        update={"weighted_score": weighted, "priority": classify_bias_priority(weighted)}
    )


def rescore_bias_sources(sources: list[BiasSource], primary_definition: str) -> list[BiasSource]:
    """Re-derive every source under the profile of the current primary definition."""
    weights = get_adaptive_weights(primary_definition).weights
    return [score_bias_source(source, weights) for source in sources]


BIAS_METRIC_MAP: dict[BiasType, list[tuple[str, str, str]]] = {
    BiasType.HISTORICAL: [
        ("Statistical Parity Difference", "P(Y=1|G=a) - P(Y=1|G=b)",
         "Detects outcome rate disparities rooted in historical discrimination patterns"),
        ("Disparate Impact Ratio", "P(Y=1|G=a) / P(Y=1|G=b)",
         "Four-fifths rule compliance check for historically disadvantaged groups"),
    ],
    BiasType.REPRESENTATION: [
        ("Coverage Ratio", "n_group / N_population_group",
         "Measures whether training data represents each group proportionally"),
        ("Representation Gap", "|p_data - p_population|",
         "Quantifies deviation between data composition and true population"),
    ],
    BiasType.MEASUREMENT: [
        ("Calibration by Group", "E[Y|S=s, G=g] = s for all g",
         "Tests whether scores mean the same thing across groups"),
        ("Disaggregated FPR/FNR", "FP_g/(FP_g+TN_g) per group",
         "Reveals measurement errors that fall disproportionately on specific groups"),
    ],
    BiasType.AGGREGATION: [
        ("Subgroup Accuracy", "Accuracy_g for each subgroup g",
         "Detects whether one-size-fits-all models underperform for specific subgroups"),
    ],
    BiasType.LEARNING: [
        ("Prediction Drift", "KL(P_t || P_t+1) per group",
         "Monitors whether model predictions shift disproportionately for some groups"),
    ],
    BiasType.EVALUATION: [
        ("Disaggregated Accuracy", "Accuracy_g for all groups",
         "Ensures evaluation metrics are not masking group-level performance gaps"),
    ],
    BiasType.DEPLOYMENT: [
        ("Outcome Drift", "SPD_t+1 - SPD_t",
         "Tracks whether deployment context introduces new or worsening disparities"),
        ("Appeal/Override Rate by Group", "appeals_g / decisions_g",
         "Higher appeal rates in specific groups signal deployment-context bias"),
    ],
}


def get_recommended_metrics(bias_sources: list[BiasSource]) -> list[RecommendedMetric]:
    """
    Metrics suggested by the bias inventory, highest-scoring source first.

    Each metric appears once, attributed to the first source that suggests it.
    """
    metrics: list[RecommendedMetric] = []
    seen: set[str] = set()

    for source in sorted(bias_sources, key=lambda s: s.weighted_score, reverse=True):
        for metric, formula, reason in BIAS_METRIC_MAP.get(source.type, []):
            if metric in seen:
                continue
            seen.add(metric)
            metrics.append(
                RecommendedMetric(
                    metric=metric,
                    formula=formula,
                    reason=reason,
                    bias_source=source.type.value,
                )
            )

    return metrics
