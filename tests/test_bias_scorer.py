"""
Tests for Bias Prioritisation — weighted scoring, adaptive weights, metric mapping.
"""

import pytest

from app.core.bias_scorer import (
    ADAPTIVE_WEIGHT_PROFILES,
    BASE_WEIGHTS,
    DEFAULT_RATIONALE,
    calculate_weighted_score,
    classify_bias_priority,
    get_adaptive_weights,
    get_recommended_metrics,
    rescore_bias_sources,
    score_bias_source,
    score_dimensions,
)
from app.models.audit_models import BiasDimensions, BiasPriority, BiasSource, BiasType
from app.models.risk_models import WeightOverrides


def _dims(severity, scope, persistence, historical_alignment, feasibility):
    return BiasDimensions(
        severity=severity,
        scope=scope,
        persistence=persistence,
        historical_alignment=historical_alignment,
        feasibility=feasibility,
    )


def test_base_weights_sum_to_one():
    assert BASE_WEIGHTS.total == pytest.approx(1.0)


def test_default_weighted_score():
    assert calculate_weighted_score(_dims(5, 5, 5, 5, 5)) == 5.0
    assert calculate_weighted_score(_dims(1, 1, 1, 1, 1)) == 1.0
    assert calculate_weighted_score(_dims(4, 3, 3, 3, 3)) == 3.3


def test_partial_override_keeps_other_base_weights():
    score = calculate_weighted_score(_dims(5, 1, 1, 1, 1), WeightOverrides(severity=1.0))
    # 5×1.0 + 1×0.2 + 1×0.2 + 1×0.2 + 1×0.1
    assert score == 5.7


def test_dict_overrides_accepted():
    assert calculate_weighted_score(_dims(2, 2, 2, 2, 2), {"feasibility": 0.1}) == 2.0


@pytest.mark.parametrize(
    "score, expected",
    [
        (5.0, BiasPriority.HIGH),
        (3.5, BiasPriority.HIGH),
        (3.4, BiasPriority.MEDIUM),
        (2.5, BiasPriority.MEDIUM),
        (2.4, BiasPriority.LOW),
        (1.0, BiasPriority.LOW),
    ],
)
def test_priority_thresholds(score, expected):
    assert classify_bias_priority(score) == expected


def test_profiles_are_not_renormalised():
    totals = {name: get_adaptive_weights(name).weights.total for name in ADAPTIVE_WEIGHT_PROFILES}
    assert totals["Equalized Odds"] == pytest.approx(1.0)
    for name in ("Calibration", "Demographic Parity", "Equal Opportunity", "Predictive Parity"):
        assert totals[name] == pytest.approx(1.05)


def test_demographic_parity_profile():
    adaptive = get_adaptive_weights("Demographic Parity")
    assert adaptive.profile == "Demographic Parity"
    assert adaptive.weights.scope == pytest.approx(0.30)
    assert adaptive.weights.feasibility == pytest.approx(0.05)
    assert adaptive.weights.severity == pytest.approx(0.30)
    assert "scope" in adaptive.rationale


@pytest.mark.parametrize("name", ["", "Individual Fairness", "Equalised Odds", "demographic parity"])
def test_unknown_definitions_fall_back_to_base(name):
    adaptive = get_adaptive_weights(name)
    assert adaptive.profile is None
    assert adaptive.weights == BASE_WEIGHTS
    assert adaptive.rationale == DEFAULT_RATIONALE


def test_score_dimensions_explains_result():
    result = score_dimensions(_dims(4, 3, 3, 3, 3))
    assert result.weighted_score == 3.3
    assert result.priority == BiasPriority.MEDIUM
    assert result.weights == BASE_WEIGHTS


def test_score_bias_source_updates_score_and_priority_together():
    source = BiasSource(type=BiasType.MEASUREMENT, dimensions=_dims(5, 5, 5, 5, 5))
    scored = score_bias_source(source, BASE_WEIGHTS)
    assert scored.weighted_score == 5.0
    assert scored.priority == BiasPriority.HIGH
    assert source.weighted_score == 1.0


def test_rescored_sources_match_the_formula_under_every_profile():
    sources = [BiasSource(type=t) for t in BiasType]
    sources[0] = BiasSource(type=BiasType.HISTORICAL, dimensions=_dims(2, 4, 3, 5, 1))
    for name in ADAPTIVE_WEIGHT_PROFILES:
        weights = get_adaptive_weights(name).weights
        for source in rescore_bias_sources(sources, name):
            expected = calculate_weighted_score(source.dimensions, weights)
            assert source.weighted_score == expected
            assert source.priority == classify_bias_priority(expected)


def test_untouched_source_scores_sum_of_weights():
    untouched = BiasSource(type=BiasType.LEARNING)
    weights = get_adaptive_weights("Demographic Parity").weights
    rescored = rescore_bias_sources([untouched], "Demographic Parity")[0]
    assert rescored.weighted_score == calculate_weighted_score(BiasDimensions(), weights)
    assert rescored.weighted_score > 1.0
    assert rescored.is_scored is False


def test_rescore_uses_profile_weights():
    sources = [BiasSource(type=BiasType.HISTORICAL, dimensions=_dims(5, 5, 5, 5, 5))]
    assert rescore_bias_sources(sources, "")[0].weighted_score == 5.0
    assert rescore_bias_sources(sources, "Demographic Parity")[0].weighted_score > 5.0
    assert rescore_bias_sources(sources, "Equalized Odds")[0].weighted_score == 5.0


def test_recommended_metrics_follow_priority_order():
    sources = [
        BiasSource(type=BiasType.HISTORICAL, weighted_score=2.0),
        BiasSource(type=BiasType.DEPLOYMENT, weighted_score=4.5),
    ]
    metrics = get_recommended_metrics(sources)
    assert [m.bias_source for m in metrics] == ["Deployment", "Deployment", "Historical", "Historical"]
    assert metrics[0].metric == "Outcome Drift"
    assert metrics[2].metric == "Statistical Parity Difference"


def test_recommended_metrics_are_unique():
    sources = [BiasSource(type=t, weighted_score=3.0) for t in BiasType]
    names = [m.metric for m in get_recommended_metrics(sources)]
    assert len(names) == len(set(names))
    assert get_recommended_metrics([]) == []
