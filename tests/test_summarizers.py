"""
Tests for Component Summarizers — structured summaries and their rendered text.
"""

from app.core.bias_scorer import calculate_weighted_score, rescore_bias_sources
from app.core.context_builder import build_progressive_context
from app.core.metrics import interpret_metric
from app.core.risk_scorer import score_risk
from app.core.summarizers import (
    build_c1_summary,
    build_c2_summary,
    build_c3_summary,
    no_data_sentinel,
)


def test_empty_components_report_no_content(blank_state):
    for number, build in enumerate((build_c1_summary, build_c2_summary, build_c3_summary), start=1):
        summary = build(blank_state)
        assert summary.has_content is False
        assert summary.text == no_data_sentinel(number)
        assert summary.section.heading.startswith(f"Component {number}:")


def test_c1_summary_text(populated_store):
    summary = build_c1_summary(populated_store.snapshot())
    assert summary.has_content is True
    assert summary.text == "\n".join(
        [
            "System: Robodebt",
            "Decision type: Debt raising",
            "Affected population: Welfare recipients",
            "Risk matrix: 2 risks identified (1 Critical)",
            "  - Invalid income averaging (score: 125)",
            "Protected groups: Young adults, Indigenous Australians",
            "Feedback loops: 1 identified",
            "  - Trigger: Debt notice",
            "    Mechanism: Garnishing",
            "    Amplification: Re-targeting",
            "Intersectional groups: 1 identified",
            "  - Young + Indigenous (priority 1): Casual work",
            "Label reliability: Low",
        ]
    )


def test_c1_domain_lines_need_system_name(store):
    store.update_domain_context(decision_type="Debt raising")
    summary = build_c1_summary(store.snapshot())
    assert summary.has_content is False


def test_c1_risks_without_critical(store):
    store.add_new_risk("Minor", 2, 2, 2)
    summary = build_c1_summary(store.snapshot())
    assert summary.text == "Risk matrix: 1 risks identified (0 Critical)"


def test_c2_summary_text(populated_store):
    summary = build_c2_summary(populated_store.snapshot())
    assert summary.text == "\n".join(
        [
            "Decision framework answers:",
            "  Step 2: Which errors cause more harm? → False Positives",
            "Primary definition: Equal Opportunity — FPs cause harm",
        ]
    )


def test_c2_list_answers_are_joined(store):
    store.update_decision_step(4, answer=["Anti-discrimination law", "Privacy Act"])
    summary = build_c2_summary(store.snapshot())
    assert "  Step 5: What legal requirements apply? → Anti-discrimination law, Privacy Act" in summary.text


def test_c2_empty_list_answer_is_unanswered(store):
    store.update_decision_step(4, answer=[])
    assert build_c2_summary(store.snapshot()).has_content is False


def test_c3_summary_lists_scored_sources_highest_first(populated_store):
    populated_store.update_bias_dimensions(2, severity=3, scope=3, persistence=3, historical_alignment=3, feasibility=3)
    summary = build_c3_summary(populated_store.snapshot())
    lines = summary.text.split("\n")
    assert lines[0] == "Bias sources (prioritized):"
    assert lines[1].startswith("  - Historical: ")
    assert lines[1].endswith("(High) — Punitive welfare history")
    assert lines[2].startswith("  - Measurement: ")
    assert lines[2].endswith("— No description")
    assert len(lines) == 3


def test_c3_score_has_one_decimal(store):
    store.update_bias_dimensions(0, severity=5, scope=5, persistence=5, historical_alignment=5, feasibility=5)
    assert "  - Historical: 5.0 (High) — No description" in build_c3_summary(store.snapshot()).text


def test_c3_untouched_sources_stay_out_under_heavier_profiles(store):
    store.update_primary_selection(definition="Demographic Parity")
    assert all(bs.weighted_score > 1 for bs in store.snapshot().c3.bias_sources)

    summary = build_c3_summary(store.snapshot())
    assert summary.has_content is False
    assert summary.text == no_data_sentinel(3)

    store.update_bias_dimensions(3, scope=4)
    lines = build_c3_summary(store.snapshot()).text.split("\n")
    assert len(lines) == 2
    assert lines[1].startswith("  - Aggregation: ")


def test_summaries_are_deterministic(populated_store):
    state = populated_store.snapshot()

    for build in (build_c1_summary, build_c2_summary, build_c3_summary):
        first, second = build(state), build(state)
        assert first.text == second.text
        assert first.model_dump_json() == second.model_dump_json()

    for component in ("c2", "c3", "c4"):
        assert build_progressive_context(state, component).text == build_progressive_context(state, component).text

    sources = state.c3.bias_sources
    assert rescore_bias_sources(sources, "Calibration") == rescore_bias_sources(sources, "Calibration")
    assert calculate_weighted_score(sources[0].dimensions) == calculate_weighted_score(sources[0].dimensions)
    assert score_risk(4, 3, 5) == score_risk(4, 3, 5)
    assert interpret_metric("SPD", 0.21, "A", "B") == interpret_metric("SPD", 0.21, "A", "B")
