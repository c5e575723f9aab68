"""
Prompt Templates — System and user prompts for each audit analysis.

Every template shares METHODOLOGY_CONTEXT as the base of its system prompt.
Templates receive the progressive context (upstream findings) and the
auditor's inputs for the section under review as plain text.

Some templates take parameters:
    c1_phase_review   phase_num, phase_title
    c3_bias_analysis  bias_type
    chat              component
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import NamedTuple


METHODOLOGY_CONTEXT = """\
You are an expert AI fairness auditor assisting with a structured fairness audit of an automated decision-making system. You follow a 4-component methodology:

1. Historical Context Assessment: Examines institutional history, data representation, technology transitions, protected groups, intersectional analysis, and feedback loops. Produces a risk classification matrix (Severity × Likelihood × Relevance, scores 1-125).

2. Fairness Definition Selection: Evaluates 7 fairness definitions (Demographic Parity, Equal Opportunity, Equalized Odds, Predictive Parity, Calibration, Individual Fairness, Counterfactual Fairness) through a 7-step decision framework considering label reliability, error asymmetry, base rates, calibration needs, legal requirements, intersections, and feedback loops. Key constraint: impossibility results mean trade-offs are mandatory.

3. Bias Source Identification: Systematically identifies 7 bias types (Historical, Representation, Measurement, Aggregation, Learning, Evaluation, Deployment) with 5-dimension weighted scoring (Severity 30%, Scope 20%, Persistence 20%, Historical Alignment 20%, Feasibility 10%).

4. Fairness Metrics & Reporting: Maps definitions to metrics (SPD, EOD, etc.), computes with statistical validation (bootstrap CIs, permutation tests, BH correction), intersectional analysis, and produces actionable recommendations.

Your responses should be:
- Specific and evidence-based, not generic
- Structured with clear assessments, gaps identified, and actionable suggestions
- Accessible to professional auditors who may not be ML specialists
- Grounded in the methodology above"""

BIAS_METRIC_REFERENCE = """\
- Historical bias → SPD, Disparate Impact Ratio
- Representation bias → Coverage Ratio, Representation Gap
- Measurement bias → Calibration by Group, Disaggregated FPR/FNR
- Aggregation bias → Subgroup-specific Accuracy
- Learning bias → Prediction Drift
- Evaluation bias → Disaggregated Accuracy
- Deployment bias → Outcome Drift, Appeal Rate by Group"""


class PromptPair(NamedTuple):
    system: str
    user: str


def _system(role: str) -> str:
    return f"{METHODOLOGY_CONTEXT}\n\n{role}"


def _c1_phase_review(context: str, inputs: str, phase_num: int, phase_title: str) -> PromptPair:
    return PromptPair(
        system=_system(f"You are reviewing Phase {phase_num} ({phase_title}) of the Historical Context Assessment."),
        user=(
            f"Here is the auditor's work for Phase {phase_num} - {phase_title}:\n\n{inputs}\n\n"
            "Please provide:\n"
            "1. Assessment of completeness and quality\n"
            "2. Gaps or missing considerations\n"
            "3. Specific suggestions for improvement\n"
            "4. Connections to other phases that should be explored"
        ),
    )


def _c1_risk_matrix_review(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system("You are reviewing the full Risk Classification Matrix from Component 1."),
        user=(
            f"Here is the risk matrix:\n\n{inputs}\n\n"
            "Please provide:\n"
            "1. Assessment of risk identification completeness\n"
            "2. Whether severity/likelihood/relevance scores seem well-calibrated\n"
            "3. Any missing risks that should be considered\n"
            "4. Priority ordering recommendations\n"
            "5. How these risks should influence fairness definition selection in Component 2"
        ),
    )


def _c2_definition_recommendation(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system(
            "You are helping the auditor select appropriate fairness definitions "
            "based on their answers to the 7-step decision framework."
        ),
        user=(
            f"Prior component findings:\n{context}\n\n"
            f"Decision framework answers (Steps 1-3):\n{inputs}\n\n"
            "Based on these answers and the prior findings, which fairness definition(s) would you "
            "recommend as primary and secondary? Explain your reasoning, including how label "
            "reliability and error asymmetry drive the selection."
        ),
    )


def _c2_selection_review(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system("You are reviewing the auditor's complete fairness definition selection."),
        user=(
            f"Prior findings:\n{context}\n\nSelection:\n{inputs}\n\n"
            "Please assess:\n"
            "1. Whether the primary definition is appropriate given the context\n"
            "2. Whether the secondary definition adds value\n"
            "3. Trade-offs that should be documented\n"
            "4. Implications for Component 3 (bias detection) and Component 4 (metrics)"
        ),
    )


def _c3_bias_analysis(context: str, inputs: str, bias_type: str) -> PromptPair:
    return PromptPair(
        system=_system(f"You are analyzing {bias_type} Bias for this system."),
        user=(
            f"Prior findings:\n{context}\n\nAuditor's evidence for {bias_type} Bias:\n{inputs}\n\n"
            "Please provide:\n"
            "1. Assessment of the evidence quality and completeness\n"
            "2. Additional indicators to look for\n"
            "3. Suggested severity scoring (1-5) with justification\n"
            "4. How this bias type interacts with others identified\n"
            "5. Specific detection techniques to apply"
        ),
    )


def _c3_inventory_review(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system("You are reviewing the complete bias source inventory."),
        user=(
            f"Prior findings:\n{context}\n\nBias inventory:\n{inputs}\n\n"
            "Please assess:\n"
            "1. Completeness: are any bias types underexplored?\n"
            "2. Priority ordering: does the weighting seem right?\n"
            "3. Interaction effects between bias types\n"
            "4. Implications for metric selection in Component 4"
        ),
    )


def _c4_metrics_recommendation(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system(
            "You are recommending which metrics to compute based on the selected "
            "fairness definitions and identified bias sources."
        ),
        user=(
            f"Complete audit context:\n{context}\n\n"
            f"Bias-to-metric mapping reference:\n{BIAS_METRIC_REFERENCE}\n\n"
            "Based on the selected fairness definitions, prioritized bias sources, and the mapping above, recommend:\n"
            "1. Primary metrics to compute (with formulas)\n"
            "2. Supplementary metrics by bias type\n"
            "3. Intersectional subgroups to analyze\n"
            "4. Statistical validation approach\n"
            "5. Threshold recommendations"
        ),
    )


def _c4_results_interpretation(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system("You are interpreting fairness metric results for the auditor."),
        user=(
            f"Full audit context:\n{context}\n\nMetric results:\n{inputs}\n\n"
            "Please provide:\n"
            "1. Plain-language interpretation of each metric\n"
            "2. Which disparities are most concerning and why\n"
            "3. Comparison to common regulatory thresholds\n"
            "4. Intersectional findings\n"
            "5. Confidence in the results (statistical validation)"
        ),
    )


def _c4_recommendations(context: str, inputs: str) -> PromptPair:
    return PromptPair(
        system=_system("You are generating actionable recommendations based on the complete audit."),
        user=(
            f"Complete audit context:\n{context}\n\nKey findings:\n{inputs}\n\n"
            "Generate recommendations organized by:\n"
            "1. Immediate actions (pre-deployment or emergency)\n"
            "2. Short-term improvements (within 3 months)\n"
            "3. Long-term structural changes\n"
            "4. Monitoring and re-audit schedule\n"
            "Each recommendation should include: action, expected impact, responsible party, and timeline."
        ),
    )


def _chat(context: str, inputs: str, component: str) -> PromptPair:
    system = _system(
        f"You are in a follow-up conversation about {component}. The auditor may ask clarifying "
        "questions about methodology, terminology, or their specific findings. Be helpful, "
        "specific, and reference the methodology when relevant."
    )
    if context:
        system = f"{system}\n\nAudit findings so far:\n{context}"
    return PromptPair(system=system, user=inputs)


PROMPT_TEMPLATES: dict[str, Callable[..., PromptPair]] = {
    "c1_phase_review": _c1_phase_review,
    "c1_risk_matrix_review": _c1_risk_matrix_review,
    "c2_definition_recommendation": _c2_definition_recommendation,
    "c2_selection_review": _c2_selection_review,
    "c3_bias_analysis": _c3_bias_analysis,
    "c3_inventory_review": _c3_inventory_review,
    "c4_metrics_recommendation": _c4_metrics_recommendation,
    "c4_results_interpretation": _c4_results_interpretation,
    "c4_recommendations": _c4_recommendations,
    "chat": _chat,
}


def build_prompt(template: str, context: str = "", inputs: str = "", **params) -> PromptPair:
    """
    Render `template` with the upstream context and section inputs.

    Raises KeyError for an unknown template name and TypeError when a
    parameterised template is missing its parameters.
    """
    render = PROMPT_TEMPLATES[template]
    return render(context, inputs, **params)


def check_params(template: str, params: dict) -> None:
    """Raise KeyError for an unknown template, TypeError when `params` do not fit it."""
    inspect.signature(PROMPT_TEMPLATES[template]).bind("", "", **params)
