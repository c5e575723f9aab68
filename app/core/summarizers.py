"""
Component Summarizers — Condense one upstream component for downstream use.

Each summarizer reads an AuditState snapshot and returns a ComponentSummary:
a section of typed lines plus a has_content flag. When a component holds
nothing reportable the section carries only the "No Component N data yet."
sentinel line and has_content is False; consumers check the flag, never the
text.

The same text goes to the prior-findings panel and into LLM prompts, so
lines are prose and bullets rather than a serialization format.
"""

from __future__ import annotations

from app.core.numbers import format_number
from app.models.audit_models import AuditState, RiskClassification
from app.models.context_models import ComponentSummary, ContextSection, SummaryLine

COMPONENT_TITLES: dict[str, str] = {
    "c1": "Historical Context",
    "c2": "Fairness Definitions",
    "c3": "Bias Sources",
    "c4": "Fairness Metrics",
}


def no_data_sentinel(component_number: int) -> str:
    return f"No Component {component_number} data yet."


def _summary(component: str, lines: list[SummaryLine]) -> ComponentSummary:
    number = int(component[1:])
    heading = f"Component {number}: {COMPONENT_TITLES[component]}"
    has_content = bool(lines)
    if not has_content:
        lines = [SummaryLine(kind="text", value=no_data_sentinel(number))]
    return ComponentSummary(
        component=component,
        section=ContextSection(heading=heading, lines=lines, has_content=has_content),
        has_content=has_content,
    )


def intersection_lines(state: AuditState, indent: int = 0) -> list[SummaryLine]:
    """One bullet per C1 intersectional group: groups, priority and pattern."""
    return [
        SummaryLine(kind="bullet", value=f"{ix.groups} (priority {ix.priority}): {ix.pattern}", indent=indent)
        for ix in state.c1.intersections
    ]


def feedback_loop_lines(state: AuditState, indent: int = 0) -> list[SummaryLine]:
    """Trigger bullet per C1 feedback loop, with mechanism and amplification nested under it."""
    lines: list[SummaryLine] = []
    for loop in state.c1.feedback_loops:
        lines.append(SummaryLine(kind="bullet", key="Trigger", value=loop.trigger, indent=indent))
        lines.append(SummaryLine(kind="kv", key="Mechanism", value=loop.mechanism, indent=indent + 1))
        lines.append(SummaryLine(kind="kv", key="Amplification", value=loop.amplification, indent=indent + 1))
    return lines


def build_c1_summary(state: AuditState) -> ComponentSummary:
    """
    Historical context: domain, Critical risks, protected groups, feedback
    loops, intersections and label reliability.

    The domain lines are emitted only when the system name is filled in,
    independently of every other C1 field.
    """
    c1 = state.c1
    lines: list[SummaryLine] = []

    if c1.domain_context.system:
        lines.append(SummaryLine(kind="kv", key="System", value=c1.domain_context.system))
        lines.append(SummaryLine(kind="kv", key="Decision type", value=c1.domain_context.decision_type))
        lines.append(
            SummaryLine(kind="kv", key="Affected population", value=c1.domain_context.affected_population)
        )

    if c1.risk_matrix:
        critical = [r for r in c1.risk_matrix if r.classification == RiskClassification.CRITICAL]
        lines.append(
            SummaryLine(
                kind="kv",
                key="Risk matrix",
                value=f"{len(c1.risk_matrix)} risks identified ({len(critical)} Critical)",
            )
        )
        lines.extend(
            SummaryLine(kind="bullet", value=f"{r.risk} (score: {format_number(r.score)})", indent=1)
            for r in critical
        )

    if c1.protected_groups:
        names = ", ".join(g.group for g in c1.protected_groups)
        lines.append(SummaryLine(kind="kv", key="Protected groups", value=names))

    if c1.feedback_loops:
        lines.append(
            SummaryLine(kind="kv", key="Feedback loops", value=f"{len(c1.feedback_loops)} identified")
        )
        lines.extend(feedback_loop_lines(state, indent=1))

    if c1.intersections:
        lines.append(
            SummaryLine(kind="kv", key="Intersectional groups", value=f"{len(c1.intersections)} identified")
        )
        lines.extend(intersection_lines(state, indent=1))

    if c1.data_representation.label_reliability:
        lines.append(
            SummaryLine(kind="kv", key="Label reliability", value=c1.data_representation.label_reliability)
        )

    return _summary("c1", lines)


def build_c2_summary(state: AuditState) -> ComponentSummary:
    """Fairness definitions: answered framework steps, then primary and secondary selections."""
    c2 = state.c2
    lines: list[SummaryLine] = []

    answered = [s for s in c2.decision_framework if s.is_answered]
    if answered:
        lines.append(SummaryLine(kind="text", value="Decision framework answers:"))
        lines.extend(
            SummaryLine(
                kind="step",
                key=f"Step {s.step}",
                value=f"{s.question} → {s.answer_text()}",
                indent=1,
            )
            for s in answered
        )

    for label, selection in (("Primary", c2.primary_selection), ("Secondary", c2.secondary_selection)):
        if selection.definition:
            lines.append(
                SummaryLine(
                    kind="kv",
                    key=f"{label} definition",
                    value=f"{selection.definition} — {selection.justification}",
                )
            )

    return _summary("c2", lines)


def build_c3_summary(state: AuditState) -> ComponentSummary:
    """
    Bias sources scored above the untouched default (1.0), highest first.

    A source with every dimension still at 1 stays out even under the
    profiles whose weights sum to 1.05.
    """
    scored = [bs for bs in state.c3.bias_sources if bs.is_scored]
    lines: list[SummaryLine] = []

    if scored:
        lines.append(SummaryLine(kind="text", value="Bias sources (prioritized):"))
        for bs in sorted(scored, key=lambda s: s.weighted_score, reverse=True):
            lines.append(
                SummaryLine(
                    kind="bullet",
                    key=bs.type.value,
                    value=f"{bs.weighted_score:.1f} ({bs.priority.value}) — {bs.description or 'No description'}",
                    indent=1,
                )
            )

    return _summary("c3", lines)
