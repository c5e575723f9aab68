"""
Component Progress — Checklist completion for each audit component.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.audit_models import AuditState


class ProgressItem(BaseModel):
    label: str
    complete: bool


class ComponentProgress(BaseModel):
    component: str
    completed: int = 0
    total: int = 0
    percent: int = Field(default=0, ge=0, le=100)
    items: list[ProgressItem] = Field(default_factory=list)


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def _c1_items(state: AuditState) -> list[ProgressItem]:
    c1 = state.c1
    return [
        ProgressItem(
            label="Domain context",
            complete=_filled(c1.domain_context.system) and _filled(c1.domain_context.decision_type),
        ),
        ProgressItem(
            label="Data representation",
            complete=_filled(c1.data_representation.data_sources)
            or _filled(c1.data_representation.label_reliability),
        ),
        ProgressItem(label="Technology transition", complete=_filled(c1.technology_transition.prior_process)),
        ProgressItem(label="Protected groups", complete=len(c1.protected_groups) > 0),
        ProgressItem(label="Intersectional analysis", complete=len(c1.intersections) > 0),
        ProgressItem(label="Feedback loops", complete=len(c1.feedback_loops) > 0),
    ]


def _c2_items(state: AuditState) -> list[ProgressItem]:
    c2 = state.c2
    answered = sum(1 for s in c2.decision_framework if s.is_answered)
    return [
        ProgressItem(label="Framework steps answered", complete=answered >= 3),
        ProgressItem(label="All 7 steps complete", complete=answered == 7),
        ProgressItem(label="Primary definition selected", complete=_filled(c2.primary_selection.definition)),
        ProgressItem(label="Trade-off documented", complete=_filled(c2.tradeoff.description)),
    ]


def _c3_items(state: AuditState) -> list[ProgressItem]:
    scored = sum(1 for bs in state.c3.bias_sources if bs.is_scored)
    return [
        ProgressItem(label="At least 1 bias source scored", complete=scored >= 1),
        ProgressItem(label="3+ bias sources scored", complete=scored >= 3),
        ProgressItem(label="5+ bias sources scored", complete=scored >= 5),
        ProgressItem(label="All 7 bias sources scored", complete=scored == 7),
    ]


def _c4_items(state: AuditState) -> list[ProgressItem]:
    c4 = state.c4
    return [
        ProgressItem(
            label="Metric summary",
            complete=_filled(c4.metric_summary.highest_group_rate) or _filled(c4.metric_summary.worst_spd),
        ),
        ProgressItem(label="Group outcome rates", complete=_filled(c4.group_outcome_rates)),
        ProgressItem(label="Error rate analysis", complete=_filled(c4.error_rate_analysis)),
        ProgressItem(label="Intersectional analysis", complete=_filled(c4.intersectional_analysis)),
        ProgressItem(
            label="Recommendations",
            complete=_filled(c4.pre_deployment_recs) or _filled(c4.post_deployment_recs),
        ),
        ProgressItem(label="Audit dimension scores", complete=_filled(c4.audit_dimension_scores)),
    ]


_ITEM_BUILDERS = {
    "c1": _c1_items,
    "c2": _c2_items,
    "c3": _c3_items,
    "c4": _c4_items,
}


def component_progress(state: AuditState, component: str) -> ComponentProgress:
    """Checklist for `component`; unknown components report an empty checklist at 0%."""
    builder = _ITEM_BUILDERS.get(component)
    items = builder(state) if builder else []

    completed = sum(1 for i in items if i.complete)
    total = len(items)
    percent = int(completed / total * 100 + 0.5) if total else 0

    return ComponentProgress(
        component=component,
        completed=completed,
        total=total,
        percent=percent,
        items=items,
    )
