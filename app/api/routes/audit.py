"""
Audit Routes — Read and edit the single in-process audit.

Reads (GET /audit, risk matrix, context, progress, recommended metrics,
export) serve the active view: the Robodebt case study in learn mode, the
worksheet in audit mode. Edits always go to the worksheet. Partial-update
bodies take camelCase or snake_case keys.

Store errors are mapped in app.main: ItemNotFoundError → 404,
InvalidUpdateError → 422.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from app.api.dependencies import get_audit_store
from app.core.bias_scorer import get_adaptive_weights, get_recommended_metrics
from app.core.context_builder import build_progressive_context
from app.core.progress import ComponentProgress, component_progress
from app.core.risk_scorer import count_by_classification, sort_risk_matrix
from app.core.summarizers import COMPONENT_TITLES
from app.export.json_io import export_audit_json, export_filename, parse_audit_json
from app.models.audit_models import (
    AuditMode,
    AuditState,
    BiasSource,
    ComponentStatus,
    FeedbackLoop,
    Intersection,
    ProtectedGroup,
    RiskClassification,
    RiskMatrixEntry,
)
from app.models.risk_models import AdaptiveWeights, RecommendedMetric
from app.store.audit_store import AuditStore

logger = logging.getLogger("fairaudit.api")
router = APIRouter(prefix="/audit", tags=["audit"])

Updates = dict[str, Any]


class ModeRequest(BaseModel):
    mode: AuditMode


class StatusRequest(BaseModel):
    status: ComponentStatus


class NewRiskRequest(BaseModel):
    risk: str = ""
    severity: float = Field(default=1, ge=1, le=5)
    likelihood: float = Field(default=1, ge=1, le=5)
    relevance: float = Field(default=1, ge=1, le=5)


class TemplateRequest(BaseModel):
    indexes: list[int] = Field(..., min_length=1)


class RiskMatrixView(BaseModel):
    risks: list[RiskMatrixEntry]
    counts: dict[RiskClassification, int]


def _check_component(component: str) -> None:
    if component not in COMPONENT_TITLES:
        raise HTTPException(status_code=404, detail=f"Unknown component: {component}")


# ── Reads ──


@router.get("", response_model=AuditState)
async def get_audit(store: AuditStore = Depends(get_audit_store)):
    return store.view()


@router.get("/worksheet", response_model=AuditState)
async def get_worksheet(store: AuditStore = Depends(get_audit_store)):
    return store.snapshot()


@router.put("/mode")
async def set_mode(req: ModeRequest, store: AuditStore = Depends(get_audit_store)):
    store.set_mode(req.mode)
    return {"mode": store.mode.value}


@router.post("/reset", response_model=AuditState)
async def reset(store: AuditStore = Depends(get_audit_store)):
    store.reset()
    return store.snapshot()


@router.get("/export")
async def export(store: AuditStore = Depends(get_audit_store)):
    state = store.view()
    return Response(
        content=export_audit_json(state),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(state)}"'},
    )


@router.post("/import")
async def import_audit(request: Request, store: AuditStore = Depends(get_audit_store)):
    body = await request.body()
    result = parse_audit_json(body.decode("utf-8", errors="replace"))
    if not result.success:
        logger.warning(f"Audit import rejected: {result.error}")
        raise HTTPException(status_code=400, detail=result.error)

    store.load(result.data)
    state = store.snapshot()
    return {"success": True, "id": state.metadata.id, "name": state.metadata.name, "mode": state.mode.value}


@router.get("/context/{component}")
async def context(component: str, store: AuditStore = Depends(get_audit_store)):
    _check_component(component)
    ctx = build_progressive_context(store.view(), component)
    return {
        "component": component,
        "has_content": ctx.has_content,
        "text": ctx.text,
        "sections": [s.model_dump() for s in ctx.sections],
    }


@router.get("/progress/{component}", response_model=ComponentProgress)
async def progress(component: str, store: AuditStore = Depends(get_audit_store)):
    _check_component(component)
    return component_progress(store.view(), component)


@router.get("/recommended-metrics", response_model=list[RecommendedMetric])
async def recommended_metrics(store: AuditStore = Depends(get_audit_store)):
    return get_recommended_metrics(store.view().c3.bias_sources)


@router.get("/weights", response_model=AdaptiveWeights)
async def active_weights(store: AuditStore = Depends(get_audit_store)):
    return get_adaptive_weights(store.view().c2.primary_selection.definition)


@router.get("/c1/risks", response_model=RiskMatrixView)
async def risk_matrix(sort_by_score: bool = False, store: AuditStore = Depends(get_audit_store)):
    """The risk matrix with a count per tier, optionally highest score first."""
    matrix = store.view().c1.risk_matrix
    return RiskMatrixView(
        risks=sort_risk_matrix(matrix) if sort_by_score else matrix,
        counts=count_by_classification(matrix),
    )


# ── Navigation, overview and report ──


@router.put("/components/{component}/status")
async def set_status(component: str, req: StatusRequest, store: AuditStore = Depends(get_audit_store)):
    _check_component(component)
    store.set_component_status(component, req.status)
    return {"component": component, "status": req.status.value}


@router.patch("/system", response_model=AuditState)
async def update_system(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_system(**updates)
    return store.snapshot()


@router.patch("/metadata", response_model=AuditState)
async def update_metadata(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_audit_metadata(**updates)
    return store.snapshot()


@router.patch("/executive-summary", response_model=AuditState)
async def update_executive_summary(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_executive_summary(**updates)
    return store.snapshot()


@router.patch("/limitations", response_model=AuditState)
async def update_limitations(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_limitations(**updates)
    return store.snapshot()


# ── C1 ──


@router.patch("/c1/domain-context", response_model=AuditState)
async def update_domain_context(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_domain_context(**updates)
    return store.snapshot()


@router.patch("/c1/data-representation", response_model=AuditState)
async def update_data_representation(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_data_representation(**updates)
    return store.snapshot()


@router.patch("/c1/technology-transition", response_model=AuditState)
async def update_technology_transition(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_technology_transition(**updates)
    return store.snapshot()


@router.post("/c1/protected-groups", status_code=201, response_model=list[ProtectedGroup])
async def add_protected_group(group: ProtectedGroup, store: AuditStore = Depends(get_audit_store)):
    store.add_protected_group(group)
    return store.snapshot().c1.protected_groups


@router.patch("/c1/protected-groups/{index}", response_model=list[ProtectedGroup])
async def update_protected_group(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_protected_group(index, **updates)
    return store.snapshot().c1.protected_groups


@router.delete("/c1/protected-groups/{index}", response_model=list[ProtectedGroup])
async def remove_protected_group(index: int, store: AuditStore = Depends(get_audit_store)):
    store.remove_protected_group(index)
    return store.snapshot().c1.protected_groups


@router.post("/c1/intersections", status_code=201, response_model=list[Intersection])
async def add_intersection(intersection: Intersection, store: AuditStore = Depends(get_audit_store)):
    store.add_intersection(intersection)
    return store.snapshot().c1.intersections


@router.patch("/c1/intersections/{index}", response_model=list[Intersection])
async def update_intersection(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_intersection(index, **updates)
    return store.snapshot().c1.intersections


@router.delete("/c1/intersections/{index}", response_model=list[Intersection])
async def remove_intersection(index: int, store: AuditStore = Depends(get_audit_store)):
    store.remove_intersection(index)
    return store.snapshot().c1.intersections


@router.post("/c1/feedback-loops", status_code=201, response_model=list[FeedbackLoop])
async def add_feedback_loop(loop: FeedbackLoop, store: AuditStore = Depends(get_audit_store)):
    store.add_feedback_loop(loop)
    return store.snapshot().c1.feedback_loops


@router.patch("/c1/feedback-loops/{index}", response_model=list[FeedbackLoop])
async def update_feedback_loop(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_feedback_loop(index, **updates)
    return store.snapshot().c1.feedback_loops


@router.delete("/c1/feedback-loops/{index}", response_model=list[FeedbackLoop])
async def remove_feedback_loop(index: int, store: AuditStore = Depends(get_audit_store)):
    store.remove_feedback_loop(index)
    return store.snapshot().c1.feedback_loops


@router.post("/c1/risks", status_code=201, response_model=RiskMatrixEntry)
async def add_risk(req: NewRiskRequest, store: AuditStore = Depends(get_audit_store)):
    return store.add_new_risk(req.risk, req.severity, req.likelihood, req.relevance)


@router.post("/c1/risks/templates", status_code=201, response_model=list[RiskMatrixEntry])
async def add_risk_templates(req: TemplateRequest, store: AuditStore = Depends(get_audit_store)):
    return store.add_risk_templates(req.indexes)


@router.patch("/c1/risks/{index}", response_model=RiskMatrixEntry)
async def update_risk(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    return store.update_risk(index, **updates)


@router.delete("/c1/risks/{index}", response_model=list[RiskMatrixEntry])
async def remove_risk(index: int, store: AuditStore = Depends(get_audit_store)):
    store.remove_risk(index)
    return store.snapshot().c1.risk_matrix


# ── C2 ──


@router.patch("/c2/steps/{index}", response_model=AuditState)
async def update_decision_step(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_decision_step(index, **updates)
    return store.snapshot()


@router.patch("/c2/primary", response_model=AuditState)
async def update_primary(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_primary_selection(**updates)
    return store.snapshot()


@router.patch("/c2/secondary", response_model=AuditState)
async def update_secondary(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_secondary_selection(**updates)
    return store.snapshot()


@router.patch("/c2/tradeoff", response_model=AuditState)
async def update_tradeoff(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_tradeoff(**updates)
    return store.snapshot()


# ── C3 ──


@router.patch("/c3/bias-sources/{index}", response_model=BiasSource)
async def update_bias_source(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    return store.update_bias_source(index, **updates)


@router.patch("/c3/bias-sources/{index}/dimensions", response_model=BiasSource)
async def update_bias_dimensions(index: int, updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    return store.update_bias_dimensions(index, **updates)


# ── C4 ──


@router.patch("/c4", response_model=AuditState)
async def update_c4(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_c4(**updates)
    return store.snapshot()


@router.patch("/c4/metric-summary", response_model=AuditState)
async def update_metric_summary(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_metric_summary(**updates)
    return store.snapshot()


@router.patch("/c4/statistical-validation", response_model=AuditState)
async def update_statistical_validation(updates: Updates = Body(...), store: AuditStore = Depends(get_audit_store)):
    store.update_statistical_validation(**updates)
    return store.snapshot()
