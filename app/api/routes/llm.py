"""
LLM Routes — AI-assisted review of audit sections.

  POST /llm/analyze  named prompt template + upstream context → analysis
  POST /llm/chat     follow-up question about a component

The provider key comes from the X-LLM-API-Key header, falling back to
GROQ_API_KEY. No key → 401. Provider failure after retries → 502.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from app.api.dependencies import get_audit_store, get_llm_gateway
from app.llm.analysis import run_analysis, run_chat
from app.llm.gateway import LLMGateway
from app.llm.prompt_templates import PROMPT_TEMPLATES, check_params
from app.models.llm_models import AnalysisResult, AnalyzeRequest, ChatRequest
from app.store.audit_store import AuditStore

logger = logging.getLogger("fairaudit.api")
router = APIRouter(prefix="/llm", tags=["llm"])


def _raise_on_failure(result: AnalysisResult) -> AnalysisResult:
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "LLM provider returned no content")
    return result


@router.get("/templates")
async def templates():
    return {"templates": sorted(PROMPT_TEMPLATES)}


@router.post("/analyze", response_model=AnalysisResult)
async def analyze(
    req: AnalyzeRequest,
    x_llm_api_key: Optional[str] = Header(default=None),
    gateway: LLMGateway = Depends(get_llm_gateway),
    store: AuditStore = Depends(get_audit_store),
):
    if req.template not in PROMPT_TEMPLATES or req.template == "chat":
        raise HTTPException(status_code=400, detail=f"Unknown template: {req.template}")

    try:
        check_params(req.template, req.params)
    except TypeError as e:
        raise HTTPException(status_code=400, detail=f"Bad parameters for {req.template}: {e}")

    result = await run_analysis(gateway, store, req, api_key=x_llm_api_key)
    return _raise_on_failure(result)


@router.post("/chat", response_model=AnalysisResult)
async def chat(
    req: ChatRequest,
    x_llm_api_key: Optional[str] = Header(default=None),
    gateway: LLMGateway = Depends(get_llm_gateway),
    store: AuditStore = Depends(get_audit_store),
):
    result = await run_chat(gateway, store, req, api_key=x_llm_api_key)
    return _raise_on_failure(result)
