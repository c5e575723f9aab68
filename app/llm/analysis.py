"""
Audit Analysis — Prompt → gateway → parsed result → audit record.

The upstream context comes from the progressive context builder over the
active view (the learn dataset in learn mode). Successful analyses are
appended to the worksheet's llm_analyses list.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from app.core.context_builder import build_progressive_context
from app.llm.gateway import LLMGateway
from app.llm.prompt_templates import PromptPair, build_prompt
from app.llm.response_parser import extract_score, parse_markdown_sections
from app.models.audit_models import LLMAnalysis
from app.models.llm_models import AnalysisResult, AnalyzeRequest, ChatRequest
from app.store.audit_store import AuditStore
from app.store.defaults import now_ms

logger = logging.getLogger("fairaudit.llm")

# Templates whose answer includes a 1-5 severity suggestion.
SEVERITY_TEMPLATES = frozenset({"c3_bias_analysis"})


def upstream_context(store: AuditStore, component: str) -> str:
    """Rendered upstream findings for `component`, or "" when nothing upstream has content."""
    context = build_progressive_context(store.view(), component)
    return context.text if context.has_content else ""


async def _run(
    gateway: LLMGateway,
    prompt: PromptPair,
    template: str,
    component: str,
    section: str,
    api_key: Optional[str],
) -> AnalysisResult:
    result = await gateway.complete(prompt.system, prompt.user, api_key=api_key)
    content = result.get("content", "")
    return AnalysisResult(
        success=result.get("success", False),
        template=template,
        component=component,
        section=section,
        provider=gateway.provider,
        model=gateway.model,
        content=content,
        sections=parse_markdown_sections(content) if content else [],
        tokens_used=result.get("tokens_used", 0),
        error=result.get("error"),
    )


async def run_analysis(
    gateway: LLMGateway,
    store: AuditStore,
    request: AnalyzeRequest,
    api_key: Optional[str] = None,
) -> AnalysisResult:
    """
    Render the named template with the upstream context and call the model.

    Raises KeyError for an unknown template, TypeError for missing template
    parameters and MissingAPIKeyError when no key is available.
    """
    prompt = build_prompt(
        request.template,
        context=upstream_context(store, request.component),
        inputs=request.inputs,
        **request.params,
    )
    logger.info(f"Running {request.template} for {request.component} ({len(prompt.user)} chars)")

    result = await _run(gateway, prompt, request.template, request.component, request.section, api_key)

    if result.success and request.template in SEVERITY_TEMPLATES:
        result.suggested_severity = extract_score(result.content, "severity")

    if result.success and request.record:
        analysis = LLMAnalysis(
            id=str(uuid.uuid4()),
            component=request.component,
            section=request.section or request.template,
            timestamp=now_ms(),
            provider=gateway.provider,
            prompt=prompt.user,
            response=result.content,
        )
        store.add_llm_analysis(analysis)
        result.analysis_id = analysis.id

    return result


async def run_chat(
    gateway: LLMGateway,
    store: AuditStore,
    request: ChatRequest,
    api_key: Optional[str] = None,
) -> AnalysisResult:
    """Answer a follow-up question about a component; chats are not recorded."""
    context = upstream_context(store, request.component) if request.include_context else ""
    prompt = build_prompt("chat", context=context, inputs=request.message, component=request.component)
    return await _run(gateway, prompt, "chat", request.component, "chat", api_key)
