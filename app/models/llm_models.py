"""
LLM Data Models — Request and response schemas for audit analyses.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Run one named prompt template against the current audit."""

    template: str = Field(..., description="Prompt template name, e.g. 'c3_bias_analysis'")
    component: str = Field(..., description="Component under review (c1..c4); selects the upstream context")
    section: str = Field(default="", description="Worksheet section the analysis belongs to")
    inputs: str = Field(default="", description="Auditor's inputs for the section, as text")
    params: dict[str, Any] = Field(
        default_factory=dict, description="Template parameters (phase_num, phase_title, bias_type)"
    )
    record: bool = Field(default=True, description="Store the analysis on the audit when it succeeds")


class ChatRequest(BaseModel):
    component: str
    message: str = Field(..., min_length=1)
    include_context: bool = True


class ParsedSection(BaseModel):
    heading: str
    content: str
    items: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Outcome of one gateway call. content is empty and error set when success is False."""

    success: bool
    template: str
    component: str
    section: str = ""
    provider: str = "groq"
    model: str = ""
    content: str = ""
    sections: list[ParsedSection] = Field(default_factory=list)
    suggested_severity: Optional[int] = None
    tokens_used: int = 0
    analysis_id: Optional[str] = None
    error: Optional[str] = None
