"""
Context Data Models — Structured summaries passed between audit components.

Summaries are built as sections of typed lines and rendered to plain text
only at the boundary, so the prior-findings panel and LLM prompts share one
representation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

LineKind = Literal["kv", "bullet", "step", "text"]


class SummaryLine(BaseModel):
    """A single line of a summary section."""

    kind: LineKind
    value: str
    key: str = ""
    indent: int = Field(default=0, ge=0, description="Nesting depth, two spaces per level")

    def render(self) -> str:
        prefix = "  " * self.indent
        if self.kind == "bullet":
            prefix += "- "
        if self.key:
            return f"{prefix}{self.key}: {self.value}"
        return f"{prefix}{self.value}"


class ContextSection(BaseModel):
    """A headed block of summary lines."""

    heading: str = ""
    lines: list[SummaryLine] = Field(default_factory=list)
    has_content: bool = True

    def body(self) -> str:
        return "\n".join(line.render() for line in self.lines)

    def render(self) -> str:
        if not self.heading:
            return self.body()
        return f"=== {self.heading} ===\n{self.body()}"


class ComponentSummary(BaseModel):
    """Summary of one upstream component."""

    component: str
    section: ContextSection
    has_content: bool

    @property
    def text(self) -> str:
        return self.section.body()


class ProgressiveContext(BaseModel):
    """Everything upstream of the current component, in component order."""

    current_component: str
    sections: list[ContextSection] = Field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return any(section.has_content for section in self.sections)

    @property
    def text(self) -> str:
        return "\n\n".join(section.render() for section in self.sections)
