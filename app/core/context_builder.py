"""
Progressive Context Builder — Everything upstream of the current component.

Precedence:
    c2 ← C1
    c3 ← C1 + C2
    c4 ← C1 + C2 + C3, plus the raw C1 intersections and feedback loops
         (recommendation prompts need them and the C3 summary drops them)

Rendered text uses "=== Component N: Title ===" headers separated by blank
lines. parse_prior_findings() reads that text back into sections; the two
must change together.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from app.core.summarizers import (
    build_c1_summary,
    build_c2_summary,
    build_c3_summary,
    feedback_loop_lines,
    intersection_lines,
)
from app.models.audit_models import AuditState
from app.models.context_models import (
    ComponentSummary,
    ContextSection,
    ProgressiveContext,
    SummaryLine,
)

Summarizer = Callable[[AuditState], ComponentSummary]

UPSTREAM_SUMMARIZERS: dict[str, tuple[Summarizer, ...]] = {
    "c2": (build_c1_summary,),
    "c3": (build_c1_summary, build_c2_summary),
    "c4": (build_c1_summary, build_c2_summary, build_c3_summary),
}

INTERSECTIONS_HEADING = "Intersectional Groups from C1"
FEEDBACK_LOOPS_HEADING = "Feedback Loops from C1"


def build_progressive_context(state: AuditState, current_component: str) -> ProgressiveContext:
    """Summaries of every component strictly upstream of `current_component`; empty for c1 or unknown."""
    sections = [summarize(state).section for summarize in UPSTREAM_SUMMARIZERS.get(current_component, ())]

    if current_component == "c4":
        if state.c1.intersections:
            sections.append(ContextSection(heading=INTERSECTIONS_HEADING, lines=intersection_lines(state)))
        if state.c1.feedback_loops:
            sections.append(ContextSection(heading=FEEDBACK_LOOPS_HEADING, lines=feedback_loop_lines(state)))

    return ProgressiveContext(current_component=current_component, sections=sections)


_HEADER_RE = re.compile(r"^===\s+(.+?)\s+===$")
_STEP_RE = re.compile(r"^\s*Step\s+\d", re.IGNORECASE)
_KV_RE = re.compile(r"^([A-Z][A-Za-z\s/&]+?):\s+(.+)$")
_BULLET_RE = re.compile(r"^[-•]\s+")


def parse_prior_findings(raw: str) -> list[ContextSection]:
    """
    Parse rendered context text back into headed sections of typed lines.

    Heuristics, in order: "=== Title ===" headers, "- "/"• " bullets,
    "Step N: ..." lines, "Key: Value" lines, then plain text. Blank lines
    are dropped; indentation is not preserved.
    """
    sections: list[ContextSection] = []
    current = ContextSection()

    for line in raw.split("\n"):
        header = _HEADER_RE.match(line)
        if header:
            if current.heading or current.lines:
                sections.append(current)
            current = ContextSection(heading=header.group(1))
            continue

        trimmed = line.strip()
        if not trimmed:
            continue

        if trimmed.startswith("- ") or trimmed.startswith("• "):
            current.lines.append(SummaryLine(kind="bullet", value=_BULLET_RE.sub("", trimmed, count=1)))
            continue

        if _STEP_RE.match(line):
            key, sep, value = trimmed.partition(":")
            if sep and key:
                current.lines.append(SummaryLine(kind="step", key=key, value=value.strip()))
            else:
                current.lines.append(SummaryLine(kind="text", value=trimmed))
            continue

        kv = _KV_RE.match(trimmed)
        if kv:
            current.lines.append(SummaryLine(kind="kv", key=kv.group(1), value=kv.group(2)))
            continue

        current.lines.append(SummaryLine(kind="text", value=trimmed))

    if current.heading or current.lines:
        sections.append(current)

    return sections
