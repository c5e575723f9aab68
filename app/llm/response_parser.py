"""
Response Parser — Pull structure out of free-text LLM analyses.
"""

from __future__ import annotations

import re
from typing import Optional

from app.models.llm_models import ParsedSection

_HEADING_RE = re.compile(r"^#{1,3}\s+(.+)")
_NUMBERED_RE = re.compile(r"^\s*\d+\.\s+(.+)")


def _section(heading: str, lines: list[str]) -> ParsedSection:
    content = "\n".join(lines).strip()
    return ParsedSection(heading=heading, content=content, items=extract_numbered_items(content))


def parse_markdown_sections(markdown: str) -> list[ParsedSection]:
    """
    Split on #, ## and ### headings. Text before the first heading becomes a
    section with an empty heading. Numbered lines are also collected as items.
    """
    sections: list[ParsedSection] = []
    heading = ""
    content: list[str] = []

    for line in markdown.split("\n"):
        match = _HEADING_RE.match(line)
        if match:
            if heading or content:
                sections.append(_section(heading, content))
            heading = match.group(1)
            content = []
        else:
            content.append(line)

    if heading or content:
        sections.append(_section(heading, content))

    return sections


def extract_numbered_items(text: str) -> list[str]:
    items = []
    for line in text.split("\n"):
        match = _NUMBERED_RE.match(line)
        if match:
            items.append(match.group(1).strip())
    return items


def extract_score(text: str, label: str) -> Optional[int]:
    """
    Find a score for `label` in text like "Severity: 4/5" or "4/5 - Severity".

    Case-insensitive. Returns the first integer found, or None.
    """
    escaped = re.escape(label)
    patterns = (
        re.compile(rf"{escaped}[:\s]+(\d+)(?:/\d+)?", re.IGNORECASE),
        re.compile(rf"(\d+)(?:/\d+)?\s*[-–]?\s*{escaped}", re.IGNORECASE),
    )
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None
