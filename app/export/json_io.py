"""
Audit JSON Export/Import — The portable audit file.

An export is the camelCase audit state with three header keys prepended:
_format, _version (the metadata version) and _exportedAt (ISO-8601, UTC).
Import checks the top-level shape, strips the header keys, and validates the
rest into an AuditState. Component blocks are loose: missing fields take
their defaults.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ValidationError

from app.models.audit_models import AuditMode, AuditModel, AuditState

EXPORT_FORMAT = "fairness-audit-playbook"
EXPORT_ONLY_KEYS = ("_format", "_version", "_exportedAt")


class ImportResult(BaseModel):
    success: bool
    data: Optional[AuditState] = None
    error: Optional[str] = None


class _MetadataShape(AuditModel):
    id: str
    name: str
    created_at: int
    updated_at: int
    version: int


class _SystemShape(AuditModel):
    name: str
    operator: str
    period: str
    scale: str
    algorithm: str
    decision: str
    outcome: str


class _AuditFileShape(AuditModel):
    """Required top-level keys of an audit file; component contents are checked later."""

    metadata: _MetadataShape
    mode: AuditMode
    active_component: str
    component_status: dict[str, str]
    system: _SystemShape
    c1: dict[str, Any]
    c2: dict[str, Any]
    c3: dict[str, Any]
    c4: dict[str, Any]
    llm_analyses: list[dict[str, Any]]


class _HeaderShape(BaseModel):
    format: Optional[Literal["fairness-audit-playbook"]] = None
    version: Optional[int] = None


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_audit_json(state: AuditState) -> str:
    """Serialize `state` as an indented audit file."""
    payload: dict[str, Any] = {
        "_format": EXPORT_FORMAT,
        "_version": state.metadata.version,
        "_exportedAt": _iso_now(),
    }
    payload.update(state.model_dump(mode="json", by_alias=True))
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_filename(state: AuditState, today: Optional[str] = None) -> str:
    """fairness-audit-<name-slug>-<YYYY-MM-DD>.json"""
    slug = "-".join(state.metadata.name.split()).lower()
    date = today or datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return f"fairness-audit-{slug}-{date}.json"


def _describe(error: ValidationError) -> str:
    issues = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        issues.append(f"{path}: {item['msg']}")
    return f"Invalid audit file: {'; '.join(issues)}"


def parse_audit_json(text: str) -> ImportResult:
    """Parse an audit file. Never raises; failures come back as ImportResult(success=False)."""
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError):
        return ImportResult(success=False, error="Invalid JSON format")

    if not isinstance(parsed, dict):
        return ImportResult(success=False, error="Invalid audit file: expected a JSON object")

    try:
        _HeaderShape(format=parsed.get("_format"), version=parsed.get("_version"))
        _AuditFileShape.model_validate(parsed)
        data = {k: v for k, v in parsed.items() if k not in EXPORT_ONLY_KEYS}
        state = AuditState.model_validate(data)
    except ValidationError as e:
        return ImportResult(success=False, error=_describe(e))

    return ImportResult(success=True, data=state)
