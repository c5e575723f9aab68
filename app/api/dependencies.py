"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from app.config import settings
from app.llm.gateway import LLMGateway
from app.store.audit_store import AuditStore
from app.store.defaults import create_default_state


@lru_cache
def get_audit_store() -> AuditStore:
    """Shared audit store singleton, starting in the configured mode."""
    return AuditStore(create_default_state(mode=settings.default_mode))


@lru_cache
def get_llm_gateway() -> LLMGateway:
    """Shared LLM gateway singleton."""
    return LLMGateway()
