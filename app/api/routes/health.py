"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter

from app.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "model": settings.fairaudit_model,
        "version": "1.0.0",
        "llm_configured": bool(settings.groq_api_key),
    }
