"""
Fairness Audit Playbook — FastAPI application.

  GET  /health      → service status
  /scoring/*        → stateless risk, bias and metric calculators
  /audit/*          → the in-process audit: view, edit, context, export/import
  /llm/*            → AI review of audit sections (Groq)
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.audit import router as audit_router
from app.api.routes.health import router as health_router
from app.api.routes.llm import router as llm_router
from app.api.routes.scoring import router as scoring_router
from app.config import settings
from app.llm.gateway import MissingAPIKeyError
from app.store.audit_store import InvalidUpdateError, ItemNotFoundError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("fairaudit")

app = FastAPI(
    title="Fairness Audit Playbook",
    description="Structured fairness audit: historical context, definitions, bias sources, metrics",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(scoring_router)
app.include_router(audit_router)
app.include_router(llm_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": body.decode("utf-8")[:100]},
    )


@app.exception_handler(ItemNotFoundError)
async def item_not_found_handler(request: Request, exc: ItemNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidUpdateError)
async def invalid_update_handler(request: Request, exc: InvalidUpdateError):
    logger.warning(f"Rejected update on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(MissingAPIKeyError)
async def missing_key_handler(request: Request, exc: MissingAPIKeyError):
    return JSONResponse(status_code=401, content={"error": "Missing API key"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
