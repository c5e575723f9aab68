"""
Robodebt Case Study — The completed audit shown in Learn Mode.

Stored as an exported audit file (camelCase JSON). Scores and
classifications are never read from the file; they are re-derived on load
so the case study always agrees with the current scoring rules.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from app.core.bias_scorer import rescore_bias_sources
from app.core.risk_scorer import rescore_risk_entry
from app.models.audit_models import AuditState

logger = logging.getLogger("fairaudit.data")

DATA_FILE = Path(__file__).with_name("robodebt.json")


@lru_cache
def load_learn_state() -> AuditState:
    """Parse and score the case study once. Callers must copy before mutating."""
    state = AuditState.model_validate(json.loads(DATA_FILE.read_text(encoding="utf-8")))
    state.c1.risk_matrix = [rescore_risk_entry(entry) for entry in state.c1.risk_matrix]
    state.c3.bias_sources = rescore_bias_sources(
        state.c3.bias_sources, state.c2.primary_selection.definition
    )
    logger.info(
        f"Loaded learn dataset: {len(state.c1.risk_matrix)} risks, "
        f"{len(state.c3.bias_sources)} bias sources"
    )
    return state
