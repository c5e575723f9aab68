"""
Test fixtures shared across all fairness audit tests.
"""

import pytest

from app.llm.gateway import MissingAPIKeyError
from app.models.audit_models import (
    AuditMode,
    FeedbackLoop,
    Intersection,
    ProtectedGroup,
)
from app.store.audit_store import AuditStore
from app.store.defaults import create_default_state


class StubGateway:
    """Stands in for LLMGateway: records calls, returns a canned completion."""

    provider = "groq"
    model = "stub-model"

    def __init__(self, content="## Assessment\nLooks complete.\n\n## Gaps\n1. Add appeal data", success=True):
        self.content = content
        self.success = success
        self.calls = []

    async def complete(self, system_prompt, user_prompt, api_key=None):
        if not api_key:
            raise MissingAPIKeyError("Missing API key")
        self.calls.append({"system": system_prompt, "user": user_prompt, "api_key": api_key})
        if not self.success:
            return {"content": "", "tokens_used": 0, "success": False, "error": "provider down"}
        return {"content": self.content, "tokens_used": 42, "success": True}


@pytest.fixture
def blank_state():
    """Fresh worksheet in audit mode."""
    return create_default_state(mode=AuditMode.AUDIT)


@pytest.fixture
def store(blank_state):
    return AuditStore(blank_state)


@pytest.fixture
def populated_store(store):
    """Worksheet with some of every component filled in."""
    store.update_domain_context(
        system="Robodebt",
        decision_type="Debt raising",
        affected_population="Welfare recipients",
    )
    store.add_new_risk("Invalid income averaging", 5, 5, 5)
    store.add_new_risk("Weak appeal process", 2, 2, 2)
    store.add_protected_group(ProtectedGroup(group="Young adults"))
    store.add_protected_group(ProtectedGroup(group="Indigenous Australians"))
    store.add_feedback_loop(
        FeedbackLoop(id="FL-1", trigger="Debt notice", mechanism="Garnishing", amplification="Re-targeting")
    )
    store.add_intersection(Intersection(groups="Young + Indigenous", priority=1, pattern="Casual work"))
    store.update_data_representation(label_reliability="Low")

    store.update_decision_step(1, answer="False Positives")
    store.update_primary_selection(definition="Equal Opportunity", justification="FPs cause harm")

    store.update_bias_dimensions(0, severity=5, scope=5, persistence=5, historical_alignment=5, feasibility=5)
    store.update_bias_source(0, description="Punitive welfare history")
    return store


@pytest.fixture
def stub_gateway():
    return StubGateway()


@pytest.fixture
def failing_gateway():
    return StubGateway(success=False)
