"""
Tests for the FastAPI app — scoring, audit and LLM routes.
"""

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_audit_store, get_llm_gateway
from app.main import app
from app.store.audit_store import AuditStore

client = TestClient(app)

ALL_FIVES = {"severity": 5, "scope": 5, "persistence": 5, "historicalAlignment": 5, "feasibility": 5}


@pytest.fixture(autouse=True)
def fresh_dependencies(stub_gateway):
    """Each test gets its own learn-mode store and the stub gateway."""
    store = AuditStore()
    app.dependency_overrides[get_audit_store] = lambda: store
    app.dependency_overrides[get_llm_gateway] = lambda: stub_gateway
    yield store
    app.dependency_overrides.clear()


def _audit_mode():
    assert client.put("/audit/mode", json={"mode": "audit"}).status_code == 200


# ── Health & scoring ──


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "model" in data
    assert data["version"] == "1.0.0"


def test_risk_score():
    response = client.post("/scoring/risk", json={"severity": 5, "likelihood": 5, "relevance": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 125
    assert data["classification"] == "Critical"


def test_risk_score_rejects_out_of_range():
    response = client.post("/scoring/risk", json={"severity": 6, "likelihood": 1, "relevance": 1})
    assert response.status_code == 422


def test_bias_score_default_and_definition():
    response = client.post("/scoring/bias", json={"dimensions": ALL_FIVES})
    assert response.json()["weighted_score"] == 5.0
    assert response.json()["priority"] == "High"

    response = client.post("/scoring/bias", json={"dimensions": ALL_FIVES, "primary_definition": "Demographic Parity"})
    assert response.json()["weighted_score"] > 5.0


def test_bias_score_explicit_weights():
    response = client.post(
        "/scoring/bias",
        json={"dimensions": {"severity": 5}, "weights": {"severity": 1.0}},
    )
    assert response.json()["weighted_score"] == 5.7


def test_weights_lookup():
    data = client.get("/scoring/weights", params={"definition": "Demographic Parity"}).json()
    assert data["profile"] == "Demographic Parity"
    assert data["weights"]["scope"] == pytest.approx(0.3)

    data = client.get("/scoring/weights", params={"definition": "Equalised Odds"}).json()
    assert data["profile"] is None


def test_interpret():
    response = client.post(
        "/scoring/interpret",
        json={"metric_name": "FPR", "value": 0.12, "group_a": "Young", "group_b": "Older"},
    )
    assert response.json()["interpretation"] == "Young faces a 12% false positive rate vs Older, a difference of 12pp."


def test_thresholds():
    data = client.get("/scoring/thresholds").json()
    assert data["risk"]["Critical"] == "Critical (Score >= 90)"
    assert len(data["templates"]) == 5


# ── Audit ──


def test_learn_mode_serves_case_study():
    data = client.get("/audit").json()
    assert data["metadata"]["id"] == "robodebt-case-study"
    assert data["mode"] == "learn"
    assert "riskMatrix" in data["c1"]


def test_audit_mode_serves_worksheet():
    _audit_mode()
    data = client.get("/audit").json()
    assert data["metadata"]["name"] == "New Audit"
    assert data["mode"] == "audit"


def test_add_and_update_risk():
    response = client.post("/audit/c1/risks", json={"risk": "Averaging", "severity": 5, "likelihood": 5, "relevance": 5})
    assert response.status_code == 201
    assert response.json()["id"] == "R1"
    assert response.json()["classification"] == "Critical"

    response = client.patch("/audit/c1/risks/0", json={"likelihood": 1})
    assert response.json()["score"] == 25
    assert response.json()["classification"] == "Moderate"


def test_missing_item_is_404():
    response = client.patch("/audit/c1/risks/3", json={"severity": 2})
    assert response.status_code == 404


def test_invalid_update_is_422():
    client.post("/audit/c1/risks", json={})
    response = client.patch("/audit/c1/risks/0", json={"bogus": 1})
    assert response.status_code == 422


def test_bias_dimensions_route():
    response = client.patch("/audit/c3/bias-sources/0/dimensions", json=ALL_FIVES)
    assert response.status_code == 200
    data = response.json()
    assert data["weightedScore"] == 5.0
    assert data["priority"] == "High"


def test_worksheet_and_calculator_agree_on_untouched_source():
    _audit_mode()
    client.patch("/audit/c2/primary", json={"definition": "Demographic Parity"})
    client.patch("/audit/c3/bias-sources/0/dimensions", json={"severity": 2})
    stored = client.patch("/audit/c3/bias-sources/0/dimensions", json={"severity": 1}).json()

    calculated = client.post(
        "/scoring/bias",
        json={"dimensions": {"severity": 1}, "primary_definition": "Demographic Parity"},
    ).json()
    assert stored["weightedScore"] == calculated["weighted_score"]


def test_primary_selection_route_rescores():
    client.patch("/audit/c3/bias-sources/0/dimensions", json=ALL_FIVES)
    data = client.patch("/audit/c2/primary", json={"definition": "Demographic Parity"}).json()
    assert data["c3"]["biasSources"][0]["weightedScore"] > 5.0
    assert client.get("/audit/weights").status_code == 200


def test_risk_matrix_route_sorts_and_counts():
    _audit_mode()
    client.post("/audit/c1/risks", json={"risk": "Weak appeals", "severity": 2, "likelihood": 2, "relevance": 2})
    client.post("/audit/c1/risks", json={"risk": "Income averaging", "severity": 5, "likelihood": 5, "relevance": 5})

    data = client.get("/audit/c1/risks").json()
    assert [r["risk"] for r in data["risks"]] == ["Weak appeals", "Income averaging"]

    data = client.get("/audit/c1/risks", params={"sort_by_score": True}).json()
    assert [r["score"] for r in data["risks"]] == [125, 8]
    assert data["counts"] == {"Critical": 1, "Elevated": 0, "Moderate": 0, "Low": 1}


def test_context_route():
    _audit_mode()
    client.patch("/audit/c1/domain-context", json={"system": "Robodebt"})
    data = client.get("/audit/context/c3").json()
    assert data["has_content"] is True
    assert data["text"].startswith("=== Component 1: Historical Context ===\nSystem: Robodebt")
    assert len(data["sections"]) == 2


def test_context_unknown_component():
    assert client.get("/audit/context/c9").status_code == 404


def test_progress_route():
    assert client.get("/audit/progress/c1").json()["percent"] == 100
    _audit_mode()
    assert client.get("/audit/progress/c1").json()["percent"] == 0


def test_recommended_metrics_route():
    metrics = client.get("/audit/recommended-metrics").json()
    assert len(metrics) > 0
    assert {"metric", "formula", "reason", "bias_source"} <= set(metrics[0])


def test_export_import_round_trip(fresh_dependencies):
    _audit_mode()
    client.patch("/audit/system", json={"name": "Exported system"})
    exported = client.get("/audit/export")
    assert exported.status_code == 200
    assert "attachment" in exported.headers["content-disposition"]

    client.post("/audit/reset")
    assert fresh_dependencies.snapshot().system.name == ""

    response = client.post("/audit/import", content=exported.content)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert fresh_dependencies.snapshot().system.name == "Exported system"


def test_import_rejects_bad_json():
    response = client.post("/audit/import", content=b"not json")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON format"


# ── LLM ──


def test_analyze(fresh_dependencies, stub_gateway):
    response = client.post(
        "/llm/analyze",
        json={"template": "c4_recommendations", "component": "c4", "inputs": "SPD = 0.21"},
        headers={"X-LLM-API-Key": "test-key"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["analysis_id"]
    assert stub_gateway.calls[0]["api_key"] == "test-key"
    assert len(fresh_dependencies.snapshot().llm_analyses) == 1


def test_analyze_without_key_is_401():
    response = client.post("/llm/analyze", json={"template": "c4_recommendations", "component": "c4"})
    assert response.status_code == 401
    assert response.json() == {"error": "Missing API key"}


def test_analyze_unknown_template_is_400():
    response = client.post(
        "/llm/analyze",
        json={"template": "nope", "component": "c1"},
        headers={"X-LLM-API-Key": "k"},
    )
    assert response.status_code == 400


def test_analyze_missing_params_is_400():
    response = client.post(
        "/llm/analyze",
        json={"template": "c3_bias_analysis", "component": "c3"},
        headers={"X-LLM-API-Key": "k"},
    )
    assert response.status_code == 400


def test_analyze_does_not_mask_internal_type_errors(stub_gateway, monkeypatch):
    async def broken_complete(system_prompt, user_prompt, api_key=None):
        raise TypeError("unsupported operand")

    monkeypatch.setattr(stub_gateway, "complete", broken_complete)
    with pytest.raises(TypeError):
        client.post(
            "/llm/analyze",
            json={"template": "c3_bias_analysis", "component": "c3", "params": {"bias_type": "Historical"}},
            headers={"X-LLM-API-Key": "k"},
        )


def test_provider_failure_is_502(stub_gateway):
    stub_gateway.success = False
    response = client.post(
        "/llm/analyze",
        json={"template": "c1_risk_matrix_review", "component": "c1"},
        headers={"X-LLM-API-Key": "k"},
    )
    assert response.status_code == 502
    assert response.json()["detail"] == "provider down"


def test_chat():
    response = client.post(
        "/llm/chat",
        json={"component": "c2", "message": "Why demographic parity?"},
        headers={"X-LLM-API-Key": "k"},
    )
    assert response.status_code == 200
    assert response.json()["template"] == "chat"
