"""HTTP tests for /api/search and /healthz."""

import pytest
from fastapi.testclient import TestClient

from controller.controller_dependencies import get_claim_service
from controller.search_controller import search_limiter
from helpers import FakeAudit, FakeCompletion, decision_json, fixed_embed
from main import app
from service.claim_service import ClaimService
from util.errors import AppError
from util.enums import ErrorMessage


class ExplodingService:
    def __init__(self, error):
        self.error = error

    async def handle(self, query):
        raise self.error


@pytest.fixture
def client():
    async def _no_limit():
        return None

    app.dependency_overrides[search_limiter] = _no_limit
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def use_service(service):
    app.dependency_overrides[get_claim_service] = lambda: service


def test_search_returns_decision_result(client, knee_index):
    audit = FakeAudit()
    use_service(
        ClaimService(
            knee_index,
            audit,
            FakeCompletion(extract='{"age": 46}', decide=decision_json("Approved", [], amount="₹50,000")),
            fixed_embed([1.0, 0.0, 0.0]),
        )
    )
    res = client.post("/api/search", json={"query": "46M knee surgery"})

    assert res.status_code == 200
    body = res.json()
    assert set(body) == {"parsed_query", "decision", "clauses_used"}
    assert body["decision"]["status"] == "Approved"
    assert body["decision"]["amount"] == "₹50,000"
    assert body["clauses_used"][0]["clause_ref"] == "policy.pdf::4"
    assert len(audit.records) == 1


@pytest.mark.parametrize("payload", [{}, {"query": 123}, {"query": ""}, {"query": None}, {"q": "x"}])
def test_invalid_query_is_rejected_before_any_work(client, payload):
    service = ExplodingService(AssertionError("must not be called"))
    use_service(service)
    res = client.post("/api/search", json=payload)
    assert res.status_code == 400
    assert res.json() == {
        "ok": False,
        "error": "invalid_request",
        "message": "query (string) is required",
    }


def test_upstream_outage_is_reported_as_502(client):
    use_service(ExplodingService(AppError.of(ErrorMessage.UPSTREAM_UNAVAILABLE)))
    res = client.post("/api/search", json={"query": "knee"})
    assert res.status_code == 502
    assert res.json()["error"] == "upstream_unavailable"
    assert res.json()["message"]


def test_unexpected_failure_is_reported_with_message(client):
    use_service(ExplodingService(RuntimeError("embedding model missing")))
    res = client.post("/api/search", json={"query": "knee"})
    assert res.status_code == 500
    assert res.json() == {
        "ok": False,
        "error": "internal_error",
        "message": "embedding model missing",
    }


def test_healthz_reports_fragment_count(client, knee_index):
    previous = app.state.index
    app.state.index = knee_index
    try:
        res = client.get("/healthz")
    finally:
        app.state.index = previous
    assert res.status_code == 200
    assert res.json() == {"ok": True, "fragments": 3}


def test_model_reported_clauses_have_no_score_field(client, knee_index):
    used = [{"dataset": "policy.pdf", "clause_ref": "policy.pdf::4", "excerpt": "Knee surgery is excluded."}]
    use_service(
        ClaimService(
            knee_index,
            FakeAudit(),
            FakeCompletion(extract="{}", decide=decision_json("Rejected", used)),
            fixed_embed([1.0, 0.0, 0.0]),
        )
    )
    body = client.post("/api/search", json={"query": "knee"}).json()
    assert body["clauses_used"] == used
    assert body["decision"]["amount"] is None


def test_substituted_evidence_keeps_scores(client, knee_index):
    use_service(
        ClaimService(
            knee_index,
            FakeAudit(),
            FakeCompletion(extract="{}", decide="not json"),
            fixed_embed([1.0, 0.0, 0.0]),
        )
    )
    body = client.post("/api/search", json={"query": "knee"}).json()
    assert body["decision"]["status"] == "Pending"
    assert all(isinstance(c["score"], float) for c in body["clauses_used"])
