"""Tests for FastAPI application."""

import json

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_orchestrator
from app.api.routes.documents import documents_db
from app.main import app
from fairclause.agents.prompts import PromptBuilder, TruncationBudgets
from fairclause.pipeline import PipelineOrchestrator


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    documents_db.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    documents_db.clear()


@pytest.fixture
def use_gateway(recorder):
    """Route requests through an orchestrator around the given gateway."""
    def _use(gateway) -> None:
        orchestrator = PipelineOrchestrator(
            gateway=gateway,
            builder=PromptBuilder(TruncationBudgets()),
            recorder=recorder,
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return _use


def upload(client: TestClient, content: bytes, filename: str, content_type: str = "text/plain"):
    return client.post(
        "/api/v1/documents/upload",
        files={"file": (filename, content, content_type)},
    )


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns app info."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "FairClause"
    assert data["status"] == "operational"


def test_health_check(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestDocumentRoutes:
    """Tests for upload and retrieval."""

    def test_upload_and_fetch(self, client: TestClient) -> None:
        response = upload(client, b"RENTAL AGREEMENT\nThe tenant pays rent.", "lease.txt")

        assert response.status_code == 200
        data = response.json()
        assert data["contract_type"] == "rental"
        assert data["word_count"] == 6

        assert client.get(f"/api/v1/documents/{data['id']}").json()["filename"] == "lease.txt"
        text = client.get(f"/api/v1/documents/{data['id']}/text").json()["text"]
        assert "tenant pays rent" in text
        assert len(client.get("/api/v1/documents/").json()) == 1

    def test_unsupported_upload(self, client: TestClient) -> None:
        response = upload(client, b"\x89PNG", "scan.png", "image/png")
        assert response.status_code == 422

    def test_unknown_document(self, client: TestClient) -> None:
        response = client.get("/api/v1/documents/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    def test_analyze_stored_document(self, client: TestClient, use_gateway, make_gateway, analysis_reply) -> None:
        use_gateway(make_gateway(analysis_reply))
        document_id = upload(client, b"The tenant pays rent.", "lease.txt").json()["id"]

        response = client.post(f"/api/v1/documents/{document_id}/analyze", json={"kind": "full"})

        assert response.status_code == 200
        assert response.json()["status"] == "SUCCESS"
        assert client.get(f"/api/v1/documents/{document_id}").json()["status"] == "analyzed"


class TestAnalysisRoutes:
    """Tests for inline text and upload analysis."""

    def test_analyze_text(self, client: TestClient, use_gateway, make_gateway, analysis_reply) -> None:
        use_gateway(make_gateway(analysis_reply))

        response = client.post(
            "/api/v1/analysis/analyze",
            json={"text": "The tenant pays rent.", "kind": "quick", "role": "Tenant"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SUCCESS"
        assert data["result"]["analysisType"] == "ai"
        assert data["result"]["clauses"][0]["id"] == "clause-1"

    def test_gateway_failure_is_partial(self, client: TestClient, use_gateway, make_gateway) -> None:
        """Test AI outages surface as 200 PARTIAL_SUCCESS, never 5xx."""
        use_gateway(make_gateway(RuntimeError("Service Unavailable: model overloaded")))

        response = client.post("/api/v1/analysis/analyze", json={"text": "text"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "PARTIAL_SUCCESS"
        assert data["result"]["analysisType"] == "fallback"
        assert data["error"]["kind"] == "overloaded"
        assert data["error"]["retryable"] is True

    def test_missing_text_is_422(self, client: TestClient, use_gateway, make_gateway) -> None:
        use_gateway(make_gateway())

        response = client.post("/api/v1/analysis/analyze", json={})

        assert response.status_code == 422
        assert response.json()["status"] == "FAILURE"

    def test_upload_and_analyze(self, client: TestClient, use_gateway, make_gateway, analysis_reply, benchmark_reply) -> None:
        use_gateway(make_gateway(analysis_reply, benchmark_reply))

        response = client.post(
            "/api/v1/analysis/upload",
            files={"file": ("lease.txt", b"The tenant pays rent.", "text/plain")},
            data={"kind": "quick", "includeBenchmark": "true"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SUCCESS"
        assert data["benchmark"]["contractType"] == "rental"


class TestBenchmarkRoutes:
    """Tests for the fairness benchmark endpoint."""

    def test_analyze_fairness(self, client: TestClient, use_gateway, make_gateway) -> None:
        use_gateway(make_gateway(json.dumps({"overallFairnessScore": 77, "riskLevel": "low"})))

        response = client.post(
            "/api/v1/benchmark/analyze-fairness",
            json={"text": "Deposit: 2 months", "contractType": "rental", "userRole": "Tenant"},
        )

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["overallFairnessScore"] == 77
        assert result["riskLevel"] == "LOW"
        assert result["contractType"] == "rental"

    def test_fairness_fallback(self, client: TestClient, use_gateway, make_gateway) -> None:
        use_gateway(make_gateway("I cannot process this."))

        response = client.post("/api/v1/benchmark/analyze-fairness", json={"text": "Deposit"})

        data = response.json()
        assert data["status"] == "PARTIAL_SUCCESS"
        assert data["result"]["overallFairnessScore"] == 70
        assert data["result"]["benchmarkMetrics"]["generalTerms"]["assessment"] == "STANDARD"

    def test_fairness_requires_input(self, client: TestClient) -> None:
        response = client.post("/api/v1/benchmark/analyze-fairness", json={})
        assert response.status_code == 400

    def test_fairness_unknown_document(self, client: TestClient) -> None:
        response = client.post("/api/v1/benchmark/analyze-fairness", json={"documentId": "nope"})
        assert response.status_code == 404
