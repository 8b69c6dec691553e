from fastapi.testclient import TestClient

from content_forge.api.app import create_app
from content_forge.errors import EmptyResponseError, PipelineError, QuotaExceededError, StoreError


class _FakeService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict] = []

    async def generate(self, user_id: str, topic: str, doc_type: str, tone: str, sections_count: int) -> dict:
        self.calls.append(
            {"user_id": user_id, "topic": topic, "doc_type": doc_type, "tone": tone, "sections_count": sections_count}
        )
        if self.error is not None:
            raise self.error
        return {"text": f"# {topic} - A Comprehensive {doc_type}", "new_used_count": 3}

    async def usage(self, user_id: str) -> dict:
        if self.error is not None:
            raise self.error
        return {"user_id": user_id, "generations_used": 2, "limit": 5, "is_pro": False, "remaining": 3}


def _client(service: _FakeService) -> TestClient:
    return TestClient(create_app(service=service))  # type: ignore[arg-type]


PAYLOAD = {
    "topic": "Home Coffee Roasting",
    "type": "eBook",
    "tone": "Friendly",
    "sectionsCount": 3,
    "userId": "user-1",
}


def test_healthz() -> None:
    resp = _client(_FakeService()).get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_generate_success_shape() -> None:
    service = _FakeService()

    resp = _client(service).post("/api/generate", json=PAYLOAD)

    assert resp.status_code == 200
    assert resp.json() == {"text": "# Home Coffee Roasting - A Comprehensive eBook", "newUsedCount": 3}
    assert service.calls == [
        {
            "user_id": "user-1",
            "topic": "Home Coffee Roasting",
            "doc_type": "eBook",
            "tone": "Friendly",
            "sections_count": 3,
        }
    ]


def test_generate_rejects_non_post() -> None:
    resp = _client(_FakeService()).get("/api/generate")
    assert resp.status_code == 405


def test_missing_user_or_topic_is_client_error_without_calls() -> None:
    service = _FakeService()
    client = _client(service)

    for missing in ("userId", "topic"):
        body = {key: value for key, value in PAYLOAD.items() if key != missing}
        resp = client.post("/api/generate", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required parameters (userId or topic)."}

    resp = client.post("/api/generate", json={**PAYLOAD, "topic": "   "})
    assert resp.status_code == 400
    assert service.calls == []


def test_malformed_body_is_client_error() -> None:
    service = _FakeService()

    resp = _client(service).post("/api/generate", json={**PAYLOAD, "sectionsCount": "many"})

    assert resp.status_code == 400
    assert "sectionsCount" in resp.json()["error"]
    assert service.calls == []


def test_defaults_for_optional_fields() -> None:
    service = _FakeService()

    resp = _client(service).post("/api/generate", json={"topic": "Coffee", "userId": "u"})

    assert resp.status_code == 200
    assert service.calls[0]["doc_type"] == "eBook"
    assert service.calls[0]["tone"] == "Professional"
    assert service.calls[0]["sections_count"] == 5


def test_quota_exceeded_is_forbidden() -> None:
    resp = _client(_FakeService(error=QuotaExceededError(5))).post("/api/generate", json=PAYLOAD)

    assert resp.status_code == 403
    assert resp.json() == {"error": "Generation limit reached. Please upgrade to Pro (5 max)."}


def test_store_error_is_server_error() -> None:
    resp = _client(_FakeService(error=StoreError("boom", status_code=500))).post("/api/generate", json=PAYLOAD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Error accessing user profile data."}


def test_pipeline_error_is_server_error_with_message() -> None:
    error = PipelineError("section 2", EmptyResponseError("AI returned an empty response"))

    resp = _client(_FakeService(error=error)).post("/api/generate", json=PAYLOAD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Generation failed: AI returned an empty response."}


def test_usage_endpoint() -> None:
    resp = _client(_FakeService()).get("/api/usage/user-1")

    assert resp.status_code == 200
    assert resp.json() == {"userId": "user-1", "generationsUsed": 2, "limit": 5, "isPro": False, "remaining": 3}


def test_usage_store_error() -> None:
    resp = _client(_FakeService(error=StoreError("down"))).get("/api/usage/user-1")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Error accessing user profile data."}
