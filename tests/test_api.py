"""
Tests for the compare API.
"""

import pytest
from fastapi.testclient import TestClient

from llm_compare.api.app import app
from llm_compare.api.dependencies import get_compare_handler, get_dispatch_service, get_likes_handler
from llm_compare.handlers import CompareHandler, LikesHandler
from llm_compare.repositories import InMemoryLikeRepository
from llm_compare.services import LikeService

from conftest import build_service, parse_sse

MODELS = ["openai:gpt-4o", "anthropic:claude-3-opus-20240229", "bogus:engine"]


@pytest.fixture
def dispatch_service():
    return build_service()


@pytest.fixture
def client(dispatch_service):
    """Create a test client wired to stub providers."""
    like_service = LikeService(store=InMemoryLikeRepository())
    compare_handler = CompareHandler(dispatch_service=dispatch_service, like_service=like_service)
    likes_handler = LikesHandler(like_service=like_service)

    app.dependency_overrides[get_dispatch_service] = lambda: dispatch_service
    app.dependency_overrides[get_compare_handler] = lambda: compare_handler
    app.dependency_overrides[get_likes_handler] = lambda: likes_handler
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "LLM Compare API"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_compare(client):
    """Successful models and a per-model error share one 200 response."""
    response = client.post("/api/compare", json={"query": "hi", "modelIds": MODELS})

    assert response.status_code == 200
    data = response.json()
    assert [item["modelId"] for item in data["responses"]] == MODELS

    first = data["responses"][0]
    assert first["text"] == "ABC"
    assert first["metrics"] == {"timeMs": 5, "length": 3}
    assert first["modelDisplay"] == "openai:gpt-4o"
    assert first["cached"] is False

    bogus = data["responses"][2]
    assert bogus["error"] is True
    assert bogus["message"] == "unsupported provider: bogus"
    assert "text" not in bogus

    assert data["recommended"] in MODELS[:2]


def test_compare_second_call_is_cached(client):
    """Test that a repeated compare is served from the cache."""
    client.post("/api/compare", json={"query": "hi", "modelIds": ["openai:gpt-4o"]})
    response = client.post("/api/compare", json={"query": "hi", "modelIds": ["openai:gpt-4o"]})

    assert response.json()["responses"][0]["cached"] is True


def test_compare_skipped_model(client):
    response = client.post("/api/compare", json={"query": "hi", "modelIds": ["openai:gpt-3.5-deprecated"]})

    item = response.json()["responses"][0]
    assert item == {
        "modelId": "openai:gpt-3.5-deprecated",
        "error": True,
        "skipped": True,
        "reason": "deprecated",
        "message": "model deprecated or marked deprecated",
    }


def test_compare_truncates_to_three(client):
    model_ids = [f"openai:m{i}" for i in range(5)]

    response = client.post("/api/compare", json={"query": "hi", "modelIds": model_ids})

    assert len(response.json()["responses"]) == 3


@pytest.mark.parametrize(
    "body",
    [
        {"query": "", "modelIds": ["openai:gpt-4o"]},
        {"modelIds": ["openai:gpt-4o"]},
        {"query": "hi", "modelIds": "openai:gpt-4o"},
        {"query": "hi", "modelIds": []},
        {"query": "hi"},
    ],
)
def test_compare_invalid_input(client, body):
    """Test that malformed bodies are rejected before dispatch."""
    response = client.post("/api/compare", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_compare_rejects_wrong_method(client):
    response = client.get("/api/compare")

    assert response.status_code == 405
    assert response.json() == {"error": "method_not_allowed"}


def test_stream(client):
    """Test the event stream for a mixed request."""
    response = client.post("/api/stream", json={"query": "hi", "modelIds": MODELS})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache, no-transform"

    events = parse_sse(response.text)
    names = [name for name, _ in events]
    assert names.count("model-start") == 3
    assert names.count("model-end") == 2
    assert names.count("model-error") == 1
    assert events[-1] == ("done", {"ok": True})

    chunks = [data["text"] for name, data in events if name == "model-chunk" and data["modelId"] == "openai:gpt-4o"]
    assert "".join(chunks) == "ABC"


def test_stream_invalid_input(client):
    response = client.post("/api/stream", json={"query": "hi", "modelIds": []})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_likes(client):
    """Test recording likes and reading the tally."""
    for model_id in ["anthropic:claude", "openai:gpt-4o", "anthropic:claude"]:
        response = client.post("/api/likes", json={"query": "hi", "modelId": model_id})
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    response = client.get("/api/likes", params={"query": "hi"})

    assert response.status_code == 200
    assert response.json() == {
        "likes": [{"modelId": "anthropic:claude", "count": 2}, {"modelId": "openai:gpt-4o", "count": 1}],
        "recommended": "anthropic:claude",
    }


def test_likes_drive_compare_recommendation(client):
    client.post("/api/likes", json={"query": "hi", "modelId": "anthropic:claude-3-opus-20240229"})

    response = client.post("/api/compare", json={"query": "hi", "modelIds": MODELS})

    assert response.json()["recommended"] == "anthropic:claude-3-opus-20240229"


def test_likes_missing_query(client):
    response = client.get("/api/likes")

    assert response.status_code == 400
    assert response.json() == {"error": "missing_query"}


def test_likes_invalid_body(client):
    response = client.post("/api/likes", json={"query": "hi"})

    assert response.status_code == 400


def test_stats_and_clear_cache(client):
    """Test stats reporting and cache clearing."""
    client.post("/api/compare", json={"query": "hi", "modelIds": ["openai:gpt-4o"]})

    stats = client.get("/stats").json()
    assert stats["dispatch"]["requests"] == 1
    assert stats["cache"]["total_entries"] == 1
    assert stats["limiter"]["max_concurrency"] == 3

    response = client.delete("/api/cache")
    assert response.json()["deleted_count"] == 1
    assert client.get("/stats").json()["cache"]["total_entries"] == 0
