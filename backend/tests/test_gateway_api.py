"""Tests for the gateway HTTP endpoints."""
import json
import httpx
import pytest
from fastapi.testclient import TestClient
import bailian_gateway.services.gateway.adapter as adapter_module
from bailian_gateway.main import app


CHAT_RESPONSE = {
    "request_id": "req-api",
    "output": {"choices": [{"finish_reason": "stop", "message": {"role": "assistant", "content": "Hello!"}}]},
    "usage": {"input_tokens": 5, "output_tokens": 2, "total_tokens": 7},
}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def dashscope(monkeypatch, mock_transport):
    """Route the adapter's HTTP calls to a handler."""
    def _install(handler):
        transport = mock_transport(handler)
        monkeypatch.setattr(adapter_module, "HTTPTransport", lambda: transport)
        return transport
    return _install


def parse_sse(text):
    events = []
    for block in text.strip().split("\n\n"):
        assert block.startswith("data: ")
        events.append(block[len("data: "):])
    return events


# ===== Health and Models Tests =====

def test_health(client):
    """Test the health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["provider"] == "dashscope"
    assert data["api_key_configured"] is True


def test_root(client):
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["health"] == "/health"


def test_list_models(client):
    """Test listing models."""
    response = client.get("/models")
    assert response.status_code == 200
    ids = [m["id"] for m in response.json()["data"]]
    assert "qwen-plus" in ids
    assert "text-embedding-v2" in ids


def test_list_models_by_type(client):
    """Test filtering models by type."""
    response = client.get("/models", params={"type": "embedding"})
    ids = [m["id"] for m in response.json()["data"]]
    assert ids
    assert all(model_id.startswith("text-embedding") for model_id in ids)


# ===== Chat Completion Tests =====

def test_chat_completions(client, dashscope):
    """Test a non-streaming chat completion."""
    transport = dashscope(lambda request: httpx.Response(200, json=CHAT_RESPONSE))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "req-api"
    assert data["object"] == "chat.completion"
    assert data["model"] == "qwen-plus"
    assert data["choices"][0]["message"]["content"] == "Hello!"
    assert data["usage"] == {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7}
    assert transport.requests[0].headers["Authorization"].startswith("Bearer ")


def test_chat_completions_vendor_error(client, dashscope):
    """Test vendor errors are rendered as OpenAI error bodies."""
    dashscope(lambda request: httpx.Response(200, json={
        "code": "InvalidParameter", "message": "Range of input length should be [1, 6000]", "request_id": "req-bad",
    }))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
    })

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "InvalidParameter"
    assert error["code"] == "InvalidParameter"
    assert error["param"] == "req-bad"


def test_chat_completions_vendor_error_null_output(client, dashscope):
    """Test error bodies with null output render the vendor error and status."""
    dashscope(lambda request: httpx.Response(200, json={
        "code": "InvalidParameter", "message": "bad", "request_id": "req-null", "output": None, "usage": None,
    }))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
    })

    assert response.status_code == 400
    assert response.json() == {
        "error": {"message": "bad", "type": "InvalidParameter", "param": "req-null", "code": "InvalidParameter"},
    }


def test_chat_completions_empty_messages(client, dashscope):
    """Test requests without content are rejected before any call."""
    transport = dashscope(lambda request: httpx.Response(200, json=CHAT_RESPONSE))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": ""}],
    })

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "invalid_request_error"
    assert transport.requests == []


def test_chat_completions_validation_error(client):
    """Test malformed bodies are rejected by FastAPI."""
    response = client.post("/v1/chat/completions", json={"messages": []})
    assert response.status_code == 422


def test_chat_completions_network_error(client, dashscope):
    """Test network failures map to 503."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    dashscope(handler)

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
    })

    assert response.status_code == 503
    assert "Network error" in response.json()["detail"]


def test_chat_completions_stream(client, dashscope, sse_body):
    """Test a streaming chat completion is relayed as SSE."""
    body = sse_body(
        {"request_id": "req-s", "output": {"text": "Hi", "finish_reason": "null"}},
        {"request_id": "req-s", "output": {"text": "Hi there", "finish_reason": "stop"},
         "usage": {"input_tokens": 3, "output_tokens": 2}},
    )
    dashscope(lambda request: httpx.Response(200, content=body))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
        "stream": True,
    })

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = parse_sse(response.text)
    assert events[-1] == "[DONE]"
    chunks = [json.loads(e) for e in events[:-1]]
    assert [c["choices"][0]["delta"]["content"] for c in chunks] == ["Hi", " there"]
    assert chunks[0]["choices"][0]["finish_reason"] is None
    assert chunks[1]["choices"][0]["finish_reason"] == "stop"
    assert all(c["object"] == "chat.completion.chunk" for c in chunks)


def test_chat_completions_stream_error_event(client, dashscope, sse_body):
    """Test a mid-stream vendor error ends the stream with an error event."""
    body = sse_body(
        {"output": {"choices": [{"message": {"content": "partial"}}]}},
        {"code": "InternalError", "message": "An internal error has occured", "request_id": "req-e"},
    )
    dashscope(lambda request: httpx.Response(200, content=body))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
        "stream": True,
    })

    events = parse_sse(response.text)
    assert len(events) == 2
    assert json.loads(events[0])["choices"][0]["delta"]["content"] == "partial"
    assert json.loads(events[1])["error"]["code"] == "InternalError"
    assert "[DONE]" not in events


def test_chat_completions_stream_http_error(client, dashscope):
    """Test HTTP errors on stream start are returned as error responses."""
    dashscope(lambda request: httpx.Response(429, json={
        "code": "Throttling.RateQuota", "message": "Requests rate limit exceeded", "request_id": "req-429",
    }))

    response = client.post("/v1/chat/completions", json={
        "model": "qwen-plus",
        "messages": [{"role": "user", "content": "Hello"}],
        "stream": True,
    })

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "Throttling.RateQuota"


# ===== Embedding Tests =====

def test_embeddings(client, dashscope):
    """Test the embeddings endpoint."""
    dashscope(lambda request: httpx.Response(200, json={
        "request_id": "req-emb",
        "output": {"embeddings": [{"text_index": 0, "embedding": [0.5, 0.25]}]},
        "usage": {"total_tokens": 2, "input_tokens": 2},
    }))

    response = client.post("/v1/embeddings", json={"model": "text-embedding-v2", "input": "hi"})

    assert response.status_code == 200
    data = response.json()
    assert data["object"] == "list"
    assert data["data"] == [{"object": "embedding", "index": 0, "embedding": [0.5, 0.25]}]
    assert data["usage"]["total_tokens"] == 2
