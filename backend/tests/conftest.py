"""Pytest configuration and fixtures."""
import os

# Settings are read at import time
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DASHSCOPE_API_KEY", "sk-test")

import json

import httpx
import pytest

from bailian_gateway.models.chat import ChatCompletionRequest
from bailian_gateway.services.gateway.router import ProviderContext
from bailian_gateway.services.gateway.transport import HTTPTransport


@pytest.fixture
def sse_body():
    """Build a DashScope SSE body from event dicts."""
    def _build(*events) -> bytes:
        lines = []
        for i, event in enumerate(events):
            lines.append(f"id:{i + 1}")
            lines.append("event:result")
            lines.append(f"data:{json.dumps(event)}")
            lines.append("")
        return ("\n".join(lines) + "\n").encode("utf-8")
    return _build


@pytest.fixture
def chat_request():
    """Factory for canonical chat requests."""
    def _make(model="qwen-plus", messages=None, **kwargs):
        if messages is None:
            messages = [{"role": "user", "content": "Hello"}]
        return ChatCompletionRequest(model=model, messages=messages, **kwargs)
    return _make


@pytest.fixture
def dashscope_context():
    """Factory for DashScope provider contexts."""
    def _make(model_name="qwen-plus", **kwargs):
        kwargs.setdefault("endpoint", "https://dashscope.test")
        return ProviderContext(provider="dashscope", model_name=model_name, **kwargs)
    return _make


@pytest.fixture
def mock_transport():
    """Factory for an HTTPTransport backed by httpx.MockTransport.

    The handler's received requests are collected on ``transport.requests``.
    """
    def _make(handler):
        requests = []

        def _handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = HTTPTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(_handler)))
        transport.requests = requests
        return transport
    return _make
