"""
Shared pytest fixtures: settings, a stubbed chat-completion provider, and a
TestClient wired to it.
"""

import json
from typing import Any, List

import httpx
import pytest
from fastapi.testclient import TestClient

from quizboard.app import create_app
from quizboard.core.config import Settings
from quizboard.core.upstream import UpstreamClient


class ProviderStub:
    """Stands in for the provider's /chat/completions endpoint and records every call."""

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.status = 200
        self.body = ""
        self.error: Exception | None = None

    def reply(self, document: Any) -> None:
        """Model output is `document` serialized as JSON text."""
        self.reply_content(json.dumps(document))

    def reply_content(self, content: Any) -> None:
        self.body = json.dumps(
            {
                "id": "chatcmpl-test",
                "object": "chat.completion",
                "choices": [
                    {"index": 0, "message": {"role": "assistant", "content": content}}
                ],
            }
        )

    def fail(self, status: int, body: str) -> None:
        self.status = status
        self.body = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status,
            content=self.body.encode("utf-8"),
            headers={"content-type": "application/json"},
        )

    def sent_json(self, index: int = -1) -> dict:
        return json.loads(self.calls[index].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", base_url="https://provider.test/v1", timeout=5)


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def http_client(provider: ProviderStub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(provider.handler))


@pytest.fixture
def upstream(settings: Settings, http_client: httpx.AsyncClient) -> UpstreamClient:
    return UpstreamClient(settings, http_client=http_client)


@pytest.fixture
def client(settings: Settings, http_client: httpx.AsyncClient) -> TestClient:
    return TestClient(create_app(settings, http_client=http_client))
