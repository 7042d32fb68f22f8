"""
Shared fixtures: an in-process app whose upstream provider is a recording stub.
"""
import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from chat_relay.api.dependencies.upstream import get_upstream_client
from chat_relay.config.settings import Settings, get_settings
from chat_relay.services.upstream import UpstreamClient
from main import create_app


class StubUpstream:
    """Records outbound requests and answers with a canned response."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = {"output_text": "hello"}
        self.content = None
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def stub():
    return StubUpstream()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        openai_api_key="sk-test",
        openai_base_url="https://api.openai.com/v1/",
        openai_model="gpt-5-mini",
        upstream_api="responses",
        upstream_timeout_seconds=5,
    )


@pytest.fixture
def make_client(stub):
    """Build a TestClient for the given settings, wired to the stub upstream."""
    http_clients = []

    def _make(settings: Settings) -> TestClient:
        app = create_app()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        http_clients.append(http_client)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_upstream_client] = lambda: UpstreamClient(settings, http_client)
        return TestClient(app)

    yield _make

    for http_client in http_clients:
        asyncio.run(http_client.aclose())


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)
