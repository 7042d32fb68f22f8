"""
Tests for the chat relay endpoint.

The upstream provider is a MockTransport stub (see conftest.py), so every
test can assert exactly what was, or was not, sent upstream.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from chat_relay.api.endpoints.chat import get_relay_controller
from chat_relay.config.settings import get_settings
from chat_relay.controllers.relay_controller import (
    INTERNAL_ERROR,
    MISSING_API_KEY_ERROR,
    MISSING_MESSAGES_ERROR,
    UPSTREAM_FALLBACK_ERROR,
    RelayController,
)
from main import create_app

CONVERSATION = [
    {"role": "user", "content": "I keep postponing my reflection notes."},
    {"role": "assistant", "content": "What usually happens right before you postpone them?"},
    {"role": "user", "content": "אני מרגיש עייף בסוף היום."},
]


def test_reply_from_output_text(client, stub):
    """Aggregated output_text is returned as the reply."""
    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 200
    assert response.json() == {"reply": "hello"}
    assert stub.calls == 1


def test_reply_from_structured_output(client, stub):
    """Without output_text, output_text fragments are concatenated in order."""
    stub.body = {
        "output": [
            {
                "content": [
                    {"type": "output_text", "text": "a"},
                    {"type": "output_text", "text": "b"},
                ]
            }
        ]
    }

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 200
    assert response.json() == {"reply": "ab"}


def test_unrecognized_shape_replies_empty(client, stub):
    stub.body = {"id": "resp_123", "output": []}

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 200
    assert response.json() == {"reply": ""}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"messages": []},
        {"messages": None},
        {"messages": "hello"},
        {"messages": {"role": "user", "content": "hi"}},
        {"messages": ["hello"]},
        {"messages": [{"role": "moderator", "content": "hi"}]},
        [{"role": "user", "content": "hi"}],
    ],
)
def test_invalid_messages_rejected_without_upstream_call(client, stub, body):
    response = client.post("/api/chat", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": MISSING_MESSAGES_ERROR}
    assert stub.calls == 0


def test_malformed_json_rejected(client, stub):
    response = client.post(
        "/api/chat",
        content=b'{"messages": [',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert stub.calls == 0


@pytest.mark.parametrize("api_key", ["", "   "])
def test_missing_credential_is_server_error(make_client, settings, stub, api_key):
    client = make_client(settings.model_copy(update={"openai_api_key": api_key}))

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {"error": MISSING_API_KEY_ERROR}
    assert stub.calls == 0


def test_bad_input_reported_before_missing_credential(make_client, settings, stub):
    client = make_client(settings.model_copy(update={"openai_api_key": ""}))

    response = client.post("/api/chat", json={"messages": []})

    assert response.status_code == 400
    assert stub.calls == 0


def test_outbound_payload_prepends_system_prompt(client, stub, settings):
    """System prompt first, then the caller's messages untouched and in order."""
    response = client.post(
        "/api/chat",
        json={"messages": CONVERSATION, "userName": "Dana", "dimension": "Leadership"},
    )
    assert response.status_code == 200

    payload = stub.payload()
    assert payload["model"] == settings.openai_model
    sent = payload["input"]
    assert len(sent) == len(CONVERSATION) + 1
    assert sent[0]["role"] == "system"
    assert "User name: Dana." in sent[0]["content"]
    assert "Dimension/context: Leadership." in sent[0]["content"]
    assert sent[1:] == CONVERSATION


def test_system_prompt_defaults(client, stub):
    client.post("/api/chat", json={"messages": CONVERSATION})

    system = stub.payload()["input"][0]["content"]
    assert "User name: Unknown." in system
    assert "Dimension/context: None." in system
    assert "Hebrew or English" in system


def test_language_interpolated(client, stub):
    client.post("/api/chat", json={"messages": CONVERSATION, "language": "Hebrew"})

    assert stub.payload()["input"][0]["content"].endswith("Reply in Hebrew.")


def test_null_content_becomes_empty_string(client, stub):
    messages = [
        {"role": "user", "content": None},
        {"role": "assistant"},
        {"role": "user", "content": 42},
    ]

    response = client.post("/api/chat", json={"messages": messages})

    assert response.status_code == 200
    sent = stub.payload()["input"][1:]
    assert [m["content"] for m in sent] == ["", "", "42"]


def test_unicode_content_preserved(client, stub):
    text = "שלום, מה שלומך? 👋"
    client.post("/api/chat", json={"messages": [{"role": "user", "content": text}]})

    assert stub.payload()["input"][1]["content"] == text


def test_request_uses_bearer_auth_and_responses_endpoint(client, stub):
    client.post("/api/chat", json={"messages": CONVERSATION})

    request = stub.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.openai.com/v1/responses"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.headers["Content-Type"] == "application/json"


def test_upstream_error_propagates_status_and_message(client, stub):
    stub.status_code = 429
    stub.body = {"error": {"message": "rate limited"}}

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 429
    assert response.json() == {"error": "rate limited"}
    assert stub.calls == 1


def test_upstream_error_without_message_uses_fallback(client, stub):
    stub.status_code = 503
    stub.body = {"detail": "overloaded"}

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 503
    assert response.json() == {"error": UPSTREAM_FALLBACK_ERROR}


def test_network_failure_is_internal_error(client, stub):
    stub.error = httpx.ConnectError("connection refused")

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {"error": INTERNAL_ERROR}

    # The relay keeps serving afterwards
    stub.error = None
    response = client.post("/api/chat", json={"messages": CONVERSATION})
    assert response.status_code == 200


def test_timeout_is_internal_error(client, stub):
    stub.error = httpx.ReadTimeout("timed out")

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {"error": INTERNAL_ERROR}


def test_non_json_upstream_body_is_internal_error(client, stub):
    stub.content = b"<html>Bad Gateway</html>"

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {"error": INTERNAL_ERROR}


def test_chat_completions_variant(make_client, settings, stub):
    client = make_client(settings.model_copy(update={"upstream_api": "chat_completions"}))
    stub.body = {"choices": [{"message": {"role": "assistant", "content": "legacy reply"}}]}

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 200
    assert response.json() == {"reply": "legacy reply"}
    assert str(stub.requests[0].url) == "https://api.openai.com/v1/chat/completions"
    payload = stub.payload()
    assert "input" not in payload
    assert payload["messages"][0]["role"] == "system"
    assert payload["messages"][1:] == CONVERSATION


def test_cors_allows_any_origin(client):
    response = client.options(
        "/api/chat",
        headers={
            "Origin": "https://coach.example.org",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_health_does_not_call_upstream(client, stub):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["upstream"] == {
        "api": "responses",
        "model": "gpt-5-mini",
        "credential_configured": True,
    }
    assert stub.calls == 0


def test_non_list_output_content_replies_empty(client, stub):
    stub.body = {"output": [{"type": "message", "content": 5}]}

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 200
    assert response.json() == {"reply": ""}


class ExplodingController(RelayController):
    async def handle(self, request):
        raise RuntimeError("secret connection string leaked")


def _client_with_exploding_controller(monkeypatch, settings):
    monkeypatch.setattr("chat_relay.config.settings.get_settings", lambda: settings)
    app = create_app()
    app.dependency_overrides[get_relay_controller] = lambda: ExplodingController(settings, None)
    return TestClient(app)


def test_unexpected_exception_returns_generic_error(monkeypatch, settings):
    """Exception details stay in the logs, never in the response body."""
    client = _client_with_exploding_controller(monkeypatch, settings)

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {"error": INTERNAL_ERROR}


def test_unexpected_exception_details_in_debug_mode(monkeypatch, settings):
    client = _client_with_exploding_controller(
        monkeypatch, settings.model_copy(update={"debug": True})
    )

    response = client.post("/api/chat", json={"messages": CONVERSATION})

    assert response.status_code == 500
    assert response.json() == {
        "error": f"{INTERNAL_ERROR}: RuntimeError: secret connection string leaked"
    }


def test_lifespan_http_client_is_used_and_closed(settings, stub):
    """The shared client created at startup serves requests and is closed at shutdown."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as client:
        assert isinstance(app.state.http_client, httpx.AsyncClient)
        client.portal.call(app.state.http_client.aclose)
        shared = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        app.state.http_client = shared

        response = client.post("/api/chat", json={"messages": CONVERSATION})

        assert response.status_code == 200
        assert response.json() == {"reply": "hello"}
        assert stub.calls == 1
        assert stub.requests[0].headers["Authorization"] == "Bearer sk-test"
        assert not shared.is_closed

    assert shared.is_closed
