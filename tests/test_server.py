"""Tests for the HTTP layer — requests go through FastAPI's TestClient."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from resend_mcp.config import Settings
from resend_mcp.server import create_app, main


@pytest.fixture
def http(provider):
    app = create_app(Settings(api_key="re_test", sender_email_address="noreply@example.com"), provider)
    with TestClient(app) as client:
        yield client


def test_health(http) -> None:
    response = http.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "resend-mcp-server"}


def test_get_mcp_not_allowed(http) -> None:
    response = http.get("/mcp")
    assert response.status_code == 405
    assert response.json() == {
        "jsonrpc": "2.0",
        "error": {"code": -32000, "message": "Method not allowed"},
        "id": None,
    }


def test_post_tools_list(http) -> None:
    response = http.post("/mcp", json={"jsonrpc": "2.0", "method": "tools/list", "id": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    assert [t["name"] for t in body["result"]["tools"]] == ["send-email", "list-audiences"]


def test_rpc_errors_use_http_200(http) -> None:
    response = http.post("/mcp", json={"jsonrpc": "2.0", "method": "nope", "id": "x"})
    assert response.status_code == 200
    assert response.json()["error"]["code"] == -32601


def test_send_email_end_to_end(http, provider) -> None:
    response = http.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": "send-email", "arguments": {"to": "a@b.com", "subject": "hi", "text": "hello"}},
            "id": 5,
        },
    )
    assert response.status_code == 200
    assert "Email sent successfully!" in response.json()["result"]["content"][0]["text"]
    assert provider.sent[0].from_ == "noreply@example.com"


def test_malformed_json(http) -> None:
    response = http.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {
        "jsonrpc": "2.0",
        "error": {"code": -32700, "message": "Parse error"},
        "id": None,
    }


def test_batch_rejected(http) -> None:
    response = http.post("/mcp", json=[{"jsonrpc": "2.0", "method": "initialize", "id": 1}])
    assert response.status_code == 400
    assert response.json()["error"]["code"] == -32600


def test_notification_gets_no_body(http) -> None:
    response = http.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert response.status_code == 202
    assert response.content == b""


def test_unexpected_failure_returns_internal_error(http) -> None:
    http.app.state.dispatcher.handle_request = AsyncMock(side_effect=RuntimeError("boom"))
    response = http.post("/mcp", json={"jsonrpc": "2.0", "method": "initialize", "id": 1})
    assert response.status_code == 500
    assert response.json()["error"] == {"code": -32603, "message": "Internal error"}
    assert response.json()["id"] is None


def test_lifespan_closes_provider(provider) -> None:
    app = create_app(Settings(api_key="re_test"), provider)
    with TestClient(app):
        assert provider.closed is False
    assert provider.closed is True


def test_main_exits_without_api_key(monkeypatch) -> None:
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    with patch("resend_mcp.server.load_dotenv"), patch("resend_mcp.server.anyio.run") as run:
        with pytest.raises(SystemExit) as excinfo:
            main()
    assert excinfo.value.code == 1
    run.assert_not_called()
