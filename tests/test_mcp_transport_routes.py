"""End-to-end tests for the MCP HTTP transport."""

import json

import pytest
from fastapi.testclient import TestClient

from sng_gateway.registry.handlers import PACKAGES_LIST_PATH, PRICE_REGISTRATION_PATH

HOUSEHOLD = {
    "zip_code": "85706",
    "number_of_dogs": 2,
    "last_time_yard_was_thoroughly_cleaned": "one_week",
}


def _rpc(method, params=None, request_id=1):
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


class TestStatelessPost:
    """Tests for POST without a session."""
    
    def test_empty_body_lists_tools(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp", content=b"")
        
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        body = response.json()
        assert body["jsonrpc"] == "2.0"
        assert body["id"] is None
        assert len(body["result"]["tools"]) == 4
    
    def test_initialize(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp", json=_rpc("initialize", {"protocolVersion": "2024-11-05"}))
        
        assert response.json()["result"]["serverInfo"]["name"] == "titan-sweepandgo-mcp"
    
    def test_tool_call_reaches_downstream(self, build_app, backend):
        backend.respond("POST", PRICE_REGISTRATION_PATH, json={"price": 42})
        
        with TestClient(build_app()) as client:
            response = client.post(
                "/mcp",
                json=_rpc("tools/call", {"name": "get_onboarding_price", "arguments": HOUSEHOLD}),
            )
        
        result = response.json()["result"]
        assert result["isError"] is False
        assert json.loads(result["content"][0]["text"]) == {"price": 42}
        
        sent = backend.requests[0]
        assert sent.headers["authorization"] == "Bearer sng-test-key"
        assert json.loads(sent.content) == HOUSEHOLD
    
    def test_organization_scope_is_forwarded(self, build_app, backend):
        with TestClient(build_app(SNG_ORGANIZATION="acme")) as client:
            client.post("/mcp", json=_rpc("tools/call", {"name": "get_packages_list"}))
        
        assert backend.requests[0].url.path == PACKAGES_LIST_PATH
        assert backend.requests[0].url.params["organization"] == "acme"
    
    def test_unknown_method_is_jsonrpc_error(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp", json=_rpc("prompts/list", request_id="x"))
        
        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": "x",
            "error": {"code": -32601, "message": "Method not found: prompts/list"},
        }


class TestAuthorization:
    """Tests for the bearer secret gate."""
    
    @pytest.mark.parametrize("headers, message", [
        ({}, "Missing Authorization header"),
        ({"Authorization": "Basic abc"}, "Invalid Authorization header format. Expected: 'Bearer <token>'"),
        ({"Authorization": "Bearer wrong"}, "Invalid bearer token"),
    ])
    def test_rejected_before_any_downstream_call(self, build_app, backend, headers, message):
        with TestClient(build_app(MCP_BEARER_SECRET="s3cret")) as client:
            response = client.post(
                "/mcp",
                json=_rpc("tools/call", {"name": "get_packages_list"}),
                headers=headers,
            )
        
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {"error": "UNAUTHORIZED", "message": message}
        assert backend.call_count == 0
    
    def test_matching_secret_is_accepted(self, build_app):
        with TestClient(build_app(MCP_BEARER_SECRET="s3cret")) as client:
            response = client.post(
                "/mcp",
                json=_rpc("tools/list"),
                headers={"Authorization": "Bearer s3cret"},
            )
        
        assert response.status_code == 200
        assert "tools" in response.json()["result"]
    
    def test_stream_requires_secret(self, build_app):
        with TestClient(build_app(MCP_BEARER_SECRET="s3cret")) as client:
            response = client.get("/mcp")
        
        assert response.status_code == 401
    
    def test_open_mode_accepts_any_caller(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp", json=_rpc("ping"), headers={"Authorization": "Bearer anything"})
        
        assert response.status_code == 200


class TestSessionPost:
    """Tests for POST into a streaming session."""
    
    def test_unknown_session(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp?sessionId=missing", json=_rpc("ping"))
        
        assert response.status_code == 404
        assert response.json() == {"error": "SESSION_NOT_FOUND", "message": "Unknown session: missing"}
    
    def test_unknown_session_via_header(self, build_app):
        with TestClient(build_app()) as client:
            response = client.post("/mcp", json=_rpc("ping"), headers={"Mcp-Session-Id": "missing"})
        
        assert response.status_code == 404
    
    def test_accepted_and_pushed(self, build_app):
        app = build_app()
        with TestClient(app) as client:
            session = app.state.session_manager.open()
            response = client.post(f"/mcp?sessionId={session.id}", json=_rpc("tools/list", request_id=11))
            
            assert response.status_code == 202
            assert response.text == "Accepted"
            
            message = client.portal.call(session.next_message, 1.0)
        
        assert message.id == 11
        assert len(message.result["tools"]) == 4
    
    def test_malformed_session_body_is_rejected(self, build_app):
        app = build_app()
        with TestClient(app) as client:
            session = app.state.session_manager.open()
            response = client.post(f"/mcp?sessionId={session.id}", content=b"{not json")
        
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_MESSAGE"
    
    def test_closed_session(self, build_app):
        app = build_app()
        with TestClient(app) as client:
            manager = app.state.session_manager
            session = manager.open()
            manager.close(session.id)
            response = client.post("/mcp", json=_rpc("ping"), headers={"Mcp-Session-Id": session.id})
        
        assert response.status_code == 404


class TestMethodNotAllowed:
    """Tests for unsupported HTTP methods on the MCP path."""
    
    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_method_not_allowed(self, build_app, method):
        with TestClient(build_app()) as client:
            response = client.request(method, "/mcp")
        
        assert response.status_code == 405
        assert response.headers["allow"] == "GET, POST, OPTIONS"
        assert response.json()["error"] == "METHOD_NOT_ALLOWED"
