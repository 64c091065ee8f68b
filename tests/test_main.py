"""Tests for application wiring."""

import httpx
import pytest
from fastapi.testclient import TestClient

from sng_gateway.auth.exceptions import MCPGatewayError
from sng_gateway.main import create_app
from sng_gateway.mcp_transport.service import PROTOCOL_VERSION
from sng_gateway.registry.service import ToolCatalog

from conftest import make_settings


@pytest.mark.parametrize("path", ["/", "/health"])
def test_health(build_app, path):
    with TestClient(build_app()) as client:
        response = client.get(path)
    
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "app": "titan-sweepandgo-mcp"}


def test_discovery_open_mode(build_app):
    with TestClient(build_app()) as client:
        response = client.get("/.well-known/mcp.json")
    
    assert response.json() == {
        "name": "titan-sweepandgo-mcp",
        "version": "1.0.0",
        "protocolVersion": PROTOCOL_VERSION,
        "transport": {"type": "sse", "endpoint": "/mcp", "stateless": True},
        "authentication": "none",
    }


def test_discovery_with_secret_and_custom_path(build_app):
    with TestClient(build_app(MCP_BEARER_SECRET="s3cret", MCP_PATH="/rpc")) as client:
        body = client.get("/.well-known/mcp.json").json()
        preflight = client.options("/rpc")
    
    assert body["authentication"] == "bearer"
    assert body["transport"]["endpoint"] == "/rpc"
    assert preflight.status_code == 204


def test_preflight(build_app):
    with TestClient(build_app(MCP_BEARER_SECRET="s3cret")) as client:
        response = client.options("/mcp")
    
    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    allowed = response.headers["access-control-allow-headers"]
    assert "Authorization" in allowed
    assert "Mcp-Session-Id" in allowed


def test_gateway_errors_are_shaped(build_app):
    app = build_app()
    
    async def broken():
        raise MCPGatewayError("backend misconfigured", code="CONFIG_ERROR")
    
    app.add_api_route("/broken", broken)
    
    with TestClient(app) as client:
        response = client.get("/broken")
    
    assert response.status_code == 500
    assert response.json() == {"error": "CONFIG_ERROR", "message": "backend misconfigured"}


def test_app_state_is_wired(build_app):
    app = build_app(SNG_ALLOW_WRITES=True, SNG_ORGANIZATION="acme")
    
    with TestClient(app):
        dispatcher = app.state.dispatcher
        assert dispatcher.mutation_gate.allow_writes is True
        assert dispatcher.downstream.organization == "acme"
        assert app.state.session_manager.dispatcher is dispatcher
    
    assert app.state.policy.is_open is True


def test_injected_catalog(backend):
    app = create_app(make_settings(), http_client=backend.client(), catalog=ToolCatalog([]))
    
    with TestClient(app) as client:
        body = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"}).json()
    
    assert body["result"] == {"tools": [], "nextCursor": None}


def test_sessions_closed_on_shutdown(build_app):
    app = build_app()
    
    with TestClient(app):
        session = app.state.session_manager.open()
    
    assert session.closed is True
    assert len(app.state.session_manager) == 0


def test_owned_http_client_is_closed_on_shutdown():
    app = create_app(make_settings())
    
    with TestClient(app):
        client = app.state.http_client
        assert isinstance(client, httpx.AsyncClient)
    
    assert client.is_closed is True
