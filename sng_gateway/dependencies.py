"""Global dependencies for the application."""

from fastapi import Request

from sng_gateway.mcp_transport.service import MCPDispatcher
from sng_gateway.mcp_transport.sessions import SessionManager


async def get_dispatcher(request: Request) -> MCPDispatcher:
    """Dependency to get the JSON-RPC dispatcher built at startup."""
    return request.app.state.dispatcher


async def get_session_manager(request: Request) -> SessionManager:
    """Dependency to get the streaming session registry."""
    return request.app.state.session_manager
