"""MCP transport module - JSON-RPC dispatch, sessions and the HTTP/SSE router."""

from .exceptions import MalformedEnvelopeError, SessionNotFoundError
from .schemas import (
    MCPContent,
    MCPErrorCodes,
    MCPJSONRPCRequest,
    MCPJSONRPCResponse,
    MCPTool,
    MCPToolCallResult,
    MCPToolListResult,
)
from .service import MCPDispatcher, PROTOCOL_VERSION, parse_envelope
from .sessions import Session, SessionClosed, SessionManager


__all__ = [
    "MalformedEnvelopeError",
    "SessionNotFoundError",
    "MCPContent",
    "MCPErrorCodes",
    "MCPJSONRPCRequest",
    "MCPJSONRPCResponse",
    "MCPTool",
    "MCPToolCallResult",
    "MCPToolListResult",
    "MCPDispatcher",
    "PROTOCOL_VERSION",
    "parse_envelope",
    "Session",
    "SessionClosed",
    "SessionManager",
]
