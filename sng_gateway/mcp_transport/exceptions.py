"""Transport-level exceptions for MCP sessions and envelopes."""

from typing import Any

from sng_gateway.auth.exceptions import MCPGatewayError


class MalformedEnvelopeError(MCPGatewayError):
    """Raised when a body is not a usable JSON-RPC request.
    
    Attributes:
        request_id: The ``id`` found in the body, if one could be read.
    """
    
    def __init__(self, reason: str, request_id: Any | None = None):
        super().__init__(message=f"Malformed JSON-RPC message: {reason}", code="INVALID_MESSAGE")
        self.request_id = request_id


class SessionNotFoundError(MCPGatewayError):
    """Raised when a call references a session that is not open."""
    
    def __init__(self, session_id: str):
        super().__init__(message=f"Unknown session: {session_id}", code="SESSION_NOT_FOUND")
        self.session_id = session_id
