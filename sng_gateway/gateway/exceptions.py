"""Custom exceptions for calls into the Sweep&Go API."""

from sng_gateway.auth.exceptions import MCPGatewayError


class GatewayError(MCPGatewayError):
    """Base exception for downstream-call errors."""
    pass


class DownstreamError(GatewayError):
    """Raised when the downstream API answers with a non-success status.
    
    Attributes:
        method: HTTP method of the failed call.
        path: Request path of the failed call.
        status: HTTP status code from downstream.
        status_text: Reason phrase from downstream.
        body: Response body text (may be empty).
    """
    
    def __init__(self, method: str, path: str, status: int, status_text: str = "", body: str = ""):
        super().__init__(
            message=f"Sweep&Go API {method} {path} failed: {status} {status_text} {body}".rstrip(),
            code="DOWNSTREAM_ERROR"
        )
        self.method = method
        self.path = path
        self.status = status
        self.status_text = status_text
        self.body = body


class BackendTimeoutError(GatewayError):
    """Raised when the downstream API doesn't respond in time.
    
    Attributes:
        path: Request path that timed out.
        timeout_seconds: Timeout duration that was exceeded.
    """
    
    def __init__(self, path: str, timeout_seconds: float):
        super().__init__(
            message=f"Sweep&Go API call to '{path}' timed out after {timeout_seconds}s",
            code="BACKEND_TIMEOUT"
        )
        self.path = path
        self.timeout_seconds = timeout_seconds


class BackendUnavailableError(GatewayError):
    """Raised when the downstream API is unreachable.
    
    Attributes:
        path: Request path that failed.
        reason: Description of the connection failure.
    """
    
    def __init__(self, path: str, reason: str = "Connection failed"):
        super().__init__(
            message=f"Sweep&Go API is unavailable for '{path}': {reason}",
            code="BACKEND_UNAVAILABLE"
        )
        self.path = path
        self.reason = reason
