"""Custom exceptions for the gateway and its authorization boundary."""


class MCPGatewayError(Exception):
    """Base exception for all MCP Gateway errors."""
    
    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class AuthenticationError(MCPGatewayError):
    """Raised when a caller fails the gateway bearer check."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when the Authorization header is missing, malformed or wrong."""
    
    def __init__(self, message: str = "Invalid or missing bearer token"):
        super().__init__(message=message, code="UNAUTHORIZED")
