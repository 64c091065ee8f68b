"""Auth module initialization."""

from .exceptions import (
    MCPGatewayError,
    AuthenticationError,
    InvalidTokenError,
)
from .models import GatewayPolicy
from .utils import AuthorizationGate, extract_bearer_token
from .dependencies import get_authorization_gate, require_gateway_credential
from .policy import MutationGate, WRITES_DISABLED_MESSAGE

__all__ = [
    # Exceptions
    "MCPGatewayError",
    "AuthenticationError",
    "InvalidTokenError",
    # Models
    "GatewayPolicy",
    # Utils
    "AuthorizationGate",
    "extract_bearer_token",
    # Dependencies
    "get_authorization_gate",
    "require_gateway_credential",
    # Policy
    "MutationGate",
    "WRITES_DISABLED_MESSAGE",
]
