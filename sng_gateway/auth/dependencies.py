"""FastAPI dependencies for gateway authorization."""

from typing import Annotated

from fastapi import Depends, Header, Request

from .utils import AuthorizationGate


def get_authorization_gate(request: Request) -> AuthorizationGate:
    """Return the gate built at startup."""
    return request.app.state.authorization_gate


async def require_gateway_credential(
    gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request before any MCP handling if the bearer check fails.
    
    Raises:
        InvalidTokenError: If a secret is configured and the header does not match it.
    """
    gate.enforce(authorization)
