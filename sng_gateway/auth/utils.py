"""Bearer credential parsing and the gateway authorization gate."""

import hmac

from .exceptions import InvalidTokenError


def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization header.
    
    Args:
        authorization: Authorization header value (format: 'Bearer <token>').
        
    Returns:
        The bearer token.
        
    Raises:
        InvalidTokenError: If header is missing or malformed.
    """
    if not authorization:
        raise InvalidTokenError("Missing Authorization header")
    
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("Invalid Authorization header format. Expected: 'Bearer <token>'")
    
    return parts[1]


class AuthorizationGate:
    """Checks the gateway bearer secret on inbound calls.
    
    With no secret configured every call is allowed. Otherwise the caller
    must present ``Authorization: Bearer <secret>`` with an exact match.
    """
    
    def __init__(self, secret: str | None):
        self._secret = secret or None
    
    @property
    def is_open(self) -> bool:
        return self._secret is None
    
    def check(self, authorization: str | None) -> bool:
        """Return True if the header satisfies the configured secret."""
        try:
            self.enforce(authorization)
        except InvalidTokenError:
            return False
        return True

    def enforce(self, authorization: str | None) -> None:
        """Raise InvalidTokenError unless the header carries the secret."""
        if self._secret is None:
            return
        # Surface the precise header problem before comparing the token.
        token = extract_bearer_token(authorization)
        if not hmac.compare_digest(token.encode("utf-8"), self._secret.encode("utf-8")):
            raise InvalidTokenError("Invalid bearer token")
