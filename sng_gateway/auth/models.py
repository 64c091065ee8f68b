"""Pydantic models for gateway-wide policy."""

from pydantic import BaseModel, ConfigDict, Field

from sng_gateway.config import Settings


class GatewayPolicy(BaseModel):
    """Process-wide policy values, built once at startup.
    
    Attributes:
        allow_writes: Whether mutating tools may reach the downstream API.
        bearer_secret: Shared secret callers must present; None means open mode.
        organization: Optional organization scope forwarded downstream.
    """
    
    allow_writes: bool = Field(default=False, description="Enable mutating tools")
    bearer_secret: str | None = Field(default=None, description="Gateway bearer secret")
    organization: str | None = Field(default=None, description="Downstream organization scope")
    
    model_config = ConfigDict(frozen=True)
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayPolicy":
        """Build the policy from loaded settings.
        
        Empty strings are treated as "not configured".
        """
        return cls(
            allow_writes=settings.SNG_ALLOW_WRITES,
            bearer_secret=settings.MCP_BEARER_SECRET or None,
            organization=settings.SNG_ORGANIZATION or None,
        )
    
    @property
    def is_open(self) -> bool:
        """True when no bearer secret is configured."""
        return self.bearer_secret is None
