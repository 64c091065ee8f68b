"""Gateway module - downstream Sweep&Go API client."""

from .exceptions import (
    GatewayError,
    DownstreamError,
    BackendTimeoutError,
    BackendUnavailableError,
)
from .proxy import DownstreamClient, DEFAULT_TIMEOUT_SECONDS


__all__ = [
    # Exceptions
    "GatewayError",
    "DownstreamError",
    "BackendTimeoutError",
    "BackendUnavailableError",
    # Client
    "DownstreamClient",
    "DEFAULT_TIMEOUT_SECONDS",
]
