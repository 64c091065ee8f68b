# Test configuration
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from sng_gateway.config import Settings  # noqa: E402
from sng_gateway.main import create_app  # noqa: E402

BASE_URL = "https://sng.test"


class RecordingBackend:
    """Stand-in for the Sweep&Go API behind an httpx.MockTransport.
    
    Records every request and answers from canned responses keyed by
    (method, path); unknown routes answer 200 with an empty JSON object.
    """
    
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], dict[str, Any]] = {}
    
    def respond(self, method: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        self._routes[(method.upper(), path)] = {"status_code": status_code, **kwargs}
    
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(200, json={})
        return httpx.Response(**route)
    
    @property
    def call_count(self) -> int:
        return len(self.requests)
    
    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "CRM_BASE_URL": BASE_URL,
        "SNG_API_KEY": "sng-test-key",
        "SNG_ALLOW_WRITES": False,
        "SNG_ORGANIZATION": "",
        "MCP_BEARER_SECRET": "",
        "MCP_LOG_LEVEL": "WARNING",
        "SSE_KEEPALIVE_SECONDS": 0.05,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def build_app(backend):
    """Factory for an app wired to the recording backend."""
    def _build(**overrides: Any):
        return create_app(make_settings(**overrides), http_client=backend.client())
    return _build
