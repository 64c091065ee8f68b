"""HTTP client for forwarding validated calls to the Sweep&Go API."""

from typing import Any

import httpx
import structlog

from .exceptions import BackendTimeoutError, BackendUnavailableError, DownstreamError


# Default timeout for downstream requests
DEFAULT_TIMEOUT_SECONDS = 30.0

logger = structlog.get_logger(__name__)


class DownstreamClient:
    """Sends requests to the Sweep&Go API on behalf of tool handlers.
    
    The shared ``httpx.AsyncClient`` is owned by the application lifespan;
    this class only adds the base URL, credentials and organization scope.
    """
    
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str = "",
        organization: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.base_url = base_url
        self.api_key = api_key
        self.organization = organization
        self.timeout = timeout
    
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    
    def _params(self, query: dict[str, Any] | None) -> dict[str, str]:
        params = {
            key: str(value)
            for key, value in (query or {}).items()
            if value is not None
        }
        if self.organization and "organization" not in params:
            params["organization"] = self.organization
        return params
    
    async def send(
        self,
        path: str,
        method: str = "GET",
        query: dict[str, Any] | None = None,
        body: Any | None = None,
    ) -> Any:
        """Send one request to the downstream API.
        
        Args:
            path: API path, joined onto the configured base URL.
            method: HTTP method.
            query: Query parameters; None values are dropped.
            body: JSON-serialisable request body.
            
        Returns:
            Parsed JSON for JSON responses, ``{}`` for an empty body,
            otherwise the response text.
            
        Raises:
            DownstreamError: If the API returns a non-success status.
            BackendTimeoutError: If the API doesn't respond in time.
            BackendUnavailableError: If the connection fails.
        """
        url = httpx.URL(self.base_url).join(path)
        
        try:
            response = await self.client.request(
                method,
                url,
                params=self._params(query),
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            raise BackendTimeoutError(path=path, timeout_seconds=self.timeout)
        except httpx.ConnectError as e:
            raise BackendUnavailableError(path=path, reason=str(e))
        except httpx.RequestError as e:
            raise BackendUnavailableError(path=path, reason=f"Request failed: {e}")
        
        if not response.is_success:
            logger.warning(
                "downstream_error",
                method=method,
                path=path,
                status=response.status_code,
            )
            raise DownstreamError(
                method=method,
                path=url.path,
                status=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
            )
        
        if not response.content.strip():
            return {}
        
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                # Declared JSON but not parseable; hand the text through.
                return response.text
        return response.text
