import logging
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .auth.exceptions import AuthenticationError, MCPGatewayError
from .auth.models import GatewayPolicy
from .auth.policy import MutationGate
from .auth.utils import AuthorizationGate
from .gateway.proxy import DownstreamClient
from .mcp_transport.exceptions import MalformedEnvelopeError, SessionNotFoundError
from .mcp_transport.service import MCPDispatcher
from .mcp_transport.sessions import SessionManager
from .mcp_transport.sse import CORS_HEADERS, create_mcp_router
from .registry.service import ToolCatalog, build_tool_catalog

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Filter structlog output below ``level`` (a stdlib level name)."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


def _error_body(exc: MCPGatewayError) -> dict:
    return {"error": exc.code, "message": exc.message}


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    catalog: ToolCatalog | None = None,
) -> FastAPI:
    """Build the gateway application.

    Settings are read once here; request handlers only see the objects
    derived from them (policy, gates, dispatcher, session manager).

    Args:
        settings: Loaded settings; read from the environment if omitted.
        http_client: Shared client for downstream calls. When omitted one is
            created in the lifespan and closed on shutdown.
        catalog: Tool catalog; built from the packaged YAML if omitted.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.MCP_LOG_LEVEL)

    policy = GatewayPolicy.from_settings(settings)
    if catalog is None:
        catalog = build_tool_catalog(config_path=settings.TOOL_CATALOG_PATH or None)

    if not settings.SNG_API_KEY:
        logger.warning("missing_api_key", detail="SNG_API_KEY is not set; downstream calls will fail")
    if policy.is_open:
        logger.warning("open_mode", detail="MCP_BEARER_SECRET is not set; all callers are accepted")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Global HTTP client for connection pooling; per-request timeouts
        # come from DownstreamClient.
        owns_client = http_client is None
        client = http_client if http_client is not None else httpx.AsyncClient(timeout=None)
        app.state.http_client = client

        downstream = DownstreamClient(
            client,
            base_url=settings.CRM_BASE_URL,
            api_key=settings.SNG_API_KEY,
            organization=policy.organization,
            timeout=settings.DOWNSTREAM_TIMEOUT_SECONDS,
        )
        app.state.dispatcher = MCPDispatcher(
            catalog,
            downstream,
            MutationGate(policy.allow_writes),
            server_name=settings.APP_NAME,
            server_version=settings.APP_VERSION,
        )
        app.state.session_manager = SessionManager(app.state.dispatcher)
        logger.info(
            "gateway_started",
            mcp_path=settings.MCP_PATH,
            tools=len(catalog),
            allow_writes=policy.allow_writes,
        )

        yield

        # Shutdown: drop open sessions and close the HTTP client
        app.state.session_manager.close_all()
        if owns_client:
            await client.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )
    app.state.settings = settings
    app.state.policy = policy
    app.state.catalog = catalog
    app.state.authorization_gate = AuthorizationGate(policy.bearer_secret)

    # Global exception handlers
    @app.exception_handler(AuthenticationError)
    async def authentication_exception_handler(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body(exc),
            headers={**CORS_HEADERS, "WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
        return JSONResponse(status_code=404, content=_error_body(exc), headers=CORS_HEADERS)

    @app.exception_handler(MalformedEnvelopeError)
    async def malformed_message_handler(request: Request, exc: MalformedEnvelopeError):
        return JSONResponse(status_code=400, content=_error_body(exc), headers=CORS_HEADERS)

    @app.exception_handler(MCPGatewayError)
    async def gateway_exception_handler(request: Request, exc: MCPGatewayError):
        return JSONResponse(status_code=500, content=_error_body(exc), headers=CORS_HEADERS)

    app.include_router(create_mcp_router(settings.MCP_PATH))
    return app


app = create_app()
