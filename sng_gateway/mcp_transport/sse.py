"""HTTP transport for the MCP protocol.

One path serves both transports:

* ``GET``  opens a Server-Sent-Events session and announces the
  session-scoped POST endpoint;
* ``POST`` with a ``sessionId`` (query) or ``Mcp-Session-Id`` (header) is
  routed into that session and answered over its stream;
* ``POST`` without a session is a stateless call answered in the body.
"""

import asyncio
import json
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from sng_gateway.auth.dependencies import require_gateway_credential
from sng_gateway.dependencies import get_dispatcher, get_session_manager

from .exceptions import MalformedEnvelopeError
from .schemas import MCPJSONRPCResponse
from .service import PROTOCOL_VERSION, MCPDispatcher, parse_envelope
from .sessions import Session, SessionClosed, SessionManager

logger = structlog.get_logger(__name__)

ALLOWED_METHODS = "GET, POST, OPTIONS"
SESSION_HEADER = "Mcp-Session-Id"
SESSION_QUERY_PARAM = "sessionId"

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Headers": f"Content-Type, Accept, Authorization, {SESSION_HEADER}",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Expose-Headers": SESSION_HEADER,
}


def format_sse_event(event: str, data: str) -> str:
    """Frame one SSE event; multi-line data becomes several data lines."""
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


def _session_id_from(request: Request) -> str | None:
    return request.query_params.get(SESSION_QUERY_PARAM) or request.headers.get(SESSION_HEADER)


def _jsonrpc_response(response: MCPJSONRPCResponse) -> JSONResponse:
    return JSONResponse(content=response.to_wire(), headers=CORS_HEADERS)


def _discovery_descriptor(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "protocolVersion": PROTOCOL_VERSION,
        "transport": {
            "type": "sse",
            "endpoint": settings.MCP_PATH,
            "stateless": True,
        },
        "authentication": "bearer" if settings.MCP_BEARER_SECRET else "none",
    }


async def _event_stream(
    manager: SessionManager,
    session: Session,
    endpoint: str,
    keepalive_seconds: float,
):
    # Session-scoped endpoint announcement, then replies in routing order.
    try:
        yield format_sse_event("endpoint", endpoint)
        while True:
            try:
                message = await session.next_message(timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield ": ping\n\n"
                continue
            except SessionClosed:
                break
            yield format_sse_event("message", json.dumps(message.to_wire()))
    finally:
        manager.close(session.id)


def session_stream_response(
    manager: SessionManager,
    session: Session,
    endpoint: str,
    keepalive_seconds: float,
) -> StreamingResponse:
    """Stream ``session`` as SSE.

    The background task closes the session even when the client goes away
    before the body iterator ever starts.
    """
    return StreamingResponse(
        _event_stream(manager, session, endpoint, keepalive_seconds),
        media_type="text/event-stream",
        headers={
            **CORS_HEADERS,
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
            SESSION_HEADER: session.id,
        },
        background=BackgroundTask(manager.close, session.id),
    )


def create_mcp_router(mcp_path: str = "/mcp") -> APIRouter:
    """Build the transport router serving MCP on ``mcp_path``."""
    router = APIRouter(prefix="", tags=["mcp-sse"])

    @router.get("/", operation_id="root_health")
    @router.get("/health", operation_id="health_check")
    async def health_check(request: Request):
        """Static liveness acknowledgement."""
        return {"status": "ok", "app": request.app.state.settings.APP_NAME}

    @router.get("/.well-known/mcp.json", operation_id="mcp_discovery")
    async def discovery(request: Request):
        """Describe where and how to reach the MCP endpoint."""
        return JSONResponse(content=_discovery_descriptor(request), headers=CORS_HEADERS)

    @router.options(mcp_path, operation_id="mcp_preflight")
    async def preflight():
        """Answer cross-origin preflight without a body."""
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    @router.get(
        mcp_path,
        operation_id="sse_endpoint_get",
        dependencies=[Depends(require_gateway_credential)],
    )
    async def sse_get_endpoint(
        request: Request,
        manager: Annotated[SessionManager, Depends(get_session_manager)],
    ):
        """Establish an SSE stream bound to a new session."""
        session = manager.open()
        endpoint = f"{mcp_path}?{SESSION_QUERY_PARAM}={session.id}"
        keepalive = request.app.state.settings.SSE_KEEPALIVE_SECONDS
        return session_stream_response(manager, session, endpoint, keepalive)

    @router.post(
        mcp_path,
        operation_id="sse_endpoint_post",
        dependencies=[Depends(require_gateway_credential)],
    )
    async def sse_post_endpoint(
        request: Request,
        dispatcher: Annotated[MCPDispatcher, Depends(get_dispatcher)],
        manager: Annotated[SessionManager, Depends(get_session_manager)],
    ):
        """Handle JSON-RPC 2.0 messages, stateless or session-scoped."""
        body = await request.body()
        session_id = _session_id_from(request)

        if not session_id:
            response = await dispatcher.dispatch_raw(body)
            return _jsonrpc_response(response)

        # Session-scoped bodies are parsed strictly; no listing fallback.
        manager.lookup(session_id)
        try:
            envelope = parse_envelope(body)
        except MalformedEnvelopeError as e:
            logger.info("session_message_rejected", session_id=session_id, reason=e.message)
            raise
        await manager.route(session_id, envelope)
        return Response(
            status_code=202,
            content="Accepted",
            media_type="text/plain",
            headers=CORS_HEADERS,
        )

    @router.api_route(
        mcp_path,
        methods=["PUT", "PATCH", "DELETE"],
        operation_id="mcp_method_not_allowed",
        include_in_schema=False,
    )
    async def method_not_allowed(request: Request):
        return JSONResponse(
            status_code=405,
            content={
                "error": "METHOD_NOT_ALLOWED",
                "message": f"Method {request.method} not allowed on {mcp_path}",
            },
            headers={**CORS_HEADERS, "Allow": ALLOWED_METHODS},
        )

    return router
