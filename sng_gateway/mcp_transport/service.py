"""JSON-RPC dispatcher for the MCP protocol.

The dispatcher handles one envelope at a time and keeps no state between
calls. Tool failures are reported inside a successful JSON-RPC result with
``isError`` set; only unknown methods produce a JSON-RPC ``error``.
"""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from sng_gateway.audit import audit_tool_invocation
from sng_gateway.auth.exceptions import MCPGatewayError
from sng_gateway.auth.policy import MutationGate
from sng_gateway.gateway.exceptions import BackendTimeoutError
from sng_gateway.gateway.proxy import DownstreamClient
from sng_gateway.registry.exceptions import ArgumentValidationError, ToolNotFoundError
from sng_gateway.registry.models import ToolDescriptor
from sng_gateway.registry.service import ToolCatalog
from sng_gateway.registry.validation import validate_arguments

from .exceptions import MalformedEnvelopeError
from .schemas import (
    MCPErrorCodes,
    MCPInitializeParams,
    MCPJSONRPCRequest,
    MCPJSONRPCResponse,
    MCPTool,
    MCPToolCallParams,
    MCPToolCallResult,
    MCPToolListResult,
)

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
INITIALIZED_NOTIFICATIONS = {"notifications/initialized", "initialized"}


def _to_mcp_tool(tool: ToolDescriptor) -> MCPTool:
    return MCPTool(
        name=tool.name,
        description=tool.description,
        inputSchema=tool.input_schema,
    )


def parse_envelope(body: bytes | str | dict[str, Any] | None) -> MCPJSONRPCRequest:
    """Parse one JSON-RPC request.
    
    Args:
        body: Raw request body or an already-decoded JSON value.
        
    Returns:
        The parsed request.
        
    Raises:
        MalformedEnvelopeError: For empty, unparseable or non-conforming bodies.
    """
    if isinstance(body, (bytes, str)):
        if not body.strip():
            raise MalformedEnvelopeError("empty body")
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedEnvelopeError(f"invalid JSON ({e})")
    else:
        data = body

    if data is None:
        raise MalformedEnvelopeError("empty body")
    if not isinstance(data, dict):
        raise MalformedEnvelopeError("expected a JSON object")

    request_id = data.get("id")
    if not isinstance(request_id, (str, int)) or isinstance(request_id, bool):
        request_id = None

    try:
        return MCPJSONRPCRequest.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise MalformedEnvelopeError(f"invalid fields: {fields}", request_id=request_id)


class MCPDispatcher:
    """Routes JSON-RPC methods to protocol operations.
    
    Attributes:
        catalog: Tools exposed by the gateway.
        downstream: Client handed to tool handlers.
        mutation_gate: Write policy applied to mutating tools.
        server_name: Name reported by ``initialize``.
        server_version: Version reported by ``initialize``.
    """
    
    def __init__(
        self,
        catalog: ToolCatalog,
        downstream: DownstreamClient,
        mutation_gate: MutationGate,
        server_name: str = "titan-sweepandgo-mcp",
        server_version: str = "1.0.0",
    ):
        self.catalog = catalog
        self.downstream = downstream
        self.mutation_gate = mutation_gate
        self.server_name = server_name
        self.server_version = server_version
    
    async def handle_initialize(self, params: MCPInitializeParams) -> dict[str, Any]:
        """Handle initialize request.
        
        Args:
            params: Initialize parameters from client.
            
        Returns:
            Server initialization response.
        """
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {
                    "listChanged": False  # Static catalog
                }
            },
            "serverInfo": {
                "name": self.server_name,
                "version": self.server_version,
            }
        }
    
    async def handle_tools_list(self, cursor: str | None = None) -> MCPToolListResult:
        """Handle tools/list request.
        
        The catalog is always returned as a single page, so ``cursor`` is
        accepted and ignored and ``nextCursor`` is null.
        """
        return MCPToolListResult(
            tools=[_to_mcp_tool(tool) for tool in self.catalog.list_tools()],
            nextCursor=None,
        )
    
    async def handle_tools_call(
        self,
        name: str,
        arguments: Any,
        request_id: str | int | None = None,
        session_id: str | None = None,
    ) -> MCPToolCallResult:
        """Handle tools/call request.
        
        Runs validation, the write policy and the downstream call in that
        order. Every failure is converted to an error-flagged result.
        
        Args:
            name: Tool name to invoke.
            arguments: Raw tool arguments.
            request_id: JSON-RPC id, used for audit correlation.
            session_id: Streaming session the call arrived on, if any.
            
        Returns:
            Tool execution result.
        """
        tool = self.catalog.get(name)
        if tool is None:
            error = ToolNotFoundError(name)
            logger.warning("unknown_tool", tool_name=name, request_id=request_id)
            return MCPToolCallResult.error(error.message)

        async with audit_tool_invocation(name, request_id=request_id, session_id=session_id) as audit:
            try:
                typed_arguments = validate_arguments(tool.schema, arguments, tool_name=name)
                if self.mutation_gate.blocks(tool):
                    audit.mark_blocked()
                text = await self.mutation_gate.guard(
                    tool,
                    lambda: tool.handler(self.downstream, typed_arguments),
                )
            except ArgumentValidationError as e:
                audit.mark_invalid()
                return MCPToolCallResult.error(e.message)
            except BackendTimeoutError as e:
                audit.mark_timeout()
                return MCPToolCallResult.error(f"Error: {e.message}")
            except MCPGatewayError as e:
                audit.mark_error(e.code)
                return MCPToolCallResult.error(f"Error: {e.message}")
            except Exception as e:
                logger.error("tool_handler_failed", tool_name=name, exc_info=True)
                audit.mark_error("INTERNAL_ERROR")
                return MCPToolCallResult.error(f"Exception: {e}")

        return MCPToolCallResult.text(text)
    
    async def dispatch(
        self,
        request: MCPJSONRPCRequest,
        session_id: str | None = None,
    ) -> MCPJSONRPCResponse:
        """Dispatch one parsed JSON-RPC request.
        
        Args:
            request: The request envelope.
            session_id: Streaming session the request arrived on, if any.
            
        Returns:
            The JSON-RPC response. Notifications are acknowledged with an
            empty result; callers decide whether to deliver it.
        """
        method = request.method
        params = request.params or {}

        try:
            if method == "initialize":
                try:
                    init_params = MCPInitializeParams.model_validate(params)
                except ValidationError:
                    init_params = MCPInitializeParams()
                logger.info(
                    "client_initialize",
                    client_info=init_params.clientInfo,
                    protocol_version=init_params.protocolVersion,
                    session_id=session_id,
                )
                result = await self.handle_initialize(init_params)
                return MCPJSONRPCResponse.success(request.id, result)

            elif method in INITIALIZED_NOTIFICATIONS:
                # Client is confirming initialization, just acknowledge
                return MCPJSONRPCResponse.success(request.id, {})

            elif method == "ping":
                return MCPJSONRPCResponse.success(request.id, {})

            elif method == "tools/list":
                cursor = params.get("cursor")
                result = await self.handle_tools_list(cursor if isinstance(cursor, str) else None)
                return MCPJSONRPCResponse.success(request.id, result.model_dump(exclude_none=False))

            elif method == "tools/call":
                try:
                    call_params = MCPToolCallParams.model_validate(params)
                except ValidationError:
                    call_result = MCPToolCallResult.error(
                        "Error: tools/call requires params.name (string) and optional params.arguments (object)"
                    )
                else:
                    call_result = await self.handle_tools_call(
                        call_params.name,
                        call_params.arguments,
                        request_id=request.id,
                        session_id=session_id,
                    )
                return MCPJSONRPCResponse.success(request.id, call_result.model_dump(exclude_none=True))

            else:
                return MCPJSONRPCResponse.error_response(
                    request.id,
                    code=MCPErrorCodes.METHOD_NOT_FOUND,
                    message=f"Method not found: {method}",
                )

        except Exception as e:
            logger.error("internal_error", method=method, exc_info=True)
            return MCPJSONRPCResponse.error_response(
                request.id,
                code=MCPErrorCodes.INTERNAL_ERROR,
                message=f"Internal error: {e}",
            )
    
    async def dispatch_raw(
        self,
        body: bytes | str | dict[str, Any] | None,
        session_id: str | None = None,
    ) -> MCPJSONRPCResponse:
        """Parse and dispatch a stateless call body.
        
        A malformed or empty body falls back to the tool listing so that
        clients probing with imperfect first requests still discover tools.
        """
        try:
            request = parse_envelope(body)
        except MalformedEnvelopeError as e:
            logger.info("malformed_envelope_fallback", reason=e.message)
            result = await self.handle_tools_list()
            return MCPJSONRPCResponse.success(e.request_id, result.model_dump(exclude_none=False))
        return await self.dispatch(request, session_id=session_id)
