"""Pydantic schemas for MCP protocol messages."""

from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field


class MCPInitializeParams(BaseModel):
    """Parameters for initialize request.
    
    Every field is optional: capability negotiation always succeeds.
    """
    
    protocolVersion: str | None = Field(default=None, description="MCP protocol version")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: dict[str, Any] = Field(default_factory=dict)
    
    model_config = ConfigDict(extra="allow")


class MCPTool(BaseModel):
    """MCP tool definition as advertised to callers."""
    
    name: str
    description: str
    inputSchema: dict[str, Any]


class MCPToolListResult(BaseModel):
    """Result for tools/list."""
    
    tools: list[MCPTool]
    nextCursor: str | None = None


class MCPToolCallParams(BaseModel):
    """Parameters for tools/call.
    
    ``arguments`` is left untyped here; its shape is checked against the
    tool's own schema.
    """
    
    name: str
    arguments: Any = None


class MCPContent(BaseModel):
    """Content item in tool response."""
    
    type: Literal["text"] = "text"
    text: str
    isError: bool | None = None


class MCPToolCallResult(BaseModel):
    """Result for tools/call."""
    
    content: list[MCPContent]
    isError: bool = False
    
    @classmethod
    def text(cls, text: str) -> "MCPToolCallResult":
        return cls(content=[MCPContent(text=text)])
    
    @classmethod
    def error(cls, text: str) -> "MCPToolCallResult":
        return cls(content=[MCPContent(text=text, isError=True)], isError=True)


class MCPJSONRPCRequest(BaseModel):
    """Generic JSON-RPC 2.0 request."""
    
    jsonrpc: Literal["2.0"]
    id: str | int | None = None
    method: str
    params: dict[str, Any] | None = None
    
    @property
    def is_notification(self) -> bool:
        """True when no reply is expected (no correlation id)."""
        return self.id is None


class MCPErrorDetail(BaseModel):
    """Error details in JSON-RPC format."""
    
    code: int
    message: str
    data: Any | None = None


class MCPJSONRPCResponse(BaseModel):
    """Generic JSON-RPC 2.0 response."""
    
    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    result: Any | None = None
    error: MCPErrorDetail | None = None
    
    @classmethod
    def success(cls, id: str | int | None, result: Any) -> "MCPJSONRPCResponse":
        return cls(id=id, result=result)
    
    @classmethod
    def error_response(
        cls,
        id: str | int | None,
        code: int,
        message: str,
        data: Any | None = None,
    ) -> "MCPJSONRPCResponse":
        return cls(id=id, error=MCPErrorDetail(code=code, message=message, data=data))
    
    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result`` or ``error`` and an explicit id."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = {} if self.result is None else self.result
        return payload


class MCPErrorCodes:
    """Standard MCP/JSON-RPC error codes."""
    
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
