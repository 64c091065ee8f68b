"""Tool descriptors held by the catalog."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from .schemas import ObjectSchema

if TYPE_CHECKING:
    from sng_gateway.gateway.proxy import DownstreamClient


ToolHandler = Callable[["DownstreamClient", dict[str, Any]], Awaitable[str]]


@dataclass(frozen=True)
class ToolDescriptor:
    """One entry of the tool catalog.
    
    Attributes:
        name: Unique tool name.
        description: Human-readable description shown to callers.
        input_schema: The JSON Schema advertised by ``tools/list``.
        schema: Parsed form of ``input_schema`` used for validation.
        mutating: Whether invoking the tool changes downstream state.
        handler: Coroutine performing the call; never exposed on the wire.
    """
    
    name: str
    description: str
    input_schema: dict[str, Any]
    schema: ObjectSchema
    mutating: bool = False
    handler: ToolHandler | None = field(default=None, repr=False, compare=False)
