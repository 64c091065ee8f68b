"""Write policy for mutating tools."""

from typing import Awaitable, Callable

import structlog

from sng_gateway.registry.models import ToolDescriptor

logger = structlog.get_logger(__name__)

WRITES_DISABLED_MESSAGE = (
    "Writes are disabled for this MCP server. "
    "Set SNG_ALLOW_WRITES=true in .env if you really want Parker to create clients."
)


class MutationGate:
    """Blocks mutating tools unless writes are enabled.
    
    A blocked call is answered with an advisory text instead of an error so
    that an agent can explain the limitation rather than retry.
    """
    
    def __init__(self, allow_writes: bool):
        self.allow_writes = allow_writes
    
    def blocks(self, tool: ToolDescriptor) -> bool:
        return tool.mutating and not self.allow_writes
    
    async def guard(self, tool: ToolDescriptor, invoke: Callable[[], Awaitable[str]]) -> str:
        """Run ``invoke`` unless the write policy blocks ``tool``.
        
        Args:
            tool: Descriptor of the tool being called.
            invoke: Zero-argument coroutine factory performing the call.
            
        Returns:
            The tool's text, or the advisory message when blocked.
        """
        if self.blocks(tool):
            logger.info("mutation_blocked", tool_name=tool.name)
            return WRITES_DISABLED_MESSAGE
        return await invoke()
