"""Tests for the write policy on mutating tools."""

from unittest.mock import AsyncMock

import pytest

from sng_gateway.auth.policy import WRITES_DISABLED_MESSAGE, MutationGate
from sng_gateway.registry.models import ToolDescriptor
from sng_gateway.registry.schemas import ObjectSchema


def _tool(mutating: bool) -> ToolDescriptor:
    return ToolDescriptor(
        name="create_client" if mutating else "get_packages_list",
        description="test",
        input_schema={"type": "object", "properties": {}},
        schema=ObjectSchema(),
        mutating=mutating,
    )


@pytest.mark.asyncio
async def test_mutating_tool_blocked_when_writes_disabled():
    invoke = AsyncMock(return_value="created")
    gate = MutationGate(allow_writes=False)
    
    result = await gate.guard(_tool(mutating=True), invoke)
    
    assert result == WRITES_DISABLED_MESSAGE
    assert "SNG_ALLOW_WRITES=true" in result
    invoke.assert_not_awaited()


@pytest.mark.asyncio
async def test_mutating_tool_runs_when_writes_enabled():
    invoke = AsyncMock(return_value="created")
    gate = MutationGate(allow_writes=True)
    
    result = await gate.guard(_tool(mutating=True), invoke)
    
    assert result == "created"
    invoke.assert_awaited_once()


@pytest.mark.parametrize("allow_writes", [True, False])
@pytest.mark.asyncio
async def test_read_only_tool_always_runs(allow_writes):
    invoke = AsyncMock(return_value="packages")
    gate = MutationGate(allow_writes=allow_writes)
    
    assert await gate.guard(_tool(mutating=False), invoke) == "packages"
    invoke.assert_awaited_once()


def test_blocks():
    assert MutationGate(False).blocks(_tool(True)) is True
    assert MutationGate(True).blocks(_tool(True)) is False
    assert MutationGate(False).blocks(_tool(False)) is False
