"""Structured audit logging for tool invocations."""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

import structlog

from .schemas import AuditStatus

# Configure structured logger
logger = structlog.get_logger("audit")


class AuditContext:
    """Tracks timing and outcome of one tool invocation.
    
    Attributes:
        request_id: JSON-RPC id of the call, or a generated correlation ID.
        tool_name: Which tool is being invoked.
        session_id: Streaming session the call arrived on, if any.
        start_time: When the invocation started.
        status: Final status of the invocation.
        error_code: Error code if failed.
    """
    
    def __init__(
        self,
        request_id: str,
        tool_name: str,
        session_id: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.tool_name = tool_name
        self.session_id = session_id
        self.start_time = time.perf_counter()
        self.status = AuditStatus.success
        self.error_code: str | None = None
    
    def mark_error(self, error_code: str) -> None:
        """Mark the invocation as failed with an error code."""
        self.status = AuditStatus.error
        self.error_code = error_code
    
    def mark_timeout(self) -> None:
        """Mark the invocation as timed out."""
        self.status = AuditStatus.timeout
        self.error_code = "BACKEND_TIMEOUT"
    
    def mark_invalid(self) -> None:
        """Mark the invocation as rejected by argument validation."""
        self.status = AuditStatus.invalid_arguments
        self.error_code = "INVALID_ARGUMENTS"
    
    def mark_blocked(self) -> None:
        """Mark the invocation as stopped by the write policy."""
        self.status = AuditStatus.blocked
        self.error_code = "WRITES_DISABLED"
    
    @property
    def duration_ms(self) -> int:
        """Calculate duration in milliseconds."""
        elapsed = time.perf_counter() - self.start_time
        return int(elapsed * 1000)


def log_tool_invocation(context: AuditContext) -> None:
    """Emit the audit event for a finished invocation."""
    logger.info(
        "tool_invocation",
        request_id=context.request_id,
        tool_name=context.tool_name,
        session_id=context.session_id,
        status=context.status.value,
        duration_ms=context.duration_ms,
        error_code=context.error_code,
    )


@asynccontextmanager
async def audit_tool_invocation(
    tool_name: str,
    request_id: str | int | None = None,
    session_id: str | None = None,
) -> AsyncGenerator[AuditContext, None]:
    """Context manager for auditing tool invocations.
    
    Automatically tracks timing and logs when the context exits.
    
    Example:
        async with audit_tool_invocation("get_packages_list", req_id) as ctx:
            try:
                result = await do_work()
            except BackendTimeoutError:
                ctx.mark_timeout()
                raise
    """
    correlation_id = str(request_id) if request_id is not None else str(uuid4())
    context = AuditContext(correlation_id, tool_name, session_id=session_id)
    try:
        yield context
    finally:
        log_tool_invocation(context)
