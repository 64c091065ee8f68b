"""Audit module - structured logging of tool invocations."""

from .logger import audit_tool_invocation, log_tool_invocation, AuditContext
from .schemas import AuditStatus

__all__ = [
    "audit_tool_invocation",
    "log_tool_invocation",
    "AuditContext",
    "AuditStatus",
]
