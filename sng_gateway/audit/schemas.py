"""Audit record types."""

from enum import Enum


class AuditStatus(str, Enum):
    """Outcome of a tool invocation."""
    
    success = "success"
    error = "error"
    timeout = "timeout"
    invalid_arguments = "invalid_arguments"
    blocked = "blocked"
