"""Exceptions raised while resolving and validating tool calls."""

from typing import Any

from pydantic import BaseModel

from sng_gateway.auth.exceptions import MCPGatewayError


class Violation(BaseModel):
    """One violated constraint in a tool's arguments.
    
    Attributes:
        path: Dotted path of the offending field ("" for the arguments object).
        expected: Short description of the accepted shape.
        actual: The value received, or None when the field is missing.
        message: Human-readable explanation.
    """
    
    path: str
    expected: str
    actual: Any | None = None
    message: str

    def describe(self) -> str:
        return f"{self.path or 'arguments'}: {self.message}"


class ToolNotFoundError(MCPGatewayError):
    """Raised when a requested tool is not in the catalog.
    
    Attributes:
        tool_name: Name of the tool that was not found.
    """
    
    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Unknown tool: {tool_name}",
            code="TOOL_NOT_FOUND"
        )
        self.tool_name = tool_name


class ArgumentValidationError(MCPGatewayError):
    """Raised when tool arguments violate the tool's schema.
    
    Attributes:
        tool_name: Tool whose schema was checked, when known.
        violations: Every violated constraint, in schema order.
    """
    
    def __init__(self, violations: list[Violation], tool_name: str | None = None):
        self.violations = violations
        self.tool_name = tool_name
        subject = f"tool '{tool_name}'" if tool_name else "tool"
        lines = [f"Invalid arguments for {subject}:"]
        lines.extend(f"- {violation.describe()}" for violation in violations)
        super().__init__(message="\n".join(lines), code="INVALID_ARGUMENTS")


class CatalogError(MCPGatewayError):
    """Raised when the tool catalog definition is inconsistent."""
    
    def __init__(self, message: str):
        super().__init__(message=message, code="CATALOG_ERROR")
