"""Registry module - Tool catalog, argument schemas and validation."""

from .models import ToolDescriptor, ToolHandler
from .schemas import ObjectSchema, StringSchema, NumberSchema, BooleanSchema
from .exceptions import ArgumentValidationError, CatalogError, ToolNotFoundError, Violation
from .validation import validate_arguments
from .service import ToolCatalog, build_tool_catalog


__all__ = [
    "ToolDescriptor",
    "ToolHandler",
    "ObjectSchema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "ArgumentValidationError",
    "CatalogError",
    "ToolNotFoundError",
    "Violation",
    "validate_arguments",
    "ToolCatalog",
    "build_tool_catalog",
]
