"""Generic validator for tool arguments.

One interpreter walks the tagged schema variants from ``schemas.py``; tools
never carry their own validation code. All violations are collected so a
caller can fix every problem in a single round trip.
"""

import math
import re
from typing import Any

from .exceptions import ArgumentValidationError, Violation
from .schemas import BooleanSchema, NumberSchema, ObjectSchema, StringSchema

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MISSING = object()


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _validate_string(schema: StringSchema, value: Any, path: str, violations: list[Violation]) -> Any:
    if not isinstance(value, str):
        violations.append(Violation(
            path=path,
            expected="string",
            actual=value,
            message=f"expected string, got {_type_name(value)}",
        ))
        return _MISSING

    if schema.enum is not None and value not in schema.enum:
        violations.append(Violation(
            path=path,
            expected=f"one of {schema.enum}",
            actual=value,
            message=f"must be one of: {', '.join(schema.enum)}; got '{value}'",
        ))
        return _MISSING

    if schema.min_length is not None and len(value) < schema.min_length:
        violations.append(Violation(
            path=path,
            expected=f"string of length >= {schema.min_length}",
            actual=value,
            message=f"must be at least {schema.min_length} characters long",
        ))
        return _MISSING

    if schema.format == "email" and not _EMAIL_RE.match(value):
        violations.append(Violation(
            path=path,
            expected="email address",
            actual=value,
            message=f"must be a valid email address; got '{value}'",
        ))
        return _MISSING

    return value


def _coerce_number(value: str) -> int | float | None:
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _validate_number(schema: NumberSchema, value: Any, path: str, violations: list[Violation]) -> Any:
    expected = schema.type
    number = value
    if isinstance(value, str) and schema.coerce:
        number = _coerce_number(value)

    # bool is an int subclass but never a number here.
    if isinstance(number, bool) or not isinstance(number, (int, float)) or (
        isinstance(number, float) and not math.isfinite(number)
    ):
        violations.append(Violation(
            path=path,
            expected=expected,
            actual=value,
            message=f"expected {expected}, got {_type_name(value)}",
        ))
        return _MISSING

    if schema.type == "integer":
        if isinstance(number, float):
            if not number.is_integer():
                violations.append(Violation(
                    path=path,
                    expected="integer",
                    actual=value,
                    message=f"expected integer, got {value}",
                ))
                return _MISSING
            number = int(number)

    if schema.minimum is not None and number < schema.minimum:
        violations.append(Violation(
            path=path,
            expected=f"{expected} >= {schema.minimum:g}",
            actual=value,
            message=f"must be >= {schema.minimum:g}; got {value}",
        ))
        return _MISSING

    if schema.maximum is not None and number > schema.maximum:
        violations.append(Violation(
            path=path,
            expected=f"{expected} <= {schema.maximum:g}",
            actual=value,
            message=f"must be <= {schema.maximum:g}; got {value}",
        ))
        return _MISSING

    return number


def _validate_boolean(schema: BooleanSchema, value: Any, path: str, violations: list[Violation]) -> Any:
    if not isinstance(value, bool):
        violations.append(Violation(
            path=path,
            expected="boolean",
            actual=value,
            message=f"expected boolean, got {_type_name(value)}",
        ))
        return _MISSING
    return value


def _validate_object(schema: ObjectSchema, value: Any, path: str, violations: list[Violation]) -> Any:
    if not isinstance(value, dict):
        violations.append(Violation(
            path=path,
            expected="object",
            actual=value,
            message=f"expected object, got {_type_name(value)}",
        ))
        return _MISSING

    result: dict[str, Any] = {}
    for name in schema.required:
        if value.get(name) is None:
            violations.append(Violation(
                path=_join(path, name),
                expected=_describe(schema.properties.get(name)),
                actual=None,
                message="required field is missing",
            ))

    for name, field_schema in schema.properties.items():
        field_value = value.get(name)
        # Optional fields sent as null are treated as absent.
        if field_value is None:
            continue
        checked = _validate_value(field_schema, field_value, _join(path, name), violations)
        if checked is not _MISSING:
            result[name] = checked

    extra = [name for name in value if name not in schema.properties]
    if extra and not schema.additional_properties:
        for name in extra:
            violations.append(Violation(
                path=_join(path, name),
                expected="no additional properties",
                actual=value[name],
                message="unexpected field",
            ))

    if schema.min_properties is not None:
        present = [name for name in schema.properties if value.get(name) is not None]
        if len(present) < schema.min_properties:
            fields = ", ".join(schema.properties)
            violations.append(Violation(
                path=path,
                expected=f"at least {schema.min_properties} of: {fields}",
                actual=None,
                message=f"provide at least {schema.min_properties} of: {fields}",
            ))

    return result


def _describe(schema: Any) -> str:
    if schema is None:
        return "value"
    if isinstance(schema, StringSchema) and schema.enum is not None:
        return f"one of {schema.enum}"
    return schema.type


def _validate_value(schema: Any, value: Any, path: str, violations: list[Violation]) -> Any:
    if isinstance(schema, ObjectSchema):
        return _validate_object(schema, value, path, violations)
    if isinstance(schema, StringSchema):
        return _validate_string(schema, value, path, violations)
    if isinstance(schema, NumberSchema):
        return _validate_number(schema, value, path, violations)
    if isinstance(schema, BooleanSchema):
        return _validate_boolean(schema, value, path, violations)
    raise TypeError(f"unsupported schema variant: {type(schema).__name__}")


def validate_arguments(
    schema: ObjectSchema,
    arguments: Any,
    tool_name: str | None = None,
) -> dict[str, Any]:
    """Check raw tool arguments against a tool's schema.
    
    Args:
        schema: The tool's argument schema.
        arguments: Raw arguments from the caller; None means no arguments.
        tool_name: Used only to label the error.
        
    Returns:
        The typed arguments. Only declared fields are kept; missing optional
        fields are absent.
        
    Raises:
        ArgumentValidationError: With every violated constraint.
    """
    if arguments is None:
        arguments = {}

    violations: list[Violation] = []
    result = _validate_object(schema, arguments, "", violations)
    if violations:
        raise ArgumentValidationError(violations, tool_name=tool_name)
    return result
