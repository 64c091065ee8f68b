"""Argument schema shapes understood by the validator.

Tool input schemas are written as a small subset of JSON Schema. Each
``type`` maps to one variant below, so a catalog entry using an unsupported
keyword combination fails when the catalog is loaded rather than at call time.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _BaseSchema(BaseModel):
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class StringSchema(_BaseSchema):
    """A string, optionally constrained to an enum, a length or an email."""
    
    type: Literal["string"] = "string"
    enum: list[str] | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    format: Literal["email"] | None = None


class NumberSchema(_BaseSchema):
    """A number or integer with optional bounds.
    
    Numeric strings are only accepted when ``x-coerce`` is set.
    """
    
    type: Literal["number", "integer"] = "number"
    minimum: float | None = None
    maximum: float | None = None
    coerce: bool = Field(default=False, alias="x-coerce")


class BooleanSchema(_BaseSchema):
    type: Literal["boolean"] = "boolean"


class ObjectSchema(_BaseSchema):
    """An object of named fields.
    
    ``minProperties`` expresses "at least one of these fields" for
    partial-update tools.
    """
    
    type: Literal["object"] = "object"
    properties: dict[str, "FieldSchema"] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: bool = Field(default=True, alias="additionalProperties")
    min_properties: int | None = Field(default=None, alias="minProperties")


FieldSchema = Annotated[
    Union[StringSchema, NumberSchema, BooleanSchema, ObjectSchema],
    Field(discriminator="type"),
]

ObjectSchema.model_rebuild()
