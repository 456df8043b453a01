"""Shape declarations with fluent API for request validation.

A shape is an explicit, statically-declared descriptor of a payload: a
named, closed set of fields, each with a type and an ordered list of
constraints. Shapes may reference other shapes (directly, or by the name
they are registered under), which is how nested objects and arrays of
objects are declared.

Example:
    ```python
    from shapeguard import FieldType, Shape
    from shapeguard.constraints import Length, NotEmpty, Range

    line_item = (
        Shape("CreateLineItem")
        .field("description", FieldType.STRING, required=True,
               constraints=[NotEmpty(), Length(max=500)])
        .field("quantity", FieldType.NUMBER, required=True, constraints=[Range(min=1)])
    )

    order = (
        Shape("CreatePurchaseOrder")
        .field("title", FieldType.STRING, required=True, constraints=[NotEmpty()])
        .field("lineItems", FieldType.SHAPE, shape=line_item, each=True)
    )
    ```
"""

from __future__ import annotations

import copy
import math
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any

from .constraints import Constraint, Required
from .exceptions import ShapeDefinitionError
from .result import ValidationContext, ValidationResult


class FieldType(Enum):
    """Enumeration of supported field types.

    Attributes:
        STRING: Text values
        INTEGER: Whole numbers (booleans are rejected)
        NUMBER: Finite integers or floats (booleans are rejected)
        BOOLEAN: True/False values
        ARRAY: Lists of arbitrary values
        OBJECT: Free-form mappings, validated only as a whole
        ANY: No type check
        SHAPE: A nested shape, or a list of them when ``each`` is set
    """

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"
    SHAPE = "shape"


# Python types accepted as pass-through targets
BARE_TYPES: tuple[type, ...] = (str, int, float, bool, list, dict, bytes, object)

_TYPE_MESSAGES: dict[FieldType, str] = {
    FieldType.STRING: "{property} must be a string",
    FieldType.INTEGER: "{property} must be an integer number",
    FieldType.NUMBER: "{property} must be a number",
    FieldType.BOOLEAN: "{property} must be a boolean value",
    FieldType.ARRAY: "{property} must be an array",
    FieldType.OBJECT: "{property} must be an object",
}


def is_bare_target(target: Any) -> bool:
    """Whether ``target`` is a bare scalar marker that bypasses validation.

    Args:
        target: A ``Shape``, a registered shape name, or a type marker

    Returns:
        True for ``None``, plain Python types, and non-SHAPE field types
    """
    if target is None:
        return True
    if isinstance(target, FieldType):
        return target is not FieldType.SHAPE
    return isinstance(target, type) and target in BARE_TYPES


def matches_type(value: Any, field_type: FieldType) -> bool:
    """Check if a non-null value matches a scalar field type."""
    if field_type is FieldType.STRING:
        return isinstance(value, str)
    if field_type is FieldType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if field_type is FieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not (isinstance(value, float) and not math.isfinite(value))
    if field_type is FieldType.BOOLEAN:
        return isinstance(value, bool)
    if field_type is FieldType.ARRAY:
        return isinstance(value, (list, tuple))
    if field_type is FieldType.OBJECT:
        return isinstance(value, Mapping)
    return True


@dataclass
class Field:
    """Field definition within a shape.

    A non-required field whose value is absent or null is skipped entirely.
    A required field always carries a leading ``Required`` constraint.
    """

    name: str
    field_type: FieldType
    required: bool = False
    default: Any = None
    constraints: list[Constraint] = dataclass_field(default_factory=list)
    shape: Shape | str | None = None
    each: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ShapeDefinitionError(f"Field name must be a non-empty string, got: {self.name!r}")
        if self.field_type is FieldType.SHAPE and self.shape is None:
            raise ShapeDefinitionError(
                f"Field '{self.name}' of type SHAPE needs a shape reference",
                context={"field": self.name},
            )
        if self.field_type is not FieldType.SHAPE and self.shape is not None:
            raise ShapeDefinitionError(
                f"Field '{self.name}' declares a shape but has type {self.field_type.name}",
                context={"field": self.name},
            )
        if self.each and self.field_type is not FieldType.SHAPE:
            raise ShapeDefinitionError(
                f"Field '{self.name}' uses 'each' but is not a SHAPE field",
                context={"field": self.name},
            )
        if self.required and not any(isinstance(c, Required) for c in self.constraints):
            self.constraints = [Required(), *self.constraints]

    @property
    def is_nested(self) -> bool:
        return self.field_type is FieldType.SHAPE

    @property
    def shape_name(self) -> str | None:
        if isinstance(self.shape, Shape):
            return self.shape.name
        return self.shape

    def default_value(self) -> Any:
        """A fresh copy of the declared default."""
        return copy.deepcopy(self.default)

    def add_constraint(self, constraint: Constraint) -> Field:
        """Add a constraint to this field (fluent API)."""
        self.constraints.append(constraint)
        return self

    def check(self, value: Any, context: ValidationContext | None = None) -> ValidationResult:
        """Run the type check and every constraint, collecting all failures.

        Nested shape contents are not inspected here; the validator recurses
        into them separately.

        Args:
            value: Candidate value for this field
            context: Evaluation context (property name and path)

        Returns:
            ValidationResult whose messages are keyed at the root
        """
        context = context or ValidationContext(property=self.name)
        result = ValidationResult.success(value)

        # No type check on a missing value; presence is left to the constraints
        if value is not None:
            type_message = self._type_message(value)
            if type_message:
                result.add_error(type_message.format(property=context.property))

        for constraint in self.constraints:
            check_result = constraint.check(value, context)
            if not check_result.valid:
                result = result.merge(check_result)

        return result

    def _type_message(self, value: Any) -> str | None:
        if self.field_type is FieldType.SHAPE:
            if self.each:
                return None if isinstance(value, (list, tuple)) else "{property} must be an array"
            return None if isinstance(value, Mapping) else "nested property {property} must be an object"
        if matches_type(value, self.field_type):
            return None
        return _TYPE_MESSAGES.get(self.field_type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.field_type.name,
            "required": self.required,
            "default": self.default,
            "description": self.description,
            "constraints": [c.key for c in self.constraints],
        }
        if self.is_nested:
            data["shape"] = self.shape_name
            data["each"] = self.each
        return data


class Shape:
    """Shape definition with fluent API.

    Provides a chainable interface for declaring the fields of a request
    payload. Field order is preserved and drives the order of the coerced
    instance and of the error report.
    """

    def __init__(self, name: str, description: str | None = None):
        """Initialize shape.

        Args:
            name: Shape name, also the key it is registered under
            description: Optional human-readable description
        """
        if not name or not isinstance(name, str):
            raise ShapeDefinitionError(f"Shape name must be a non-empty string, got: {name!r}")
        self.name = name
        self.description = description
        self.fields: dict[str, Field] = {}

    def __repr__(self) -> str:
        return f"Shape({self.name!r}, fields={self.field_names})"

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def field(
        self,
        name: str,
        field_type: FieldType | str,
        required: bool = False,
        default: Any = None,
        constraints: list[Constraint] | None = None,
        shape: Shape | str | None = None,
        each: bool = False,
        description: str | None = None,
    ) -> Shape:
        """Add a field definition (fluent API).

        Args:
            name: Field name
            field_type: Field type (FieldType enum or its name)
            required: Whether field is required
            default: Default value used when the field is absent
            constraints: Constraints to apply, in order
            shape: Nested shape (or its registered name) for SHAPE fields
            each: SHAPE field holds a list of nested instances
            description: Field description

        Returns:
            Self for chaining
        """
        if isinstance(field_type, str):
            try:
                field_type = FieldType[field_type.upper()]
            except KeyError as e:
                raise ShapeDefinitionError(
                    f"Invalid field type: {field_type}",
                    context={"shape": self.name, "field": name},
                ) from e

        return self.add_field(
            Field(
                name=name,
                field_type=field_type,
                required=required,
                default=default,
                constraints=list(constraints or []),
                shape=shape,
                each=each,
                description=description,
            )
        )

    def add_field(self, field_def: Field) -> Shape:
        """Add a prepared Field (fluent API)."""
        if field_def.name in self.fields:
            raise ShapeDefinitionError(
                f"Field '{field_def.name}' is declared twice in shape '{self.name}'",
                context={"shape": self.name, "field": field_def.name},
            )
        self.fields[field_def.name] = field_def
        return self

    def with_description(self, description: str) -> Shape:
        """Set shape description (fluent API)."""
        self.description = description
        return self

    @property
    def field_names(self) -> list[str]:
        return list(self.fields)

    def get_field(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError as e:
            raise ShapeDefinitionError(
                f"Shape '{self.name}' has no field '{name}'",
                context={"shape": self.name, "fields": self.field_names},
            ) from e

    def partial(self, name: str | None = None) -> Shape:
        """Copy of this shape with every field optional.

        Used for update payloads, where any subset of the create fields may
        be sent. ``Required`` constraints are dropped; other constraints
        still apply to the fields that are present.

        Args:
            name: Name of the new shape (defaults to ``Partial<name>``)

        Returns:
            New Shape instance
        """
        partial = Shape(name or f"Partial{self.name}", self.description)
        for field_def in self.fields.values():
            partial.add_field(
                Field(
                    name=field_def.name,
                    field_type=field_def.field_type,
                    required=False,
                    default=field_def.default,
                    constraints=[c for c in field_def.constraints if not isinstance(c, Required)],
                    shape=field_def.shape,
                    each=field_def.each,
                    description=field_def.description,
                )
            )
        return partial

    def to_dict(self) -> dict[str, Any]:
        """Convert shape to dictionary representation."""
        return {
            "name": self.name,
            "description": self.description,
            "fields": {name: field_def.to_dict() for name, field_def in self.fields.items()},
        }


__all__ = ["BARE_TYPES", "Field", "FieldType", "Shape", "is_bare_target", "matches_type"]
