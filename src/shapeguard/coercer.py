"""Coercion of untyped payloads into candidate shape instances.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .registry import ShapeRegistry, default_registry
from .result import ValidationResult
from .shape import Field, FieldType, Shape, is_bare_target, matches_type

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

_TRUE_STRINGS = ("true", "1", "yes", "y", "on")
_FALSE_STRINGS = ("false", "0", "no", "n", "off")


class Coercer:
    """Structural mapping of raw input onto declared shapes.

    The coercer never judges validity. It builds a fresh instance holding
    only the declared fields, recursing into nested shapes, and hands
    anything it cannot map (null, scalars, arrays where an object is
    expected) through unchanged for the validator to reject.
    """

    def __init__(self, registry: ShapeRegistry | None = None):
        """Initialize coercer.

        Args:
            registry: Registry used to resolve shapes referenced by name
        """
        self.registry = registry if registry is not None else default_registry

    def coerce(
        self,
        raw: Any,
        target: Shape | str | Any,
        implicit_conversion: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> Any:
        """Coerce a raw value into a candidate instance of ``target``.

        Args:
            raw: Structurally decoded input (e.g. parsed JSON)
            target: Shape, registered shape name, or bare type marker
            implicit_conversion: Convert scalar field values toward their declared types
            max_depth: Nesting depth beyond which values are left uncoerced

        Returns:
            A new dict of declared fields, or ``raw`` unchanged for bare
            targets and non-mapping input

        Raises:
            ShapeNotFoundError: If a referenced shape is not registered
        """
        if is_bare_target(target):
            return raw
        shape = self.registry.resolve(target)
        return self._coerce_shape(raw, shape, 0, implicit_conversion, max_depth)

    def _coerce_shape(
        self,
        raw: Any,
        shape: Shape,
        depth: int,
        implicit_conversion: bool,
        max_depth: int,
    ) -> Any:
        if not isinstance(raw, Mapping):
            return raw
        if depth > max_depth:
            logger.debug(f"Depth {depth} exceeds {max_depth} in shape '{shape.name}', not coercing")
            return raw

        instance: dict[str, Any] = {}
        for name, field_def in shape.fields.items():
            value = raw.get(name)
            if value is not None:
                instance[name] = self._coerce_field(value, field_def, depth, implicit_conversion, max_depth)
            elif name in raw:
                # Explicit null is kept so the validator can report it
                instance[name] = None
            elif field_def.default is not None:
                instance[name] = field_def.default_value()
        return instance

    def _coerce_field(
        self,
        value: Any,
        field_def: Field,
        depth: int,
        implicit_conversion: bool,
        max_depth: int,
    ) -> Any:
        if field_def.is_nested:
            sub_shape = self.registry.resolve(field_def.shape)  # type: ignore[arg-type]
            if field_def.each:
                if not isinstance(value, (list, tuple)):
                    return value
                return [
                    self._coerce_shape(item, sub_shape, depth + 1, implicit_conversion, max_depth)
                    for item in value
                ]
            return self._coerce_shape(value, sub_shape, depth + 1, implicit_conversion, max_depth)

        if implicit_conversion and field_def.field_type in _CONVERTIBLE:
            result = self.convert(value, field_def.field_type)
            if result.valid:
                return result.value
        return value

    def convert(self, value: Any, field_type: FieldType) -> ValidationResult:
        """Convert a scalar value to the given field type.

        Always returns ValidationResult, never raises.

        Args:
            value: Value to convert
            field_type: Target scalar field type

        Returns:
            ValidationResult with the converted value or an error
        """
        if value is None:
            return ValidationResult.failure(None, [f"Cannot convert None to {field_type.name}"])

        if matches_type(value, field_type):
            return ValidationResult.success(value)

        try:
            return ValidationResult.success(self._convert_value(value, field_type))
        except (ValueError, TypeError, OverflowError) as e:
            return ValidationResult.failure(
                value,
                [f"Cannot convert {type(value).__name__} to {field_type.name}: {e!s}"],
            )

    def _convert_value(self, value: Any, field_type: FieldType) -> Any:
        """Perform the actual conversion.

        Raises:
            ValueError: If conversion fails
        """
        if field_type is FieldType.STRING:
            if isinstance(value, (int, float, bool)):
                return str(value).lower() if isinstance(value, bool) else str(value)
            raise ValueError(f"{type(value).__name__} has no string form")

        if field_type is FieldType.INTEGER:
            if isinstance(value, str):
                value = value.strip()
                if value.startswith(("0x", "0X")):
                    return int(value, 16)
                return int(value)
            if isinstance(value, float):
                if value != int(value):
                    raise ValueError(f"Float {value} cannot be losslessly converted to int")
                return int(value)
            raise ValueError(f"Cannot convert {type(value).__name__} to int")

        if field_type is FieldType.NUMBER:
            if isinstance(value, str):
                value = value.strip()
                try:
                    return int(value)
                except ValueError:
                    number = float(value)
                if not matches_type(number, FieldType.NUMBER):
                    raise ValueError(f"'{value}' is not a finite number")
                return number
            raise ValueError(f"Cannot convert {type(value).__name__} to number")

        if field_type is FieldType.BOOLEAN:
            if isinstance(value, str):
                text = value.strip().lower()
                if text in _TRUE_STRINGS:
                    return True
                if text in _FALSE_STRINGS:
                    return False
                raise ValueError(f"String '{value}' is not a valid boolean")
            if isinstance(value, (int, float)) and value in (0, 1):
                return bool(value)
            raise ValueError(f"Cannot convert {value!r} to bool")

        raise ValueError(f"No conversion to {field_type.name}")


_CONVERTIBLE = (FieldType.STRING, FieldType.INTEGER, FieldType.NUMBER, FieldType.BOOLEAN)


__all__ = ["Coercer", "DEFAULT_MAX_DEPTH"]
