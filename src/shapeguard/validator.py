"""Validation of candidate instances with complete, path-qualified error reports.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from .config import ValidatorConfig
from .registry import ShapeRegistry, default_registry
from .result import ROOT_PATH, ErrorReport, ValidationContext, ValidationResult, join_path
from .shape import Field, Shape

logger = logging.getLogger(__name__)

UNKNOWN_VALUE_MESSAGE = "an unknown value was passed to the validate function"

_MISSING = object()


class Validator:
    """Walks a candidate instance against its shape, collecting every violation.

    Evaluation order for each object level:

    1. unrecognized value (input is not an object at all)
    2. fields present in the raw input but not declared by the shape
    3. type check and every constraint of each declared field, recursing
       into nested shapes

    Nothing stops at the first failure: a call either accepts the whole
    instance or rejects it with one report covering every path.
    """

    def __init__(self, config: ValidatorConfig | None = None, registry: ShapeRegistry | None = None):
        """Initialize validator.

        Args:
            config: Validation switches (defaults to ``ValidatorConfig()``)
            registry: Registry used to resolve shapes referenced by name
        """
        self.config = config or ValidatorConfig()
        self.registry = registry if registry is not None else default_registry

    def validate(self, candidate: Any, target: Shape | str, raw: Any = _MISSING) -> ValidationResult:
        """Validate a candidate instance.

        Args:
            candidate: Output of the coercion step
            target: Shape or registered shape name
            raw: The original input, used to detect undeclared fields;
                defaults to the candidate itself

        Returns:
            Accepted result with the whitelisted instance, or a rejected
            result carrying the full error report

        Raises:
            ShapeDefinitionError: If the shape declaration is malformed
        """
        shape = self.registry.resolve(target)
        if raw is _MISSING:
            raw = candidate

        report = ErrorReport()
        context = ValidationContext(property=shape.name, path=ROOT_PATH, shape=shape.name, depth=0)

        if not isinstance(candidate, Mapping):
            if self.config.forbid_unknown_values:
                report.add(ROOT_PATH, UNKNOWN_VALUE_MESSAGE)
            else:
                report.add(ROOT_PATH, f"{shape.name} must be an object")
            cleaned = candidate
        else:
            cleaned = self._validate_object(candidate, raw, shape, context, report)

        if report:
            logger.warning(f"Validation failed: {json.dumps(report.to_dict())}")
            return ValidationResult.failure(raw, report, shape=shape.name, expose_errors=self.config.expose_errors)
        return ValidationResult.success(cleaned, shape=shape.name)

    def _validate_object(
        self,
        candidate: Mapping[str, Any],
        raw: Any,
        shape: Shape,
        context: ValidationContext,
        report: ErrorReport,
    ) -> dict[str, Any]:
        if self.config.forbid_non_whitelisted and isinstance(raw, Mapping):
            for key in raw:
                if key not in shape.fields:
                    report.add(join_path(context.path, key), f"property {key} should not exist")

        cleaned: dict[str, Any] = {} if self.config.whitelist else dict(candidate)

        for name, field_def in shape.fields.items():
            present = name in candidate
            value = candidate.get(name)

            if value is None and not field_def.required:
                if present:
                    cleaned[name] = None
                continue

            field_context = context.child(name, shape.name)
            result = field_def.check(value, field_context)
            report.extend(field_context.path, result.messages)

            if field_def.is_nested and value is not None:
                raw_value = raw.get(name) if isinstance(raw, Mapping) else None
                value = self._validate_nested(value, raw_value, field_def, field_context, report)

            if present:
                cleaned[name] = value

        return cleaned

    def _validate_nested(
        self,
        value: Any,
        raw: Any,
        field_def: Field,
        context: ValidationContext,
        report: ErrorReport,
    ) -> Any:
        depth = context.depth + 1
        if depth > self.config.max_depth:
            report.add(
                context.path,
                f"{context.property} exceeds maximum nesting depth of {self.config.max_depth}",
            )
            return value

        sub_shape = self.registry.resolve(field_def.shape)  # type: ignore[arg-type]

        if not field_def.each:
            if not isinstance(value, Mapping):
                return value  # already reported by the field's type check
            nested = ValidationContext(context.property, context.path, sub_shape.name, depth)
            return self._validate_object(value, raw, sub_shape, nested, report)

        if not isinstance(value, (list, tuple)):
            return value

        raw_items = raw if isinstance(raw, (list, tuple)) and len(raw) == len(value) else value
        cleaned_items = []
        for index, (item, raw_item) in enumerate(zip(value, raw_items)):
            item_path = join_path(context.path, index)
            if not isinstance(item, Mapping):
                report.add(item_path, f"each value in nested property {field_def.name} must be an object")
                cleaned_items.append(item)
                continue
            nested = ValidationContext(str(index), item_path, sub_shape.name, depth)
            cleaned_items.append(self._validate_object(item, raw_item, sub_shape, nested, report))
        return cleaned_items


__all__ = ["UNKNOWN_VALUE_MESSAGE", "Validator"]
