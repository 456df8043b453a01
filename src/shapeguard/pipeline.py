"""The inbound validation operation used by the transport layer.

Example:
    ```python
    from shapeguard import ValidationPipeline, ValidatorConfig

    pipeline = ValidationPipeline(ValidatorConfig.strict())

    result = pipeline.run(request_json, "CreatePurchaseOrder")
    if not result:
        return 400, result.to_response()
    create_purchase_order(result.value)
    ```
"""

from __future__ import annotations

from typing import Any

from .coercer import Coercer
from .config import ValidatorConfig
from .registry import ShapeRegistry, default_registry
from .result import ValidationResult
from .shape import Shape, is_bare_target
from .validator import Validator


class ValidationPipeline:
    """Coercion followed by validation, configured once and reused per request.

    The pipeline holds no per-call state, so one instance can serve
    concurrent requests.
    """

    def __init__(self, config: ValidatorConfig | None = None, registry: ShapeRegistry | None = None):
        self.config = config or ValidatorConfig()
        self.registry = registry if registry is not None else default_registry
        self.coercer = Coercer(self.registry)
        self.validator = Validator(self.config, self.registry)

    def run(self, value: Any, target: Shape | str | Any) -> ValidationResult:
        """Coerce and validate one payload.

        Args:
            value: Structurally decoded request payload
            target: Shape, registered shape name, or bare type marker

        Returns:
            ValidationResult; bare targets are accepted unchanged without checks

        Raises:
            ShapeDefinitionError: If the shape declaration is malformed
        """
        if is_bare_target(target):
            return ValidationResult.success(value)

        candidate = self.coercer.coerce(
            value,
            target,
            implicit_conversion=self.config.implicit_conversion,
            max_depth=self.config.max_depth,
        )
        return self.validator.validate(candidate, target, raw=value)

    def transform(self, value: Any, target: Shape | str | Any) -> Any:
        """Coerce and validate, raising on rejection.

        Returns:
            The cleaned instance

        Raises:
            RequestValidationError: Single aggregated failure carrying the full report
            ShapeDefinitionError: If the shape declaration is malformed
        """
        return self.run(value, target).unwrap()


def validate(
    raw_input: Any,
    shape: Shape | str | Any,
    config: ValidatorConfig | None = None,
    registry: ShapeRegistry | None = None,
) -> ValidationResult:
    """Validate a raw payload against a shape.

    Args:
        raw_input: Structurally decoded input (e.g. parsed JSON)
        shape: Shape, registered shape name, or bare type marker
        config: Validation switches (defaults to ``ValidatorConfig()``)
        registry: Registry for shapes referenced by name

    Returns:
        ValidationResult holding the cleaned instance or the error report
    """
    return ValidationPipeline(config, registry).run(raw_input, shape)


__all__ = ["ValidationPipeline", "validate"]
