"""Exception hierarchy for shapeguard.

Two families of failure exist and they must never be confused:

- Validation failures are recoverable. They are normally returned as a
  ``ValidationResult``; callers that prefer exceptions get a single
  ``RequestValidationError`` carrying the whole error report.
- Shape definition failures are programming errors (a shape referencing an
  unknown sub-shape, a constraint with impossible bounds). They propagate as
  ``ShapeDefinitionError`` and never appear inside an error report.

Example:
    ```python
    from shapeguard.exceptions import RequestValidationError, ShapeDefinitionError

    try:
        order = pipeline.transform(payload, "CreatePurchaseOrder")
    except RequestValidationError as e:
        return 400, e.to_response()
    except ShapeDefinitionError:
        logger.exception("Broken shape declaration")
        raise
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from shapeguard.result import ErrorReport


class ShapeguardError(Exception):
    """Base exception for all shapeguard errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (shape names, paths, etc.)
        details: Alternative to context (both are supported)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        # Details takes precedence if both are provided
        self.context = details or context or {}
        self.details = self.context


class ShapeDefinitionError(ShapeguardError):
    """Raised when a shape declaration itself is malformed.

    Not recoverable at the validation layer; transport layers should map it
    to a server-side (5xx) fault.

    Example:
        ```python
        raise ShapeDefinitionError(
            "Field 'items' of type SHAPE needs a shape reference",
            context={"shape": "CreateRequest", "field": "items"}
        )
        ```
    """

    pass


class ShapeNotFoundError(ShapeDefinitionError):
    """Raised when a shape reference cannot be resolved."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        super().__init__(
            f"Shape '{name}' is not registered",
            context={"shape": name, "available_shapes": available or []},
        )


class ConfigurationError(ShapeguardError):
    """Raised when validator configuration is invalid or missing."""

    pass


class RequestValidationError(ShapeguardError):
    """The single aggregated rejection of one validation call.

    Carries the full error report so the transport layer can translate it
    into a client-facing response in one round trip.
    """

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: ErrorReport, shape: str | None = None, expose_errors: bool = True):
        self.errors = errors
        self.shape = shape
        self.expose_errors = expose_errors
        super().__init__(
            self.message,
            context={"shape": shape, "paths": errors.paths},
        )

    def to_response(self, expose_errors: bool | None = None) -> dict[str, Any]:
        """Build the outbound rejection payload.

        Args:
            expose_errors: If False, the field-level messages are withheld;
                defaults to the setting the error was raised with

        Returns:
            ``{"message": "Validation failed", "errors": {...}}``
        """
        if expose_errors is None:
            expose_errors = self.expose_errors
        return {
            "message": self.message,
            "errors": self.errors.to_dict() if expose_errors else {},
        }


__all__ = [
    "ShapeguardError",
    "ShapeDefinitionError",
    "ShapeNotFoundError",
    "ConfigurationError",
    "RequestValidationError",
]
