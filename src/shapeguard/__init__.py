"""Request validation and normalization for procurement API payloads.

Given an untyped payload and a declared shape, shapeguard produces either a
clean, whitelisted instance or a complete, path-qualified error report:

- Explicit shape declarations with a fluent API
- Structural coercion that keeps only declared fields
- Validation that collects every violation at every depth
- An explicit result type instead of exception-driven control flow
"""

from .coercer import Coercer
from .config import ValidatorConfig
from .constraints import (
    All,
    AnyOf,
    Constraint,
    Custom,
    Enum,
    IsDateString,
    IsEmail,
    IsUUID,
    Length,
    Not,
    NotEmpty,
    Pattern,
    Range,
    Required,
)
from .exceptions import (
    ConfigurationError,
    RequestValidationError,
    ShapeDefinitionError,
    ShapeguardError,
    ShapeNotFoundError,
)
from .factory import ShapeFactory, shape_factory
from .pipeline import ValidationPipeline, validate
from .registry import Registry, ShapeRegistry, default_registry
from .result import ROOT_PATH, ErrorReport, ValidationContext, ValidationResult
from .shape import Field, FieldType, Shape, is_bare_target
from .validator import UNKNOWN_VALUE_MESSAGE, Validator

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "validate",
    "ValidationPipeline",
    "Coercer",
    "Validator",
    "ValidatorConfig",
    # Result types
    "ValidationResult",
    "ValidationContext",
    "ErrorReport",
    "ROOT_PATH",
    "UNKNOWN_VALUE_MESSAGE",
    # Shapes
    "Shape",
    "Field",
    "FieldType",
    "is_bare_target",
    "Registry",
    "ShapeRegistry",
    "default_registry",
    "ShapeFactory",
    "shape_factory",
    # Constraints
    "Constraint",
    "All",
    "AnyOf",
    "Not",
    "Required",
    "NotEmpty",
    "Range",
    "Length",
    "Pattern",
    "IsUUID",
    "IsEmail",
    "IsDateString",
    "Enum",
    "Custom",
    # Exceptions
    "ShapeguardError",
    "ShapeDefinitionError",
    "ShapeNotFoundError",
    "ConfigurationError",
    "RequestValidationError",
]
