"""Constraint implementations with consistent, composable API.
"""

from __future__ import annotations

import enum
import math
import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from numbers import Number
from re import Pattern as RegexPattern
from typing import Any as AnyType, TYPE_CHECKING

from .exceptions import ShapeDefinitionError
from .result import ValidationContext, ValidationResult

if TYPE_CHECKING:
    from collections.abc import Callable


_DEFAULT_CONTEXT = ValidationContext()


class Constraint(ABC):
    """Base class for all constraints with composable operators.

    Subclasses declare a ``key`` (used in shape configuration and
    ``to_dict``) and a ``default_message`` template. Templates are rendered
    with ``{property}`` plus the constraint's own parameters, and any
    constraint accepts a ``message`` override using the same placeholders.
    """

    key = "constraint"
    default_message = "{property} is invalid"

    def __init__(self, message: str | None = None):
        self.message = message

    @abstractmethod
    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Validate a value against this constraint.

        Args:
            value: Value to validate
            context: Where the value sits; supplies the property name for messages

        Returns:
            ValidationResult with validation outcome
        """
        pass

    def params(self) -> dict[str, AnyType]:
        """Parameters available to message templates."""
        return {}

    def fail(
        self,
        value: AnyType,
        context: ValidationContext | None,
        template: str | None = None,
        **params: AnyType,
    ) -> ValidationResult:
        """Build a failure carrying this constraint's rendered message."""
        context = context or _DEFAULT_CONTEXT
        template = self.message or template or self.default_message
        values = {**self.params(), **params, "property": context.property}
        return ValidationResult.failure(value, [template.format(**values)])

    def __and__(self, other: Constraint) -> All:
        """Combine with AND: both constraints must pass."""
        if isinstance(self, All):
            return All(self.constraints + [other])
        elif isinstance(other, All):
            return All([self] + other.constraints)
        return All([self, other])

    def __or__(self, other: Constraint) -> AnyOf:
        """Combine with OR: at least one constraint must pass."""
        if isinstance(self, AnyOf):
            return AnyOf(self.constraints + [other])
        elif isinstance(other, AnyOf):
            return AnyOf([self] + other.constraints)
        return AnyOf([self, other])

    def __invert__(self) -> Not:
        """Negate this constraint."""
        return Not(self)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.params().items())
        return f"{type(self).__name__}({args})"


class All(Constraint):
    """All constraints must pass (AND logic)."""

    key = "all"

    def __init__(self, constraints: list[Constraint], message: str | None = None):
        super().__init__(message)
        self.constraints = constraints

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check all constraints, collecting every failure."""
        result = ValidationResult.success(value)

        for constraint in self.constraints:
            check_result = constraint.check(value, context)
            if not check_result.valid:
                result = result.merge(check_result)

        if not result.valid and self.message:
            return self.fail(value, context)
        return result


class AnyOf(Constraint):
    """At least one constraint must pass (OR logic)."""

    key = "any"
    default_message = "{property} must satisfy at least one of: {reasons}"

    def __init__(self, constraints: list[Constraint], message: str | None = None):
        super().__init__(message)
        self.constraints = constraints

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if any constraint passes."""
        all_errors = []

        for constraint in self.constraints:
            check_result = constraint.check(value, context)
            if check_result.valid:
                return check_result
            all_errors.extend(check_result.messages)

        return self.fail(value, context, reasons="; ".join(all_errors))


class Not(Constraint):
    """Negates a constraint."""

    key = "not"
    default_message = "{property} should not satisfy {constraint}"

    def __init__(self, constraint: Constraint, message: str | None = None):
        super().__init__(message)
        self.constraint = constraint

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if constraint fails (negation)."""
        result = self.constraint.check(value, context)
        if result.valid:
            return self.fail(value, context, constraint=type(self.constraint).__name__)
        return ValidationResult.success(value)


class Required(Constraint):
    """Value must be present and non-null."""

    key = "required"
    default_message = "{property} should not be null or undefined"

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        if value is None:
            return self.fail(value, context)
        return ValidationResult.success(value)


class NotEmpty(Constraint):
    """Value must not be null, an empty string, or an empty collection."""

    key = "not_empty"
    default_message = "{property} should not be empty"

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        if value is None:
            return self.fail(value, context)
        if isinstance(value, (str, list, dict, set, tuple)) and len(value) == 0:
            return self.fail(value, context)
        return ValidationResult.success(value)


class Range(Constraint):
    """Numeric value must be in specified range."""

    key = "range"

    def __init__(
        self,
        min: Number | None = None,
        max: Number | None = None,
        min_exclusive: bool = False,
        max_exclusive: bool = False,
        message: str | None = None,
    ):
        """Initialize range constraint.

        Args:
            min: Minimum value (inclusive by default)
            max: Maximum value (inclusive by default)
            min_exclusive: If True, minimum is exclusive (value must be > min)
            max_exclusive: If True, maximum is exclusive (value must be < max)
            message: Optional message override
        """
        super().__init__(message)
        if min is not None and max is not None and min > max:  # type: ignore[operator]
            raise ShapeDefinitionError(
                f"min ({min}) cannot be greater than max ({max})",
                context={"constraint": self.key},
            )
        self.min = min
        self.max = max
        self.min_exclusive = min_exclusive
        self.max_exclusive = max_exclusive

    def params(self) -> dict[str, AnyType]:
        return {"min": self.min, "max": self.max}

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if value is in range."""
        if value is None:
            return ValidationResult.success(value)  # use Required to enforce presence

        if isinstance(value, bool) or not isinstance(value, Number):
            return self.fail(value, context, "{property} must be a number to be range-checked")

        if isinstance(value, float) and math.isnan(value):
            return self.fail(value, context, "{property} must not be NaN")

        result = ValidationResult.success(value)
        if self.min is not None:
            if self.min_exclusive:
                if value <= self.min:  # type: ignore[operator]
                    result = result.merge(self.fail(value, context, "{property} must be greater than {min}"))
            elif value < self.min:  # type: ignore[operator]
                result = result.merge(self.fail(value, context, "{property} must not be less than {min}"))

        if self.max is not None:
            if self.max_exclusive:
                if value >= self.max:  # type: ignore[operator]
                    result = result.merge(self.fail(value, context, "{property} must be less than {max}"))
            elif value > self.max:  # type: ignore[operator]
                result = result.merge(self.fail(value, context, "{property} must not be greater than {max}"))

        return result


class Length(Constraint):
    """String/collection length must be in specified range."""

    key = "length"

    def __init__(self, min: int | None = None, max: int | None = None, message: str | None = None):
        """Initialize length constraint.

        Args:
            min: Minimum length (inclusive)
            max: Maximum length (inclusive)
            message: Optional message override
        """
        super().__init__(message)
        if min is not None and min < 0:
            raise ShapeDefinitionError(f"min length cannot be negative: {min}")
        if max is not None and max < 0:
            raise ShapeDefinitionError(f"max length cannot be negative: {max}")
        if min is not None and max is not None and min > max:
            raise ShapeDefinitionError(f"min length ({min}) cannot be greater than max ({max})")
        self.min = min
        self.max = max

    def params(self) -> dict[str, AnyType]:
        return {"min": self.min, "max": self.max}

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if value length is in range."""
        if value is None:
            return ValidationResult.success(value)

        if not isinstance(value, (str, list, tuple, dict, set)):
            return self.fail(value, context, "{property} must be a string or collection to be length-checked")

        unit = "characters" if isinstance(value, str) else "elements"
        length = len(value)
        result = ValidationResult.success(value)

        if self.min is not None and length < self.min:
            result = result.merge(
                self.fail(value, context, "{property} must be longer than or equal to {min} {unit}", unit=unit)
            )
        if self.max is not None and length > self.max:
            result = result.merge(
                self.fail(value, context, "{property} must be shorter than or equal to {max} {unit}", unit=unit)
            )

        return result


class Pattern(Constraint):
    """String value must match regex pattern."""

    key = "pattern"
    default_message = "{property} must match {pattern} regular expression"

    def __init__(self, pattern: str | RegexPattern, message: str | None = None):
        """Initialize pattern constraint.

        Args:
            pattern: Regex pattern (string or compiled pattern)
            message: Optional message override
        """
        super().__init__(message)
        if isinstance(pattern, str):
            try:
                self.regex = re.compile(pattern)
            except re.error as e:
                raise ShapeDefinitionError(
                    f"Invalid pattern '{pattern}': {e}", context={"constraint": self.key}
                ) from e
        else:
            self.regex = pattern
        self.pattern_str = pattern if isinstance(pattern, str) else pattern.pattern

    def params(self) -> dict[str, AnyType]:
        return {"pattern": self.pattern_str}

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if value matches pattern."""
        if value is None:
            return ValidationResult.success(value)

        if not isinstance(value, str) or not self.regex.search(value):
            return self.fail(value, context)

        return ValidationResult.success(value)


class IsUUID(Pattern):
    """String must be a canonical UUID."""

    key = "uuid"
    default_message = "{property} must be a UUID"

    def __init__(self, message: str | None = None):
        super().__init__(
            r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
            message,
        )

    def params(self) -> dict[str, AnyType]:
        return {}


class IsEmail(Pattern):
    """String must look like an email address."""

    key = "email"
    default_message = "{property} must be an email"

    def __init__(self, message: str | None = None):
        super().__init__(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", message)

    def params(self) -> dict[str, AnyType]:
        return {}


class IsDateString(Constraint):
    """String must be an ISO-8601 date or date-time."""

    key = "date_string"
    default_message = "{property} must be a valid ISO 8601 date string"

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        if value is None:
            return ValidationResult.success(value)

        if not isinstance(value, str):
            return self.fail(value, context)

        text = value.strip()
        try:
            if "T" in text or " " in text:
                datetime.fromisoformat(text.replace("Z", "+00:00"))
            else:
                date.fromisoformat(text)
        except ValueError:
            return self.fail(value, context)

        return ValidationResult.success(value)


class Enum(Constraint):
    """Value must be in allowed set."""

    key = "enum"
    default_message = "{property} must be one of the following values: {allowed}"

    def __init__(
        self,
        values: list[AnyType] | type[enum.Enum],
        case_sensitive: bool = True,
        message: str | None = None,
    ):
        """Initialize enum constraint.

        Args:
            values: List of allowed values, or an Enum class whose member values are allowed
            case_sensitive: If False, string comparisons ignore case
            message: Optional message override
        """
        super().__init__(message)
        if isinstance(values, type) and issubclass(values, enum.Enum):
            values = [member.value for member in values]
        if not values:
            raise ShapeDefinitionError("Enum constraint requires at least one allowed value")
        self.values = list(values)
        self.case_sensitive = case_sensitive
        self.allowed_str = ", ".join(str(v) for v in self.values)

        if case_sensitive:
            self.allowed = list(self.values)
        else:
            self.allowed = [v.lower() if isinstance(v, str) else v for v in self.values]

    def params(self) -> dict[str, AnyType]:
        return {"allowed": self.allowed_str}

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check if value is in allowed set."""
        if value is None:
            return ValidationResult.success(value)

        if isinstance(value, enum.Enum):
            value = value.value
        check_value = value if self.case_sensitive or not isinstance(value, str) else value.lower()
        if check_value not in self.allowed:
            return self.fail(value, context)

        return ValidationResult.success(value)


class Custom(Constraint):
    """Custom constraint using a callable."""

    key = "custom"
    default_message = "{property} failed custom validation"

    def __init__(
        self,
        validator: Callable[[AnyType], bool | ValidationResult],
        message: str | None = None,
    ):
        """Initialize custom constraint.

        Args:
            validator: Callable that returns bool or ValidationResult
            message: Error message if validation fails
        """
        super().__init__(message)
        self.validator = validator

    def check(self, value: AnyType, context: ValidationContext | None = None) -> ValidationResult:
        """Check using custom validator.

        ``TypeError`` and ``ValueError`` raised by the callable count as a
        failed check; anything else propagates.
        """
        try:
            result = self.validator(value)
        except (TypeError, ValueError) as e:
            return self.fail(value, context, "{property} failed custom validation: {reason}", reason=e)

        if isinstance(result, ValidationResult):
            return result
        if result:
            return ValidationResult.success(value)
        return self.fail(value, context)


__all__ = [
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
]
