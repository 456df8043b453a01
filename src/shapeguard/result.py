"""Validation result types with consistent, predictable behavior.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import RequestValidationError

ROOT_PATH = "$"
FAILURE_MESSAGE = "Validation failed"


def join_path(parent: str, child: str | int) -> str:
    """Compose a dot-joined field path."""
    if not parent or parent == ROOT_PATH:
        return str(child)
    return f"{parent}.{child}"


class ErrorReport(Mapping[str, list[str]]):
    """Ordered mapping of field path to the violation messages for that path.

    Every failing constraint on a field surfaces here, so a field that is
    both too short and wrongly formatted has a single entry with two
    messages.
    """

    def __init__(self, errors: Mapping[str, list[str]] | None = None):
        self._errors: dict[str, list[str]] = {}
        if errors:
            for path, messages in errors.items():
                self.extend(path, messages)

    def __getitem__(self, path: str) -> list[str]:
        return self._errors[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __repr__(self) -> str:
        return f"ErrorReport({self._errors!r})"

    @property
    def paths(self) -> list[str]:
        """Field paths in the order they were first reported."""
        return list(self._errors)

    def add(self, path: str, message: str) -> ErrorReport:
        """Record one violation (fluent API).

        Args:
            path: Dot-joined field path
            message: Violation message

        Returns:
            Self for chaining
        """
        self._errors.setdefault(path, []).append(message)
        return self

    def extend(self, path: str, messages: list[str]) -> ErrorReport:
        """Record several violations for the same path."""
        if messages:
            self._errors.setdefault(path, []).extend(messages)
        return self

    def merge(self, other: ErrorReport, prefix: str = "") -> ErrorReport:
        """Fold a child report into this one.

        Args:
            other: Report produced for a nested value
            prefix: Path of the nested value; child paths are re-keyed
                under ``<prefix>.<child>``

        Returns:
            Self for chaining
        """
        for path, messages in other.items():
            if path == ROOT_PATH:
                key = prefix or ROOT_PATH
            else:
                key = join_path(prefix, path) if prefix else path
            self.extend(key, messages)
        return self

    def message_count(self) -> int:
        """Total number of violation messages across all paths."""
        return sum(len(messages) for messages in self._errors.values())

    def to_dict(self) -> dict[str, list[str]]:
        """Plain-dict copy suitable for JSON serialization."""
        return {path: list(messages) for path, messages in self._errors.items()}


@dataclass
class ValidationResult:
    """Unified result object for all validation operations.

    Either accepted (``valid`` with the cleaned value) or rejected (with the
    complete error report). Callers branch on it explicitly instead of
    catching exceptions.
    """

    valid: bool
    value: Any  # The cleaned instance, or the raw input when rejected
    errors: ErrorReport = field(default_factory=ErrorReport)
    warnings: list[str] = field(default_factory=list)
    shape: str | None = None
    expose_errors: bool = True

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    @property
    def messages(self) -> list[str]:
        """All violation messages, flattened in report order."""
        return [message for messages in self.errors.values() for message in messages]

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine results for composite validation.

        Args:
            other: Another ValidationResult to merge with this one

        Returns:
            New ValidationResult with combined state
        """
        errors = ErrorReport(self.errors).merge(other.errors)
        return ValidationResult(
            valid=self.valid and other.valid,
            value=other.value if other.valid else self.value,
            errors=errors,
            warnings=self.warnings + other.warnings,
            shape=self.shape,
            expose_errors=self.expose_errors and other.expose_errors,
        )

    def add_error(self, message: str, path: str = ROOT_PATH) -> ValidationResult:
        """Add an error and mark as invalid (fluent API)."""
        self.errors.add(path, message)
        self.valid = False
        return self

    def add_warning(self, warning: str) -> ValidationResult:
        """Add a warning without affecting validity (fluent API)."""
        self.warnings.append(warning)
        return self

    def to_response(self, expose_errors: bool | None = None) -> dict[str, Any]:
        """Build the outbound rejection payload for the transport layer.

        Args:
            expose_errors: If False, the field-level messages are withheld
                (production deployments that hide validation details);
                defaults to the setting the result was produced with

        Returns:
            ``{"message": "Validation failed", "errors": {...}}``

        Raises:
            ValueError: If called on an accepted result
        """
        if self.valid:
            raise ValueError("Accepted results have no rejection payload")
        if expose_errors is None:
            expose_errors = self.expose_errors
        return {
            "message": FAILURE_MESSAGE,
            "errors": self.errors.to_dict() if expose_errors else {},
        }

    def unwrap(self) -> Any:
        """Return the accepted value or raise the aggregated rejection.

        Raises:
            RequestValidationError: If the result is rejected
        """
        if not self.valid:
            raise RequestValidationError(self.errors, shape=self.shape, expose_errors=self.expose_errors)
        return self.value

    @classmethod
    def success(
        cls,
        value: Any,
        warnings: list[str] | None = None,
        shape: str | None = None,
    ) -> ValidationResult:
        """Create a successful validation result."""
        return cls(valid=True, value=value, errors=ErrorReport(), warnings=warnings or [], shape=shape)

    @classmethod
    def failure(
        cls,
        value: Any,
        errors: ErrorReport | Mapping[str, list[str]] | list[str],
        warnings: list[str] | None = None,
        shape: str | None = None,
        expose_errors: bool = True,
    ) -> ValidationResult:
        """Create a failed validation result.

        Args:
            value: The value that failed validation
            errors: Error report, mapping, or bare messages (keyed at the root)
            warnings: Optional list of warnings
            shape: Name of the shape that was validated against
            expose_errors: Default for whether ``to_response`` includes field messages

        Returns:
            Failed ValidationResult
        """
        if isinstance(errors, list):
            report = ErrorReport().extend(ROOT_PATH, errors)
        elif isinstance(errors, ErrorReport):
            report = errors
        else:
            report = ErrorReport(errors)
        return cls(
            valid=False,
            value=value,
            errors=report,
            warnings=warnings or [],
            shape=shape,
            expose_errors=expose_errors,
        )


@dataclass
class ValidationContext:
    """Where a constraint is being evaluated.

    Constraints render their messages against ``property`` (the field
    name), mirroring messages such as ``title should not be empty``.
    """

    property: str = "value"
    path: str = ROOT_PATH
    shape: str | None = None
    depth: int = 0

    def child(self, name: str | int, shape: str | None = None) -> ValidationContext:
        """Context for a value nested under this one."""
        return ValidationContext(
            property=str(name),
            path=join_path(self.path, name),
            shape=shape or self.shape,
            depth=self.depth,
        )
