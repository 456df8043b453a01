"""Validator configuration.

The three switches mirror the behavior a request pipeline needs:

- ``whitelist``: strip fields the shape does not declare
- ``forbid_non_whitelisted``: reject payloads carrying undeclared fields
- ``forbid_unknown_values``: reject payloads that are not objects at all

Configuration can be built in code, from a dictionary, from a YAML/JSON
file (with ``${VAR}`` / ``${VAR:default}`` environment substitution), or
from ``SHAPEGUARD_*`` environment variables.

Example:
    ```yaml
    # validation.yaml
    whitelist: true
    forbid_non_whitelisted: ${STRICT_PAYLOADS:true}
    max_depth: 16
    ```

    ```python
    config = ValidatorConfig.from_file("validation.yaml")
    ```
"""

from __future__ import annotations

import json
import os
import re
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigurationError

ENV_PREFIX = "SHAPEGUARD_"


def max_depth_ceiling() -> int:
    """Largest max_depth the recursive coercion and validation walks can reach safely."""
    return sys.getrecursionlimit() // 5


class VariableSubstitution:
    """Handles environment variable substitution in configuration values.

    Supports patterns:
    - ${VAR} - Replace with environment variable VAR, error if not found
    - ${VAR:default} - Replace with VAR or use default if not found
    - ${VAR:-default} - Same as above (bash-style)
    """

    VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::(-)?([^}]*))?\}')

    def substitute(self, value: Any) -> Any:
        """Recursively substitute environment variables in a value.

        Raises:
            ConfigurationError: If a required environment variable is not found
        """
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, dict):
            return {k: self.substitute(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self.substitute(v) for v in value]
        return value

    def _substitute_string(self, text: str) -> Union[str, int, float, bool]:
        # A string that is exactly one reference may become a non-string
        match = self.VAR_PATTERN.fullmatch(text)
        if match:
            return convert_scalar(self._lookup(match))

        return self.VAR_PATTERN.sub(self._lookup, text)

    def _lookup(self, match: re.Match) -> str:
        var_name = match.group(1)
        has_default = match.group(2) is not None or match.group(3) is not None
        if var_name in os.environ:
            return os.environ[var_name]
        if has_default:
            return match.group(3) or ""
        raise ConfigurationError(
            f"Environment variable '{var_name}' not found",
            context={"variable": var_name},
        )


def convert_scalar(value: str) -> Union[str, int, float, bool]:
    """Convert an environment string to bool, int, or float where it looks like one."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class ValidatorConfig:
    """Options controlling one validation pipeline.

    Attributes:
        whitelist: Strip undeclared fields from the returned instance
        forbid_non_whitelisted: Undeclared fields in the raw input are violations
        forbid_unknown_values: Non-object input is rejected with a single
            unrecognized-value violation
        implicit_conversion: Convert scalar strings/numbers toward declared field types
        max_depth: Maximum nesting depth; deeper values are rejected
        expose_errors: Include field-level messages in rejection payloads
    """

    whitelist: bool = True
    forbid_non_whitelisted: bool = False
    forbid_unknown_values: bool = True
    implicit_conversion: bool = False
    max_depth: int = 32
    expose_errors: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            expected = int if f.name == "max_depth" else bool
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise ConfigurationError(
                    f"Config option '{f.name}' must be {expected.__name__}, got {type(value).__name__}",
                    context={"option": f.name, "value": value},
                )
        if self.max_depth < 1:
            raise ConfigurationError(
                f"max_depth must be at least 1, got {self.max_depth}",
                context={"option": "max_depth", "value": self.max_depth},
            )
        ceiling = max_depth_ceiling()
        if self.max_depth > ceiling:
            raise ConfigurationError(
                f"max_depth must be at most {ceiling}, got {self.max_depth}",
                context={"option": "max_depth", "value": self.max_depth, "ceiling": ceiling},
            )

    @classmethod
    def strict(cls, **overrides: Any) -> ValidatorConfig:
        """Whitelist, forbid undeclared fields, and forbid unknown values."""
        options: Dict[str, Any] = {
            "whitelist": True,
            "forbid_non_whitelisted": True,
            "forbid_unknown_values": True,
        }
        options.update(overrides)
        return cls.from_dict(options)

    @classmethod
    def lenient(cls, **overrides: Any) -> ValidatorConfig:
        """Whitelist silently; accept whatever else the shape allows."""
        options: Dict[str, Any] = {
            "whitelist": True,
            "forbid_non_whitelisted": False,
            "forbid_unknown_values": False,
        }
        options.update(overrides)
        return cls.from_dict(options)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ValidatorConfig:
        """Create a config from a dictionary.

        Raises:
            ConfigurationError: On unknown options or wrongly typed values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown validator options: {', '.join(unknown)}",
                context={"unknown": unknown, "known": sorted(known)},
            )
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path], section: str | None = None) -> ValidatorConfig:
        """Load a config from a YAML or JSON file.

        Args:
            path: File path (``.yaml``/``.yml`` or ``.json``)
            section: Optional top-level key holding the options

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}", context={"path": str(path)})

        with open(path) as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported config file format: {path.suffix}",
                    context={"path": str(path)},
                )

        if section is not None and isinstance(data, dict):
            data = data.get(section, {})
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config in {path} must be a mapping",
                context={"path": str(path), "section": section},
            )
        return cls.from_dict(VariableSubstitution().substitute(data))

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Dict[str, str] | None = None) -> ValidatorConfig:
        """Build a config from environment variables.

        ``SHAPEGUARD_FORBID_NON_WHITELISTED=true`` sets
        ``forbid_non_whitelisted``; options not present keep their defaults.
        """
        environ = os.environ if environ is None else environ
        options: Dict[str, Any] = {}
        for f in fields(cls):
            key = f"{prefix}{f.name.upper()}"
            if key in environ:
                options[f.name] = convert_scalar(environ[key])
        return cls.from_dict(options)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ENV_PREFIX", "ValidatorConfig", "VariableSubstitution", "convert_scalar", "max_depth_ceiling"]
