"""Factory for building shapes from declarative configuration."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import yaml  # type: ignore[import-untyped]

from .constraints import (
    All,
    AnyOf,
    Constraint,
    Enum,
    IsDateString,
    IsEmail,
    IsUUID,
    Length,
    NotEmpty,
    Pattern,
    Range,
    Required,
)
from .exceptions import ShapeDefinitionError
from .registry import ShapeRegistry, default_registry
from .shape import Shape

logger = logging.getLogger(__name__)


class ShapeFactory:
    """Factory for creating shapes from configuration.

    Configuration Options:
        name (str): Shape name
        description (str): Optional shape description
        fields (list): List of field definitions

    Field Definition Options:
        name (str): Field name
        type (str): Field type (STRING, INTEGER, NUMBER, BOOLEAN, ARRAY, OBJECT, ANY, SHAPE)
        required (bool): Whether field is required (default: False)
        default (any): Default value if field is missing
        shape (str): Referenced shape name (SHAPE fields)
        each (bool): SHAPE field holds a list of instances
        description (str): Field description
        constraints (list): List of constraint definitions

    Example Configuration:
        shapes:
          - name: CreateRequestItem
            fields:
              - name: description
                type: STRING
                required: true
                constraints:
                  - type: not_empty
                  - type: length
                    max: 500
              - name: quantity
                type: NUMBER
                required: true
                constraints:
                  - type: range
                    min: 1
          - name: CreateRequest
            fields:
              - name: items
                type: SHAPE
                shape: CreateRequestItem
                each: true
                required: true
    """

    def create(self, **config: Any) -> Shape:
        """Create a Shape instance from configuration.

        Raises:
            ShapeDefinitionError: If the configuration describes an invalid shape
        """
        name = config.get("name")
        if not name:
            raise ShapeDefinitionError("Shape configuration missing 'name'", context={"config": config})

        logger.info(f"Creating shape: {name}")

        shape = Shape(name, config.get("description"))
        for field_config in config.get("fields", []):
            self._add_field_to_shape(shape, field_config)

        return shape

    def load(self, path: Union[str, Path], registry: ShapeRegistry | None = None) -> List[Shape]:
        """Create and register every shape declared in a YAML or JSON file.

        Args:
            path: File holding a top-level ``shapes`` list
            registry: Registry to populate (defaults to the module default)

        Returns:
            Created shapes in file order
        """
        registry = registry if registry is not None else default_registry
        path = Path(path)
        if not path.exists():
            raise ShapeDefinitionError(f"Shape file not found: {path}", context={"path": str(path)})

        with open(path) as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        shape_configs = data.get("shapes") if isinstance(data, dict) else None
        if not isinstance(shape_configs, list):
            raise ShapeDefinitionError(
                f"Expected a 'shapes' list in {path}",
                context={"path": str(path)},
            )

        shapes = [self.create(**shape_config) for shape_config in shape_configs]

        # Nothing is registered unless every name is free
        names = [shape.name for shape in shapes]
        clashes = sorted({name for name in names if registry.has(name) or names.count(name) > 1})
        if clashes:
            raise ShapeDefinitionError(
                f"Shapes already registered or declared twice in {path}: {', '.join(clashes)}",
                context={"path": str(path), "shapes": clashes},
            )

        for shape in shapes:
            registry.register_shape(shape)
        return shapes

    def _add_field_to_shape(self, shape: Shape, field_config: Dict[str, Any]) -> None:
        field_name = field_config.get("name")
        if not field_name:
            raise ShapeDefinitionError(
                f"Field configuration in shape '{shape.name}' missing 'name'",
                context={"shape": shape.name, "field_config": field_config},
            )

        shape.field(
            name=field_name,
            field_type=field_config.get("type", "STRING"),
            required=field_config.get("required", False),
            default=field_config.get("default"),
            constraints=self._build_constraints(field_config.get("constraints", [])),
            shape=field_config.get("shape"),
            each=field_config.get("each", False),
            description=field_config.get("description"),
        )

    def _build_constraints(self, constraint_configs: List[Dict[str, Any]]) -> List[Constraint]:
        """Build constraint objects from configuration.

        Raises:
            ShapeDefinitionError: On unknown constraint types
        """
        constraints: List[Constraint] = []

        for config in constraint_configs:
            constraint_type = str(config.get("type", "")).lower()
            builder = self._builders.get(constraint_type)
            if builder is None:
                raise ShapeDefinitionError(
                    f"Unknown constraint type: {constraint_type}",
                    context={"constraint": config, "known": sorted(self._builders)},
                )
            constraints.append(builder(self, config))

        return constraints

    def _build_all(self, config: Dict[str, Any]) -> Constraint:
        return All(self._build_constraints(config.get("constraints", [])), message=config.get("message"))

    def _build_any(self, config: Dict[str, Any]) -> Constraint:
        return AnyOf(self._build_constraints(config.get("constraints", [])), message=config.get("message"))

    def _build_pattern(self, config: Dict[str, Any]) -> Constraint:
        pattern = config.get("pattern")
        if not pattern:
            raise ShapeDefinitionError("Pattern constraint requires 'pattern'", context={"constraint": config})
        return Pattern(pattern, message=config.get("message"))

    _builders: Dict[str, Callable[["ShapeFactory", Dict[str, Any]], Constraint]] = {
        "required": lambda self, c: Required(message=c.get("message")),
        "not_empty": lambda self, c: NotEmpty(message=c.get("message")),
        "range": lambda self, c: Range(
            min=c.get("min"),
            max=c.get("max"),
            min_exclusive=c.get("min_exclusive", False),
            max_exclusive=c.get("max_exclusive", False),
            message=c.get("message"),
        ),
        "length": lambda self, c: Length(min=c.get("min"), max=c.get("max"), message=c.get("message")),
        "pattern": lambda self, c: self._build_pattern(c),
        "enum": lambda self, c: Enum(
            c.get("values", []),
            case_sensitive=c.get("case_sensitive", True),
            message=c.get("message"),
        ),
        "uuid": lambda self, c: IsUUID(message=c.get("message")),
        "email": lambda self, c: IsEmail(message=c.get("message")),
        "date_string": lambda self, c: IsDateString(message=c.get("message")),
        "all": lambda self, c: self._build_all(c),
        "any": lambda self, c: self._build_any(c),
    }


shape_factory = ShapeFactory()


__all__ = ["ShapeFactory", "shape_factory"]
