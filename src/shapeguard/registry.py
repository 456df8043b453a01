"""Registry of named shapes.

Shapes may reference each other by name, which is how mutually
referential declarations are expressed. The registry is the static table
those names are resolved against at validation time.

Example:
    ```python
    from shapeguard.registry import ShapeRegistry

    registry = ShapeRegistry()
    registry.register_shape(address_shape)
    registry.resolve("Address")
    ```
"""

import threading
from typing import Dict, Generic, List, TypeVar

from shapeguard.exceptions import ShapeDefinitionError, ShapeNotFoundError
from shapeguard.shape import Shape

T = TypeVar("T")


class Registry(Generic[T]):
    """Thread-safe registry for managing named items.

    Attributes:
        name: Name of the registry (for logging/debugging)
    """

    def __init__(self, name: str):
        self._name = name
        self._items: Dict[str, T] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str, item: T, allow_overwrite: bool = False) -> None:
        """Register an item by key.

        Args:
            key: Unique identifier for the item
            item: Item to register
            allow_overwrite: Whether to allow overwriting existing items

        Raises:
            ShapeDefinitionError: If item already exists and allow_overwrite is False
        """
        with self._lock:
            if not allow_overwrite and key in self._items:
                raise ShapeDefinitionError(
                    f"Item '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = item

    def unregister(self, key: str) -> T:
        """Unregister and return an item by key."""
        with self._lock:
            if key not in self._items:
                raise ShapeNotFoundError(key, list(self._items))
            return self._items.pop(key)

    def get(self, key: str) -> T:
        """Get an item by key.

        Raises:
            ShapeNotFoundError: If item not found
        """
        with self._lock:
            if key not in self._items:
                raise ShapeNotFoundError(key, list(self._items))
            return self._items[key]

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.count()


class ShapeRegistry(Registry[Shape]):
    """Registry of shapes keyed by shape name."""

    def __init__(self, name: str = "shapes"):
        super().__init__(name)

    def register_shape(self, shape: Shape, allow_overwrite: bool = False) -> Shape:
        """Register a shape under its own name.

        Returns:
            The shape, so declarations can be registered inline
        """
        self.register(shape.name, shape, allow_overwrite=allow_overwrite)
        return shape

    def resolve(self, ref: Shape | str) -> Shape:
        """Resolve a shape reference.

        Args:
            ref: A Shape (returned as-is) or a registered shape name

        Returns:
            The referenced Shape

        Raises:
            ShapeNotFoundError: If a name is not registered
            ShapeDefinitionError: If ref is neither a Shape nor a name
        """
        if isinstance(ref, Shape):
            return ref
        if isinstance(ref, str):
            return self.get(ref)
        raise ShapeDefinitionError(
            f"Invalid shape reference: {ref!r}",
            context={"registry": self._name},
        )


default_registry = ShapeRegistry("default")


__all__ = ["Registry", "ShapeRegistry", "default_registry"]
