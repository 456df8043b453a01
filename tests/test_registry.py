"""Tests for the shape registry."""

import threading

import pytest

from shapeguard import FieldType, Registry, Shape, ShapeDefinitionError, ShapeNotFoundError, ShapeRegistry


class TestRegistry:
    """Test the generic registry."""

    def test_register_and_get(self):
        """Test basic registration and lookup."""
        registry: Registry[int] = Registry("limits")
        registry.register("maxLineItems", 500)

        assert registry.name == "limits"
        assert registry.get("maxLineItems") == 500
        assert "maxLineItems" in registry
        assert registry.has("maxLineItems")
        assert len(registry) == 1

    def test_duplicate_registration(self):
        """Test duplicates need allow_overwrite."""
        registry: Registry[int] = Registry("limits")
        registry.register("maxLineItems", 500)

        with pytest.raises(ShapeDefinitionError):
            registry.register("maxLineItems", 100)

        registry.register("maxLineItems", 100, allow_overwrite=True)
        assert registry.get("maxLineItems") == 100

    def test_missing_key(self):
        """Test lookups of unknown keys list what is available."""
        registry: Registry[int] = Registry("limits")
        registry.register("maxLineItems", 500)

        with pytest.raises(ShapeNotFoundError) as exc_info:
            registry.get("maxDepth")

        assert exc_info.value.name == "maxDepth"
        assert exc_info.value.context["available_shapes"] == ["maxLineItems"]

    def test_unregister_and_clear(self):
        """Test removal."""
        registry: Registry[int] = Registry("limits")
        registry.register("a", 1)
        registry.register("b", 2)

        assert registry.unregister("a") == 1
        assert registry.keys() == ["b"]
        with pytest.raises(ShapeNotFoundError):
            registry.unregister("a")

        registry.clear()
        assert registry.count() == 0

    def test_concurrent_registration(self):
        """Test registration from many threads."""
        registry: Registry[int] = Registry("counters")

        def register_range(start):
            for i in range(start, start + 100):
                registry.register(f"item-{i}", i)

        threads = [threading.Thread(target=register_range, args=(n * 100,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 800


class TestShapeRegistry:
    """Test shape registration and resolution."""

    def test_register_shape_returns_shape(self):
        """Test inline registration."""
        registry = ShapeRegistry()
        shape = registry.register_shape(Shape("Address").field("city", FieldType.STRING))

        assert registry.resolve("Address") is shape
        assert registry.resolve(shape) is shape

    def test_resolve_unknown_name(self):
        """Test unresolved names raise a definition error."""
        with pytest.raises(ShapeNotFoundError) as exc_info:
            ShapeRegistry().resolve("Address")

        assert isinstance(exc_info.value, ShapeDefinitionError)
        assert "Address" in str(exc_info.value)

    def test_resolve_invalid_reference(self):
        """Test references that are neither shapes nor names."""
        with pytest.raises(ShapeDefinitionError):
            ShapeRegistry().resolve(42)  # type: ignore[arg-type]

    def test_mutually_referential_shapes(self):
        """Test shapes may reference each other by name."""
        registry = ShapeRegistry()
        registry.register_shape(Shape("Department").field("manager", FieldType.SHAPE, shape="Employee"))
        registry.register_shape(Shape("Employee").field("department", FieldType.SHAPE, shape="Department"))

        manager_ref = registry.resolve("Department").fields["manager"].shape
        assert registry.resolve(manager_ref).name == "Employee"
