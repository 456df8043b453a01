"""Shared procurement shapes and payloads for shapeguard tests."""

import copy

import pytest

from shapeguard import (
    Enum,
    FieldType,
    IsDateString,
    IsEmail,
    IsUUID,
    Length,
    NotEmpty,
    Pattern,
    Range,
    Shape,
    ShapeRegistry,
)

SUPPLIER_ID = "123e4567-e89b-12d3-a456-426614174000"


def build_registry() -> ShapeRegistry:
    """Registry holding the procurement shapes used across the tests."""
    registry = ShapeRegistry("test")

    registry.register_shape(
        Shape("Address")
        .field("city", FieldType.STRING, required=True, constraints=[NotEmpty()])
        .field("postalCode", FieldType.STRING, constraints=[Pattern(r"^\d{5}$")])
    )

    registry.register_shape(
        Shape("Supplier")
        .field("name", FieldType.STRING, required=True, constraints=[NotEmpty(), Length(max=200)])
        .field("email", FieldType.STRING, constraints=[IsEmail()])
        .field("address", FieldType.SHAPE, shape="Address")
    )

    registry.register_shape(
        Shape("Person")
        .field("name", FieldType.STRING, required=True)
        .field("age", FieldType.INTEGER, required=True, constraints=[Range(min=0)])
    )

    registry.register_shape(
        Shape("RegisterUser")
        .field("email", FieldType.STRING, required=True, constraints=[IsEmail()])
        .field(
            "password",
            FieldType.STRING,
            required=True,
            constraints=[
                Length(min=8, max=128),
                Pattern(r"[A-Z]", message="{property} must contain an uppercase letter"),
            ],
        )
    )

    registry.register_shape(
        Shape("CreateLineItem")
        .field("lineNumber", FieldType.NUMBER, required=True, constraints=[Range(min=1)])
        .field("description", FieldType.STRING, required=True, constraints=[NotEmpty(), Length(max=500)])
        .field("quantity", FieldType.NUMBER, required=True, constraints=[Range(min=1)])
        .field("unitPrice", FieldType.NUMBER, required=True, constraints=[Range(min=0)])
        .field("unitOfMeasure", FieldType.STRING)
        .field("sku", FieldType.STRING, constraints=[Pattern(r"^[A-Z0-9-]+$")])
    )

    registry.register_shape(
        Shape("CreatePurchaseOrder")
        .field("title", FieldType.STRING, required=True, constraints=[NotEmpty(), Length(max=500)])
        .field("supplierId", FieldType.STRING, required=True, constraints=[IsUUID()])
        .field("currency", FieldType.STRING, default="USD", constraints=[Length(min=3, max=3)])
        .field("priority", FieldType.STRING, constraints=[Enum(["low", "medium", "high", "critical"])])
        .field("neededByDate", FieldType.STRING, constraints=[IsDateString()])
        .field(
            "lineItems",
            FieldType.SHAPE,
            shape="CreateLineItem",
            each=True,
            required=True,
            constraints=[NotEmpty()],
        )
        .field("shipTo", FieldType.SHAPE, shape="Address")
    )

    registry.register_shape(
        Shape("Category")
        .field("name", FieldType.STRING, required=True)
        .field("parent", FieldType.SHAPE, shape="Category")
    )

    return registry


VALID_ORDER = {
    "title": "Laptops for Engineering",
    "supplierId": SUPPLIER_ID,
    "priority": "high",
    "neededByDate": "2025-03-15",
    "lineItems": [
        {
            "lineNumber": 1,
            "description": "MacBook Pro 16-inch M3 Max",
            "quantity": 15,
            "unitPrice": 3000.0,
            "unitOfMeasure": "EA",
        }
    ],
    "shipTo": {"city": "Austin", "postalCode": "78701"},
}


@pytest.fixture
def registry():
    """Fresh registry of procurement shapes."""
    return build_registry()


@pytest.fixture
def valid_order():
    """A purchase order payload that passes every constraint."""
    return copy.deepcopy(VALID_ORDER)


def nested_categories(depth: int) -> dict:
    """Build a Category payload nested ``depth`` levels deep without recursion."""
    payload: dict = {"name": f"level-{depth}"}
    for level in range(depth - 1, -1, -1):
        payload = {"name": f"level-{level}", "parent": payload}
    return payload


@pytest.fixture
def make_categories():
    """Factory for deeply nested Category payloads."""
    return nested_categories
