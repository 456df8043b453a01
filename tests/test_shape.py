"""Tests for shape declarations."""

import pytest

from shapeguard import (
    Field,
    FieldType,
    Length,
    NotEmpty,
    Required,
    Shape,
    ShapeDefinitionError,
    ValidationContext,
    is_bare_target,
)


class TestShapeDeclaration:
    """Test the fluent Shape API."""

    def test_fields_keep_declaration_order(self):
        """Test field order is preserved."""
        shape = (
            Shape("CreateRequest")
            .field("title", FieldType.STRING, required=True)
            .field("description", "string")
            .field("estimatedBudget", "NUMBER")
        )

        assert shape.field_names == ["title", "description", "estimatedBudget"]
        assert shape.fields["description"].field_type is FieldType.STRING
        assert "title" in shape
        assert "costCenter" not in shape

    def test_required_field_gets_required_constraint_first(self):
        """Test required fields lead with a Required constraint."""
        shape = Shape("CreateRequest").field(
            "title", FieldType.STRING, required=True, constraints=[NotEmpty(), Length(max=500)]
        )
        constraints = shape.fields["title"].constraints

        assert isinstance(constraints[0], Required)
        assert len(constraints) == 3

    def test_invalid_field_type(self):
        """Test unknown type names are definition errors."""
        with pytest.raises(ShapeDefinitionError):
            Shape("CreateRequest").field("title", "text")

    def test_duplicate_field(self):
        """Test declaring a field twice is a definition error."""
        shape = Shape("CreateRequest").field("title", FieldType.STRING)
        with pytest.raises(ShapeDefinitionError):
            shape.field("title", FieldType.STRING)

    def test_nested_declarations_are_checked(self):
        """Test inconsistent nested declarations are definition errors."""
        with pytest.raises(ShapeDefinitionError):
            Shape("CreateRequest").field("items", FieldType.SHAPE)
        with pytest.raises(ShapeDefinitionError):
            Shape("CreateRequest").field("title", FieldType.STRING, shape="Address")
        with pytest.raises(ShapeDefinitionError):
            Shape("CreateRequest").field("tags", FieldType.ARRAY, each=True)

    def test_empty_name(self):
        """Test shapes need a name."""
        with pytest.raises(ShapeDefinitionError):
            Shape("")

    def test_get_field(self):
        """Test looking up declared and undeclared fields."""
        shape = Shape("CreateRequest").field("title", FieldType.STRING)
        assert shape.get_field("title").name == "title"
        with pytest.raises(ShapeDefinitionError):
            shape.get_field("costCenter")

    def test_partial(self):
        """Test partial shapes make every field optional but keep other constraints."""
        shape = (
            Shape("CreateRequest")
            .field("title", FieldType.STRING, required=True, constraints=[Length(max=500)])
            .field("items", FieldType.SHAPE, shape="CreateRequestItem", each=True, required=True)
        )
        partial = shape.partial()

        assert partial.name == "PartialCreateRequest"
        assert partial.field_names == ["title", "items"]
        assert not any(f.required for f in partial.fields.values())
        assert [type(c) for c in partial.fields["title"].constraints] == [Length]
        assert partial.fields["items"].each is True
        assert shape.fields["title"].required is True

        assert shape.partial("UpdateRequest").name == "UpdateRequest"

    def test_to_dict(self):
        """Test the dictionary summary."""
        shape = (
            Shape("Supplier", description="Supplier master data")
            .field("name", FieldType.STRING, required=True)
            .field("address", FieldType.SHAPE, shape="Address")
        )
        data = shape.to_dict()

        assert data["name"] == "Supplier"
        assert data["description"] == "Supplier master data"
        assert data["fields"]["name"]["type"] == "STRING"
        assert data["fields"]["name"]["constraints"] == ["required"]
        assert data["fields"]["address"]["shape"] == "Address"


class TestFieldCheck:
    """Test per-field type checks and constraint aggregation."""

    def test_type_mismatch(self):
        """Test type check messages."""
        assert Field("title", FieldType.STRING).check(123).messages == ["title must be a string"]
        assert Field("quantity", FieldType.INTEGER).check(1.5).messages == ["quantity must be an integer number"]
        assert Field("unitPrice", FieldType.NUMBER).check(True).messages == ["unitPrice must be a number"]
        assert Field("active", FieldType.BOOLEAN).check("yes").messages == ["active must be a boolean value"]
        assert Field("tags", FieldType.ARRAY).check("a,b").messages == ["tags must be an array"]
        assert Field("specifications", FieldType.OBJECT).check([]).messages == [
            "specifications must be an object"
        ]

    def test_number_rejects_non_finite(self):
        """Test NaN and infinity are not numbers."""
        assert not Field("unitPrice", FieldType.NUMBER).check(float("inf")).valid
        assert Field("unitPrice", FieldType.NUMBER).check(3000).valid

    def test_any_accepts_everything(self):
        """Test ANY skips the type check."""
        assert Field("metadata", FieldType.ANY).check(object()).valid

    def test_missing_required_value(self):
        """Test a missing required value reports only the presence failure."""
        field_def = Field("title", FieldType.STRING, required=True, constraints=[Length(max=5)])
        assert field_def.check(None).messages == ["title should not be null or undefined"]

    def test_all_constraints_run(self):
        """Test type and constraint failures are all collected."""
        field_def = Field("title", FieldType.STRING, constraints=[NotEmpty(), Length(min=3)])
        result = field_def.check("", ValidationContext(property="title"))
        assert result.messages == [
            "title should not be empty",
            "title must be longer than or equal to 3 characters",
        ]

    def test_nested_type_checks(self):
        """Test SHAPE fields check for objects or arrays."""
        single = Field("address", FieldType.SHAPE, shape="Address")
        many = Field("items", FieldType.SHAPE, shape="CreateRequestItem", each=True)

        assert single.check({}).valid
        assert single.check("Austin").messages == ["nested property address must be an object"]
        assert many.check([]).valid
        assert many.check({}).messages == ["items must be an array"]


class TestBareTargets:
    """Test bare scalar markers."""

    @pytest.mark.parametrize("target", [str, int, float, bool, list, dict, None, FieldType.STRING])
    def test_bare(self, target):
        """Test plain types and scalar field types are bare."""
        assert is_bare_target(target)

    def test_not_bare(self):
        """Test shapes, shape names and SHAPE markers are not bare."""
        assert not is_bare_target(Shape("Address"))
        assert not is_bare_target("Address")
        assert not is_bare_target(FieldType.SHAPE)
