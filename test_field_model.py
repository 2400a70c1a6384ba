"""
Unit tests for the field tree model.
"""

import pytest
from pydantic import ValidationError

from schema_studio.field_model import (
    CHILDREN,
    ITEM_FIELDS,
    FieldType,
    SchemaField,
    add_enum_values,
    append_field,
    get_field,
    merge_enum_values,
    new_field,
    parse_field_type,
    remove_enum_value,
    remove_field,
    replace_field,
    set_children,
    set_item_fields,
    split_enum_input,
    update_field,
)


@pytest.fixture
def sample_tree():
    """Root list with a scalar, an object and an array of objects."""
    return [
        new_field("id", FieldType.STRING, required=True),
        new_field("address", FieldType.OBJECT, children=[
            new_field("street"),
            new_field("zip", FieldType.NUMBER),
        ]),
        new_field("orders", FieldType.ARRAY, item_type=FieldType.OBJECT, item_fields=[
            new_field("sku", required=True),
        ]),
    ]


class TestSchemaField:
    """Test cases for SchemaField construction."""

    def test_blank_field_defaults(self):
        """A new field is a non-required, non-nullable string."""
        field = new_field()

        assert field.name == ""
        assert field.type == FieldType.STRING
        assert field.required is False
        assert field.allow_null is False
        assert field.children == ()
        assert field.enum_values == ()

    def test_type_names_are_coerced(self):
        """Type names are accepted case-insensitively."""
        assert SchemaField(name="a", type="Number").type == FieldType.NUMBER
        assert SchemaField(name="a", type=" boolean ").type == FieldType.BOOLEAN

    def test_unrecognized_type_becomes_unknown(self):
        """Unknown type text is kept and the field behaves as a string."""
        field = new_field("created", "timestamp")

        assert field.type == FieldType.UNKNOWN
        assert field.original_type == "timestamp"
        assert field.effective_type == FieldType.STRING

    def test_unknown_item_type_falls_back_to_string(self):
        """Array item types outside the closed set are read as string."""
        field = new_field("tags", FieldType.ARRAY, item_type="widget")
        assert field.item_type == FieldType.STRING

    def test_enum_values_are_deduplicated(self):
        """Enum values keep first-appearance order without duplicates."""
        field = new_field("role", FieldType.ENUM, enum_values=["USER", "ADMIN", "USER"])
        assert field.enum_values == ("USER", "ADMIN")

    def test_fields_are_frozen(self):
        """Nodes cannot be mutated in place."""
        field = new_field("id")
        with pytest.raises(ValidationError):
            field.name = "other"

    def test_is_container(self):
        """Only object and array fields hold nested fields."""
        assert new_field("a", FieldType.OBJECT).is_container
        assert new_field("a", FieldType.ARRAY).is_container
        assert not new_field("a", FieldType.ENUM).is_container


class TestParseFieldType:
    """Test cases for parse_field_type."""

    def test_known_names(self):
        assert parse_field_type("string") == FieldType.STRING
        assert parse_field_type(FieldType.ARRAY) == FieldType.ARRAY

    def test_unknown_or_non_string(self):
        assert parse_field_type("integer") is None
        assert parse_field_type(None) is None
        assert parse_field_type(3) is None


class TestReplaceField:
    """Test cases for replace_field."""

    def test_changes_are_validated(self):
        """Replacing re-runs validation so names are coerced."""
        field = replace_field(new_field("a"), type="array", item_type="number")

        assert field.type == FieldType.ARRAY
        assert field.item_type == FieldType.NUMBER

    def test_known_type_clears_original_type(self):
        """Picking a real type drops the remembered unknown type text."""
        field = replace_field(new_field("a", "uuid"), type="string")

        assert field.type == FieldType.STRING
        assert field.original_type is None

    def test_unknown_attributes_are_ignored(self):
        field = replace_field(new_field("a"), colour="blue")
        assert field == new_field("a")

    def test_original_is_untouched(self):
        original = new_field("a")
        replace_field(original, name="b")
        assert original.name == "a"


class TestGetField:
    """Test cases for get_field."""

    def test_root_and_nested_lookup(self, sample_tree):
        assert get_field(sample_tree, (0,)).name == "id"
        assert get_field(sample_tree, (1, CHILDREN, 1)).name == "zip"
        assert get_field(sample_tree, (2, ITEM_FIELDS, 0)).name == "sku"

    def test_invalid_locations_return_none(self, sample_tree):
        assert get_field(sample_tree, ()) is None
        assert get_field(sample_tree, (7,)) is None
        assert get_field(sample_tree, (1, CHILDREN)) is None
        assert get_field(sample_tree, (0, CHILDREN, 0)) is None
        assert get_field(sample_tree, (1, ITEM_FIELDS, 0)) is None


class TestStructuralEdits:
    """Test cases for append, remove and update."""

    def test_append_to_root(self, sample_tree):
        result = append_field(sample_tree)

        assert len(result) == 4
        assert result[3] == new_field()
        assert len(sample_tree) == 3

    def test_append_into_object(self, sample_tree):
        result = append_field(sample_tree, new_field("city"), (1, CHILDREN))

        assert [f.name for f in result[1].children] == ["street", "zip", "city"]
        assert [f.name for f in sample_tree[1].children] == ["street", "zip"]

    def test_append_into_array_items(self, sample_tree):
        result = append_field(sample_tree, new_field("qty", FieldType.NUMBER), (2, ITEM_FIELDS))
        assert [f.name for f in result[2].item_fields] == ["sku", "qty"]

    def test_append_through_scalar_is_noop(self, sample_tree):
        """Locations through a non-container node leave the tree unchanged."""
        result = append_field(sample_tree, new_field("x"), (0, CHILDREN))
        assert result == sample_tree

    def test_remove_root_field(self, sample_tree):
        result = remove_field(sample_tree, (0,))
        assert [f.name for f in result] == ["address", "orders"]

    def test_remove_nested_field(self, sample_tree):
        result = remove_field(sample_tree, (1, CHILDREN, 0))
        assert [f.name for f in result[1].children] == ["zip"]

    def test_remove_out_of_range_is_noop(self, sample_tree):
        assert remove_field(sample_tree, (9,)) == sample_tree
        assert remove_field(sample_tree, (1, CHILDREN, 9)) == sample_tree

    def test_update_attributes(self, sample_tree):
        result = update_field(sample_tree, (1, CHILDREN, 1), name="postcode", allow_null=True)

        updated = get_field(result, (1, CHILDREN, 1))
        assert updated.name == "postcode"
        assert updated.allow_null is True
        assert updated.type == FieldType.NUMBER

    def test_update_to_enum_starts_empty(self, sample_tree):
        result = update_field(sample_tree, (0,), type="enum")

        assert result[0].type == FieldType.ENUM
        assert result[0].enum_values == ()

    def test_update_out_of_range_is_noop(self, sample_tree):
        assert update_field(sample_tree, (5,), name="x") == sample_tree

    def test_set_children_and_item_fields(self, sample_tree):
        result = set_children(sample_tree, (1,), [new_field("line1")])
        result = set_item_fields(result, (2,), [])

        assert [f.name for f in result[1].children] == ["line1"]
        assert result[2].item_fields == ()


class TestEnumValues:
    """Test cases for enum value editing."""

    def test_merge_enum_values_keeps_first_appearance(self):
        assert merge_enum_values(["A", "B"], ["B", "C", "A"]) == ("A", "B", "C")

    def test_merge_enum_values_converts_to_text(self):
        assert merge_enum_values(["1"], [1, 2]) == ("1", "2")

    def test_split_enum_input(self):
        assert split_enum_input(" ADMIN, USER ,, ") == ["ADMIN", "USER"]
        assert split_enum_input("") == []

    def test_add_enum_values_from_pasted_text(self):
        fields = [new_field("role", FieldType.ENUM, enum_values=["ADMIN"])]

        result = add_enum_values(fields, (0,), "USER, ADMIN, GUEST")

        assert result[0].enum_values == ("ADMIN", "USER", "GUEST")

    def test_add_enum_values_missing_target(self):
        fields = [new_field("role", FieldType.ENUM)]
        assert add_enum_values(fields, (3,), "A") == fields

    def test_remove_enum_value(self):
        fields = [new_field("role", FieldType.ENUM, enum_values=["A", "B", "C"])]

        result = remove_enum_value(fields, (0,), "B")

        assert result[0].enum_values == ("A", "C")


class TestInvalidChanges:
    """Values that fail validation leave the tree unchanged."""

    def test_update_with_invalid_name(self, sample_tree):
        result = update_field(sample_tree, (0,), name=None)
        assert result == sample_tree

    def test_update_nested_with_invalid_flag(self, sample_tree):
        result = update_field(sample_tree, (1, CHILDREN, 0), required="sometimes")
        assert get_field(result, (1, CHILDREN, 0)) == new_field("street")

    def test_replace_field_returns_original(self):
        original = new_field("a")
        assert replace_field(original, enum_values=5) is original
