"""Tests for field parsing."""

from __future__ import annotations

from schemascope.extraction.fields import parse_field_value, parse_fields
from schemascope.models import FieldType


def test_parse_fields_reads_common_shapes() -> None:
    body = """
        name: { type: String, required: true },
        age: Number,
        tags: [String],
        owner: { type: ObjectId, ref: 'User' }
    """

    fields = parse_fields(body)

    assert [field.name for field in fields] == ["name", "age", "tags", "owner"]
    name, age, tags, owner = fields
    assert (name.type, name.required, name.is_array) == (FieldType.STRING, True, False)
    assert (age.type, age.required, age.is_array) == (FieldType.NUMBER, False, False)
    assert (tags.type, tags.is_array) == (FieldType.STRING, True)
    assert (owner.type, owner.ref) == (FieldType.OBJECT_ID, "User")


def test_required_accepts_validator_message_form() -> None:
    field = parse_field_value("{ type: String, required: [true, 'Name is required'] }")

    assert field.required is True


def test_required_false_forms_are_not_required() -> None:
    assert parse_field_value("{ type: String, required: false }").required is False
    assert parse_field_value("{ type: String, required: [false, 'x'] }").required is False


def test_enum_values_are_trimmed_and_unquoted() -> None:
    field = parse_field_value("{ type: String, enum: ['active', 'paused', \"done\"] }")

    assert field.enum_values == ["active", "paused", "done"]


def test_default_captures_quoted_and_bare_values() -> None:
    assert parse_field_value("{ type: String, default: 'draft' }").default_value == "draft"
    assert parse_field_value("{ type: Date, default: Date.now }").default_value == "Date.now"
    assert parse_field_value("{ type: Number, default: 0 }").default_value == "0"
    assert parse_field_value("{ type: String }").default_value is None


def test_ref_without_type_defaults_to_object_id() -> None:
    field = parse_field_value("{ ref: 'Team' }")

    assert field.type is FieldType.OBJECT_ID
    assert field.ref == "Team"


def test_namespaced_types_are_normalised() -> None:
    assert parse_field_value("Schema.Types.ObjectId").type is FieldType.OBJECT_ID
    assert parse_field_value("mongoose.Schema.Types.Decimal128").type is FieldType.DECIMAL128
    field = parse_field_value("{ type: mongoose.Schema.Types.ObjectId, ref: 'User' }")
    assert field.type is FieldType.OBJECT_ID


def test_bracketed_type_attribute_marks_array() -> None:
    field = parse_field_value("{ type: [String], default: [] }")

    assert field.type is FieldType.STRING
    assert field.is_array is True


def test_array_of_objects_takes_inner_attributes() -> None:
    field = parse_field_value("[{ type: Schema.Types.ObjectId, ref: 'Comment', required: true }]")

    assert field.is_array is True
    assert field.type is FieldType.OBJECT_ID
    assert field.ref == "Comment"
    assert field.required is True


def test_unknown_shapes_fall_back_to_mixed() -> None:
    assert parse_field_value("addressSchema").type is FieldType.MIXED
    assert parse_field_value("{ type: Whatever }").type is FieldType.MIXED
    array_of_subschema = parse_field_value("[commentSchema]")
    assert array_of_subschema.type is FieldType.MIXED
    assert array_of_subschema.is_array is True


def test_nested_object_surfaces_only_matched_attributes() -> None:
    field = parse_field_value("{ street: String, geo: { type: String, required: true } }")

    assert field.type is FieldType.STRING
    assert field.required is True
    assert field.ref is None


def test_malformed_entries_are_skipped() -> None:
    body = "...baseFields, [computed]: String, 'quoted': Boolean, title: String"

    fields = parse_fields(body)

    assert [(field.name, field.type) for field in fields] == [
        ("quoted", FieldType.BOOLEAN),
        ("title", FieldType.STRING),
    ]


def test_comments_around_entries_are_tolerated() -> None:
    body = """
        // display name
        name: String, // shown in UI
        /* years */ age: Number // whole years
    """

    fields = parse_fields(body)

    assert [(field.name, field.type) for field in fields] == [
        ("name", FieldType.STRING),
        ("age", FieldType.NUMBER),
    ]


def test_trailing_comment_may_contain_quotes() -> None:
    assert parse_field_value("ObjectId // user's id").type is FieldType.OBJECT_ID
    assert parse_field_value("[String] // \"tags\"").is_array is True
    field = parse_field_value("{ type: String, default: 'a//b' } // it's fine")
    assert field.type is FieldType.STRING
    assert field.default_value == "a//b"


def test_slashes_inside_strings_are_not_comments() -> None:
    field = parse_field_value("{ type: String, default: 'http://example.test' }")

    assert field.default_value == "http://example.test"
