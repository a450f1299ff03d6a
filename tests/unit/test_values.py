"""Tests for field value coercion."""

import pytest

from pouch_admin.models.schema import FieldSchema, FieldType
from pouch_admin.values import (
    BoolValue,
    NumValue,
    OptValue,
    StrValue,
    coerce_field_value,
    format_number,
    parse_number,
    read_field_value,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("42", 42.0), ("2.5", 2.5), ("", 0.0), ("abc", 0.0), (None, 0.0), (7, 7.0), ("inf", 0.0)],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


class TestCoerceFieldValue:
    def test_number(self):
        assert coerce_field_value("10", FieldType.NUMBER) == NumValue(10.0)
        assert coerce_field_value("", "number") == NumValue(0.0)

    def test_boolean_only_true_for_literal_true(self):
        assert coerce_field_value("true", FieldType.BOOLEAN) == BoolValue(True)
        assert coerce_field_value(True, FieldType.BOOLEAN) == BoolValue(True)
        assert coerce_field_value("yes", FieldType.BOOLEAN) == BoolValue(False)
        assert coerce_field_value("false", FieldType.BOOLEAN) == BoolValue(False)

    def test_string_and_select_pass_through(self):
        assert coerce_field_value("abc", FieldType.STRING) == StrValue("abc")
        assert coerce_field_value("gpt-4o", FieldType.SELECT) == OptValue("gpt-4o")

    def test_variant_matches_field_type(self):
        for field_type in FieldType:
            assert coerce_field_value("1", field_type).field_type is field_type


class TestReadFieldValue:
    def test_stored_value_wins(self):
        schema = FieldSchema(type=FieldType.NUMBER, default=10)
        assert read_field_value({"limit": 25}, "limit", schema) == NumValue(25.0)

    def test_falls_back_to_default(self):
        schema = FieldSchema(type=FieldType.NUMBER, default=10)
        assert read_field_value({}, "limit", schema) == NumValue(10.0)

    def test_falls_back_to_empty_value(self):
        assert read_field_value({}, "on", FieldSchema(type=FieldType.BOOLEAN)) == BoolValue(False)
        assert read_field_value({}, "name", FieldSchema(type=FieldType.STRING)) == StrValue("")

    def test_stored_boolean(self):
        schema = FieldSchema(type=FieldType.BOOLEAN, default=True)
        assert read_field_value({"enabled": False}, "enabled", schema) == BoolValue(False)


def test_format_number():
    assert format_number(10.0) == "10"
    assert format_number(2.5) == "2.5"
