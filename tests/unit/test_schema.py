"""Tests for plugin schema models and catalogs."""

import pytest
from pydantic import ValidationError

from pouch_admin.exceptions import CatalogError
from pouch_admin.models.schema import FieldRole, FieldSchema, FieldType, PluginCatalog, PluginDescriptor


class TestFieldSchema:
    def test_accepts_both_display_name_spellings(self):
        camel = FieldSchema.model_validate({"type": "string", "displayName": "API key"})
        snake = FieldSchema.model_validate({"type": "string", "display_name": "API key"})

        assert camel.display_name == snake.display_name == "API key"

    def test_label_falls_back_to_field_name(self):
        assert FieldSchema(type=FieldType.STRING).label("api_key") == "api key"
        assert FieldSchema(type=FieldType.STRING, display_name="Key").label("api_key") == "Key"

    def test_select_requires_options(self):
        with pytest.raises(ValidationError):
            FieldSchema(type=FieldType.SELECT)

    def test_select_default_must_be_an_option(self):
        with pytest.raises(ValidationError):
            FieldSchema(type=FieldType.SELECT, options=["a", "b"], default="c")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            FieldSchema.model_validate({"type": "color"})

    def test_role_parsed(self):
        schema = FieldSchema.model_validate({"type": "number", "role": "limit"})
        assert schema.role is FieldRole.LIMIT

    def test_initial_value_uses_default_or_empty_string(self):
        assert FieldSchema(type=FieldType.NUMBER, default=10).initial_value() == 10
        assert FieldSchema(type=FieldType.NUMBER).initial_value() == ""
        assert FieldSchema(type=FieldType.BOOLEAN, default=False).initial_value() is False


class TestPluginDescriptor:
    def test_null_schema_is_empty(self):
        descriptor = PluginDescriptor.model_validate({"id": "noop", "schema": None})
        assert descriptor.field_schemas == {}
        assert descriptor.is_default is False

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            PluginDescriptor.model_validate({"id": ""})


class TestPluginCatalog:
    def test_lookup_and_order(self, middleware_catalog):
        assert middleware_catalog.ids() == ["rate_limit", "logger", "pii_filter"]
        assert "logger" in middleware_catalog
        assert "missing" not in middleware_catalog
        assert middleware_catalog.get("missing") is None
        assert len(middleware_catalog) == 3

    def test_defaults(self, middleware_catalog):
        assert [d.id for d in middleware_catalog.defaults()] == ["logger"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate"):
            PluginCatalog.from_payload([{"id": "a"}, {"id": "a"}])

    def test_invalid_payload_raises_catalog_error(self):
        with pytest.raises(CatalogError):
            PluginCatalog.from_payload([{"id": "a", "schema": {"x": {"type": "select"}}}])

    def test_null_payload_is_empty_catalog(self):
        assert len(PluginCatalog.from_payload(None)) == 0

    def test_to_payload_uses_wire_names(self, middleware_catalog):
        payload = middleware_catalog.to_payload()

        rate_limit = payload[0]
        assert rate_limit["id"] == "rate_limit"
        assert rate_limit["schema"]["limit"]["displayName"] == "Requests"
        assert rate_limit["schema"]["limit"]["role"] == "limit"
        assert "options" not in rate_limit["schema"]["limit"]
