"""Plugin schema models.

A plugin (middleware or provider) describes each of its configurable fields
with a FieldSchema. The optional ``role`` tag lets generic code find the
field that carries a quota limit and the field that carries its period
without knowing which plugin declared them.
"""

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from pouch_admin.exceptions import CatalogError


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


class FieldRole(str, Enum):
    LIMIT = "limit"
    PERIOD = "period"


class FieldSchema(BaseModel):
    """Declarative description of one configurable value."""

    model_config = ConfigDict(populate_by_name=True)

    type: FieldType
    display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "display_name"),
        serialization_alias="displayName",
    )
    default: Any = None
    description: str | None = None
    options: list[str] | None = None
    role: FieldRole | None = None

    @model_validator(mode="after")
    def check_select_options(self) -> "FieldSchema":
        if self.type is FieldType.SELECT:
            if not self.options:
                raise ValueError("select fields require at least one option")
            if self.default is not None and self.default not in self.options:
                raise ValueError(f"default {self.default!r} is not one of {self.options}")
        return self

    def label(self, name: str) -> str:
        """Display label, falling back to the field name with spaces."""
        return self.display_name or name.replace("_", " ")

    def empty_value(self) -> Any:
        if self.type is FieldType.NUMBER:
            return 0
        if self.type is FieldType.BOOLEAN:
            return False
        return ""

    def initial_value(self) -> Any:
        """Value a freshly added plugin starts with."""
        return self.default if self.default is not None else ""


class PluginDescriptor(BaseModel):
    """A middleware or provider advertised by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    field_schemas: dict[str, FieldSchema] = Field(default_factory=dict, alias="schema")
    is_default: bool = False

    @field_validator("field_schemas", mode="before")
    @classmethod
    def null_schema_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


_descriptor_list = TypeAdapter(list[PluginDescriptor])


class PluginCatalog:
    """Ordered, id-unique collection of plugin descriptors.

    Catalogs are handed explicitly to every function that needs schema
    lookups; there is no process-wide catalog.
    """

    def __init__(self, descriptors: list[PluginDescriptor] | None = None):
        self._descriptors: list[PluginDescriptor] = list(descriptors or [])
        self._by_id: dict[str, PluginDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.id in self._by_id:
                raise CatalogError(f"Duplicate plugin id in catalog: {descriptor.id}")
            self._by_id[descriptor.id] = descriptor

    @classmethod
    def from_payload(cls, payload: Any) -> "PluginCatalog":
        """Parse a list of descriptor dicts as returned by the backend."""
        try:
            descriptors = _descriptor_list.validate_python(payload or [])
        except ValidationError as e:
            raise CatalogError(f"Invalid plugin catalog: {e}") from e
        return cls(descriptors)

    def get(self, plugin_id: str) -> PluginDescriptor | None:
        return self._by_id.get(plugin_id)

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._by_id

    def __iter__(self) -> Iterator[PluginDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def ids(self) -> list[str]:
        return [d.id for d in self._descriptors]

    def defaults(self) -> list[PluginDescriptor]:
        return [d for d in self._descriptors if d.is_default]

    def to_payload(self) -> list[dict[str, Any]]:
        return [
            d.model_dump(mode="json", by_alias=True, exclude_none=True)
            for d in self._descriptors
        ]
