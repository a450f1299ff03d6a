"""Typed plugin field values.

Each configured value is one of StrValue, NumValue, BoolValue or OptValue,
selected by the field's FieldType. Plugin configs keep the plain JSON value
(``FieldValue.value``) so the wire format is unchanged.
"""

from dataclasses import dataclass
import math
from typing import Any, ClassVar

from pouch_admin.models.schema import FieldSchema, FieldType


@dataclass(frozen=True)
class StrValue:
    value: str
    field_type: ClassVar[FieldType] = FieldType.STRING


@dataclass(frozen=True)
class NumValue:
    value: float
    field_type: ClassVar[FieldType] = FieldType.NUMBER


@dataclass(frozen=True)
class BoolValue:
    value: bool
    field_type: ClassVar[FieldType] = FieldType.BOOLEAN


@dataclass(frozen=True)
class OptValue:
    value: str
    field_type: ClassVar[FieldType] = FieldType.SELECT


FieldValue = StrValue | NumValue | BoolValue | OptValue


def parse_number(raw: Any) -> float:
    """Parse numeric input; empty or malformed input reads as 0."""
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, int | float):
        number = float(raw)
    else:
        text = str(raw).strip() if raw is not None else ""
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_field_value(raw: Any, field_type: FieldType | str) -> FieldValue:
    """Coerce raw editor input to the tagged value for ``field_type``.

    Numbers parse as float (``""`` and garbage become 0), booleans are true
    only for the literal ``"true"``, strings and selects pass through.
    """
    field_type = FieldType(field_type)
    if field_type is FieldType.NUMBER:
        return NumValue(parse_number(raw))
    if field_type is FieldType.BOOLEAN:
        return BoolValue(raw is True or raw == "true")
    if field_type is FieldType.SELECT:
        return OptValue(raw if isinstance(raw, str) else str(raw))
    return StrValue(raw if isinstance(raw, str) else str(raw))


def read_field_value(config: dict[str, Any], name: str, schema: FieldSchema) -> FieldValue:
    """Read a field from a stored config, falling back to the schema default."""
    if name in config and config[name] is not None:
        raw = config[name]
    elif schema.default is not None:
        raw = schema.default
    else:
        raw = schema.empty_value()

    if schema.type is FieldType.BOOLEAN and isinstance(raw, bool):
        return BoolValue(raw)
    return coerce_field_value(raw, schema.type)


def format_number(value: float) -> str:
    """Render a number the way the dashboard shows it (``10`` rather than ``10.0``)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
