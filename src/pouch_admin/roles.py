"""Role-based field discovery.

Plugins tag the field that holds a quota with ``role: limit`` and the field
that holds its window with ``role: period``. The helpers here locate those
fields in a composed configuration without knowing which middleware declared
them. When several middlewares declare a limit/period pair, the earliest one
in list order wins.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pouch_admin.models.key import KeyConfiguration
from pouch_admin.models.schema import FieldRole, FieldSchema, PluginCatalog
from pouch_admin.values import format_number, parse_number

UNLIMITED = "Unlimited"

_PERIOD_SUFFIXES = {1: "sec", 60: "min", 3600: "hr"}


@dataclass(frozen=True)
class LimitPeriod:
    """Limit and period values taken from one middleware entry."""

    index: int
    middleware_id: str
    limit: float
    period: Any


def find_field_by_role(schema: Mapping[str, FieldSchema], role: FieldRole | str) -> str | None:
    """Return the first field name declaring ``role``, or None."""
    role = FieldRole(role)
    for name, field in schema.items():
        if field.role is role:
            return name
    return None


def find_limit_period(configuration: KeyConfiguration, catalog: PluginCatalog) -> LimitPeriod | None:
    """First middleware whose schema has both a limit and a period field."""
    for index, middleware in enumerate(configuration.middlewares):
        descriptor = catalog.get(middleware.id)
        if descriptor is None:
            continue
        limit_field = find_field_by_role(descriptor.field_schemas, FieldRole.LIMIT)
        period_field = find_field_by_role(descriptor.field_schemas, FieldRole.PERIOD)
        if limit_field and period_field:
            return LimitPeriod(
                index=index,
                middleware_id=middleware.id,
                limit=parse_number(middleware.config.get(limit_field)),
                period=middleware.config.get(period_field),
            )
    return None


def derive_budget_limit(configuration: KeyConfiguration, catalog: PluginCatalog) -> float:
    """Budget limit of a configuration, 0 meaning unlimited.

    ``configuration.budget_limit`` is authoritative. Only when it is absent
    does the limit of the first limit/period middleware apply, which is how
    older configurations encoded their budget.
    """
    if configuration.budget_limit is not None:
        return configuration.budget_limit
    found = find_limit_period(configuration, catalog)
    if found is None:
        return 0.0
    return max(found.limit, 0.0)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def format_rate(limit: float, period: Any) -> str:
    """Format a limit/period pair, e.g. ``10/min`` or ``5/30s``."""
    if limit <= 0:
        return UNLIMITED
    text = format_number(limit)
    if _is_number(period) and period > 0:
        if period in _PERIOD_SUFFIXES:
            return f"{text}/{_PERIOD_SUFFIXES[period]}"
        return f"{text}/{format_number(period)}s"
    if isinstance(period, str) and period not in ("", "none"):
        # Named periods from older configurations
        return f"{text}/{'sec' if period == 'second' else 'min'}"
    return UNLIMITED


def derive_rate_limit_display(configuration: KeyConfiguration, catalog: PluginCatalog) -> str:
    found = find_limit_period(configuration, catalog)
    if found is None:
        return UNLIMITED
    return format_rate(found.limit, found.period)


def describe_reset_mode(period: Any) -> str:
    """``Recurrent`` for budgets that reset periodically, else ``One-time``."""
    if _is_number(period) and period > 0:
        return "Recurrent"
    if isinstance(period, str) and period not in ("", "none"):
        return "Recurrent"
    return "One-time"
