"""Composition of plugin configs.

Every function here is pure: it returns a new list/config and never mutates
its input. Middlewares are identified by list position, not by id, since
the same middleware may appear more than once. An index outside the list
is a no-op rather than an error.
"""

from typing import Any, Literal

from pouch_admin.logging_config import get_logger
from pouch_admin.models.key import PluginConfig
from pouch_admin.models.schema import FieldType, PluginCatalog, PluginDescriptor
from pouch_admin.values import coerce_field_value

logger = get_logger(__name__)

Direction = Literal["up", "down"]


def default_config(descriptor: PluginDescriptor) -> dict[str, Any]:
    """Config seeded from each schema field's default ("" when it has none)."""
    return {name: schema.initial_value() for name, schema in descriptor.field_schemas.items()}


def default_middlewares(catalog: PluginCatalog) -> list[PluginConfig]:
    """Middlewares pre-selected for new keys, in catalog order."""
    return [PluginConfig(id=d.id, config=default_config(d)) for d in catalog.defaults()]


def _in_bounds(middlewares: list[PluginConfig], index: int) -> bool:
    return 0 <= index < len(middlewares)


def _copy(middlewares: list[PluginConfig]) -> list[PluginConfig]:
    return [m.model_copy(deep=True) for m in middlewares]


def add_middleware(
    middlewares: list[PluginConfig], descriptor: PluginDescriptor
) -> list[PluginConfig]:
    """Append a new instance of ``descriptor`` seeded with its defaults."""
    return [*_copy(middlewares), PluginConfig(id=descriptor.id, config=default_config(descriptor))]


def remove_middleware(middlewares: list[PluginConfig], index: int) -> list[PluginConfig]:
    if not _in_bounds(middlewares, index):
        logger.debug("middleware_remove_out_of_bounds", index=index, size=len(middlewares))
        return _copy(middlewares)
    return [m.model_copy(deep=True) for i, m in enumerate(middlewares) if i != index]


def move_middleware(
    middlewares: list[PluginConfig], index: int, direction: Direction
) -> list[PluginConfig]:
    """Swap the entry at ``index`` with its neighbour.

    ``up`` moves toward index 0, ``down`` toward the end. Moving the first
    entry up or the last entry down leaves the list unchanged.
    """
    if direction not in ("up", "down"):
        raise ValueError(f"Invalid direction: {direction!r}")

    result = _copy(middlewares)
    new_index = index - 1 if direction == "up" else index + 1
    if not _in_bounds(result, index) or not _in_bounds(result, new_index):
        return result
    result[index], result[new_index] = result[new_index], result[index]
    return result


def _merge_field(plugin: PluginConfig, field_name: str, raw_value: Any, field_type: FieldType | str) -> PluginConfig:
    value = coerce_field_value(raw_value, field_type).value
    return PluginConfig(id=plugin.id, config={**plugin.config, field_name: value})


def update_field_value(
    middlewares: list[PluginConfig],
    index: int,
    field_name: str,
    raw_value: Any,
    field_type: FieldType | str,
) -> list[PluginConfig]:
    """Coerce ``raw_value`` and write it into one field of the targeted middleware."""
    result = _copy(middlewares)
    if not _in_bounds(result, index):
        logger.debug("middleware_update_out_of_bounds", index=index, field=field_name)
        return result
    result[index] = _merge_field(result[index], field_name, raw_value, field_type)
    return result


def update_provider_field(
    provider: PluginConfig, field_name: str, raw_value: Any, field_type: FieldType | str
) -> PluginConfig:
    return _merge_field(provider, field_name, raw_value, field_type)


def change_provider(
    provider: PluginConfig, new_provider_id: str, provider_catalog: PluginCatalog
) -> PluginConfig:
    """Switch providers. Field values are not carried over; the new config is the
    new provider's defaults (empty when the id is not in the catalog)."""
    descriptor = provider_catalog.get(new_provider_id)
    if descriptor is None:
        logger.debug("provider_not_in_catalog", provider=new_provider_id)
        return PluginConfig(id=new_provider_id, config={})
    if new_provider_id != provider.id:
        logger.debug("provider_changed", old=provider.id, new=new_provider_id)
    return PluginConfig(id=new_provider_id, config=default_config(descriptor))


def split_orphans(
    middlewares: list[PluginConfig], catalog: PluginCatalog
) -> tuple[list[tuple[int, PluginConfig, PluginDescriptor]], list[int]]:
    """Partition middlewares into renderable entries and orphaned indexes.

    Orphans (ids missing from the catalog) are not rendered, but they stay in
    the list and are submitted verbatim.
    """
    renderable: list[tuple[int, PluginConfig, PluginDescriptor]] = []
    orphaned: list[int] = []
    for index, middleware in enumerate(middlewares):
        descriptor = catalog.get(middleware.id)
        if descriptor is None:
            logger.debug("middleware_orphaned", index=index, middleware=middleware.id)
            orphaned.append(index)
        else:
            renderable.append((index, middleware, descriptor))
    return renderable, orphaned
