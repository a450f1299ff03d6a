"""In-memory editor for composing a key's configuration before submission.

The editor owns the middleware and provider catalogs and threads them into
every composition call. A draft is seeded either with new-key defaults or
from an existing key, mutated field by field, and finally serialized into a
create or update request. Submission never touches the draft, so a failed
call can simply be retried.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pouch_admin import composition
from pouch_admin.client import PouchAPIClient
from pouch_admin.config import Settings, get_settings
from pouch_admin.logging_config import get_logger
from pouch_admin.models.key import Key, KeyConfiguration, KeyRequest, PluginConfig
from pouch_admin.models.schema import FieldSchema, PluginCatalog, PluginDescriptor
from pouch_admin.roles import derive_budget_limit, derive_rate_limit_display, describe_reset_mode
from pouch_admin.values import FieldValue, read_field_value

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class KeyDraft:
    """Editable state of one key."""

    name: str = ""
    configuration: KeyConfiguration = field(default_factory=KeyConfiguration)
    auto_renew: bool = False
    expires_at: int | None = None
    key_id: int | None = None


@dataclass(frozen=True)
class FieldView:
    name: str
    label: str
    schema: FieldSchema
    value: FieldValue


@dataclass(frozen=True)
class MiddlewareView:
    index: int
    id: str
    fields: list[FieldView]


def field_views(config: dict[str, Any], descriptor: PluginDescriptor) -> list[FieldView]:
    """Fields of ``descriptor`` with their current (or default) values."""
    return [
        FieldView(name=name, label=schema.label(name), schema=schema, value=read_field_value(config, name, schema))
        for name, schema in descriptor.field_schemas.items()
    ]


class ConfigurationEditor:
    def __init__(
        self,
        middleware_catalog: PluginCatalog,
        provider_catalog: PluginCatalog,
        settings: Settings | None = None,
    ) -> None:
        self.middleware_catalog = middleware_catalog
        self.provider_catalog = provider_catalog
        self.settings = settings or get_settings()
        self.draft = KeyDraft()

    @classmethod
    async def load(cls, client: PouchAPIClient, settings: Settings | None = None) -> "ConfigurationEditor":
        """Fetch both plugin catalogs from the backend and build an editor."""
        middleware_catalog = await client.list_middlewares()
        provider_catalog = await client.list_providers()
        logger.debug(
            "catalogs_loaded",
            middlewares=middleware_catalog.ids(),
            providers=provider_catalog.ids(),
        )
        return cls(middleware_catalog, provider_catalog, settings)

    # === Seeding ===

    def new_key(self, name: str = "") -> KeyDraft:
        """Start a draft with the configured defaults and default middlewares."""
        provider_id = self.settings.default_provider
        provider = composition.change_provider(PluginConfig(id=""), provider_id, self.provider_catalog)
        self.draft = KeyDraft(
            name=name,
            configuration=KeyConfiguration(
                provider=provider,
                middlewares=composition.default_middlewares(self.middleware_catalog),
                budget_limit=self.settings.default_budget_limit,
                reset_period=self.settings.default_reset_period,
            ),
        )
        return self.draft

    def edit_key(self, key: Key) -> KeyDraft:
        """Start a draft from a stored key. Unknown plugins are kept as they are."""
        self.draft = KeyDraft(
            name=key.name,
            configuration=key.configuration.model_copy(deep=True),
            auto_renew=key.auto_renew,
            expires_at=key.expires_at,
            key_id=key.id,
        )
        _, orphaned = composition.split_orphans(self.draft.configuration.middlewares, self.middleware_catalog)
        if orphaned:
            logger.info("key_has_orphaned_middlewares", key_id=key.id, indexes=orphaned)
        return self.draft

    # === Middlewares ===

    def _set_middlewares(self, middlewares: list[PluginConfig]) -> None:
        self.draft.configuration = self.draft.configuration.model_copy(update={"middlewares": middlewares})

    @property
    def middlewares(self) -> list[PluginConfig]:
        return self.draft.configuration.middlewares

    def add_middleware(self, middleware_id: str) -> None:
        descriptor = self.middleware_catalog.get(middleware_id)
        if descriptor is None:
            logger.debug("middleware_not_in_catalog", middleware=middleware_id)
            return
        self._set_middlewares(composition.add_middleware(self.middlewares, descriptor))

    def remove_middleware(self, index: int) -> None:
        self._set_middlewares(composition.remove_middleware(self.middlewares, index))

    def move_middleware(self, index: int, direction: composition.Direction) -> None:
        self._set_middlewares(composition.move_middleware(self.middlewares, index, direction))

    def update_middleware_field(self, index: int, field_name: str, raw_value: Any) -> None:
        """Set one field of the middleware at ``index``, coerced per its schema.

        Orphaned middlewares and fields missing from the schema are not
        editable; the call is ignored.
        """
        if not 0 <= index < len(self.middlewares):
            return
        descriptor = self.middleware_catalog.get(self.middlewares[index].id)
        if descriptor is None or field_name not in descriptor.field_schemas:
            logger.debug("middleware_field_not_editable", index=index, field=field_name)
            return
        field_type = descriptor.field_schemas[field_name].type
        self._set_middlewares(
            composition.update_field_value(self.middlewares, index, field_name, raw_value, field_type)
        )

    # === Provider ===

    @property
    def provider(self) -> PluginConfig:
        return self.draft.configuration.provider

    def change_provider(self, provider_id: str) -> None:
        provider = composition.change_provider(self.provider, provider_id, self.provider_catalog)
        self.draft.configuration = self.draft.configuration.model_copy(update={"provider": provider})

    def update_provider_field(self, field_name: str, raw_value: Any) -> None:
        descriptor = self.provider_catalog.get(self.provider.id)
        if descriptor is None or field_name not in descriptor.field_schemas:
            logger.debug("provider_field_not_editable", provider=self.provider.id, field=field_name)
            return
        provider = composition.update_provider_field(
            self.provider, field_name, raw_value, descriptor.field_schemas[field_name].type
        )
        self.draft.configuration = self.draft.configuration.model_copy(update={"provider": provider})

    # === Scalar policy ===

    def set_name(self, name: str) -> None:
        self.draft.name = name

    def set_budget_limit(self, budget_limit: float) -> None:
        self.draft.configuration = self.draft.configuration.model_copy(
            update={"budget_limit": max(budget_limit, 0.0)}
        )

    def set_reset_period(self, reset_period: int) -> None:
        self.draft.configuration = self.draft.configuration.model_copy(
            update={"reset_period": max(reset_period, 0)}
        )

    def set_auto_renew(self, auto_renew: bool) -> None:
        self.draft.auto_renew = auto_renew

    def set_expiration_days(self, days: int, now: datetime | None = None) -> None:
        """Expire ``days`` from now; 0 or less clears the expiry."""
        if days <= 0:
            self.draft.expires_at = None
            return
        now_ts = int((now or datetime.now()).timestamp())
        self.draft.expires_at = now_ts + days * SECONDS_PER_DAY

    # === Views ===

    def middleware_views(self) -> list[MiddlewareView]:
        """Renderable middlewares; orphaned entries are skipped."""
        renderable, _ = composition.split_orphans(self.middlewares, self.middleware_catalog)
        return [
            MiddlewareView(index=index, id=middleware.id, fields=field_views(middleware.config, descriptor))
            for index, middleware, descriptor in renderable
        ]

    def orphaned_middlewares(self) -> list[int]:
        return composition.split_orphans(self.middlewares, self.middleware_catalog)[1]

    def provider_fields(self) -> list[FieldView]:
        descriptor = self.provider_catalog.get(self.provider.id)
        if descriptor is None:
            return []
        return field_views(self.provider.config, descriptor)

    def budget_limit(self) -> float:
        return derive_budget_limit(self.draft.configuration, self.middleware_catalog)

    def rate_limit_display(self) -> str:
        return derive_rate_limit_display(self.draft.configuration, self.middleware_catalog)

    def reset_mode(self) -> str:
        return describe_reset_mode(self.draft.configuration.reset_period)

    # === Submission ===

    def to_request(self) -> KeyRequest:
        return KeyRequest.from_configuration(
            self.draft.name,
            self.draft.configuration,
            auto_renew=self.draft.auto_renew,
            expires_at=self.draft.expires_at,
        )

    async def submit(self, client: PouchAPIClient) -> str | None:
        """Create or update the key.

        Returns:
            The plaintext secret for a new key, None for an update.

        Raises:
            APIError: The backend rejected the request; the draft is unchanged.
        """
        request = self.to_request()
        if self.draft.key_id is None:
            return await client.create_key(request)
        await client.update_key(self.draft.key_id, request)
        return None
