"""Key and key configuration models (wire shapes of the key-management API)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MOCK_PROVIDER_ID = "mock"


def _to_epoch(v: Any) -> Any:
    # The backend may serialize timestamps as RFC 3339 strings instead of epoch seconds.
    if isinstance(v, datetime):
        return int(v.timestamp())
    if isinstance(v, str) and v and not v.lstrip("-").isdigit():
        return int(datetime.fromisoformat(v.replace("Z", "+00:00")).timestamp())
    return v


class PluginConfig(BaseModel):
    """A plugin instance: descriptor id plus concrete field values."""

    id: str
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("config", mode="before")
    @classmethod
    def null_config_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class KeyConfiguration(BaseModel):
    """Runtime policy of a key: provider, ordered middlewares and budget."""

    provider: PluginConfig = Field(default_factory=lambda: PluginConfig(id=""))
    middlewares: list[PluginConfig] = Field(default_factory=list)
    budget_limit: float | None = Field(default=None, ge=0)
    reset_period: int = Field(default=0, ge=0)

    @field_validator("middlewares", mode="before")
    @classmethod
    def null_middlewares_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def effective_budget_limit(self) -> float:
        """Budget limit with ``None`` (field absent) read as unlimited (0)."""
        return self.budget_limit or 0.0

    @property
    def is_mock(self) -> bool:
        return self.provider.id == MOCK_PROVIDER_ID


class Key(BaseModel):
    """API key as listed by the backend. The secret itself is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    prefix: str = ""
    expires_at: int | None = None
    budget_usage: float = Field(default=0.0, ge=0)
    auto_renew: bool = False
    configuration: KeyConfiguration = Field(default_factory=KeyConfiguration)
    created_at: int | None = None

    @field_validator("expires_at", "created_at", mode="before")
    @classmethod
    def timestamps_as_epoch(cls, v: Any) -> Any:
        return _to_epoch(v)

    @field_validator("configuration", mode="before")
    @classmethod
    def null_configuration_is_empty(cls, v: Any) -> Any:
        return KeyConfiguration() if v is None else v


class KeyRequest(BaseModel):
    """Create/update request body."""

    name: str
    provider: PluginConfig
    middlewares: list[PluginConfig] = Field(default_factory=list)
    auto_renew: bool = False
    budget_limit: float | None = Field(default=None, ge=0)
    reset_period: int = Field(default=0, ge=0)
    expires_at: int | None = None

    @classmethod
    def from_configuration(
        cls,
        name: str,
        configuration: KeyConfiguration,
        auto_renew: bool = False,
        expires_at: int | None = None,
    ) -> "KeyRequest":
        return cls(
            name=name,
            provider=configuration.provider.model_copy(deep=True),
            middlewares=[m.model_copy(deep=True) for m in configuration.middlewares],
            auto_renew=auto_renew,
            budget_limit=configuration.budget_limit,
            reset_period=configuration.reset_period,
            expires_at=expires_at,
        )

    def configuration(self) -> KeyConfiguration:
        return KeyConfiguration(
            provider=self.provider,
            middlewares=self.middlewares,
            budget_limit=self.budget_limit,
            reset_period=self.reset_period,
        )


class CreatedKey(BaseModel):
    """Response of key creation. ``key`` is the plaintext secret, shown once."""

    key: str
