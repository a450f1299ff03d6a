"""Shared fixtures: small plugin catalogs and key payloads."""

from typing import Any

import pytest

from pouch_admin.config import Settings
from pouch_admin.models.key import Key
from pouch_admin.models.schema import PluginCatalog

MIDDLEWARES_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": "rate_limit",
        "schema": {
            "limit": {"type": "number", "displayName": "Requests", "default": 10, "role": "limit"},
            "period": {"type": "number", "displayName": "Window (s)", "default": 60, "role": "period"},
        },
    },
    {
        "id": "logger",
        "is_default": True,
        "schema": {
            "level": {"type": "select", "options": ["info", "debug"], "default": "info"},
        },
    },
    {
        "id": "pii_filter",
        "schema": {
            "enabled": {"type": "boolean", "default": True},
            "pattern": {"type": "string", "description": "Extra regex to redact"},
        },
    },
]

PROVIDERS_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": "openai",
        "schema": {
            "api_key": {"type": "string", "display_name": "API key"},
            "model": {"type": "select", "options": ["gpt-4o", "gpt-4o-mini"], "default": "gpt-4o-mini"},
        },
    },
    {"id": "anthropic", "schema": {"api_key": {"type": "string"}}},
    {"id": "mock", "schema": {"latency_ms": {"type": "number", "default": 0}}},
]


@pytest.fixture
def middleware_catalog() -> PluginCatalog:
    return PluginCatalog.from_payload(MIDDLEWARES_PAYLOAD)


@pytest.fixture
def provider_catalog() -> PluginCatalog:
    return PluginCatalog.from_payload(PROVIDERS_PAYLOAD)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, api_url="http://pouch.test/v1")


def key_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": 1,
        "name": "staging-app",
        "prefix": "pk-abc",
        "expires_at": None,
        "budget_usage": 1.25,
        "auto_renew": False,
        "created_at": 1700000000,
        "configuration": {
            "provider": {"id": "openai", "config": {"api_key": "sk-test", "model": "gpt-4o"}},
            "middlewares": [
                {"id": "rate_limit", "config": {"limit": 10, "period": 60}},
                {"id": "logger", "config": {"level": "debug"}},
            ],
            "budget_limit": 5.0,
            "reset_period": 2592000,
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_key():
    """Factory for Key models; keyword arguments override payload fields."""

    def factory(**overrides: Any) -> Key:
        return Key.model_validate(key_payload(**overrides))

    return factory


@pytest.fixture
def make_key_payload():
    return key_payload
