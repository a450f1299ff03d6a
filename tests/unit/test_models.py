"""Tests for key models and CLI input validation."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pouch_admin.models.inputs import KeyCreateInput, KeyEditInput
from pouch_admin.models.key import Key, KeyConfiguration, KeyRequest, PluginConfig


class TestKey:
    def test_minimal_payload(self):
        key = Key.model_validate({"id": 4, "name": "bare", "configuration": None})

        assert key.configuration == KeyConfiguration()
        assert key.configuration.provider.id == ""
        assert key.expires_at is None

    def test_rfc3339_timestamps(self):
        key = Key.model_validate(
            {"id": 1, "name": "k", "expires_at": "2025-01-01T00:00:00Z", "created_at": "1700000000"}
        )

        assert key.expires_at == int(datetime(2025, 1, 1, tzinfo=UTC).timestamp())
        assert key.created_at == 1700000000

    def test_null_plugin_config(self):
        config = KeyConfiguration.model_validate(
            {"provider": {"id": "openai", "config": None}, "middlewares": None}
        )

        assert config.provider.config == {}
        assert config.middlewares == []

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            KeyConfiguration(budget_limit=-1)

    def test_mock_provider(self):
        assert KeyConfiguration(provider=PluginConfig(id="mock")).is_mock is True
        assert KeyConfiguration(provider=PluginConfig(id="openai")).is_mock is False


def test_key_request_round_trip():
    configuration = KeyConfiguration(
        provider=PluginConfig(id="openai", config={"api_key": "sk"}),
        middlewares=[PluginConfig(id="rate_limit", config={"limit": 10, "period": 60})],
        budget_limit=5.0,
        reset_period=60,
    )

    request = KeyRequest.from_configuration("app", configuration, auto_renew=True, expires_at=123)

    assert request.configuration() == configuration
    assert request.auto_renew is True
    assert request.expires_at == 123


class TestInputs:
    @pytest.mark.parametrize("name", ["staging-app", "mobile client", "key_1"])
    def test_valid_names(self, name):
        assert KeyCreateInput(name=name).name == name

    @pytest.mark.parametrize("name", ["", "bad/name", "x" * 51, "semi;colon"])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            KeyCreateInput(name=name)

    def test_edit_input_all_optional(self):
        data = KeyEditInput().model_dump()

        assert data == {"name": None, "budget_limit": None, "reset_period": None, "expires_in_days": None}

    def test_negative_days_rejected(self):
        with pytest.raises(ValidationError):
            KeyCreateInput(name="ok", expires_in_days=-1)


def test_serialized_request_round_trips_through_key():
    request = KeyRequest(
        name="app",
        provider=PluginConfig(id="openai", config={"api_key": "sk", "model": "gpt-4o"}),
        middlewares=[
            PluginConfig(id="rate_limit", config={"limit": 10.0, "period": 60}),
            PluginConfig(id="pii_filter", config={"enabled": False, "pattern": ""}),
            PluginConfig(id="rate_limit", config={"limit": 1, "period": 1}),
        ],
        budget_limit=12.5,
        reset_period=86400,
    )
    body = request.model_dump(mode="json")

    # The backend echoes the submitted policy back under "configuration"
    key = Key.model_validate(
        {
            "id": 9,
            "name": body["name"],
            "auto_renew": body["auto_renew"],
            "expires_at": body["expires_at"],
            "configuration": {
                "provider": body["provider"],
                "middlewares": body["middlewares"],
                "budget_limit": body["budget_limit"],
                "reset_period": body["reset_period"],
            },
        }
    )

    assert key.configuration == request.configuration()
    assert key.configuration.model_dump(mode="json") == {
        k: body[k] for k in ("provider", "middlewares", "budget_limit", "reset_period")
    }


def test_budget_limit_absent_is_none():
    config = KeyConfiguration.model_validate({"provider": {"id": "openai"}, "middlewares": []})

    assert config.budget_limit is None
    assert config.effective_budget_limit == 0.0
