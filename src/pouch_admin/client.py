"""HTTP client for the key-management API."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from pouch_admin.config import Settings, get_settings
from pouch_admin.exceptions import APIError
from pouch_admin.logging_config import get_logger
from pouch_admin.models.key import CreatedKey, Key, KeyRequest
from pouch_admin.models.schema import PluginCatalog

logger = get_logger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """The backend's ``{"error": ...}`` message, or a generic one."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"API error: {resp.status_code}"


class PouchAPIClient:
    """Async client for key and plugin-catalog endpoints.

    No retries: a failed call raises APIError with the backend's message and
    the caller decides whether to resubmit.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.base_url = settings.api_url.rstrip("/")
        self.timeout = settings.request_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                follow_redirects=True,
                timeout=self.timeout,
            )
        return self._client

    def _api_path(self, path: str) -> str:
        return path.lstrip("/")

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            resp = await client.request(method, self._api_path(path), **kwargs)
        except httpx.RequestError as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise APIError(str(e) or e.__class__.__name__) from e

        if resp.is_error:
            message = _error_message(resp)
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                status_code=resp.status_code,
                error=message,
            )
            raise APIError(message, status_code=resp.status_code)

        logger.debug("api_request", method=method, path=path, status_code=resp.status_code)
        return resp

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> PouchAPIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # === Keys ===

    async def list_keys(self) -> list[Key]:
        resp = await self._request("GET", "config/app-keys", headers={"Cache-Control": "no-store"})
        return [Key.model_validate(item) for item in resp.json() or []]

    async def create_key(self, request: KeyRequest) -> str:
        """Create a key and return its plaintext secret (shown once)."""
        resp = await self._request("POST", "config/app-keys", json=request.model_dump(mode="json"))
        try:
            secret = CreatedKey.model_validate(resp.json()).key
        except (ValidationError, ValueError) as e:
            logger.warning("create_key_bad_response", status_code=resp.status_code)
            raise APIError("Key created but the response carried no secret", status_code=resp.status_code) from e
        logger.info("key_created", name=request.name, provider=request.provider.id)
        return secret

    async def update_key(self, key_id: int, request: KeyRequest) -> None:
        await self._request("PUT", f"config/app-keys/{key_id}", json=request.model_dump(mode="json"))
        logger.info("key_updated", key_id=key_id)

    async def delete_key(self, key_id: int) -> None:
        await self._request("DELETE", f"config/app-keys/{key_id}")
        logger.info("key_revoked", key_id=key_id)

    # === Plugin catalogs ===

    async def list_middlewares(self) -> PluginCatalog:
        resp = await self._request("GET", "config/middlewares", headers={"Cache-Control": "no-store"})
        return PluginCatalog.from_payload(resp.json().get("middlewares"))

    async def list_providers(self) -> PluginCatalog:
        resp = await self._request("GET", "config/providers", headers={"Cache-Control": "no-store"})
        return PluginCatalog.from_payload(resp.json().get("providers"))


def get_api_client() -> PouchAPIClient:
    return PouchAPIClient()
