"""
Upstream Catalog Client

Fetches the slowly-changing catalog data the warmer pre-populates: stock
media providers and categories, AI style and preset lists, and platform
statistics. Failures surface as RemoteUnavailableError so the warmer can
record them against the job that made the call.

Author: Creo Platform Team
Date: 2026-01-14
"""

from typing import Any

import httpx

from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import RemoteUnavailableError
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


class CatalogClient:
    """
    Thin async client over the catalog API.

    Endpoints (relative to the base URL):
        GET /stock/providers
        GET /stock/categories
        GET /ai/styles
        GET /ai/presets
        GET /admin/system-stats
    """

    def __init__(
        self,
        base_url: str | None,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or "",
            timeout=httpx.Timeout(timeout),
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "CatalogClient":
        upstream = settings.upstream
        return cls(
            upstream.UPSTREAM_API_BASE_URL,
            token=upstream.UPSTREAM_API_TOKEN,
            timeout=upstream.UPSTREAM_TIMEOUT,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> Any:
        if not self._base_url:
            raise RemoteUnavailableError("Upstream catalog API is not configured")
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteUnavailableError.from_exception(
                e,
                message=f"Catalog {path} returned HTTP {e.response.status_code}",
                path=path,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteUnavailableError.from_exception(
                e, message=f"Catalog {path} unreachable: {e.__class__.__name__}", path=path
            ) from e
        except ValueError as e:
            raise RemoteUnavailableError.from_exception(
                e, message=f"Catalog {path} returned invalid JSON", path=path
            ) from e

        logger.debug("Catalog fetched", stage="UPSTREAM.1", path=path)
        # The catalog API wraps results as {"data": ...}; bare payloads pass through
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    async def fetch_stock_providers(self) -> Any:
        return await self._get_json("/stock/providers")

    async def fetch_stock_categories(self) -> Any:
        return await self._get_json("/stock/categories")

    async def fetch_ai_styles(self) -> Any:
        return await self._get_json("/ai/styles")

    async def fetch_ai_presets(self) -> Any:
        return await self._get_json("/ai/presets")

    async def fetch_system_stats(self) -> Any:
        return await self._get_json("/admin/system-stats")
