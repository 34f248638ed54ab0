"""
Unit Tests for CatalogClient
"""

import httpx
import pytest

from creo_cache.core.exceptions import RemoteUnavailableError
from creo_cache.infrastructure.upstream.catalog_client import CatalogClient

BASE_URL = "https://api.example.test"


def _catalog_transport() -> httpx.MockTransport:
    routes = {
        "/stock/providers": {"data": ["unsplash", "pexels"]},
        "/stock/categories": ["nature", "business"],
        "/ai/styles": {"data": [{"id": "watercolor"}]},
        "/ai/presets": {"data": []},
        "/admin/system-stats": {"data": {"totalUsers": 10}},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path not in routes:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=routes[request.url.path])

    return httpx.MockTransport(handler)


@pytest.fixture
async def catalog():
    client = CatalogClient(BASE_URL, token="catalog-token", transport=_catalog_transport())
    yield client
    await client.aclose()


@pytest.mark.unit
class TestCatalogClient:
    """Test suite for CatalogClient."""

    @pytest.mark.asyncio
    async def test_fetch_unwraps_data_envelope(self, catalog):
        """Test that {"data": ...} payloads are unwrapped."""
        assert await catalog.fetch_stock_providers() == ["unsplash", "pexels"]
        assert await catalog.fetch_system_stats() == {"totalUsers": 10}

    @pytest.mark.asyncio
    async def test_fetch_passes_bare_payload_through(self, catalog):
        """Test that unwrapped payloads are returned as-is."""
        assert await catalog.fetch_stock_categories() == ["nature", "business"]

    @pytest.mark.asyncio
    async def test_http_error_raises_remote_unavailable(self):
        """Test that a non-2xx response raises RemoteUnavailableError with the path."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        client = CatalogClient(BASE_URL, transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(RemoteUnavailableError) as exc_info:
                await client.fetch_ai_styles()
        finally:
            await client.aclose()

        assert exc_info.value.details["path"] == "/ai/styles"

    @pytest.mark.asyncio
    async def test_unconfigured_client_raises(self):
        """Test that fetching without a base URL raises RemoteUnavailableError."""
        client = CatalogClient(None)
        try:
            assert client.is_configured is False
            with pytest.raises(RemoteUnavailableError):
                await client.fetch_ai_presets()
        finally:
            await client.aclose()
