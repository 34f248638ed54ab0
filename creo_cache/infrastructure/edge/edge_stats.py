"""
Edge (CDN) Statistics Adapter

Reads hit rate and request volume from the content-delivery layer's
reporting endpoint. The adapter is stateless: every call is a fresh request
and nothing is cached, so edge figures in a stats response are never stale.

Any failure (not configured, connect error, timeout, non-2xx status,
unexpected body) is raised as RemoteUnavailableError; callers merging edge
figures into a larger response decide how to degrade.

Author: Creo Platform Team
Date: 2026-01-14
"""

import math
from dataclasses import dataclass
from typing import Any

import httpx

from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import RemoteUnavailableError
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)

_HIT_RATE_FIELDS = ("hitRate", "hit_rate", "cacheHitRatio")
_REQUEST_FIELDS = ("totalRequests", "total_requests", "requests")


@dataclass(frozen=True)
class EdgeStatistics:
    hit_rate: float
    total_requests: int

    @classmethod
    def unavailable(cls) -> "EdgeStatistics":
        return cls(hit_rate=0.0, total_requests=0)


def _first_present(payload: dict[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        if name in payload:
            return payload[name]
    raise KeyError(names[0])


class EdgeStatsAdapter:
    """
    httpx client for the edge statistics endpoint.

    Usage:
        async with EdgeStatsAdapter(url, token=token, timeout=3.0) as edge:
            stats = await edge.fetch_edge_stats()

    Args:
        url: Reporting endpoint; None leaves the adapter unconfigured
        token: Optional bearer token
        timeout: Whole-request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        url: str | None,
        token: str | None = None,
        timeout: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), headers=headers, transport=transport
        )
        self._timeout = timeout

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "EdgeStatsAdapter":
        edge = settings.edge
        return cls(
            edge.EDGE_STATS_URL,
            token=edge.EDGE_STATS_TOKEN,
            timeout=edge.EDGE_STATS_TIMEOUT,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._url)

    async def __aenter__(self) -> "EdgeStatsAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_edge_stats(self) -> EdgeStatistics:
        """
        Fetch current edge statistics.

        STAGE-EDGE.1

        Raises:
            RemoteUnavailableError: On any failure to obtain usable figures
        """
        if not self._url:
            raise RemoteUnavailableError("Edge statistics endpoint is not configured")

        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Edge stats request timed out", stage="EDGE.1", timeout=self._timeout)
            raise RemoteUnavailableError.from_exception(
                e, message=f"Edge statistics timed out after {self._timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Edge stats request rejected", stage="EDGE.1", status_code=e.response.status_code
            )
            raise RemoteUnavailableError.from_exception(
                e,
                message=f"Edge statistics returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Edge stats request failed", stage="EDGE.1", error=str(e))
            raise RemoteUnavailableError.from_exception(
                e, message=f"Edge statistics unreachable: {e}"
            ) from e
        except ValueError as e:
            raise RemoteUnavailableError.from_exception(
                e, message="Edge statistics response is not JSON"
            ) from e

        return self._parse(payload)

    @staticmethod
    def _parse(payload: Any) -> EdgeStatistics:
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        try:
            hit_rate = float(_first_present(payload, _HIT_RATE_FIELDS))
            total_requests = int(_first_present(payload, _REQUEST_FIELDS))
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise RemoteUnavailableError(
                "Edge statistics response is missing hit rate or request count",
                details={"original_error": e.__class__.__name__},
            ) from e

        if not math.isfinite(hit_rate) or hit_rate < 0 or total_requests < 0:
            logger.warning(
                "Edge stats response out of range",
                stage="EDGE.2",
                hit_rate=hit_rate,
                total_requests=total_requests,
            )
            raise RemoteUnavailableError(
                "Edge statistics response has an out-of-range hit rate or request count",
                details={"hit_rate": str(hit_rate), "total_requests": total_requests},
            )

        # Some providers report a percentage
        if hit_rate > 1:
            hit_rate = hit_rate / 100
        return EdgeStatistics(hit_rate=min(hit_rate, 1.0), total_requests=total_requests)
