"""
Cache Admin API Response Models

Pydantic models for the cache administration endpoints. Python attributes
are snake_case; the JSON wire format is camelCase through the alias
generator, which FastAPI applies when serializing response models.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CacheHealthResponse(CamelModel):
    """Backend health probe result. latencyMs is 0 when the probe failed."""

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Probe classification"
    )
    latency_ms: float = Field(..., ge=0, description="Round-trip time of the probe (ms)")
    error: str | None = Field(default=None, description="Failure reason when unhealthy")


class CacheStatsResponse(CamelModel):
    """
    Combined local and edge statistics.

    total_requests always equals hits + misses; CDN fields are 0 when the
    edge provider could not be reached.
    """

    total_keys: int = Field(..., ge=0, description="Live entries in the cache namespace")
    memory_usage_bytes: int = Field(..., ge=0, description="Backend-reported memory use")
    hits: int = Field(..., ge=0, description="Lookups that found a live entry")
    misses: int = Field(..., ge=0, description="Lookups that found nothing")
    hit_rate: float = Field(..., ge=0.0, le=1.0, description="hits / (hits + misses)")
    miss_rate: float = Field(..., ge=0.0, le=1.0, description="1 - hitRate, 0 with no requests")
    total_requests: int = Field(..., ge=0, description="hits + misses")
    cached_requests: int = Field(..., ge=0, description="Requests served from cache")
    cdn_hit_rate: float = Field(..., ge=0.0, le=1.0, description="Edge cache hit rate")
    cdn_total_requests: int = Field(..., ge=0, description="Edge request volume")
    edge_available: bool = Field(..., description="Whether edge figures were obtained")
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")


class ClearResponse(CamelModel):
    message: str = Field(..., description="Human-readable outcome")
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")


class WarmFailure(CamelModel):
    name: str = Field(..., description="Warm job name")
    reason: str = Field(..., description="Failure reason (error message, timeout or Cancelled)")


class WarmReportModel(CamelModel):
    succeeded: list[str] = Field(default_factory=list, description="Jobs that stored their key")
    failed: list[WarmFailure] = Field(default_factory=list, description="Jobs that did not")


class WarmResponse(CamelModel):
    message: str = Field(..., description="Human-readable outcome")
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    report: WarmReportModel = Field(..., description="Per-job outcome")


class ErrorResponse(CamelModel):
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    error_type: str | None = Field(default=None, description="Exception class")
    request_id: str | None = Field(default=None, description="Request correlation ID")
