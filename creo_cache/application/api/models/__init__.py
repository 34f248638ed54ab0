from .cache import (
    CacheHealthResponse,
    CacheStatsResponse,
    ClearResponse,
    ErrorResponse,
    WarmFailure,
    WarmReportModel,
    WarmResponse,
)

__all__ = [
    "CacheHealthResponse",
    "CacheStatsResponse",
    "ClearResponse",
    "ErrorResponse",
    "WarmFailure",
    "WarmReportModel",
    "WarmResponse",
]
