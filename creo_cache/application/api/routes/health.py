"""
Service Liveness Route

Process liveness only: it answers as long as the event loop is serving
requests and never touches the cache backend. Backend health lives at
/admin/cache/health.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from creo_cache.application.api.dependencies import SettingsDep

router = APIRouter(prefix="/health", tags=["Health"])


class LivenessResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str


@router.get("", response_model=LivenessResponse)
async def liveness(settings: SettingsDep):
    return {
        "status": "alive",
        "service": settings.app.APP_NAME,
        "version": settings.app.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
