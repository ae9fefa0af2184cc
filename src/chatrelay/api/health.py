from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from chatrelay.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request) -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": settings.app_version,
            "adapter_ready": getattr(request.app.state, "adapter", None) is not None,
            "shared_key_configured": settings.openai_api_key is not None,
        }
    )


@router.get("/live")
async def liveness() -> JSONResponse:
    """Kubernetes liveness probe; always returns 200 if the process is running."""
    return JSONResponse(content={"status": "alive"})
