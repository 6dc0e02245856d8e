"""Core routes for the DemoDrop API (root and health check)."""

import shutil

from api.dependencies import get_ai_service, get_storage, get_video_gen_service
from api.schemas import HealthResponse
from fastapi import APIRouter

router = APIRouter(tags=["Core"])

API_VERSION = "1.0.0"


@router.get("/", summary="API root", description="Returns API name and version.")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "DemoDrop API", "version": API_VERSION}


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns server health and which collaborators are configured.",
)
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "services": {
            "video": await get_video_gen_service().check_health(),
            "ai": {"configured": get_ai_service().is_configured},
            "storage": {"configured": get_storage() is not None},
            "ffmpeg": {"available": shutil.which("ffmpeg") is not None},
        },
    }
