"""Video generation routes: public submit and internal processing."""

import asyncio
import logging
import uuid

from api.auth import AuthUser
from api.dependencies import get_current_user, get_pipeline, get_store, verify_internal_token
from api.project_store import ProjectStore
from api.schemas import (
    GenerateVideoRequest,
    GenerateVideoResponse,
    ProcessVideoRequest,
    ProcessVideoResponse,
)
from fastapi import APIRouter, Depends, HTTPException
from models.project import QuotaStatus
from services.generation_pipeline import GenerationPipeline, GenerationRequest, RunAlreadyStartedError
from services.prompt_builder import STYLE_PRESETS, is_valid_preset

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])

# Keep references to background tasks to prevent garbage collection
_background_tasks: set = set()


def _invalid_preset_detail() -> str:
    return f"Invalid style preset. Choose one of: {', '.join(STYLE_PRESETS)}"


def _quota_exceeded(user_id: str, quota: QuotaStatus) -> HTTPException:
    logger.info(f"Quota exhausted for user {user_id} ({quota.videos_used}/{quota.videos_limit})")
    return HTTPException(
        status_code=403,
        detail={
            "error": "Quota exceeded",
            "message": quota.upgrade_message,
            "videosUsed": quota.videos_used,
            "videosLimit": quota.videos_limit,
        },
    )


@router.post(
    "/api/generate-video",
    response_model=GenerateVideoResponse,
    summary="Queue a demo video",
)
async def generate_video(
    request: GenerateVideoRequest,
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> dict:
    """Count the video against the quota, create a project and start the pipeline."""
    await store.get_or_create_user(user.id, user.email)

    quota = await store.check_quota(user.id)
    if not quota.allowed:
        raise _quota_exceeded(user.id, quota)

    website_url = (request.website_url or "").strip()
    if not website_url:
        raise HTTPException(status_code=400, detail="Website URL is required")
    if not is_valid_preset(request.style_preset):
        raise HTTPException(status_code=400, detail=_invalid_preset_detail())

    # A concurrent submit may have taken the last slot since the check above
    if not await store.record_usage(user.id):
        raise _quota_exceeded(user.id, await store.check_quota(user.id))

    project_id = str(uuid.uuid4())
    await store.create_project(
        project_id,
        website_url=website_url,
        style_preset=request.style_preset,
        user_id=user.id,
        custom_instructions=request.custom_instructions,
        video_style=request.video_style,
    )

    task = asyncio.create_task(pipeline.run(GenerationRequest(
        project_id=project_id,
        website_url=website_url,
        style_preset=request.style_preset,
        custom_instructions=request.custom_instructions,
        video_style=request.video_style,
        youtube_url=request.youtube_url,
        instagram_url=request.instagram_url,
        voice_note_url=request.voice_note_url,
    )))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    logger.info(f"Queued project {project_id} for {website_url} ({request.style_preset})")
    return {"projectId": project_id, "status": "queued", "message": "Video generation started"}


@router.post(
    "/api/process-video",
    response_model=ProcessVideoResponse,
    response_model_exclude_none=True,
    summary="Run the pipeline for an existing project",
    dependencies=[Depends(verify_internal_token)],
)
async def process_video(
    request: ProcessVideoRequest,
    store: ProjectStore = Depends(get_store),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> dict:
    """Internal endpoint: runs the whole pipeline inside the request.

    Only a project that has not been started yet can be processed; anything
    else is a 409.
    """
    if not is_valid_preset(request.style_preset):
        raise HTTPException(status_code=400, detail=_invalid_preset_detail())
    if await store.get_project(request.project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")

    try:
        project = await pipeline.run(GenerationRequest(
            project_id=request.project_id,
            website_url=request.website_url,
            style_preset=request.style_preset,
            custom_instructions=request.custom_instructions,
            video_style=request.video_style,
        ))
    except RunAlreadyStartedError as e:
        raise HTTPException(status_code=409, detail="Project has already been processed") from e

    return {
        "status": project.status.value,
        "videoUrl": project.video_url,
        "error": project.error,
    }
