"""Project and video library routes."""

import asyncio
import logging

from api.auth import AuthUser
from api.dependencies import get_current_user, get_storage, get_store
from api.project_store import ProjectStore
from api.schemas import DeleteResponse, ProjectResponse, QuotaResponse, VideoListResponse
from fastapi import APIRouter, Depends, HTTPException, Query
from models.project import Project
from services.video_storage import VideoStorage, VideoStorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])


async def _owned_project(store: ProjectStore, project_id: str, user: AuthUser) -> Project:
    project = await store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Video not found")
    if project.user_id != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return project


@router.get("/api/projects/{project_id}", response_model=ProjectResponse, summary="Project status")
async def get_project(
    project_id: str,
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> dict:
    """Polled by the client every few seconds until the project is terminal."""
    project = await _owned_project(store, project_id, user)
    return project.to_dict()


@router.get("/api/video/{project_id}", response_model=ProjectResponse, summary="Get video")
async def get_video(
    project_id: str,
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> dict:
    project = await _owned_project(store, project_id, user)
    return project.to_dict()


@router.get("/api/videos", response_model=VideoListResponse, summary="List videos")
async def list_videos(
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> dict:
    """The user's projects, newest first. ``status=all`` means no filter."""
    if status == "all":
        status = None
    projects = await store.list_projects(user.id, status=status, search=search)
    return {"videos": [p.to_dict() for p in projects]}


@router.delete("/api/video/{project_id}", response_model=DeleteResponse, summary="Delete video")
async def delete_video(
    project_id: str,
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
    storage: VideoStorage | None = Depends(get_storage),
) -> dict:
    """Remove the stored artifact (best effort) and the project row."""
    project = await _owned_project(store, project_id, user)

    if project.video_url and storage is not None:
        try:
            await asyncio.to_thread(storage.delete_video, project.video_url)
        except VideoStorageError as e:
            logger.error(f"Failed to delete stored video for {project_id}: {e}")

    await store.delete_project(project_id)
    return {"success": True}


@router.get("/api/user/quota", response_model=QuotaResponse, summary="Plan and usage")
async def get_quota(
    user: AuthUser = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> dict:
    account = await store.get_or_create_user(user.id, user.email)
    quota = await store.check_quota(user.id)
    return {
        "planType": quota.plan_type.value,
        "videosUsed": quota.videos_used,
        "videosLimit": quota.videos_limit,
        "hasQuota": quota.allowed,
        "subscriptionStatus": account.subscription_status,
    }
