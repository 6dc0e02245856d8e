"""Pydantic request/response models for the DemoDrop API.

Wire names are camelCase; Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Polling cadence for clients, in seconds
CLIENT_POLL_MIN_INTERVAL = 2
CLIENT_POLL_MAX_INTERVAL = 5
PROGRESS_SMOOTHING_TICK_MS = 50
PROGRESS_SMOOTHING_FACTOR = 0.1


def progress_smoothing_step(displayed: float, actual: float) -> float:
    """Next displayed progress value for one animation tick.

    Moves the displayed bar a tenth of the way toward the server value on
    every 50ms tick; purely cosmetic.
    """
    return displayed + (actual - displayed) * PROGRESS_SMOOTHING_FACTOR


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    services: dict = Field(default_factory=dict)

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy", "services": {}}]}}


class GenerateVideoResponse(CamelModel):
    """Returned as soon as a project is queued."""

    project_id: str
    status: str = "queued"
    message: str = "Video generation started"


class ProcessVideoResponse(CamelModel):
    status: str
    video_url: str | None = None
    error: str | None = None


class ProjectResponse(CamelModel):
    """One project as the status poller sees it."""

    id: str
    user_id: str | None = None
    website_url: str
    style_preset: str
    custom_instructions: str | None = None
    video_style: str | None = None
    status: str
    progress: int = Field(ge=0, le=100)
    prompt: str | None = None
    video_job_id: str | None = None
    video_url: str | None = None
    error: str | None = None
    created_at: int
    completed_at: int | None = None


class VideoListResponse(BaseModel):
    videos: list[ProjectResponse]


class QuotaResponse(CamelModel):
    plan_type: str
    videos_used: int
    videos_limit: int | None = None
    has_quota: bool
    subscription_status: str | None = None


class DeleteResponse(BaseModel):
    success: bool


class WebhookResponse(CamelModel):
    received: bool = True
    event_id: str
    duplicate: bool | None = None


# =============================================================================
# Request Models
# =============================================================================


class GenerateVideoRequest(CamelModel):
    """Body of POST /api/generate-video.

    ``website_url`` and ``style_preset`` are validated by the handler so the
    quota check runs first and errors carry the documented messages.
    """

    website_url: str | None = None
    style_preset: str | None = None
    custom_instructions: str | None = Field(default=None, max_length=2000)
    video_style: str | None = None
    youtube_url: str | None = None
    instagram_url: str | None = None
    voice_note_url: str | None = None


class ProcessVideoRequest(CamelModel):
    """Body of the internal POST /api/process-video."""

    project_id: str
    website_url: str
    style_preset: str
    custom_instructions: str | None = None
    video_style: str | None = None
