"""Project, user and quota models."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProjectStatus(str, Enum):
    """Lifecycle of a video project. Strictly linear; FAILED may end any phase."""

    SCRAPING = "scraping"
    ORCHESTRATING = "orchestrating"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProjectStatus.COMPLETED, ProjectStatus.FAILED)


class PlanType(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


# None means unlimited
PLAN_VIDEO_LIMITS: dict[PlanType, Optional[int]] = {
    PlanType.FREE: 1,
    PlanType.PRO: None,
    PlanType.ENTERPRISE: None,
}


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class Project:
    """One video generation request and its progress."""

    id: str
    website_url: str
    style_preset: str
    status: ProjectStatus = ProjectStatus.SCRAPING
    progress: int = 0
    user_id: Optional[str] = None
    custom_instructions: Optional[str] = None
    video_style: Optional[str] = None
    prompt: Optional[str] = None
    video_job_id: Optional[str] = None
    video_url: Optional[str] = None
    error: Optional[str] = None
    created_at: int = 0
    completed_at: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to the camelCase shape served by the API."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "websiteUrl": self.website_url,
            "stylePreset": self.style_preset,
            "customInstructions": self.custom_instructions,
            "videoStyle": self.video_style,
            "status": self.status.value,
            "progress": self.progress,
            "prompt": self.prompt,
            "videoJobId": self.video_job_id,
            "videoUrl": self.video_url,
            "error": self.error,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }


@dataclass
class User:
    """Account, plan and subscription state for one user."""

    id: str
    email: Optional[str] = None
    plan_type: PlanType = PlanType.FREE
    videos_used: int = 0
    videos_limit: Optional[int] = 1
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    subscription_status: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "planType": self.plan_type.value,
            "videosUsed": self.videos_used,
            "videosLimit": self.videos_limit,
            "subscriptionStatus": self.subscription_status,
        }


@dataclass
class QuotaStatus:
    """Result of a quota check."""

    allowed: bool
    plan_type: PlanType
    videos_used: int
    videos_limit: Optional[int]

    @property
    def upgrade_message(self) -> str:
        return (
            f"You've used {self.videos_used} of {self.videos_limit} videos. "
            "Upgrade to Pro for unlimited videos."
        )

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "planType": self.plan_type.value,
            "videosUsed": self.videos_used,
            "videosLimit": self.videos_limit,
        }
