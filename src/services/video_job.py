"""Video job driver - submit, poll, download.

One driver run owns one external clip:

    submit -> poll until done -> COMPLETED | FAILED | TIMED_OUT

Submission errors propagate to the caller. Poll reads that fail are treated
as transient and simply use up an attempt. The loop is bounded only by
``max_attempts``; there is no cancellation and no backoff. Every terminal
outcome other than COMPLETED is written to the project as ``failed`` with an
error message before the driver returns.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from models.project import ProjectStatus
from services.video_gen_service import VideoGenService, VideoGenServiceError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_ATTEMPTS = 60

TIMEOUT_MESSAGE = "Generation timeout - please try again"
DEFAULT_FAILURE_MESSAGE = "Video generation failed"


class VideoJobState(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class VideoJobResult:
    state: VideoJobState
    job_id: Optional[str] = None
    video: Optional[bytes] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state == VideoJobState.COMPLETED


def map_progress(raw: float, start: int, end: int) -> int:
    """Map provider progress (0-100) onto the project range [start, end]."""
    raw = min(max(raw, 0.0), 100.0)
    return min(end, start + round(raw * (end - start) / 100))


class VideoJobDriver:
    """Drives one external video job to a terminal state."""

    def __init__(
        self,
        video_service: VideoGenService,
        store,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            video_service: External job API client
            store: Project store; only ``update_project`` is used
            poll_interval: Seconds between status reads
            max_attempts: Status reads before giving up
            sleep: Injected so tests can run the loop without waiting
        """
        self.video_service = video_service
        self.store = store
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.sleep = sleep

    async def _fail(self, project_id: str, message: str) -> None:
        await self.store.update_project(project_id, status=ProjectStatus.FAILED, error=message)

    async def run(
        self,
        project_id: str,
        prompt: str,
        seconds: int,
        progress_start: int,
        progress_end: int,
    ) -> VideoJobResult:
        """Submit ``prompt`` and poll until the clip is ready or the budget runs out.

        Raises:
            VideoGenServiceError: If the job could not be submitted
        """
        job_id = await self.video_service.create_job(prompt, seconds)
        await self.store.update_project(project_id, video_job_id=job_id, progress=progress_start)
        logger.info(f"Video job {job_id} submitted for project {project_id} ({seconds}s)")

        last_status = "submitted"
        for attempt in range(1, self.max_attempts + 1):
            await self.sleep(self.poll_interval)

            try:
                snapshot = await self.video_service.get_job(job_id)
            except VideoGenServiceError as e:
                logger.warning(f"Poll {attempt}/{self.max_attempts} for {job_id} failed: {e}")
                last_status = "unreadable"
                continue

            last_status = snapshot.status
            logger.debug(
                f"Poll {attempt}/{self.max_attempts} for {job_id}: {snapshot.status} {snapshot.progress:.0f}%"
            )

            if snapshot.status == "failed":
                message = snapshot.error or DEFAULT_FAILURE_MESSAGE
                logger.error(f"Video job {job_id} failed: {message}")
                await self._fail(project_id, message)
                return VideoJobResult(VideoJobState.FAILED, job_id, error=message, attempts=attempt)

            if snapshot.status == "completed":
                try:
                    video = await self.video_service.download(job_id)
                except VideoGenServiceError as e:
                    logger.error(f"Video job {job_id} completed but download failed: {e}")
                    await self._fail(project_id, str(e))
                    return VideoJobResult(VideoJobState.FAILED, job_id, error=str(e), attempts=attempt)

                await self.store.update_project(project_id, progress=progress_end)
                logger.info(f"Video job {job_id} completed after {attempt} poll(s)")
                return VideoJobResult(VideoJobState.COMPLETED, job_id, video=video, attempts=attempt)

            await self.store.update_project(
                project_id, progress=map_progress(snapshot.progress, progress_start, progress_end)
            )

        logger.error(f"Video job {job_id} timed out after {self.max_attempts} polls (last status {last_status})")
        await self._fail(project_id, TIMEOUT_MESSAGE)
        return VideoJobResult(
            VideoJobState.TIMED_OUT, job_id, error=TIMEOUT_MESSAGE, attempts=self.max_attempts
        )
