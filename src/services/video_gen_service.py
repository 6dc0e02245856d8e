"""Video generation service - text-to-video job API (Sora-style endpoints).

The provider runs generation as an asynchronous job:
    POST /videos               -> create, returns job id
    GET  /videos/{id}          -> status + progress
    GET  /videos/{id}/content  -> finished MP4 bytes
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.openai.com/v1"

# Provider statuses mapped onto the three states the job driver cares about
_STATUS_MAP = {
    "queued": "in_progress",
    "in_progress": "in_progress",
    "processing": "in_progress",
    "completed": "completed",
    "succeeded": "completed",
    "failed": "failed",
    "cancelled": "failed",
    "canceled": "failed",
}


class VideoGenServiceError(Exception):
    """Raised when video generation fails."""


@dataclass
class VideoJobSnapshot:
    """One poll result for an external video job."""

    job_id: str
    status: str  # in_progress | completed | failed
    progress: float = 0.0
    error: Optional[str] = None


class VideoGenService:
    """Creates, polls and downloads text-to-video jobs."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "sora-2",
        size: str = "1280x720",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY", "")
        self.base_url = (base_url or os.getenv("VIDEO_API_BASE_URL") or DEFAULT_API_BASE).rstrip("/")
        self.model = model
        self.size = size
        self.client = httpx.AsyncClient(timeout=300.0, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def check_health(self) -> dict:
        if not self.api_key:
            return {
                "configured": False,
                "available": False,
                "error": "OPENAI_API_KEY not configured",
            }
        return {"configured": True, "available": True, "model": self.model}

    async def create_job(self, prompt: str, seconds: int) -> str:
        """Submit a generation job.

        Args:
            prompt: Final video prompt
            seconds: Clip length in seconds

        Returns:
            External job id

        Raises:
            VideoGenServiceError: On missing key, HTTP error or a response without an id
        """
        if not self.is_configured():
            raise VideoGenServiceError(
                "Video generation not configured. Set OPENAI_API_KEY in your .env file."
            )

        payload = {
            "model": self.model,
            "prompt": prompt,
            "seconds": str(seconds),
            "size": self.size,
        }

        logger.info(f"Submitting {seconds}s video job ({self.model}, {self.size}, {len(prompt)} chars)")

        try:
            response = await self.client.post(
                f"{self.base_url}/videos", headers=self._headers(), json=payload
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            raise VideoGenServiceError("Video job submission timed out")
        except httpx.HTTPStatusError as e:
            raise VideoGenServiceError(f"Video API error: {self._error_detail(e.response)}")
        except Exception as e:
            raise VideoGenServiceError(f"Video job submission failed: {e}")

        if not isinstance(data, dict):
            raise VideoGenServiceError("Video API returned an unexpected response")

        job_id = data.get("id")
        if not job_id:
            raise VideoGenServiceError("Video API returned no job id")

        logger.info(f"Video job created: {job_id}")
        return job_id

    async def get_job(self, job_id: str) -> VideoJobSnapshot:
        """Read the current state of a job.

        Raises:
            VideoGenServiceError: When the status could not be read. The job driver
                treats this as transient and keeps polling.
        """
        try:
            response = await self.client.get(
                f"{self.base_url}/videos/{job_id}", headers=self._headers(), timeout=30.0
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise VideoGenServiceError(f"Video status error: {self._error_detail(e.response)}")
        except Exception as e:
            raise VideoGenServiceError(f"Video status read failed: {e}")

        if not isinstance(data, dict):
            raise VideoGenServiceError(f"Video status for {job_id} is not an object")

        raw_status = str(data.get("status", "")).lower()
        status = _STATUS_MAP.get(raw_status, "in_progress")

        error = None
        if status == "failed":
            err = data.get("error")
            if isinstance(err, dict):
                error = err.get("message")
            elif err:
                error = str(err)

        try:
            progress = float(data.get("progress") or 0)
        except (TypeError, ValueError):
            progress = 0.0

        return VideoJobSnapshot(job_id=job_id, status=status, progress=progress, error=error)

    async def download(self, job_id: str) -> bytes:
        """Fetch the finished video.

        Raises:
            VideoGenServiceError: On HTTP failure or an empty body
        """
        try:
            response = await self.client.get(
                f"{self.base_url}/videos/{job_id}/content",
                headers=self._headers(),
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VideoGenServiceError(f"Video download error: {self._error_detail(e.response)}")
        except Exception as e:
            raise VideoGenServiceError(f"Video download failed: {e}")

        if not response.content:
            raise VideoGenServiceError(f"Video job {job_id} returned an empty file")

        logger.info(f"Downloaded video {job_id} ({len(response.content) / 1024 / 1024:.1f} MB)")
        return response.content

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            data = response.json()
            err = data.get("error", data)
            if isinstance(err, dict):
                return err.get("message") or str(err)
            return str(err)
        except Exception:
            return response.text or f"HTTP {response.status_code}"

    async def close(self) -> None:
        await self.client.aclose()
