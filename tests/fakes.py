"""In-process stand-ins for the external collaborators."""

from typing import Optional

from services.ai_service import AIServiceError
from services.video_gen_service import VideoJobSnapshot
from services.video_stitcher import StitchResult
from services.video_storage import VideoStorageError


class FakeAIService:
    """AIService stand-in that returns canned JSON or raises."""

    def __init__(self, response: Optional[dict] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def generate_json(self, prompt, system_instruction=None, temperature=0.7, operation="generate"):
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "temperature": temperature,
                "operation": operation,
            }
        )
        if self.error:
            raise self.error
        if self.response is None:
            raise AIServiceError("no canned response")
        return self.response


class FakeVideoService:
    """Video job API that replays a scripted sequence of poll results.

    ``script`` entries are VideoJobSnapshot objects or exceptions. Once the
    script runs out, the last entry repeats.
    """

    def __init__(self, script=None, video: bytes = b"clip", submit_error: Optional[Exception] = None):
        self.script = list(script or [VideoJobSnapshot("job", "completed", 100.0)])
        self.video = video
        self.submit_error = submit_error
        self.created: list[tuple[str, int]] = []
        self.polls = 0
        self.downloads = 0
        self._position = 0

    def is_configured(self) -> bool:
        return True

    async def create_job(self, prompt: str, seconds: int) -> str:
        if self.submit_error:
            raise self.submit_error
        self.created.append((prompt, seconds))
        self._position = 0
        return f"job_{len(self.created)}"

    async def get_job(self, job_id: str) -> VideoJobSnapshot:
        self.polls += 1
        entry = self.script[min(self._position, len(self.script) - 1)]
        self._position += 1
        if isinstance(entry, Exception):
            raise entry
        return VideoJobSnapshot(job_id, entry.status, entry.progress, entry.error)

    async def download(self, job_id: str) -> bytes:
        self.downloads += 1
        return self.video + job_id.encode()

    async def check_health(self) -> dict:
        return {"configured": True, "available": True}

    async def close(self) -> None:
        pass


class FakeStitcher:
    def __init__(self):
        self.calls = 0

    async def concatenate(self, clip_a, clip_b, options):
        self.calls += 1
        data = clip_a + clip_b
        return StitchResult(video=data, duration=24.0, size=len(data))


class FakeStorage:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: dict[str, bytes] = {}
        self.deleted: list[str] = []

    def upload_video(self, project_id: str, data: bytes) -> str:
        if self.fail:
            raise VideoStorageError("bucket unavailable")
        self.uploads[project_id] = data
        return f"https://cdn.example.test/videos/{project_id}.mp4"

    def delete_video(self, url_or_key: str) -> bool:
        self.deleted.append(url_or_key)
        return True


async def no_sleep(_seconds: float) -> None:
    return None


