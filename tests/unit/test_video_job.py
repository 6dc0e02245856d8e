"""Unit tests for the submit/poll/download video job driver."""

import pytest
import pytest_asyncio

from fakes import FakeVideoService, no_sleep
from models.project import ProjectStatus
from services.video_gen_service import VideoGenServiceError, VideoJobSnapshot
from services.video_job import (
    DEFAULT_FAILURE_MESSAGE,
    TIMEOUT_MESSAGE,
    VideoJobDriver,
    VideoJobState,
    map_progress,
)


def snap(status: str, progress: float = 0.0, error=None) -> VideoJobSnapshot:
    return VideoJobSnapshot("job", status, progress, error)


@pytest_asyncio.fixture
async def project(store):
    return await store.create_project("proj_1", "https://acme.test", "enterprise-saas")


class TestMapProgress:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,expected",
        [(0, 30), (50, 60), (100, 90), (-10, 30), (250, 90)],
    )
    def test_maps_into_range(self, raw, expected):
        assert map_progress(raw, 30, 90) == expected

    @pytest.mark.unit
    def test_monotonic(self):
        values = [map_progress(raw, 30, 60) for raw in range(0, 101, 5)]
        assert values == sorted(values)
        assert all(30 <= v <= 60 for v in values)


class TestVideoJobDriver:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_completes_and_downloads(self, store, project):
        service = FakeVideoService([snap("in_progress", 50), snap("completed", 100)])
        driver = VideoJobDriver(service, store, sleep=no_sleep)

        result = await driver.run(project.id, "prompt", 12, 30, 60)

        assert result.state == VideoJobState.COMPLETED
        assert result.succeeded
        assert result.video == b"clipjob_1"
        assert result.attempts == 2
        assert service.created == [("prompt", 12)]

        stored = await store.get_project(project.id)
        assert stored.video_job_id == "job_1"
        assert stored.progress == 60
        assert stored.status == ProjectStatus.SCRAPING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_progress_written_while_polling(self, store, project):
        service = FakeVideoService([snap("in_progress", 50), snap("failed", 0, "content policy")])
        driver = VideoJobDriver(service, store, sleep=no_sleep)

        await driver.run(project.id, "prompt", 12, 30, 90)

        stored = await store.get_project(project.id)
        # 30 + 50% of 60; the failed poll does not lower it
        assert stored.progress == 60

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_copies_provider_error(self, store, project):
        service = FakeVideoService([snap("failed", 0, "content policy")])
        result = await VideoJobDriver(service, store, sleep=no_sleep).run(project.id, "p", 8, 30, 90)

        assert result.state == VideoJobState.FAILED
        assert result.error == "content policy"
        assert service.downloads == 0

        stored = await store.get_project(project.id)
        assert stored.status == ProjectStatus.FAILED
        assert stored.error == "content policy"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_without_message(self, store, project):
        service = FakeVideoService([snap("failed")])
        result = await VideoJobDriver(service, store, sleep=no_sleep).run(project.id, "p", 8, 30, 90)

        assert result.error == DEFAULT_FAILURE_MESSAGE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_times_out_after_exactly_max_attempts(self, store, project, caplog):
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        service = FakeVideoService([snap("in_progress", 10)])
        driver = VideoJobDriver(service, store, poll_interval=5.0, max_attempts=4, sleep=record_sleep)

        result = await driver.run(project.id, "p", 8, 30, 90)

        assert result.state == VideoJobState.TIMED_OUT
        assert result.attempts == 4
        assert service.polls == 4
        assert sleeps == [5.0] * 4

        stored = await store.get_project(project.id)
        assert stored.status == ProjectStatus.FAILED
        assert stored.error == TIMEOUT_MESSAGE == "Generation timeout - please try again"
        assert "last status in_progress" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transient_poll_errors_use_attempts(self, store, project):
        service = FakeVideoService(
            [VideoGenServiceError("502"), VideoGenServiceError("502"), snap("completed", 100)]
        )
        result = await VideoJobDriver(service, store, max_attempts=3, sleep=no_sleep).run(
            project.id, "p", 8, 30, 90
        )

        assert result.succeeded
        assert result.attempts == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transient_errors_can_exhaust_budget(self, store, project, caplog):
        service = FakeVideoService([VideoGenServiceError("502")])
        result = await VideoJobDriver(service, store, max_attempts=2, sleep=no_sleep).run(
            project.id, "p", 8, 30, 90
        )

        assert result.state == VideoJobState.TIMED_OUT
        assert "last status unreadable" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_submission_error_propagates(self, store, project):
        service = FakeVideoService(submit_error=VideoGenServiceError("invalid prompt"))

        with pytest.raises(VideoGenServiceError):
            await VideoJobDriver(service, store, sleep=no_sleep).run(project.id, "p", 8, 30, 90)

        assert service.polls == 0
