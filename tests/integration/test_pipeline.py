"""Integration tests for the generation pipeline.

Runs the real scraper, analyzer, orchestrator, splitter and job driver with
mocked HTTP, a scripted video API, an in-memory stitcher and fake storage.
"""

import httpx
import pytest
import pytest_asyncio

from fakes import FakeAIService, FakeStitcher, FakeStorage, FakeVideoService, no_sleep
from models.project import ProjectStatus
from services.ai_service import AIServiceError
from services.generation_pipeline import (
    GenerationPipeline,
    GenerationRequest,
    GenerationStrategy,
    RunAlreadyStartedError,
)
from services.product_analyzer import ProductAnalyzer
from services.prompt_orchestrator import PromptOrchestrator
from services.prompt_splitter import PromptSplitter
from services.scraper import WebsiteScraper
from services.video_gen_service import VideoGenServiceError, VideoJobSnapshot
from services.video_job import TIMEOUT_MESSAGE

PROJECT_ID = "proj_1"
WEBSITE_URL = "https://www.acme-analytics.com"


@pytest_asyncio.fixture
async def scraper(sample_markdown):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"title": "Acme Analytics", "content": sample_markdown})

    website_scraper = WebsiteScraper(api_key="key", transport=httpx.MockTransport(handler))
    yield website_scraper
    await website_scraper.close()


@pytest_asyncio.fixture
async def project(store):
    return await store.create_project(PROJECT_ID, WEBSITE_URL, "enterprise-saas", user_id="user_1")


@pytest.fixture
def progress_log(store, monkeypatch):
    """Every progress value the pipeline writes, in order."""
    written = []
    original = store.update_project

    async def recording_update(project_id, **fields):
        if "progress" in fields:
            written.append(fields["progress"])
        return await original(project_id, **fields)

    monkeypatch.setattr(store, "update_project", recording_update)
    return written


def build_pipeline(store, scraper, video_service, storage, strategy, ai=None, stitcher=None, max_attempts=5):
    ai = ai or FakeAIService(error=AIServiceError("offline"))
    return GenerationPipeline(
        store=store,
        scraper=scraper,
        analyzer=ProductAnalyzer(ai),
        orchestrator=PromptOrchestrator(ai),
        splitter=PromptSplitter(ai),
        video_service=video_service,
        stitcher=stitcher or FakeStitcher(),
        storage=storage,
        strategy=strategy,
        poll_interval=0,
        max_attempts=max_attempts,
        sleep=no_sleep,
    )


def request() -> GenerationRequest:
    return GenerationRequest(PROJECT_ID, WEBSITE_URL, "enterprise-saas", custom_instructions="Show the dark mode")


class TestSingleClip:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_completes(self, store, project, scraper, progress_log):
        video_service = FakeVideoService(
            [VideoJobSnapshot("job", "in_progress", 50), VideoJobSnapshot("job", "completed", 100)]
        )
        storage = FakeStorage()
        pipeline = build_pipeline(store, scraper, video_service, storage, GenerationStrategy.SINGLE)

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.COMPLETED
        assert final.progress == 100
        assert final.video_url == f"https://cdn.example.test/videos/{PROJECT_ID}.mp4"
        assert final.completed_at is not None
        assert final.error is None
        assert "Acme Analytics" in final.prompt
        assert "TIMING CONTRACT:" in final.prompt
        assert video_service.created[0][1] == 30
        assert storage.uploads[PROJECT_ID] == b"clipjob_1"

        assert progress_log[:3] == [10, 20, 30]
        assert progress_log == sorted(progress_log)
        assert progress_log[-3:] == [96, 98, 100]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_timeout(self, store, project, scraper):
        video_service = FakeVideoService([VideoJobSnapshot("job", "in_progress", 10)])
        pipeline = build_pipeline(
            store, scraper, video_service, FakeStorage(), GenerationStrategy.SINGLE, max_attempts=3
        )

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.FAILED
        assert final.error == TIMEOUT_MESSAGE
        assert video_service.polls == 3
        assert final.video_url is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_submission_error_fails_project(self, store, project, scraper):
        video_service = FakeVideoService(submit_error=VideoGenServiceError("Video API error: billing hard limit"))
        pipeline = build_pipeline(store, scraper, video_service, FakeStorage(), GenerationStrategy.SINGLE)

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.FAILED
        assert final.error == "Video API error: billing hard limit"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_storage_failure(self, store, project, scraper):
        pipeline = build_pipeline(
            store, scraper, FakeVideoService(), FakeStorage(fail=True), GenerationStrategy.SINGLE
        )

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.FAILED
        assert final.error == "bucket unavailable"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_storage_not_configured(self, store, project, scraper):
        pipeline = build_pipeline(store, scraper, FakeVideoService(), None, GenerationStrategy.SINGLE)

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.FAILED
        assert final.error == "Video storage is not configured"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_second_run_is_refused(self, store, project, scraper):
        video_service = FakeVideoService()
        pipeline = build_pipeline(store, scraper, video_service, FakeStorage(), GenerationStrategy.SINGLE)
        finished = await pipeline.run(request())

        with pytest.raises(RunAlreadyStartedError):
            await pipeline.run(request())

        assert await store.get_project(PROJECT_ID) == finished
        assert len(video_service.created) == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_project_is_refused(self, store, scraper):
        pipeline = build_pipeline(store, scraper, FakeVideoService(), FakeStorage(), GenerationStrategy.SINGLE)

        with pytest.raises(RunAlreadyStartedError):
            await pipeline.run(request())


class TestTwoClip:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_both_clips_stitched(self, store, project, scraper, progress_log):
        video_service = FakeVideoService()
        stitcher = FakeStitcher()
        storage = FakeStorage()
        pipeline = build_pipeline(store, scraper, video_service, storage, GenerationStrategy.TWO_CLIP, stitcher=stitcher)

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.COMPLETED
        assert [seconds for _, seconds in video_service.created] == [12, 12]
        assert stitcher.calls == 1
        assert storage.uploads[PROJECT_ID] == b"clipjob_1clipjob_2"
        assert final.video_job_id == "job_2"

        assert 60 in progress_log
        assert 90 in progress_log
        assert 92 in progress_log
        assert progress_log == sorted(progress_log)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_clip_prompts_carry_brand(self, store, project, scraper):
        video_service = FakeVideoService()
        pipeline = build_pipeline(store, scraper, video_service, FakeStorage(), GenerationStrategy.TWO_CLIP)

        await pipeline.run(request())

        website = await scraper.scrape_website(WEBSITE_URL)
        for prompt, _ in video_service.created:
            for color in website.brand.colors:
                assert color in prompt

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_first_clip_failure_skips_second(self, store, project, scraper):
        video_service = FakeVideoService([VideoJobSnapshot("job", "failed", 0, "content policy violation")])
        stitcher = FakeStitcher()
        pipeline = build_pipeline(
            store, scraper, video_service, FakeStorage(), GenerationStrategy.TWO_CLIP, stitcher=stitcher
        )

        final = await pipeline.run(request())

        assert final.status == ProjectStatus.FAILED
        assert final.error == "content policy violation"
        assert len(video_service.created) == 1
        assert stitcher.calls == 0


class TestDegradedInputs:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_scrape_failure_still_generates(self, store, project):
        broken = WebsiteScraper(
            api_key="key", transport=httpx.MockTransport(lambda request: httpx.Response(502))
        )
        try:
            pipeline = build_pipeline(store, broken, FakeVideoService(), FakeStorage(), GenerationStrategy.SINGLE)
            final = await pipeline.run(request())
        finally:
            await broken.close()

        assert final.status == ProjectStatus.COMPLETED
        assert "Acme Analytics" in final.prompt

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_model_output_is_used(self, store, project, scraper):
        ai = FakeAIService(
            response={
                "enhancedPrompt": "A product manager opens Acme and the Monday report builds itself.",
                "whatItDoes": "Live dashboards on top of your warehouse",
            }
        )
        pipeline = build_pipeline(
            store, scraper, FakeVideoService(), FakeStorage(), GenerationStrategy.SINGLE, ai=ai
        )

        final = await pipeline.run(request())

        assert final.prompt.startswith("A product manager opens Acme")
        operations = [call["operation"] for call in ai.calls]
        assert operations == ["analyze_product/v1", "orchestrate_prompt/v1"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_orchestrator_crash_uses_basic_prompt(self, store, project, scraper, monkeypatch):
        pipeline = build_pipeline(store, scraper, FakeVideoService(), FakeStorage(), GenerationStrategy.SINGLE)

        async def crash(*args, **kwargs):
            raise KeyError("enhancedPrompt")

        monkeypatch.setattr(pipeline.orchestrator, "create_production_prompt", crash)
        final = await pipeline.run(request())

        assert final.status == ProjectStatus.COMPLETED
        assert final.prompt.startswith("Create a 30-second professional demo video for Acme Analytics.")
