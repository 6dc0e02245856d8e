"""Generation pipeline - URL in, hosted video out.

Phases and the progress written at each:

    scraping (10) -> orchestrating (20) -> generating (30)
        single:   one clip, polled over 30-95
        two_clip: clip 1 over 30-60, clip 2 over 60-90, stitch (92)
    -> upload (96-98) -> completed (100)

Any exception ends the run with ``status=failed`` and the error message on
the project. The LLM stages recover on their own and never get that far.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from models.project import Project, ProjectStatus, now_ms
from models.prompt import StylePreset
from models.website import EnrichedContext, WebsiteData
from services.content_parser import parse_markdown_content
from services.multi_source_scraper import MultiSourceScraper
from services.product_analyzer import ProductAnalyzer
from services.prompt_builder import build_basic_prompt, get_preset
from services.prompt_orchestrator import PromptOrchestrator
from services.prompt_splitter import PromptSplitter
from services.scraper import WebsiteScraper
from services.video_gen_service import VideoGenService
from services.video_job import VideoJobDriver
from services.video_stitcher import MediaTool, StitchOptions
from services.video_storage import VideoStorageError
from utils.logging import project_context

logger = logging.getLogger(__name__)

TWO_CLIP_TOTAL_DURATION = 24


class RunAlreadyStartedError(Exception):
    """Raised when a project is not in its initial state and cannot be run."""

    pass


class GenerationStrategy(str, Enum):
    SINGLE = "single"
    TWO_CLIP = "two_clip"


@dataclass
class GenerationRequest:
    """Inputs for one pipeline run."""

    project_id: str
    website_url: str
    style_preset: str
    custom_instructions: Optional[str] = None
    video_style: Optional[str] = None
    youtube_url: Optional[str] = None
    instagram_url: Optional[str] = None
    voice_note_url: Optional[str] = None

    @property
    def has_enrichment(self) -> bool:
        return any([self.youtube_url, self.instagram_url, self.voice_note_url])


@dataclass
class ProgressPlan:
    scraping: int = 10
    orchestrating: int = 20
    generating: int = 30
    single_end: int = 95
    clip1_end: int = 60
    clip2_end: int = 90
    stitching: int = 92
    uploading: int = 96
    uploaded: int = 98
    completed: int = 100


class GenerationPipeline:
    """Runs one project from URL to uploaded video."""

    def __init__(
        self,
        store,
        scraper: WebsiteScraper,
        analyzer: ProductAnalyzer,
        orchestrator: PromptOrchestrator,
        splitter: PromptSplitter,
        video_service: VideoGenService,
        stitcher: MediaTool,
        storage,
        enrichment: Optional[MultiSourceScraper] = None,
        strategy: GenerationStrategy | str = GenerationStrategy.TWO_CLIP,
        poll_interval: float = 5.0,
        max_attempts: int = 60,
        stitch_options: Optional[StitchOptions] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            store: Project store (``start_run`` / ``update_project`` / ``get_project``)
            storage: Object with ``upload_video(project_id, data) -> url``,
                or None when storage is not configured
            strategy: ``single`` or ``two_clip``
        """
        self.store = store
        self.scraper = scraper
        self.analyzer = analyzer
        self.orchestrator = orchestrator
        self.splitter = splitter
        self.stitcher = stitcher
        self.storage = storage
        self.enrichment = enrichment
        self.strategy = GenerationStrategy(strategy)
        self.stitch_options = stitch_options or StitchOptions()
        self.progress = ProgressPlan()
        self.driver = VideoJobDriver(
            video_service,
            store,
            poll_interval=poll_interval,
            max_attempts=max_attempts,
            sleep=sleep,
        )

    async def run(self, request: GenerationRequest) -> Optional[Project]:
        """Run the pipeline for ``request`` and return the final project row.

        Failures end up on the project as ``failed`` + ``error``.

        Raises:
            RunAlreadyStartedError: If the project is missing or has already
                been picked up by another run
        """
        if not await self.store.start_run(request.project_id, self.progress.scraping):
            raise RunAlreadyStartedError(f"Project {request.project_id} has already been processed")

        with project_context(request.project_id):
            try:
                await self._run(request)
            except Exception as e:
                logger.exception(f"Generation failed for {request.website_url}: {e}")
                await self.store.update_project(
                    request.project_id,
                    status=ProjectStatus.FAILED,
                    error=str(e) or type(e).__name__,
                )

        return await self.store.get_project(request.project_id)

    async def _run(self, request: GenerationRequest) -> None:
        project_id = request.project_id
        preset = get_preset(request.style_preset)

        await self.store.update_project(
            project_id, status=ProjectStatus.SCRAPING, progress=self.progress.scraping
        )
        website = await self.scraper.scrape_website(request.website_url)
        enrichment = await self._gather_enrichment(request)

        await self.store.update_project(
            project_id, status=ProjectStatus.ORCHESTRATING, progress=self.progress.orchestrating
        )
        await self._understand_product(website, enrichment)

        duration = (
            TWO_CLIP_TOTAL_DURATION if self.strategy == GenerationStrategy.TWO_CLIP else preset.duration
        )
        prompt = await self._build_prompt(website, preset, request, duration)

        await self.store.update_project(
            project_id,
            status=ProjectStatus.GENERATING,
            progress=self.progress.generating,
            prompt=prompt,
        )

        if self.strategy == GenerationStrategy.TWO_CLIP:
            video = await self._generate_two_clips(project_id, prompt, website, preset)
        else:
            video = await self._generate_single(project_id, prompt, duration)

        # The job driver has already written the failure
        if video is None:
            return

        url = await self._upload(project_id, video)
        await self.store.update_project(
            project_id,
            status=ProjectStatus.COMPLETED,
            progress=self.progress.completed,
            video_url=url,
            completed_at=now_ms(),
        )
        logger.info(f"Project {project_id} completed: {url}")

    async def _gather_enrichment(self, request: GenerationRequest) -> Optional[EnrichedContext]:
        if not self.enrichment or not request.has_enrichment:
            return None
        context = await self.enrichment.scrape_additional_sources(
            youtube_url=request.youtube_url,
            instagram_url=request.instagram_url,
            voice_note_url=request.voice_note_url,
        )
        return None if context.is_empty() else context

    async def _understand_product(
        self, website: WebsiteData, enrichment: Optional[EnrichedContext]
    ) -> None:
        # Fallback data has no page content to analyze
        if not website.markdown:
            return
        parsed = parse_markdown_content(website.markdown, website.page_metadata)
        website.product_understanding = await self.analyzer.analyze_product(
            parsed,
            website.title,
            website.meta_description,
            enrichment,
        )

    async def _build_prompt(
        self,
        website: WebsiteData,
        preset: StylePreset,
        request: GenerationRequest,
        duration: int,
    ) -> str:
        try:
            return await self.orchestrator.create_production_prompt(
                website,
                preset,
                instructions=request.custom_instructions,
                duration=duration,
                video_style=request.video_style,
            )
        except Exception as e:
            logger.warning(f"Prompt orchestration raised, using basic prompt: {e}")
            return build_basic_prompt(
                website,
                preset.key,
                request.custom_instructions,
                duration=duration,
                video_style=request.video_style,
            )

    async def _generate_single(self, project_id: str, prompt: str, duration: int) -> Optional[bytes]:
        result = await self.driver.run(
            project_id,
            prompt,
            duration,
            progress_start=self.progress.generating,
            progress_end=self.progress.single_end,
        )
        return result.video if result.succeeded else None

    async def _generate_two_clips(
        self,
        project_id: str,
        prompt: str,
        website: WebsiteData,
        preset: StylePreset,
    ) -> Optional[bytes]:
        split = await self.splitter.split_prompt(prompt, website, preset, TWO_CLIP_TOTAL_DURATION)
        logger.info(
            f"Generating two clips ({split.part1.duration}s + {split.part2.duration}s, {split.source.value} split)"
        )

        # Clip 2 is submitted only once clip 1 has finished
        first = await self.driver.run(
            project_id,
            split.part1.prompt,
            split.part1.duration,
            progress_start=self.progress.generating,
            progress_end=self.progress.clip1_end,
        )
        if not first.succeeded:
            return None

        second = await self.driver.run(
            project_id,
            split.part2.prompt,
            split.part2.duration,
            progress_start=self.progress.clip1_end,
            progress_end=self.progress.clip2_end,
        )
        if not second.succeeded:
            return None

        await self.store.update_project(project_id, progress=self.progress.stitching)
        stitched = await self.stitcher.concatenate(first.video, second.video, self.stitch_options)
        logger.info(f"Stitched video: {stitched.duration:.1f}s, {stitched.size} bytes")
        return stitched.video

    async def _upload(self, project_id: str, video: bytes) -> str:
        if self.storage is None:
            raise VideoStorageError("Video storage is not configured")

        await self.store.update_project(project_id, progress=self.progress.uploading)
        url = await asyncio.to_thread(self.storage.upload_video, project_id, video)
        await self.store.update_project(project_id, progress=self.progress.uploaded)
        return url
