"""Service singletons and dependency injection for the DemoDrop API."""

import logging

from fastapi import Header, HTTPException

from api.auth import AuthError, AuthUser, SupabaseAuth, bearer_token
from api.project_store import ProjectStore, get_project_store
from services.ai_service import AIService
from services.billing_service import BillingService
from services.generation_pipeline import GenerationPipeline
from services.multi_source_scraper import MultiSourceScraper
from services.product_analyzer import ProductAnalyzer
from services.prompt_orchestrator import PromptOrchestrator
from services.prompt_splitter import PromptSplitter
from services.scraper import WebsiteScraper
from services.video_gen_service import VideoGenService
from services.video_stitcher import FFmpegStitcher, StitchOptions
from services.video_storage import VideoStorage, get_video_storage
from utils.config import load_config

logger = logging.getLogger(__name__)

# Service singletons
_config: dict | None = None
_auth: SupabaseAuth | None = None
_ai_service: AIService | None = None
_video_gen_service: VideoGenService | None = None
_pipeline: GenerationPipeline | None = None
_billing_service: BillingService | None = None


def get_config() -> dict:
    global _config
    if _config is None:
        _config = load_config()
    return _config


async def get_store() -> ProjectStore:
    """Get the connected project store."""
    return await get_project_store(get_config()["database_path"])


def get_auth() -> SupabaseAuth:
    global _auth
    if _auth is None:
        config = get_config()
        _auth = SupabaseAuth(config.get("supabase_url", ""), config.get("supabase_anon_key", ""))
    return _auth


def get_ai_service() -> AIService:
    """Get or create the AI service instance."""
    global _ai_service
    if _ai_service is None:
        config = get_config()
        _ai_service = AIService(
            api_key=config.get("gemini_api_key", ""),
            model_name=config.get("gemini_model", "gemini-3-flash-preview"),
        )
    return _ai_service


def get_video_gen_service() -> VideoGenService:
    """Get or create the video generation service instance."""
    global _video_gen_service
    if _video_gen_service is None:
        config = get_config()
        _video_gen_service = VideoGenService(
            api_key=config.get("openai_api_key", ""),
            base_url=config.get("video_api_base_url"),
            model=config.get("video_model", "sora-2"),
            size=config.get("video_size", "1280x720"),
        )
    return _video_gen_service


def get_storage() -> VideoStorage | None:
    return get_video_storage(get_config())


async def get_pipeline() -> GenerationPipeline:
    """Get or create the generation pipeline with all collaborators wired in."""
    global _pipeline
    if _pipeline is None:
        config = get_config()
        ai_service = get_ai_service()
        _pipeline = GenerationPipeline(
            store=await get_store(),
            scraper=WebsiteScraper(
                api_key=config.get("dumpling_api_key", ""),
                base_url=config["dumpling_base_url"],
            ),
            analyzer=ProductAnalyzer(ai_service),
            orchestrator=PromptOrchestrator(ai_service),
            splitter=PromptSplitter(ai_service),
            video_service=get_video_gen_service(),
            stitcher=FFmpegStitcher(),
            storage=get_storage(),
            enrichment=MultiSourceScraper(
                api_key=config.get("dumpling_api_key", ""),
                base_url=config["dumpling_base_url"],
            ),
            strategy=config["generation_strategy"],
            poll_interval=config["poll_interval_seconds"],
            max_attempts=config["poll_max_attempts"],
            stitch_options=StitchOptions(
                transition=config["stitch_transition"],
                transition_duration=config["stitch_transition_duration"],
            ),
        )
    return _pipeline


async def get_billing_service() -> BillingService:
    global _billing_service
    if _billing_service is None:
        config = get_config()
        _billing_service = BillingService(
            store=await get_store(),
            webhook_secret=config.get("stripe_webhook_secret", ""),
            tolerance=config["stripe_signature_tolerance"],
        )
    return _billing_service


async def get_current_user(authorization: str | None = Header(default=None)) -> AuthUser:
    """Authenticated user for the request, 401 otherwise."""
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized - Please sign in")

    try:
        user = await get_auth().get_user(token)
    except AuthError as e:
        logger.error(f"Auth check failed: {e}")
        raise HTTPException(status_code=401, detail="Unauthorized - Please sign in")

    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized - Please sign in")
    return user


def verify_internal_token(x_internal_token: str | None = Header(default=None)) -> None:
    """Guard for internal endpoints when INTERNAL_API_TOKEN is set."""
    expected = get_config().get("internal_api_token")
    if expected and x_internal_token != expected:
        raise HTTPException(status_code=401, detail="Invalid internal token")
