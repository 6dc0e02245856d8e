"""Configuration loading and validation for DemoDrop."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

logger = logging.getLogger(__name__)

# Keys the service cannot do real work without. Missing ones only warn:
# every stage that needs a key degrades or fails on its own at call time.
REQUIRED_ENV_VARS = {
    "OPENAI_API_KEY": "openai_api_key",
    "GEMINI_API_KEY": "gemini_api_key",
    "DUMPLING_API": "dumpling_api_key",
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_anon_key",
    "STRIPE_SECRET_KEY": "stripe_secret_key",
    "STRIPE_WEBHOOK_SECRET": "stripe_webhook_secret",
    "APP_URL": "app_url",
}

PLACEHOLDER_MARKERS = ("placeholder", "your-", "your_")


def load_config() -> dict:
    """Load configuration from environment variables."""

    def resolve_path(path: str | None, default_relative: str) -> str:
        if not path:
            return str(PROJECT_ROOT / default_relative)
        if Path(path).is_absolute():
            return path
        return str(PROJECT_ROOT / path)

    config = {
        # Video generation API (Sora-style job endpoints)
        "openai_api_key": os.getenv("OPENAI_API_KEY"),
        "video_api_base_url": os.getenv("VIDEO_API_BASE_URL", "https://api.openai.com/v1"),
        "video_model": os.getenv("VIDEO_MODEL", "sora-2"),
        "video_size": os.getenv("VIDEO_SIZE", "1280x720"),
        # LLM used for analysis, orchestration and splitting
        "gemini_api_key": os.getenv("GEMINI_API_KEY"),
        "gemini_model": os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
        # Website content extraction
        "dumpling_api_key": os.getenv("DUMPLING_API"),
        "dumpling_base_url": os.getenv("DUMPLING_BASE_URL", "https://app.dumplingai.com/api/v1"),
        # Auth provider
        "supabase_url": os.getenv("SUPABASE_URL"),
        "supabase_anon_key": os.getenv("SUPABASE_ANON_KEY"),
        # Billing
        "stripe_secret_key": os.getenv("STRIPE_SECRET_KEY"),
        "stripe_webhook_secret": os.getenv("STRIPE_WEBHOOK_SECRET"),
        "stripe_signature_tolerance": int(os.getenv("STRIPE_SIGNATURE_TOLERANCE", "300")),
        # Public app
        "app_url": os.getenv("APP_URL", "http://localhost:3000"),
        "internal_api_token": os.getenv("INTERNAL_API_TOKEN"),
        # Blob storage (S3-compatible R2)
        "r2_account_id": os.getenv("R2_ACCOUNT_ID"),
        "r2_access_key_id": os.getenv("R2_ACCESS_KEY_ID"),
        "r2_secret_access_key": os.getenv("R2_SECRET_ACCESS_KEY"),
        "r2_bucket_name": os.getenv("R2_BUCKET_NAME", "demodrop-videos"),
        "r2_public_url": os.getenv("R2_PUBLIC_URL"),
        # Persistence
        "database_path": resolve_path(os.getenv("DATABASE_PATH"), ".data/demodrop.db"),
        # Pipeline behaviour
        "generation_strategy": os.getenv("GENERATION_STRATEGY", "two_clip").lower(),
        "poll_interval_seconds": float(os.getenv("POLL_INTERVAL_SECONDS", "5")),
        "poll_max_attempts": int(os.getenv("POLL_MAX_ATTEMPTS", "60")),
        "stitch_transition": os.getenv("STITCH_TRANSITION", "cut").lower(),
        "stitch_transition_duration": float(os.getenv("STITCH_TRANSITION_DURATION", "0.5")),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
    }

    return config


def is_placeholder(value: str) -> bool:
    """True when ``value`` looks like an unfilled template value."""
    lowered = value.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of problems found."""
    errors = []

    for env_name, key in REQUIRED_ENV_VARS.items():
        value = config.get(key)
        if not value:
            errors.append(f"{env_name} is not set")
        elif is_placeholder(str(value)):
            errors.append(f"{env_name} contains a placeholder value")

    if config.get("generation_strategy") not in ("single", "two_clip"):
        errors.append(
            f"GENERATION_STRATEGY must be 'single' or 'two_clip', got {config.get('generation_strategy')!r}"
        )

    if config.get("stitch_transition") not in ("cut", "fade", "dissolve"):
        errors.append(
            f"STITCH_TRANSITION must be 'cut', 'fade' or 'dissolve', got {config.get('stitch_transition')!r}"
        )

    if config.get("poll_max_attempts", 0) < 1:
        errors.append("POLL_MAX_ATTEMPTS must be at least 1")

    return errors


def check_environment(config: dict) -> bool:
    """Log configuration problems as warnings. Never raises.

    Returns:
        True when no problems were found.
    """
    errors = validate_config(config)
    for error in errors:
        logger.warning(f"Configuration: {error}")
    if errors:
        logger.warning(
            f"{len(errors)} configuration problem(s) found; affected features will fail at call time"
        )
    return not errors


def setup_logging(log_level: str = "INFO") -> None:
    """Set up Rich console logging for command-line tools."""
    logging.root.handlers.clear()

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[rich_handler],
        format="%(message)s",
    )

    noisy_loggers = [
        "httpx",
        "httpcore",
        "google_genai",
        "google_genai.models",
        "botocore",
        "urllib3.connectionpool",
    ]

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
