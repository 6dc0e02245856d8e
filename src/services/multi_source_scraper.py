"""Optional enrichment sources: YouTube demo transcripts, Instagram, voice briefs.

Each source is fetched independently and returns None on any failure, so a
bad link never blocks a generation. The three fetches run concurrently.
"""

import asyncio
import logging
import os
import re
from typing import Optional

import httpx

from models.website import EnrichedContext
from services.scraper import DUMPLING_API_BASE

logger = logging.getLogger(__name__)

YOUTUBE_URL_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&]+)")
INSTAGRAM_URL_PATTERN = re.compile(r"(?:instagram\.com/|@)([a-zA-Z0-9._]+)")

VOICE_BRIEF_INSTRUCTION = (
    "Transcribe this audio verbatim. Include all details about product requirements, "
    "target audience, tone preferences, and any specific instructions for the video."
)


def is_valid_youtube_url(url: Optional[str]) -> bool:
    return bool(url) and bool(YOUTUBE_URL_PATTERN.search(url))


def is_valid_instagram_url(url: Optional[str]) -> bool:
    return bool(url) and bool(INSTAGRAM_URL_PATTERN.search(url))


class MultiSourceScraper:
    """Fetches enrichment context through the Dumpling AI utility endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DUMPLING_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("DUMPLING_API", "")
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=120.0, transport=transport)

    async def _post(self, path: str, payload: dict) -> Optional[dict]:
        if not self.api_key:
            return None
        try:
            response = await self.client.post(
                f"{self.base_url}/{path}",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.warning(f"Enrichment request {path} failed: {e}")
            return None
        return data if isinstance(data, dict) else None

    async def fetch_youtube_transcript(self, video_url: str) -> Optional[tuple[str, str]]:
        """Returns (title, transcript) or None."""
        data = await self._post(
            "get-youtube-transcript",
            {"videoUrl": video_url, "includeTimestamps": False, "preferredLanguage": "en"},
        )
        if not data or not data.get("transcript"):
            return None
        return data.get("title") or "Product Demo", data["transcript"]

    async def fetch_instagram_profile(self, instagram_url: str) -> Optional[tuple[str, list[str]]]:
        """Instagram has no usable extraction endpoint yet; always None."""
        logger.info(f"Instagram enrichment not available, skipping {instagram_url}")
        return None

    async def transcribe_voice_note(self, audio_url: str) -> Optional[str]:
        data = await self._post(
            "extract-audio",
            {
                "inputMethod": "url",
                "audio": audio_url,
                "prompt": VOICE_BRIEF_INSTRUCTION,
                "jsonMode": False,
            },
        )
        if not data:
            return None
        return data.get("text") or None

    async def scrape_additional_sources(
        self,
        youtube_url: Optional[str] = None,
        instagram_url: Optional[str] = None,
        voice_note_url: Optional[str] = None,
    ) -> EnrichedContext:
        """Fetch all provided sources concurrently."""

        async def none() -> None:
            return None

        youtube, instagram, voice = await asyncio.gather(
            self.fetch_youtube_transcript(youtube_url) if youtube_url else none(),
            self.fetch_instagram_profile(instagram_url) if instagram_url else none(),
            self.transcribe_voice_note(voice_note_url) if voice_note_url else none(),
        )

        context = EnrichedContext()
        if youtube:
            context.youtube_title, context.youtube_transcript = youtube
        if instagram:
            context.instagram_bio, context.instagram_posts = instagram
        if voice:
            context.voice_brief = voice

        sources = sum(1 for item in (youtube, instagram, voice) if item)
        logger.info(f"Enrichment gathered from {sources} additional source(s)")
        return context

    async def close(self) -> None:
        await self.client.aclose()
