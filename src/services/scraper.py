"""Website scraper - Dumpling AI markdown extraction plus heuristics.

One POST to the scrape endpoint returns the page as cleaned markdown. Title,
hero text, description and features are pulled out of that markdown with
line heuristics; industry, audience and brand come from brand_inference.
Any failure (no key, HTTP error, malformed payload) yields a fallback built
from the hostname, so ``scrape_website`` never raises.
"""

import logging
import os
import re
from typing import Optional
from urllib.parse import urlparse

import httpx

from models.website import BrandProfile, WebsiteData
from services.brand_inference import (
    DEFAULT_AUDIENCE,
    DEFAULT_INDUSTRY,
    DEFAULT_TONE,
    detect_audience,
    detect_industry,
    infer_brand,
)

logger = logging.getLogger(__name__)

DUMPLING_API_BASE = "https://app.dumplingai.com/api/v1"

DEFAULT_HERO_TEXT = "Innovative solutions for your business"
GENERIC_FEATURES = ["Comprehensive solutions", "Expert team and support", "Proven track record"]

FALLBACK_HERO_TEXT = "Professional business services"
FALLBACK_FEATURES = ["Quality service", "Expert team", "Proven results"]
FALLBACK_COLORS = ["#2563eb", "#1e40af", "#ffffff"]
FALLBACK_VISUAL_STYLE = "Modern and clean"

NAV_ITEM_PATTERN = re.compile(
    r"^(home|about|contact|blog|pricing|login|sign up|sign in|menu|privacy|terms)", re.IGNORECASE
)
NON_FEATURE_HEADING_PATTERN = re.compile(
    r"^(about|contact|blog|pricing|testimonial|faq|reviews)", re.IGNORECASE
)
BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)")


class ScraperError(Exception):
    """Raised internally when the scrape service cannot be used."""

    pass


def title_from_url(url: str) -> str:
    """Derive a display name from a URL's hostname.

    ``https://www.acme-widgets.com`` -> ``Acme Widgets``
    """
    hostname = urlparse(url).hostname or url
    hostname = hostname.removeprefix("www.")
    first_label = hostname.split(".")[0]
    words = first_label.split("-")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _non_empty_lines(markdown: str) -> list[str]:
    return [line.strip() for line in markdown.split("\n") if line.strip()]


def extract_hero_text(markdown: str) -> str:
    """First H2 near the top of the page, else the first headline-sized line."""
    lines = _non_empty_lines(markdown)

    for line in lines[:20]:
        if line.startswith("##") and not line.startswith("###"):
            return re.sub(r"^##\s*", "", line).strip()

    for line in lines[:30]:
        if not line.startswith("#") and not line.startswith("[") and 30 < len(line) < 200:
            return line

    return DEFAULT_HERO_TEXT


def extract_description(markdown: str) -> str:
    """First paragraph-sized line that is not a heading, link or list item."""
    for line in _non_empty_lines(markdown)[:40]:
        if line.startswith(("#", "[", "-", "*")):
            continue
        if 50 < len(line) < 300:
            return line
    return ""


def extract_features(markdown: str) -> list[str]:
    """Pull up to three feature phrases out of page markdown.

    Bullets are tried first, then H3 headings, then bold spans; later
    strategies only run while fewer than three candidates were found.
    """
    features: list[str] = []
    lines = markdown.split("\n")

    for raw in lines:
        line = raw.strip()
        if line.startswith(("- ", "* ")) and 15 < len(line) < 120:
            text = re.sub(r"^[-*]\s+", "", line).strip()
            if not NAV_ITEM_PATTERN.match(text):
                features.append(text)

    if len(features) < 3:
        for raw in lines:
            line = raw.strip()
            if line.startswith("###") and not line.startswith("####"):
                heading = re.sub(r"^###\s*", "", line).strip()
                if 10 < len(heading) < 80 and not NON_FEATURE_HEADING_PATTERN.match(heading):
                    features.append(heading)

    if len(features) < 3:
        for match in BOLD_PATTERN.finditer(markdown):
            text = match.group(1).strip()
            if 15 < len(text) < 80 and text not in features:
                features.append(text)

    unique = [f for f in dict.fromkeys(features) if 15 < len(f) < 120][:5]
    if not unique:
        return list(GENERIC_FEATURES)
    return unique[:3]


def extract_logo_url(markdown: str, base_url: str) -> Optional[str]:
    """First markdown image that looks like a logo, resolved against the page URL."""
    for match in IMAGE_PATTERN.finditer(markdown):
        alt, src = match.group(1), match.group(2)
        if "logo" in alt.lower() or "logo" in src.lower():
            if src.startswith("//"):
                return f"{urlparse(base_url).scheme or 'https'}:{src}"
            if src.startswith("/"):
                parsed = urlparse(base_url)
                return f"{parsed.scheme}://{parsed.netloc}{src}"
            return src
    return None


def fallback_website_data(url: str) -> WebsiteData:
    """Generic but well-formed data for when the page could not be scraped."""
    return WebsiteData(
        url=url,
        title=title_from_url(url),
        hero_text=FALLBACK_HERO_TEXT,
        features=list(FALLBACK_FEATURES),
        industry=DEFAULT_INDUSTRY,
        target_audience=DEFAULT_AUDIENCE,
        brand=BrandProfile(
            colors=list(FALLBACK_COLORS),
            tone=DEFAULT_TONE,
            visual_style=FALLBACK_VISUAL_STYLE,
            key_message=FALLBACK_HERO_TEXT,
        ),
        scraped=False,
    )


def build_website_data(url: str, title: Optional[str], markdown: str, metadata: dict) -> WebsiteData:
    """Run every heuristic over scraped markdown."""
    title = title or title_from_url(url)
    hero_text = extract_hero_text(markdown)
    description = extract_description(markdown)
    features = extract_features(markdown)

    industry = detect_industry(title, hero_text, description)
    audience = detect_audience(title, hero_text, description)
    brand = infer_brand(
        title=title,
        hero_text=hero_text,
        description=description,
        content=markdown,
        industry=industry,
        logo_url=extract_logo_url(markdown, url),
    )

    return WebsiteData(
        url=url,
        title=title,
        hero_text=hero_text,
        features=features,
        meta_description=description,
        industry=industry,
        target_audience=audience,
        brand=brand,
        markdown=markdown,
        page_metadata=metadata,
    )


class WebsiteScraper:
    """Client for the Dumpling AI scrape endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DUMPLING_API_BASE,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("DUMPLING_API", "")
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def fetch_markdown(self, url: str) -> tuple[Optional[str], str, dict]:
        """Fetch a page as markdown.

        Returns:
            (title, markdown, metadata)

        Raises:
            ScraperError: On missing key, HTTP failure or a payload without content
        """
        if not self.is_configured():
            raise ScraperError("DUMPLING_API not configured")

        try:
            response = await self.client.post(
                f"{self.base_url}/scrape",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"url": url, "format": "markdown", "cleaned": True, "renderJs": True},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ScraperError(f"Scrape API error: {e.response.status_code}") from e
        except Exception as e:
            raise ScraperError(f"Scrape request failed: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("content"), str):
            raise ScraperError("Scrape API returned no content")

        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        return data.get("title") or None, data["content"], metadata

    async def scrape_website(self, url: str) -> WebsiteData:
        """Scrape ``url`` into WebsiteData. Never raises."""
        try:
            title, markdown, metadata = await self.fetch_markdown(url)
        except ScraperError as e:
            logger.warning(f"Scraping {url} failed, using fallback data: {e}")
            return fallback_website_data(url)

        website = build_website_data(url, title, markdown, metadata)
        logger.info(
            f"Scraped {url}: title={website.title!r}, industry={website.industry!r}, "
            f"{len(website.features)} features"
        )
        return website

    async def close(self) -> None:
        await self.client.aclose()
