"""Prompts module - centralized prompt templates for the LLM stages.

Re-exports all prompt constants and utilities for easy importing:
    from services.prompts import PROMPT_VERSIONS, strip_markdown_code_blocks
    from services.prompts import VIDEO_DIRECTOR_V1, CLIP_SPLITTER_V1
"""

import re

from services.prompts.product_analysis import (
    PRODUCT_ANALYST_SYSTEM,
    PRODUCT_ANALYSIS_V1,
    ENRICHMENT_YOUTUBE,
    ENRICHMENT_INSTAGRAM,
    ENRICHMENT_VOICE_BRIEF,
)
from services.prompts.orchestration import (
    VIDEO_DIRECTOR_SYSTEM,
    VIDEO_DIRECTOR_V1,
    SHORT_VIDEO_FOCUS,
)
from services.prompts.splitting import CLIP_SPLITTER_SYSTEM, CLIP_SPLITTER_V1

# Increment when a template changes so logged responses can be traced to a prompt revision
PROMPT_VERSIONS = {
    "analyze_product": "v1",
    "orchestrate_prompt": "v1",
    "split_prompt": "v1",
}

__all__ = [
    # Utilities
    "strip_markdown_code_blocks",
    # Version tracking
    "PROMPT_VERSIONS",
    # Product analysis
    "PRODUCT_ANALYST_SYSTEM",
    "PRODUCT_ANALYSIS_V1",
    "ENRICHMENT_YOUTUBE",
    "ENRICHMENT_INSTAGRAM",
    "ENRICHMENT_VOICE_BRIEF",
    # Orchestration
    "VIDEO_DIRECTOR_SYSTEM",
    "VIDEO_DIRECTOR_V1",
    "SHORT_VIDEO_FOCUS",
    # Two-clip split
    "CLIP_SPLITTER_SYSTEM",
    "CLIP_SPLITTER_V1",
]

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_markdown_code_blocks(text: str) -> str:
    """Return the body of a fenced model response, or the text unchanged.

    JSON mode usually returns bare JSON, but some models still wrap it in
    ```json fences.
    """
    text = text.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text
