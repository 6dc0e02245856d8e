"""Two-clip prompt splitter.

Providers cap clip length, so a long video is generated as two shorter
clips that get stitched. The split keeps a problem -> solution arc, gives
each part its own word budget and repeats the brand colors, tone and style
verbatim in both parts so the clips match after the cut.
"""

import logging
from typing import Optional

from models.product import AnalysisSource
from models.prompt import PromptPart, SplitPrompt, StylePreset
from models.website import WebsiteData
from services.ai_service import AIService, AIServiceError
from services.prompt_builder import word_budget
from services.prompts import CLIP_SPLITTER_SYSTEM, CLIP_SPLITTER_V1, PROMPT_VERSIONS

logger = logging.getLogger(__name__)

SPLIT_TEMPERATURE = 0.7
DEFAULT_TOTAL_DURATION = 24

DEFAULT_CONTINUITY = "Continue seamlessly from Part 1"
FALLBACK_CONTINUITY = (
    "Continue with same brand colors, setting, and visual style. Match tone and energy from Part 1."
)


def split_durations(total: int) -> tuple[int, int]:
    """Halve ``total``; any odd second goes to the second clip."""
    first = total // 2
    return first, total - first


def brand_consistency_block(website: WebsiteData) -> str:
    """Identical brand section appended to both parts."""
    brand = website.brand
    return (
        "BRAND CONSISTENCY (identical in both clips):\n"
        f"- Brand colors: {', '.join(brand.colors)}\n"
        f"- Brand tone: {brand.tone}\n"
        f"- Visual style: {brand.visual_style}"
    )


def _part_footer(website: WebsiteData, start: int, duration: int) -> str:
    return (
        f"CLIP TIMING: {start}-{start + duration}s of the full video, exactly {duration} seconds, "
        f"voiceover at most {word_budget(duration)} words.\n\n"
        + brand_consistency_block(website)
    )


def fallback_split(
    website: WebsiteData,
    preset: StylePreset,
    total_duration: int = DEFAULT_TOTAL_DURATION,
) -> SplitPrompt:
    """Problem -> solution template split."""
    first, second = split_durations(total_duration)
    name = website.title
    brand = website.brand
    colors = ", ".join(brand.colors)

    # Beat boundaries scale with the clip length: 5/12, 9/12 and 12/12 of each part
    p1_a, p1_b = round(first * 5 / 12), round(first * 9 / 12)
    p2_a, p2_b = first + round(second * 5 / 12), first + round(second * 9 / 12)

    part1 = f"""Create a {first}-second opening video for {name}.

EXACT DURATION: {first} seconds

BRAND IDENTITY:
- Brand colors: {colors} - use these exact colors
- Brand tone: {brand.tone}
- Visual style: {brand.visual_style}
- Key message: {brand.key_message}

PART 1 FOCUS (0-{first}s): Problem and introduction
- Open with the problem or challenge (0-{p1_a}s)
- Show a relatable frustration ({p1_a}-{p1_b}s)
- Introduce the product smoothly ({p1_b}-{first}s)
- End on a visual that leads into the solution

Style: {preset.visual_aesthetic}
Tone: {preset.tone}
Pacing: {preset.pacing_style}"""

    part2 = f"""Create a {second}-second conclusion video for {name}.

EXACT DURATION: {second} seconds

BRAND IDENTITY (must match Part 1):
- Brand colors: {colors} - use these exact colors
- Brand tone: {brand.tone}
- Visual style: {brand.visual_style}
- Key message: {brand.key_message}

PART 2 FOCUS ({first}-{total_duration}s): Solution and results
- Continue from Part 1 with the same setting and characters
- Product in action solving the problem ({first}-{p2_a}s)
- Key features or benefits ({p2_a}-{p2_b}s)
- Satisfied customer and call to action ({p2_b}-{total_duration}s)

This is a continuation, not a new video.

Style: {preset.visual_aesthetic}
Tone: {preset.tone}
Pacing: {preset.pacing_style}"""

    return _assemble(
        website,
        part1_prompt=part1,
        part1_description="Part 1: Problem and Introduction",
        part2_prompt=part2,
        part2_description="Part 2: Solution and Results",
        continuity=FALLBACK_CONTINUITY,
        transition="Smooth fade transition with matching brand colors",
        narrative=f"{name} demo video: Problem → Solution → Results",
        total_duration=total_duration,
        source=AnalysisSource.TEMPLATE,
    )


def _assemble(
    website: WebsiteData,
    part1_prompt: str,
    part1_description: str,
    part2_prompt: str,
    part2_description: str,
    continuity: str,
    transition: str,
    narrative: str,
    total_duration: int,
    source: AnalysisSource,
) -> SplitPrompt:
    first, second = split_durations(total_duration)

    part1_text = f"{part1_prompt.strip()}\n\n{_part_footer(website, 0, first)}"
    part2_text = (
        f"{part2_prompt.strip()}\n\nCONTINUITY FROM PART 1: {continuity}\n\n"
        f"{_part_footer(website, first, second)}"
    )

    return SplitPrompt(
        part1=PromptPart(
            prompt=part1_text,
            description=part1_description,
            duration=first,
            word_budget=word_budget(first),
        ),
        part2=PromptPart(
            prompt=part2_text,
            description=part2_description,
            duration=second,
            word_budget=word_budget(second),
        ),
        continuity_hints=continuity,
        transition_note=transition,
        full_narrative=narrative,
        source=source,
    )


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


class PromptSplitter:
    """Splits a full-length prompt into two continuous clips."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def split_prompt(
        self,
        full_prompt: str,
        website: WebsiteData,
        preset: StylePreset,
        total_duration: int = DEFAULT_TOTAL_DURATION,
    ) -> SplitPrompt:
        """Return a SplitPrompt. Never raises."""
        first, second = split_durations(total_duration)

        system = CLIP_SPLITTER_SYSTEM.format(
            total=total_duration,
            part1=first,
            part2=second,
            part1_words=word_budget(first),
            part2_words=word_budget(second),
        )
        brief = CLIP_SPLITTER_V1.format(
            total=total_duration,
            part1=first,
            part2=second,
            full_prompt=full_prompt,
            title=website.title,
            colors=", ".join(website.brand.colors),
            brand_tone=website.brand.tone,
            brand_style=website.brand.visual_style,
            key_message=website.brand.key_message,
            preset_name=preset.name,
            preset_tone=preset.tone,
            preset_pacing=preset.pacing_style,
            preset_aesthetic=preset.visual_aesthetic,
        )

        try:
            raw = await self.ai_service.generate_json(
                brief,
                system_instruction=system,
                temperature=SPLIT_TEMPERATURE,
                operation=f"split_prompt/{PROMPT_VERSIONS['split_prompt']}",
            )
        except AIServiceError as e:
            logger.warning(f"Prompt split failed, using template split: {e}")
            return fallback_split(website, preset, total_duration)

        part1 = _text(raw.get("part1"))
        part2 = _text(raw.get("part2"))
        if not part1 or not part2:
            logger.info("Prompt split response missing a part, using template split")
            return fallback_split(website, preset, total_duration)

        split = _assemble(
            website,
            part1_prompt=part1,
            part1_description=_text(raw.get("part1Description")) or "Part 1: Opening",
            part2_prompt=part2,
            part2_description=_text(raw.get("part2Description")) or "Part 2: Conclusion",
            continuity=_text(raw.get("continuityHints")) or DEFAULT_CONTINUITY,
            transition=_text(raw.get("transitionNote")) or "Smooth fade transition",
            narrative=_text(raw.get("fullNarrative")) or f"{website.title} demo video",
            total_duration=total_duration,
            source=AnalysisSource.AI,
        )
        logger.info(
            f"Split prompt: {split.part1.description!r} ({split.part1.duration}s) -> "
            f"{split.part2.description!r} ({split.part2.duration}s), transition {split.transition_note!r}"
        )
        return split
