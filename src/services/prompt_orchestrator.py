"""LLM prompt orchestration.

A director persona rewrites the product brief into a cinematic prompt. The
result is then layered with deterministic sections (industry visuals, brand
personality, cinematography, technical specs, aesthetic, brand lock and a
timing contract) so that every production prompt carries the word budget
and scene structure no matter what the model wrote.
"""

import json
import logging
import re
from typing import Optional

from models.product import AnalysisSource
from models.prompt import CinematicElements, OrchestratedPrompt, StylePreset
from models.website import WebsiteData
from services.ai_service import AIService, AIServiceError
from services.prompt_builder import (
    aesthetic_description,
    brand_lock,
    fit_boundaries,
    render_scene_structure,
    scene_structure,
    voiced_word_budget,
)
from services.prompts import (
    PROMPT_VERSIONS,
    SHORT_VIDEO_FOCUS,
    VIDEO_DIRECTOR_SYSTEM,
    VIDEO_DIRECTOR_V1,
)

logger = logging.getLogger(__name__)

ORCHESTRATION_TEMPERATURE = 0.8

DEFAULT_CINEMATICS = CinematicElements(
    lighting="Natural, warm golden hour lighting",
    camera_movement="Steady handheld with intentional movement",
    color_grading="Slightly desaturated with warm highlights",
    transitions="Smooth cuts on action",
)

FALLBACK_CINEMATICS = CinematicElements(
    lighting="Natural with practical sources",
    camera_movement="Purposeful handheld",
    color_grading="Brand-aligned color palette",
    transitions="Natural cuts",
)

# Keyed by the industry labels produced by brand_inference
INDUSTRY_VISUALS = {
    "Technology / SaaS": [
        "Real code and real data on screens, never placeholder text",
        "Terminal windows with actual commands",
        "Dashboards with meaningful data visualizations",
        "Modern workspace with multiple monitors",
        "People in authentic work moments",
    ],
    "Real Estate": [
        "Genuine property tours, not staged empty rooms",
        "Real neighborhood scenes: coffee shops, parks, schools",
        "Authentic property documents",
        "Agents in real consultation moments",
        "Homes with lived-in character",
    ],
    "Healthcare / Wellness": [
        "Clean, well-lit care environments",
        "Real practitioners, not models in costumes",
        "Actual equipment in use",
        "Interactions that show empathy",
        "Focus on human care over technology",
    ],
    "Finance / FinTech": [
        "Warm professional settings, not sterile corporate",
        "Financial dashboards with plausible data",
        "Client conversations that show trust",
        "Documents that look authentic",
        "Emphasis on security and personal attention",
    ],
    "E-commerce / Retail": [
        "Products in natural light, not white studio backdrops",
        "Real unboxing moments with genuine reactions",
        "Actual packaging and shipping",
        "Customers using the product in real life",
    ],
}

GENERIC_INDUSTRY_VISUALS = [
    "Industry-authentic environments and scenarios",
    "Real professionals in their actual work settings",
    "Genuine tools and equipment specific to this field",
    "Details only someone in this industry would recognize",
]

GENERIC_TERMS = ["professional", "modern", "innovative", "cutting-edge", "seamless"]
COLOR_HINT = re.compile(r"(#[0-9A-Fa-f]{6}\b|\brgb\b|\bhsl\b|warm|cool|vibrant|muted|earth tones|golden)", re.I)
CAMERA_HINT = re.compile(r"(wide shot|close-up|tracking|dolly|pan|tilt|handheld)", re.I)
LIGHTING_HINT = re.compile(r"(natural light|golden hour|soft|hard|backlit|rim light)", re.I)
AUTHENTICITY_HINT = re.compile(r"(real|genuine|authentic|actual|specific)", re.I)


def add_industry_details(prompt: str, industry: str) -> str:
    visuals = INDUSTRY_VISUALS.get(industry, GENERIC_INDUSTRY_VISUALS)
    return prompt + "\n\nIndustry-specific visual details:\n" + "\n".join(f"- {v}" for v in visuals)


def infer_brand_personality(website_text: str, preset_key: str) -> str:
    text = website_text.lower()
    playful = any(word in text for word in ("fun", "easy", "simple"))
    technical = any(word in text for word in ("api", "integration", "developer"))
    luxury = any(word in text for word in ("premium", "exclusive", "curated"))
    founder_led = any(phrase in text for phrase in ("we built", "our story", "we believe"))

    if playful and preset_key == "startup-energy":
        return (
            "Brand personality: Approachable innovator. Warm colors, friendly interactions and "
            "moments of delight. Real smiles, not forced ones."
        )
    if technical and preset_key == "enterprise-saas":
        return (
            "Brand personality: Technical authority. Precise UI details, actual code and "
            "professional environments. Competence shown through real work."
        )
    if luxury:
        return (
            "Brand personality: Refined excellence. Soft lighting, elegant compositions and "
            "premium materials. Visible craftsmanship."
        )
    if founder_led:
        return (
            "Brand personality: Human-first mission. Real people and genuine moments. Nothing "
            "that feels corporate or staged."
        )
    return "Brand personality: Professional and trustworthy. Balance authenticity with polish."


def check_prompt_quality(prompt: str) -> tuple[list[str], list[str]]:
    """Return (issues, suggestions) for a production prompt."""
    issues = []
    suggestions = []
    lowered = prompt.lower()

    if sum(1 for term in GENERIC_TERMS if term in lowered) > 2:
        issues.append("Too many generic marketing terms")
        suggestions.append("Replace generic terms with specific visual details")
    if not COLOR_HINT.search(prompt):
        suggestions.append("Add a specific color palette or mood")
    if not CAMERA_HINT.search(prompt):
        suggestions.append("Include specific camera movements or shot types")
    if not LIGHTING_HINT.search(prompt):
        suggestions.append("Specify lighting conditions")
    if not AUTHENTICITY_HINT.search(prompt):
        suggestions.append("Emphasize authentic, non-stock scenarios")

    return issues, suggestions


def timing_contract(website: WebsiteData, duration: int) -> str:
    """Hard timing section appended to every production prompt."""
    voice_end = max(duration - 1, 0)
    beats = scene_structure(duration, website.title, website.features, website.product_understanding)
    return (
        "TIMING CONTRACT:\n"
        f"- Duration: exactly {duration} seconds\n"
        f"- Voiceover: at most {voiced_word_budget(duration)} words, last word spoken by second {voice_end}\n"
        f"- Second {voice_end} to {duration} is visual only\n"
        "- Scene structure:\n"
        + render_scene_structure(beats)
    )


def fallback_orchestration(
    website: WebsiteData,
    preset: StylePreset,
    duration: int,
) -> OrchestratedPrompt:
    """Template prompt used whenever the model output cannot be used."""
    name = website.title
    brand = website.brand
    max_words = voiced_word_budget(duration)
    voice_end = duration - 1
    description = website.meta_description
    features = website.features

    sections = [f"Create a {duration}-second cinematic demo video for {name}, a {website.industry} company."]

    if description:
        sections.append(
            f'WHAT THIS PRODUCT ACTUALLY DOES (must be shown):\n"{description}"\n'
            "The video must visually demonstrate this exact functionality."
        )

    timing = [
        "TIMING:",
        f"- Duration: exactly {duration} seconds",
        f"- Voiceover complete by second {voice_end}, at most {max_words} words",
        "- Never cut narration off mid-sentence",
    ]
    if duration <= 12:
        timing.append(
            f"- Brand visible within 2 seconds, one clear message, strong hook, voiceover ends by {voice_end}s"
        )
    sections.append("\n".join(timing))

    secondary = brand.colors[1] if len(brand.colors) > 1 else brand.colors[0]
    accent = brand.colors[2] if len(brand.colors) > 2 else brand.colors[0]
    sections.append(
        f"Visual style: {preset.visual_aesthetic} with {brand.visual_style}\n"
        f"Emotional tone: {preset.tone} with {brand.tone}\n"
        f"Pacing: {preset.pacing_style}\n"
        f"Color palette: PRIMARY {brand.colors[0]}, SECONDARY {secondary}, ACCENT {accent}"
    )

    sections.append(
        "Key features to showcase:\n" + "\n".join(f"{i}. {f}" for i, f in enumerate(features[:3], 1))
    )

    first_feature = features[0] if features else "the core product"
    if duration <= 12:
        b1, b2, b3 = fit_boundaries([3, 7, 10], 12, duration)
        structure = (
            f"- Scene 1 (0-{b1}s): the problem or need {'this product answers' if description else 'in context'}\n"
            f"- Scene 2 ({b1}-{b2}s): demonstrate {first_feature} - the actual transformation, not just the interface\n"
            f"- Scene 3 ({b2}-{b3}s): the result the user gets\n"
            f"- Scene 4 ({b3}-{duration}s): {name} branding with the key message"
        )
    else:
        quarter = int(duration * 0.25)
        three_quarters = int(duration * 0.75)
        demo = description or ", ".join(features[:2])
        structure = (
            f"- Opening (0-{quarter}s): establish the problem with a real scenario\n"
            f"- Middle ({quarter}-{three_quarters}s): demonstrate {demo}\n"
            f"- Closing ({three_quarters}-{duration}s): real results and {name} branding"
        )
    sections.append(f"Scene structure ({duration}s total):\n{structure}")

    sections.append(
        "Cinematography:\n"
        "- Natural lighting with practical sources\n"
        "- Intentional camera movement\n"
        "- Palette derived from the brand colors\n"
        "- Nothing that feels like stock footage"
    )
    sections.append(f"Make this video feel authentic to {name}, not a template that could work for anyone.")

    return OrchestratedPrompt(
        enhanced_prompt="\n\n".join(sections),
        cinematic_elements=FALLBACK_CINEMATICS,
        scene_breakdown=[],
        source=AnalysisSource.TEMPLATE,
    )


def _cinematics(raw) -> CinematicElements:
    if not isinstance(raw, dict) or not raw:
        return DEFAULT_CINEMATICS
    return CinematicElements(
        lighting=str(raw.get("lighting") or DEFAULT_CINEMATICS.lighting),
        camera_movement=str(raw.get("cameraWork") or raw.get("cameraMovement") or DEFAULT_CINEMATICS.camera_movement),
        color_grading=str(raw.get("colorGrading") or DEFAULT_CINEMATICS.color_grading),
        transitions=str(raw.get("transitions") or DEFAULT_CINEMATICS.transitions),
    )


def _scene_breakdown(raw) -> list[str]:
    if not isinstance(raw, list):
        return []
    scenes = []
    for item in raw:
        if isinstance(item, dict):
            timing = item.get("timing", "")
            description = item.get("description", "")
            scenes.append(f"{timing}: {description}".strip(": "))
        elif isinstance(item, str):
            scenes.append(item)
    return scenes


def build_director_brief(
    website: WebsiteData,
    preset: StylePreset,
    duration: int,
    instructions: Optional[str] = None,
) -> str:
    brand = website.brand
    voice_end = duration - 1
    what_it_does = (
        website.product_understanding.what_it_does
        if website.product_understanding
        else (f'"{website.meta_description}"' if website.meta_description else website.hero_text)
    )
    return VIDEO_DIRECTOR_V1.format(
        title=website.title,
        industry=website.industry,
        target_audience=website.target_audience,
        what_it_does=what_it_does,
        features="\n".join(f"{i}. {f}" for i, f in enumerate(website.features, 1)),
        key_message=brand.key_message,
        colors=", ".join(brand.colors),
        brand_tone=brand.tone,
        brand_style=brand.visual_style,
        preset_name=preset.name,
        preset_tone=preset.tone,
        preset_pacing=preset.pacing_style,
        preset_aesthetic=preset.visual_aesthetic,
        instructions=instructions or "None provided - use your expertise",
        duration=duration,
        voice_end=voice_end,
        max_words=voiced_word_budget(duration),
        short_video_focus=(
            SHORT_VIDEO_FOCUS.format(duration=duration, voice_end=voice_end) if duration <= 12 else ""
        ),
        top_features=", ".join(website.features[:3]),
    )


class PromptOrchestrator:
    """Turns website data and a preset into a production-ready video prompt."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def orchestrate_prompt(
        self,
        website: WebsiteData,
        preset: StylePreset,
        duration: int,
        instructions: Optional[str] = None,
    ) -> OrchestratedPrompt:
        """Ask the director model for a cinematic prompt. Never raises."""
        brief = build_director_brief(website, preset, duration, instructions)

        try:
            raw = await self.ai_service.generate_json(
                brief,
                system_instruction=VIDEO_DIRECTOR_SYSTEM,
                temperature=ORCHESTRATION_TEMPERATURE,
                operation=f"orchestrate_prompt/{PROMPT_VERSIONS['orchestrate_prompt']}",
            )
        except AIServiceError as e:
            logger.warning(f"Orchestration failed, using template prompt: {e}")
            return fallback_orchestration(website, preset, duration)

        enhanced = raw.get("enhancedPrompt")
        if not enhanced:
            logger.info("Orchestration returned no enhancedPrompt, using template prompt")
            return fallback_orchestration(website, preset, duration)

        if isinstance(enhanced, dict):
            if isinstance(enhanced.get("prompt"), str) and enhanced["prompt"]:
                enhanced = enhanced["prompt"]
            else:
                logger.info("Orchestration returned enhancedPrompt as an object, serializing it")
                enhanced = json.dumps(enhanced, indent=2)
        elif isinstance(enhanced, list):
            logger.info("Orchestration returned enhancedPrompt as a list, serializing it")
            enhanced = json.dumps(enhanced, indent=2)
        elif not isinstance(enhanced, str):
            logger.info(f"Orchestration returned enhancedPrompt as {type(enhanced).__name__}, using template prompt")
            return fallback_orchestration(website, preset, duration)

        return OrchestratedPrompt(
            enhanced_prompt=enhanced,
            cinematic_elements=_cinematics(raw.get("cinematicElements")),
            scene_breakdown=_scene_breakdown(raw.get("sceneBreakdown")),
            source=AnalysisSource.AI,
        )

    async def create_production_prompt(
        self,
        website: WebsiteData,
        preset: StylePreset,
        instructions: Optional[str] = None,
        duration: Optional[int] = None,
        video_style: Optional[str] = None,
    ) -> str:
        """Orchestrate, then add the deterministic sections."""
        duration = duration or preset.duration
        orchestrated = await self.orchestrate_prompt(website, preset, duration, instructions)

        prompt = add_industry_details(orchestrated.enhanced_prompt, website.industry)
        prompt += "\n\n" + infer_brand_personality(f"{website.title} {website.hero_text}", preset.key)

        cinematics = orchestrated.cinematic_elements
        prompt += (
            "\n\nCinematic details:\n"
            f"- Lighting: {cinematics.lighting}\n"
            f"- Camera work: {cinematics.camera_movement}\n"
            f"- Color grading: {cinematics.color_grading}\n"
            f"- Transitions: {cinematics.transitions}\n"
            "\nTechnical specifications:\n"
            f"- Aspect ratio: {orchestrated.aspect_ratio}\n"
            f"- Resolution: {orchestrated.resolution}\n"
            f"- Frame rate: {orchestrated.frame_rate}"
        )

        if video_style:
            prompt += (
                f"\n\nVideo aesthetic style: {aesthetic_description(video_style)}\n"
                "- Apply this aesthetic throughout and balance it with the brand identity"
            )

        prompt += "\n\n" + brand_lock(website)
        prompt += (
            f"\nThis video must feel unique to {website.title} and never like stock footage "
            "or a generic template."
        )
        prompt += "\n\n" + timing_contract(website, duration)

        issues, suggestions = check_prompt_quality(prompt)
        if issues or len(suggestions) > 1:
            logger.info(f"Prompt quality notes: issues={issues}, suggestions={suggestions}")

        logger.info(
            f"Production prompt ready ({orchestrated.source.value}, {duration}s, {len(prompt)} chars)"
        )
        return prompt
