"""Product analyzer - one LLM call that explains what a product actually does.

The model output is trusted field by field: anything missing or malformed is
backfilled with a neutral default. If the call itself fails, a deterministic
understanding is built from the parsed page sections instead, so analysis
never raises.
"""

import logging
from typing import Any, Optional

from models.product import (
    AnalysisSource,
    ConcreteExample,
    EnrichedFeature,
    ProductUnderstanding,
    VideoGuidance,
)
from models.website import EnrichedContext, ParsedContent
from services.ai_service import AIService, AIServiceError
from services.prompts import (
    ENRICHMENT_INSTAGRAM,
    ENRICHMENT_VOICE_BRIEF,
    ENRICHMENT_YOUTUBE,
    PRODUCT_ANALYSIS_V1,
    PRODUCT_ANALYST_SYSTEM,
    PROMPT_VERSIONS,
)

logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.3
MAX_ENRICHED_FEATURES = 3
MAX_EXAMPLES = 2
MAX_TRANSCRIPT_CHARS = 3000
MAX_SOCIAL_POSTS = 5

DEFAULT_WORKFLOW = ["User accesses the platform", "User interacts with features", "User gets results"]
FALLBACK_WORKFLOW = ["Access the platform", "Use the features", "Get results"]
DEFAULT_KEY_VISUALS = ["Product interface", "User interaction", "Results"]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def format_enrichment(context: Optional[EnrichedContext]) -> str:
    """Render optional enrichment sources as extra prompt sections."""
    if context is None or context.is_empty():
        return ""

    parts = []
    if context.youtube_transcript:
        transcript = context.youtube_transcript
        if len(transcript) > MAX_TRANSCRIPT_CHARS:
            transcript = transcript[:MAX_TRANSCRIPT_CHARS] + "..."
        if context.youtube_title:
            transcript = f"Video title: {context.youtube_title}\n{transcript}"
        parts.append(ENRICHMENT_YOUTUBE.format(transcript=transcript))
    if context.instagram_bio or context.instagram_posts:
        posts = "\n".join(
            f"{i}. {caption}" for i, caption in enumerate(context.instagram_posts[:MAX_SOCIAL_POSTS], 1)
        )
        parts.append(ENRICHMENT_INSTAGRAM.format(bio=context.instagram_bio or "", posts=posts))
    if context.voice_brief:
        parts.append(ENRICHMENT_VOICE_BRIEF.format(brief=context.voice_brief))
    return "".join(parts)


def build_analysis_prompt(
    parsed: ParsedContent,
    title: str,
    meta_description: str,
    enrichment: Optional[EnrichedContext] = None,
) -> str:
    hero = "\n".join(
        part for part in (parsed.hero.heading, parsed.hero.subheading, parsed.hero.description) if part
    )
    features = "\n".join(
        f"{i}. {f.title}\n   {f.description}\n   {f.details}".rstrip()
        for i, f in enumerate(parsed.features, 1)
    )
    steps = "\n".join(
        f"Step {i}: {s.title} - {s.description}" for i, s in enumerate(parsed.how_it_works_steps, 1)
    )
    use_cases = "\n".join(f"- {u.scenario}: {u.description}" for u in parsed.use_cases)

    return PRODUCT_ANALYSIS_V1.format(
        title=title,
        meta_description=meta_description or "Not provided",
        hero=hero or "Not found",
        features=features or "None found",
        steps=steps or "None found",
        workflow=parsed.workflow,
        use_cases=use_cases or "None found",
        benefits="\n".join(parsed.benefits) or "None found",
        enrichment=format_enrichment(enrichment),
    )


def structure_analysis(
    raw: dict,
    parsed: ParsedContent,
    meta_description: str,
) -> ProductUnderstanding:
    """Backfill every field of a raw model response."""
    workflow = _dict(raw.get("userWorkflow"))
    steps = [
        _text(workflow.get("step1")) or DEFAULT_WORKFLOW[0],
        _text(workflow.get("step2")) or DEFAULT_WORKFLOW[1],
        _text(workflow.get("step3")) or DEFAULT_WORKFLOW[2],
    ]
    if _text(workflow.get("step4")):
        steps.append(_text(workflow.get("step4")))

    features = [
        EnrichedFeature(
            title=_text(f.get("name")) or "Feature",
            what_it_does=_text(f.get("whatItDoes")) or "Provides functionality",
            user_benefit=_text(f.get("userBenefit")) or "Improves experience",
            visual_concept=_text(f.get("visualConcept")) or "Feature demonstration",
        )
        for f in map(_dict, _list(raw.get("enrichedFeatures"))[:MAX_ENRICHED_FEATURES])
    ]

    examples = [
        ConcreteExample(
            scenario=_text(ex.get("scenario")) or "User scenario",
            before_state=_text(ex.get("before")) or "Before state",
            after_state=_text(ex.get("after")) or "After state",
            visual_transformation=_text(ex.get("transformation")) or "Improved state",
        )
        for ex in map(_dict, _list(raw.get("concreteExamples"))[:MAX_EXAMPLES])
    ]

    guidance = _dict(raw.get("videoGuidance"))
    key_visuals = [_text(v) for v in _list(guidance.get("keyVisualsToShow")) if _text(v)]

    return ProductUnderstanding(
        what_it_does=_text(raw.get("whatItDoes")) or parsed.hero.description or "Digital platform",
        core_problem_solved=_text(raw.get("coreProblemSolved")) or "Improves workflow efficiency",
        workflow_steps=steps,
        workflow_visual=_text(workflow.get("visualDescription")) or "User workflow demonstration",
        features=features,
        examples=examples,
        video_guidance=VideoGuidance(
            opening_hook=_text(guidance.get("openingHook")) or "Open with product in use",
            key_visuals=key_visuals or list(DEFAULT_KEY_VISUALS),
            emotional_tone=_text(guidance.get("emotionalTone")) or "Professional and engaging",
            callout=_text(guidance.get("callout")) or meta_description or parsed.hero.subheading,
        ),
        source=AnalysisSource.AI,
    )


def fallback_understanding(parsed: ParsedContent, title: str, meta_description: str) -> ProductUnderstanding:
    """Deterministic understanding built only from parsed page sections."""
    step_titles = [s.title for s in parsed.how_it_works_steps[:4]]
    steps = [
        step_titles[i] if i < len(step_titles) else FALLBACK_WORKFLOW[i] for i in range(3)
    ]
    if len(step_titles) > 3:
        steps.append(step_titles[3])

    top_features = parsed.features[:MAX_ENRICHED_FEATURES]

    return ProductUnderstanding(
        what_it_does=meta_description or parsed.hero.description or "Digital platform for business needs",
        core_problem_solved="Streamlines workflows and improves efficiency",
        workflow_steps=steps,
        workflow_visual="Show user going through the workflow step by step",
        features=[
            EnrichedFeature(
                title=f.title,
                what_it_does=f.description or "Provides key functionality",
                user_benefit=f.details or "Improves user experience",
                visual_concept=f"Demonstrate {f.title} in action",
            )
            for f in top_features
        ],
        examples=[
            ConcreteExample(
                scenario=u.scenario,
                before_state="Manual process",
                after_state="Automated solution",
                visual_transformation=u.description,
            )
            for u in parsed.use_cases[:MAX_EXAMPLES]
        ],
        video_guidance=VideoGuidance(
            opening_hook=f"Show the problem that {title} solves",
            key_visuals=[f.title for f in top_features],
            emotional_tone="Professional and solution-focused",
            callout=meta_description or parsed.hero.subheading,
        ),
        source=AnalysisSource.TEMPLATE,
    )


class ProductAnalyzer:
    """Explains a product from its parsed website sections."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def analyze_product(
        self,
        parsed: ParsedContent,
        title: str,
        meta_description: str = "",
        enrichment: Optional[EnrichedContext] = None,
    ) -> ProductUnderstanding:
        """Return a ProductUnderstanding. Never raises."""
        prompt = build_analysis_prompt(parsed, title, meta_description, enrichment)

        try:
            raw = await self.ai_service.generate_json(
                prompt,
                system_instruction=PRODUCT_ANALYST_SYSTEM,
                temperature=ANALYSIS_TEMPERATURE,
                operation=f"analyze_product/{PROMPT_VERSIONS['analyze_product']}",
            )
        except AIServiceError as e:
            logger.warning(f"Product analysis failed, using parsed-content fallback: {e}")
            return fallback_understanding(parsed, title, meta_description)

        understanding = structure_analysis(raw, parsed, meta_description)
        logger.info(
            f"Product analysis complete: {understanding.what_it_does[:100]!r}, "
            f"{len(understanding.features)} enriched features"
        )
        return understanding
