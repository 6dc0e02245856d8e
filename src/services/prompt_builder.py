"""Deterministic video prompt builder.

Holds the style presets, the narration word budgets and the time-boxed
scene templates, and renders a complete video prompt from WebsiteData
without any model call. The same inputs always give the same text, which
is what the pipeline falls back to whenever orchestration fails.
"""

import math
from dataclasses import replace
from typing import Optional

from models.product import ProductUnderstanding
from models.prompt import SceneBeat, StylePreset
from models.website import WebsiteData

# Comfortable speaking pace, with 20% of the runtime left for visual-only moments
WORDS_PER_SECOND = 2.5
SPEAKING_SHARE = 0.8

# Longest clip each scene-structure bucket is laid out for
BEAT_BUCKETS = (4, 8, 12, 20, 30)

DEFAULT_PRESET = "product-demo"

STYLE_PRESETS: dict[str, StylePreset] = {
    "enterprise-saas": StylePreset(
        key="enterprise-saas",
        name="Enterprise SaaS",
        duration=30,
        pacing_style="Steady, confident, measured",
        tone="Professional, authoritative, data-driven",
        visual_aesthetic="Clean interfaces, dashboard screenshots, professional office environments",
        color_scheme="Corporate blues, grays, whites. Avoid bright colors.",
        scene_structure=(
            "Scene 1 (0-6s): Problem statement - professional struggling with the current solution\n"
            "Scene 2 (6-12s): Product interface - smooth navigation through key features\n"
            "Scene 3 (12-18s): Data visualization - charts, metrics, ROI indicators\n"
            "Scene 4 (18-24s): Team collaboration - several users benefiting\n"
            "Scene 5 (24-30s): Success state - satisfied professional, clear results"
        ),
    ),
    "startup-energy": StylePreset(
        key="startup-energy",
        name="Startup Energy",
        duration=30,
        pacing_style="Fast, dynamic, high-energy",
        tone="Conversational, innovative, founder-led",
        visual_aesthetic="Modern workspaces, vibrant colors, young professionals, tech-forward",
        color_scheme="Bold primary colors, high contrast, energetic palette",
        scene_structure=(
            "Scene 1 (0-5s): Hook - dynamic problem visualization, fast cuts\n"
            "Scene 2 (5-10s): Solution reveal - product in action, quick feature showcase\n"
            "Scene 3 (10-18s): Use cases - rapid-fire examples of the product solving problems\n"
            "Scene 4 (18-24s): Founder authenticity - real people, real results\n"
            "Scene 5 (24-30s): Call to action - forward momentum, growth trajectory"
        ),
    ),
    "product-demo": StylePreset(
        key="product-demo",
        name="Product Demo",
        duration=45,
        pacing_style="Clear, instructional, methodical",
        tone="Explanatory, technical but accessible",
        visual_aesthetic="Screen recordings, UI focus, feature callouts",
        color_scheme="Match product interface colors. Clean and functional.",
        scene_structure=(
            "Scene 1 (0-8s): Problem context - show the pain point clearly\n"
            "Scene 2 (8-20s): Feature 1 - detailed walkthrough with UI focus\n"
            "Scene 3 (20-32s): Feature 2 - integration or key capability\n"
            "Scene 4 (32-40s): Feature 3 - ease of use\n"
            "Scene 5 (40-45s): Outcome - final result and value delivered"
        ),
    ),
    "brand-story": StylePreset(
        key="brand-story",
        name="Brand Story",
        duration=40,
        pacing_style="Thoughtful, human, emotionally resonant",
        tone="Authentic, empathetic, mission-driven",
        visual_aesthetic="Real people, genuine moments, warm lighting, human connection",
        color_scheme="Warm, inviting colors. Natural lighting. Earth tones.",
        scene_structure=(
            "Scene 1 (0-8s): The founder's why - origin story or mission\n"
            "Scene 2 (8-16s): Real customer stories - testimonial-style moments\n"
            "Scene 3 (16-26s): Product in real life - authentic use cases\n"
            "Scene 4 (26-34s): Community and impact - the broader effect\n"
            "Scene 5 (34-40s): Invitation - join the mission"
        ),
    ),
}

AESTHETIC_DESCRIPTIONS = {
    "modern": (
        "Modern & Clean - smooth camera movement, crisp product shots, bright lighting. "
        "Contemporary tech demo look with clean UI screens and polished production."
    ),
    "cinematic": (
        "Cinematic - dramatic lighting, shallow depth of field, film-like grading. Dolly and "
        "crane moves, establishing shots, composed frames. Documentary meets commercial."
    ),
    "minimalist": (
        "Minimalist - simple compositions with generous negative space. Limited palette, "
        "clean backgrounds, geometric framing, architectural restraint."
    ),
    "animated": (
        "Motion Graphics - camera movement that mimics animation, fast cuts, smooth "
        "transitions, kinetic typography, screen recordings and UI demonstrations."
    ),
    "analog": (
        "Retro Film - 35mm grain, warm color temperature, slight vignetting, practical "
        "tungsten lighting and a nostalgic 70s-90s commercial feel."
    ),
}


def get_preset(key: Optional[str]) -> StylePreset:
    """Look up a preset, defaulting to the product demo."""
    return STYLE_PRESETS.get(key or "", STYLE_PRESETS[DEFAULT_PRESET])


def is_valid_preset(key: Optional[str]) -> bool:
    return bool(key) and key in STYLE_PRESETS


def aesthetic_description(style: Optional[str]) -> str:
    return AESTHETIC_DESCRIPTIONS.get(style or "", AESTHETIC_DESCRIPTIONS["modern"])


def word_budget(seconds: int) -> int:
    """Maximum narration words for a clip of ``seconds``."""
    return math.floor(round(seconds * WORDS_PER_SECOND * SPEAKING_SHARE, 6))


def voiced_word_budget(seconds: int) -> int:
    """Word budget when narration must end one second before the clip does."""
    return word_budget(max(seconds - 1, 0))


def fit_boundaries(boundaries: list[int], nominal: int, duration: int) -> list[int]:
    """Scale beat boundaries laid out for a ``nominal``-second clip down to ``duration``.

    Longer clips keep the nominal boundaries and stretch the last beat.
    """
    if duration >= nominal:
        return list(boundaries)
    return [round(b * duration / nominal) for b in boundaries]


def scene_structure(
    duration: int,
    business_name: str,
    features: list[str],
    understanding: Optional[ProductUnderstanding] = None,
) -> list[SceneBeat]:
    """Time-boxed beats for a clip of ``duration`` seconds.

    Workflow steps and enriched features from the product analysis replace
    the generic beat descriptions when they are available. Each bucket is
    laid out for its longest clip; shorter clips get proportionally scaled
    boundaries so no beat ends before it starts.
    """
    beats = _bucket_beats(duration, business_name, features, understanding)
    nominal = next((b for b in BEAT_BUCKETS if duration <= b), duration)
    starts = fit_boundaries([beat.start for beat in beats], nominal, duration)
    ends = starts[1:] + [duration]
    return [replace(beat, start=start, end=end) for beat, start, end in zip(beats, starts, ends)]


def _bucket_beats(
    duration: int,
    business_name: str,
    features: list[str],
    understanding: Optional[ProductUnderstanding],
) -> list[SceneBeat]:
    steps = understanding.workflow_steps if understanding else []
    enriched = understanding.features if understanding else []
    visual = understanding.workflow_visual if understanding else ""

    def step(i: int, default: str) -> str:
        return steps[i] if i < len(steps) and steps[i] else default

    feature1 = (enriched[0].what_it_does if enriched else "") or (features[0] if features else "core functionality")
    feature2 = (enriched[1].what_it_does if len(enriched) > 1 else "") or (
        features[1] if len(features) > 1 else "key benefit"
    )
    feature3 = features[2] if len(features) > 2 else "additional capabilities"
    concept1 = enriched[0].visual_concept if enriched else ""

    if duration <= 4:
        return [
            SceneBeat(
                0,
                duration,
                "SINGLE SCENE",
                visual or f'Show {business_name} solving the problem - "{feature1}" in one quick, powerful visual',
            )
        ]

    if duration <= 8:
        return [
            SceneBeat(0, 3, "PROBLEM", step(0, f"The need that {business_name} answers - establish context")),
            SceneBeat(3, 6, "IN ACTION", step(1, f'Demonstrate "{feature1}" - show what it does')),
            SceneBeat(6, duration, "RESULT", step(2, "Clear outcome from using this feature")),
        ]

    if duration <= 12:
        return [
            SceneBeat(
                0,
                3,
                "HOOK",
                step(0, f"{business_name} brand colors plus the specific problem it solves") + ". Instantly recognizable.",
            ),
            SceneBeat(
                3,
                7,
                "SOLUTION",
                step(1, f'Demonstrate "{feature1}" working')
                + ". "
                + (concept1 or "Show the transformation it creates, not just the interface")
                + ".",
            ),
            SceneBeat(
                7,
                10,
                "PAYOFF",
                step(2, "User seeing tangible results") + ". Visible satisfaction and a clear benefit.",
            ),
            SceneBeat(
                10,
                duration,
                "BRAND",
                step(3, f'{business_name} colors and wordmark with a brief hint of "{feature2}"')
                + ". Memorable closing.",
            ),
        ]

    if duration <= 20:
        return [
            SceneBeat(0, 4, "HOOK", f"The specific problem that {business_name} addresses"),
            SceneBeat(4, 9, "FEATURE", f'Demonstrate "{feature1}" - exactly what it does and how'),
            SceneBeat(9, 14, "FEATURE", f'Demonstrate "{feature2}" - the additional value'),
            SceneBeat(14, 17, "RESULTS", "Tangible results from using these features"),
            SceneBeat(17, duration, "BRAND", f"{business_name} brand moment and call to action"),
        ]

    return [
        SceneBeat(0, 6, "CONTEXT", f"Real-world problem that {business_name} solves"),
        SceneBeat(6, 12, "FEATURE", f'Demonstrate "{feature1}" in detail - the full workflow'),
        SceneBeat(12, 18, "FEATURE", f'Demonstrate "{feature2}" - how the features work together'),
        SceneBeat(18, 24, "FEATURE", f'Show "{feature3}" and the complete value proposition'),
        SceneBeat(24, duration, "CLOSE", f"Real customer results, {business_name} brand story and next steps"),
    ]


def render_scene_structure(beats: list[SceneBeat]) -> str:
    return "\n".join(beat.render() for beat in beats)


def _understanding_block(understanding: ProductUnderstanding) -> str:
    lines = [
        "WHAT THIS PRODUCT ACTUALLY DOES (the video must show this):",
        f'"{understanding.what_it_does}"',
    ]
    if understanding.workflow_steps:
        lines.append("")
        lines.append("USER WORKFLOW TO VISUALIZE:")
        lines.extend(f"{i}. {s}" for i, s in enumerate(understanding.workflow_steps, 1))
        if understanding.workflow_visual:
            lines.append(f"Visual guide: {understanding.workflow_visual}")
    if understanding.core_problem_solved:
        lines.append("")
        lines.append(f"PROBLEM BEING SOLVED: {understanding.core_problem_solved}")
        lines.append("Show this problem visually, then how the product removes it.")
    return "\n".join(lines)


def brand_lock(website: WebsiteData) -> str:
    """Brand block repeated verbatim in every prompt variant."""
    brand = website.brand
    colors = brand.colors
    lines = [
        "BRAND IDENTITY (must be on-brand):",
        f"- Brand colors: {', '.join(colors)} - use these exact colors throughout",
        f"- Brand tone: {brand.tone}",
        f"- Visual style: {brand.visual_style}",
        f"- Key message: {brand.key_message}",
    ]
    if brand.logo_url:
        lines.append(f"- Logo: show the actual {website.title} logo from {brand.logo_url}")
    else:
        lines.append(
            f"- Branding: {website.title} wordmark in {colors[0]} - do not generate a logo"
        )
    return "\n".join(lines)


def build_basic_prompt(
    website: WebsiteData,
    preset_key: Optional[str] = None,
    custom_instructions: Optional[str] = None,
    duration: Optional[int] = None,
    video_style: Optional[str] = None,
) -> str:
    """Render the full template prompt. Pure function of its inputs."""
    preset = get_preset(preset_key)
    duration = duration or preset.duration
    understanding = website.product_understanding
    name = website.title or "Your Business"
    brand = website.brand
    short = duration <= 12

    features = website.features[: 2 if short else 3]
    value_prop = website.hero_text or website.meta_description or "Innovative solutions"
    budget = word_budget(duration)

    sections = [f"Create a {duration}-second professional demo video for {name}."]

    if understanding:
        sections.append(_understanding_block(understanding))
    elif website.meta_description:
        sections.append(
            "WHAT THIS PRODUCT ACTUALLY DOES (the video must show this):\n"
            f'"{website.meta_description}"'
        )

    timing = [
        "TIMING:",
        f"- Total duration: exactly {duration} seconds",
        f"- Narration at most {budget} words ({WORDS_PER_SECOND:g} words per second)",
        f"- All scenes and transitions fit inside {duration} seconds",
    ]
    if short:
        timing += [
            "- First 2 seconds: immediate brand recognition with the primary brand color",
            "- Tell one story well; 3-4 scenes at most",
            "- The visual story must work without audio",
        ]
    sections.append("\n".join(timing))

    sections.append(
        "BUSINESS CONTEXT:\n"
        f"- Industry: {website.industry}\n"
        f"- Target audience: {website.target_audience}\n"
        f"- Primary value proposition: {value_prop}\n"
        f"- Brand key message: {brand.key_message}"
    )

    if understanding and understanding.features:
        feature_lines = [
            f"- {f.title}: {f.what_it_does}\n  Benefit: {f.user_benefit}\n  Visual concept: {f.visual_concept}"
            for f in understanding.features
        ]
    else:
        feature_lines = [f"- {f}" for f in features]
    sections.append("KEY FEATURES TO SHOWCASE:\n" + "\n".join(feature_lines))

    if short and features:
        focus = understanding.features[0].title if understanding and understanding.features else features[0]
        sections.append(
            f'FOCUS: in {duration} seconds, demonstrate "{focus}" exceptionally well rather than '
            "cramming several features."
        )

    sections.append(brand_lock(website))

    secondary = brand.colors[1] if len(brand.colors) > 1 else brand.colors[0]
    accent = brand.colors[2] if len(brand.colors) > 2 else brand.colors[0]
    sections.append(
        "VISUAL STYLE:\n"
        f"- Aesthetic: {preset.visual_aesthetic} combined with {brand.visual_style}\n"
        f"- Color palette: PRIMARY {brand.colors[0]}, SECONDARY {secondary}, ACCENT {accent}\n"
        f"- Pacing: {preset.pacing_style}\n"
        f"- Tone: {preset.tone} with {brand.tone} influence"
    )

    beats = scene_structure(duration, name, website.features, understanding)
    sections.append("SCENE STRUCTURE:\n" + render_scene_structure(beats))

    if understanding and understanding.video_guidance:
        guidance = understanding.video_guidance
        sections.append(
            "VIDEO GUIDANCE:\n"
            f"- Opening hook: {guidance.opening_hook}\n"
            f"- Key visuals: {', '.join(guidance.key_visuals)}\n"
            f"- Emotional tone: {guidance.emotional_tone}\n"
            f"- Must be unmistakable: {guidance.callout}"
        )

    voiceover = [
        "VOICEOVER:",
        f"- At most {budget} words, with natural pauses",
        f"- Complete before the {duration}-second mark",
    ]
    if short:
        voiceover.append("- Consider a single strong tagline of 5-8 words instead of full narration")
    sections.append("\n".join(voiceover))

    if custom_instructions:
        sections.append(f"SPECIAL INSTRUCTIONS:\n{custom_instructions.strip()}")

    if video_style:
        sections.append(
            "VIDEO AESTHETIC:\n"
            f"{aesthetic_description(video_style)}\n"
            "- Balance this aesthetic with the brand identity; both must be clearly visible"
        )

    sections.append(
        "Technical requirements:\n"
        "- Aspect ratio: 16:9\n"
        "- Resolution: 1080p\n"
        "- No text overlays\n"
        "- Smooth transitions between scenes"
    )

    return "\n\n".join(sections)
