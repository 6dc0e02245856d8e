"""Video prompt orchestration templates.

Contains prompts for:
- VIDEO_DIRECTOR_SYSTEM: system instruction for the director persona
- VIDEO_DIRECTOR_V1: brief that turns website data and a preset into a cinematic prompt
- SHORT_VIDEO_FOCUS: extra guidance appended for clips of 12 seconds or less
"""

VIDEO_DIRECTOR_SYSTEM = """You are a video production director and cinematographer who makes
product demo videos that nobody could mistake for stock footage.

You know narrative arcs, lighting and color grading, camera work and composition, brand-specific
visual language, and how to make a viewer feel something in a few seconds.

Given a product brief and style preferences, write one detailed, cinematic video prompt that:
1. Captures what is unique about this business
2. Uses specific, evocative visual language instead of generic terms
3. Names concrete cinematography techniques
4. Connects emotionally with the target audience
5. Could not be reused for any other company

Return ONLY a JSON object with this structure:
{
  "enhancedPrompt": "The complete video prompt as ONE plain string",
  "cinematicElements": {
    "lighting": "...",
    "cameraWork": "...",
    "colorGrading": "...",
    "transitions": "..."
  },
  "sceneBreakdown": [
    {"timing": "0-3s", "description": "...", "visualDetails": "...", "emotionalTone": "..."}
  ]
}

"enhancedPrompt" MUST be a plain string, never an object."""

# Template placeholders: {title}, {industry}, {target_audience}, {what_it_does}, {features},
# {key_message}, {colors}, {brand_tone}, {brand_style}, {preset_name}, {preset_tone},
# {preset_pacing}, {preset_aesthetic}, {instructions}, {duration}, {voice_end}, {max_words},
# {short_video_focus}, {top_features}
VIDEO_DIRECTOR_V1 = """Create a cinematic video prompt for this product.

BUSINESS
- Name: {title}
- Industry: {industry}
- Target audience: {target_audience}

WHAT THE PRODUCT ACTUALLY DOES (the video must demonstrate this)
{what_it_does}

KEY FEATURES
{features}

BRAND MESSAGE
"{key_message}"

BRAND IDENTITY (the video must be on-brand)
- Colors: {colors} (use these exact colors)
- Tone: {brand_tone}
- Visual style: {brand_style}

STYLE
- Preset: {preset_name}
- Tone: {preset_tone} combined with {brand_tone}
- Pacing: {preset_pacing}
- Aesthetic: {preset_aesthetic} combined with {brand_style}

CUSTOMER INSTRUCTIONS
{instructions}

TIMING
- Duration: exactly {duration} seconds
- The voiceover must finish by second {voice_end}; the final second is visual only
- At most {max_words} voiceover words
- Every scene and transition fits inside {duration} seconds
{short_video_focus}
Include in the prompt:
1. Visual metaphors specific to this business
2. Lighting and color palette with hex codes or named moods
3. Camera movement and shot types
4. Authentic human moments, not stock scenarios
5. A scene-by-scene breakdown whose timings add up to {duration} seconds, each scene showing
   one of the key features in action
6. A voiceover script of at most {max_words} words that names real capabilities

The video must clearly show what {title} DOES: {top_features}"""

# Template placeholders: {duration}, {voice_end}
SHORT_VIDEO_FOCUS = """
SHORT CLIP FOCUS ({duration}s)
1. Brand colors or wordmark visible within the first 2 seconds
2. One clear message only
3. A hook in the first 3 seconds
4. A visual story that works with the sound off
5. A closing moment that reinforces the brand
6. Few, purposeful scene changes
7. Voiceover complete by second {voice_end}
"""
