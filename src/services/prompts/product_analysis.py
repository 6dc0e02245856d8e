"""Product analysis prompt templates.

Contains prompts for:
- PRODUCT_ANALYST_SYSTEM: system instruction for the analyst persona
- PRODUCT_ANALYSIS_V1: turn parsed website sections into a product understanding
"""

PRODUCT_ANALYST_SYSTEM = """You are a product analyst who understands SaaS products, apps and
digital services better than their own marketing pages do.

Read the website content and extract a precise understanding of:
1. What the product actually DOES (real functionality, not slogans)
2. The step-by-step workflow a user goes through
3. The transformation the user experiences
4. How that transformation can be shown on screen in a short video

Be specific and use action verbs. Describe transformations, not feature names.

BAD: "AI-powered content platform"
GOOD: "Records your voice notes and turns them into formatted blog posts with images"

Return ONLY a JSON object."""

# Template placeholders: {title}, {meta_description}, {hero}, {features}, {steps},
# {workflow}, {use_cases}, {benefits}, {enrichment}
PRODUCT_ANALYSIS_V1 = """Analyze this product and state EXACTLY what it does.

PRODUCT NAME: {title}
META DESCRIPTION: {meta_description}

HERO SECTION
{hero}

FEATURES FOUND
{features}

HOW IT WORKS
{steps}
{workflow}

USE CASES
{use_cases}

BENEFITS
{benefits}
{enrichment}
OUTPUT FORMAT (JSON)
{{
  "whatItDoes": "One sentence with action verbs, e.g. 'Transcribes Zoom calls and writes meeting notes with action items'",
  "coreProblemSolved": "The specific pain point this removes",
  "userWorkflow": {{
    "step1": "First thing the user does",
    "step2": "What happens next",
    "step3": "Final step or result",
    "step4": "Optional fourth step",
    "visualDescription": "What appears on screen while this workflow is shown"
  }},
  "enrichedFeatures": [
    {{
      "name": "Feature name",
      "whatItDoes": "What happens when you use it",
      "userBenefit": "What changes for the user",
      "visualConcept": "A filmable shot, e.g. 'Split screen: messy voice memo left, clean post appearing right'"
    }}
  ],
  "concreteExamples": [
    {{
      "scenario": "Specific use case",
      "before": "State before the product",
      "after": "State after the product",
      "transformation": "What visibly changed"
    }}
  ],
  "videoGuidance": {{
    "openingHook": "How a 12-second video should open. Describe the first shot.",
    "keyVisualsToShow": ["Visual 1", "Visual 2", "Visual 3"],
    "emotionalTone": "How the video should feel",
    "callout": "The ONE thing that must be unmistakable in the video"
  }}
}}

Do not write "user interacts with interface". Write "user taps record, speaks for
30 seconds, watches a formatted blog post appear"."""

# Template placeholders: {transcript}
ENRICHMENT_YOUTUBE = """
YOUTUBE DEMO TRANSCRIPT
{transcript}
This shows the real product in use. Prefer it over marketing copy.
"""

# Template placeholders: {bio}, {posts}
ENRICHMENT_INSTAGRAM = """
INSTAGRAM PROFILE
Bio: {bio}
Recent posts:
{posts}
This reflects the brand's visual identity and tone.
"""

# Template placeholders: {brief}
ENRICHMENT_VOICE_BRIEF = """
VOICE BRIEF FROM THE CUSTOMER
{brief}
These are direct instructions from the customer. Give them priority.
"""
