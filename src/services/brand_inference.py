"""Keyword-driven brand inference.

Industry, audience, tone and visual style are each picked by the first
matching pattern in an ordered table; the color palette follows from the
industry and style. Everything here is pure and deterministic.
"""

import re

from models.website import BrandProfile

DEFAULT_INDUSTRY = "Professional Services"
DEFAULT_AUDIENCE = "Business professionals"
DEFAULT_TONE = "Professional and trustworthy"
DEFAULT_VISUAL_STYLE = "Modern and professional"

INDUSTRY_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"software|saas|app|tech|digital|cloud|api"), "Technology / SaaS"),
    (re.compile(r"ecommerce|shop|store|retail|marketplace"), "E-commerce / Retail"),
    (re.compile(r"finance|fintech|banking|payment|investment"), "Finance / FinTech"),
    (re.compile(r"health|medical|healthcare|wellness|fitness"), "Healthcare / Wellness"),
    (re.compile(r"education|learning|course|training|school"), "Education / EdTech"),
    (re.compile(r"real estate|property|housing|rental"), "Real Estate"),
    (re.compile(r"marketing|advertising|agency|creative"), "Marketing / Agency"),
    (re.compile(r"consulting|advisory|professional services"), "Consulting / Professional Services"),
]

AUDIENCE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"enterprise|b2b|business|corporate|company"), "Enterprise / B2B decision-makers"),
    (re.compile(r"startup|founder|entrepreneur|small business"), "Startups and small businesses"),
    (re.compile(r"developer|engineer|technical|api"), "Developers and technical teams"),
    (re.compile(r"consumer|customer|user|individual"), "General consumers"),
    (re.compile(r"student|learner|educator|teacher"), "Students and educators"),
]

TONE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (
        re.compile(r"innovative|cutting-edge|revolutionary|breakthrough|disruptive"),
        "Innovative and forward-thinking",
    ),
    (re.compile(r"friendly|easy|simple|intuitive|effortless"), "Approachable and user-friendly"),
    (re.compile(r"expert|professional|enterprise|trusted|reliable"), "Professional and authoritative"),
    (re.compile(r"fun|exciting|vibrant|dynamic|energetic"), "Energetic and playful"),
    (re.compile(r"luxury|premium|exclusive|elegant|sophisticated"), "Premium and refined"),
    (re.compile(r"technical|precise|accurate|detailed|engineered"), "Technical and precise"),
    (re.compile(r"human|personal|caring|empathetic|community"), "Human-centered and empathetic"),
]

STYLE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"minimal|minimalist|clean|simple"), "Minimalist and clean"),
    (re.compile(r"bold|vibrant|colorful|dynamic"), "Bold and vibrant"),
    (re.compile(r"classic|traditional|timeless|elegant"), "Classic and elegant"),
    (re.compile(r"modern|contemporary|sleek|cutting-edge"), "Modern and sleek"),
    (re.compile(r"playful|fun|creative|quirky"), "Playful and creative"),
]

INDUSTRY_STYLES = {
    "Technology / SaaS": "Modern and tech-forward",
    "Finance / FinTech": "Professional and trustworthy",
    "Healthcare / Wellness": "Clean and calming",
    "Education / EdTech": "Friendly and accessible",
    "E-commerce / Retail": "Vibrant and engaging",
    "Marketing / Agency": "Creative and bold",
    "Real Estate": "Elegant and sophisticated",
}

INDUSTRY_COLORS = {
    "Technology / SaaS": ["#3b82f6", "#1e40af", "#0ea5e9"],
    "Finance / FinTech": ["#10b981", "#059669", "#064e3b"],
    "Healthcare / Wellness": ["#06b6d4", "#0891b2", "#14b8a6"],
    "Education / EdTech": ["#f59e0b", "#d97706", "#7c2d12"],
    "E-commerce / Retail": ["#ec4899", "#db2777", "#be185d"],
    "Marketing / Agency": ["#8b5cf6", "#7c3aed", "#6d28d9"],
    "Real Estate": ["#64748b", "#475569", "#334155"],
    "Consulting / Professional Services": ["#2563eb", "#1e40af", "#1e3a8a"],
}

BOLD_FALLBACK_COLORS = ["#ef4444", "#dc2626", "#b91c1c"]
MINIMAL_COLORS = ["#000000", "#ffffff", "#6b7280"]
ELEGANT_COLORS = ["#1f2937", "#374151", "#9ca3af"]
DEFAULT_COLORS = ["#3b82f6", "#1e40af", "#ffffff"]


def _first_match(text: str, patterns: list[tuple[re.Pattern, str]], default: str) -> str:
    for pattern, label in patterns:
        if pattern.search(text):
            return label
    return default


def detect_industry(title: str, hero_text: str, description: str) -> str:
    text = f"{title} {hero_text} {description}".lower()
    return _first_match(text, INDUSTRY_PATTERNS, DEFAULT_INDUSTRY)


def detect_audience(title: str, hero_text: str, description: str) -> str:
    text = f"{title} {hero_text} {description}".lower()
    return _first_match(text, AUDIENCE_PATTERNS, DEFAULT_AUDIENCE)


def detect_tone(title: str, hero_text: str, content: str) -> str:
    """Tone looks at the first 2000 characters of the page as well as the headline."""
    text = f"{title} {hero_text} {content[:2000]}".lower()
    return _first_match(text, TONE_PATTERNS, DEFAULT_TONE)


def detect_visual_style(title: str, hero_text: str, content: str, industry: str) -> str:
    """Explicit style words win; otherwise the industry's usual look is assumed."""
    text = f"{title} {hero_text} {content[:2000]}".lower()
    style = _first_match(text, STYLE_PATTERNS, "")
    if style:
        return style
    return INDUSTRY_STYLES.get(industry, DEFAULT_VISUAL_STYLE)


def brand_colors(industry: str, visual_style: str) -> list[str]:
    """Pick the three-color palette for an industry, adjusted by visual style."""
    industry_palette = INDUSTRY_COLORS.get(industry)

    if "Bold" in visual_style or "Vibrant" in visual_style:
        palette = industry_palette or BOLD_FALLBACK_COLORS
    elif "Minimalist" in visual_style or "Clean" in visual_style:
        palette = MINIMAL_COLORS
    elif "Elegant" in visual_style or "Classic" in visual_style:
        palette = ELEGANT_COLORS
    else:
        palette = industry_palette or DEFAULT_COLORS

    return list(palette)


def infer_brand(
    title: str,
    hero_text: str,
    description: str,
    content: str,
    industry: str,
    logo_url: str | None = None,
) -> BrandProfile:
    """Build a BrandProfile from page text and an already-detected industry."""
    tone = detect_tone(title, hero_text, content)
    visual_style = detect_visual_style(title, hero_text, content, industry)
    key_message = hero_text or description or f"{title}'s innovative solutions"

    return BrandProfile(
        colors=brand_colors(industry, visual_style),
        tone=tone,
        visual_style=visual_style,
        key_message=key_message,
        logo_url=logo_url,
    )
