"""Models describing a scraped website and its inferred brand."""

from dataclasses import dataclass, field
from typing import Optional

from .product import ProductUnderstanding


@dataclass
class BrandProfile:
    """Inferred brand identity of a website.

    ``colors`` always holds exactly three hex values: primary, secondary and
    accent.
    """

    colors: list[str]
    tone: str
    visual_style: str
    key_message: str
    logo_url: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "colors": list(self.colors),
            "tone": self.tone,
            "visual_style": self.visual_style,
            "key_message": self.key_message,
            "logo_url": self.logo_url,
        }


@dataclass
class HeroSection:
    heading: str = ""
    subheading: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "heading": self.heading,
            "subheading": self.subheading,
            "description": self.description,
        }


@dataclass
class ParsedFeature:
    title: str
    description: str = ""
    details: str = ""

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "details": self.details}


@dataclass
class HowItWorksStep:
    title: str
    description: str

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description}


@dataclass
class UseCase:
    scenario: str
    description: str

    def to_dict(self) -> dict:
        return {"scenario": self.scenario, "description": self.description}


@dataclass
class ParsedContent:
    """Structured sections pulled out of a page's markdown."""

    hero: HeroSection = field(default_factory=HeroSection)
    features: list[ParsedFeature] = field(default_factory=list)
    how_it_works_steps: list[HowItWorksStep] = field(default_factory=list)
    workflow: str = ""
    use_cases: list[UseCase] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    testimonials: list[str] = field(default_factory=list)
    metrics: list[str] = field(default_factory=list)
    raw_sections: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "hero": self.hero.to_dict(),
            "features": [f.to_dict() for f in self.features],
            "how_it_works": {
                "steps": [s.to_dict() for s in self.how_it_works_steps],
                "workflow": self.workflow,
            },
            "use_cases": [u.to_dict() for u in self.use_cases],
            "benefits": list(self.benefits),
            "social_proof": {
                "testimonials": list(self.testimonials),
                "metrics": list(self.metrics),
            },
            "raw_sections": dict(self.raw_sections),
        }


@dataclass
class WebsiteData:
    """Everything the prompt stages know about a website.

    Derived fresh on every run; nothing here is cached across runs.
    """

    url: str
    title: str
    hero_text: str
    features: list[str]
    industry: str
    target_audience: str
    brand: BrandProfile
    meta_description: str = ""
    markdown: str = ""
    page_metadata: dict = field(default_factory=dict)
    product_understanding: Optional[ProductUnderstanding] = None
    scraped: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses (raw markdown omitted)."""
        return {
            "url": self.url,
            "title": self.title,
            "hero_text": self.hero_text,
            "features": list(self.features),
            "industry": self.industry,
            "target_audience": self.target_audience,
            "meta_description": self.meta_description,
            "brand": self.brand.to_dict(),
            "product_understanding": (
                self.product_understanding.to_dict() if self.product_understanding else None
            ),
            "scraped": self.scraped,
        }


@dataclass
class EnrichedContext:
    """Optional context gathered from sources other than the website."""

    youtube_transcript: Optional[str] = None
    youtube_title: Optional[str] = None
    instagram_bio: Optional[str] = None
    instagram_posts: list[str] = field(default_factory=list)
    voice_brief: Optional[str] = None

    def is_empty(self) -> bool:
        return not (
            self.youtube_transcript or self.instagram_bio or self.instagram_posts or self.voice_brief
        )
