# Data models for DemoDrop
from .product import (
    AnalysisSource,
    EnrichedFeature,
    ConcreteExample,
    VideoGuidance,
    ProductUnderstanding,
)
from .website import (
    BrandProfile,
    HeroSection,
    ParsedFeature,
    HowItWorksStep,
    UseCase,
    ParsedContent,
    WebsiteData,
    EnrichedContext,
)
from .prompt import (
    StylePreset,
    SceneBeat,
    CinematicElements,
    OrchestratedPrompt,
    PromptPart,
    SplitPrompt,
)
from .project import (
    ProjectStatus,
    PlanType,
    PLAN_VIDEO_LIMITS,
    Project,
    User,
    QuotaStatus,
    now_ms,
)

__all__ = [
    "AnalysisSource",
    "EnrichedFeature",
    "ConcreteExample",
    "VideoGuidance",
    "ProductUnderstanding",
    # Website scraping
    "BrandProfile",
    "HeroSection",
    "ParsedFeature",
    "HowItWorksStep",
    "UseCase",
    "ParsedContent",
    "WebsiteData",
    "EnrichedContext",
    # Prompts
    "StylePreset",
    "SceneBeat",
    "CinematicElements",
    "OrchestratedPrompt",
    "PromptPart",
    "SplitPrompt",
    # Projects and billing
    "ProjectStatus",
    "PlanType",
    "PLAN_VIDEO_LIMITS",
    "Project",
    "User",
    "QuotaStatus",
    "now_ms",
]
