"""Models for the product understanding produced by the analyzer."""

from dataclasses import dataclass, field
from enum import Enum


class AnalysisSource(str, Enum):
    """Where a generated artifact came from."""

    AI = "ai"
    TEMPLATE = "template"


@dataclass
class EnrichedFeature:
    """A feature restated in terms a video can show."""

    title: str
    what_it_does: str
    user_benefit: str
    visual_concept: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "what_it_does": self.what_it_does,
            "user_benefit": self.user_benefit,
            "visual_concept": self.visual_concept,
        }


@dataclass
class ConcreteExample:
    """A before/after scenario that makes the product tangible."""

    scenario: str
    before_state: str
    after_state: str
    visual_transformation: str

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario,
            "before_state": self.before_state,
            "after_state": self.after_state,
            "visual_transformation": self.visual_transformation,
        }


@dataclass
class VideoGuidance:
    opening_hook: str
    key_visuals: list[str]
    emotional_tone: str
    callout: str = ""

    def to_dict(self) -> dict:
        return {
            "opening_hook": self.opening_hook,
            "key_visuals": list(self.key_visuals),
            "emotional_tone": self.emotional_tone,
            "callout": self.callout,
        }


@dataclass
class ProductUnderstanding:
    """Structured answer to "what does this product actually do"."""

    what_it_does: str
    core_problem_solved: str
    workflow_steps: list[str] = field(default_factory=list)
    workflow_visual: str = ""
    features: list[EnrichedFeature] = field(default_factory=list)
    examples: list[ConcreteExample] = field(default_factory=list)
    video_guidance: VideoGuidance | None = None
    source: AnalysisSource = AnalysisSource.AI

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "what_it_does": self.what_it_does,
            "core_problem_solved": self.core_problem_solved,
            "workflow_steps": list(self.workflow_steps),
            "workflow_visual": self.workflow_visual,
            "features": [f.to_dict() for f in self.features],
            "examples": [e.to_dict() for e in self.examples],
            "video_guidance": self.video_guidance.to_dict() if self.video_guidance else None,
            "source": self.source.value,
        }
