"""Models for video prompts, presets and prompt splits."""

from dataclasses import dataclass, field

from .product import AnalysisSource


@dataclass(frozen=True)
class StylePreset:
    """A named bundle of pacing, tone and look for the generated video."""

    key: str
    name: str
    duration: int
    pacing_style: str
    tone: str
    visual_aesthetic: str
    color_scheme: str
    scene_structure: str

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "duration": self.duration,
            "pacing_style": self.pacing_style,
            "tone": self.tone,
            "visual_aesthetic": self.visual_aesthetic,
            "color_scheme": self.color_scheme,
            "scene_structure": self.scene_structure,
        }


@dataclass(frozen=True)
class SceneBeat:
    """One time-boxed segment of a video, e.g. 0-3s HOOK."""

    start: int
    end: int
    label: str
    description: str

    def render(self) -> str:
        return f"[{self.start}-{self.end}s] {self.label}: {self.description}"


@dataclass
class CinematicElements:
    lighting: str
    camera_movement: str
    color_grading: str
    transitions: str

    def to_dict(self) -> dict:
        return {
            "lighting": self.lighting,
            "camera_movement": self.camera_movement,
            "color_grading": self.color_grading,
            "transitions": self.transitions,
        }


@dataclass
class OrchestratedPrompt:
    """Result of the LLM orchestration stage."""

    enhanced_prompt: str
    cinematic_elements: CinematicElements
    scene_breakdown: list[str] = field(default_factory=list)
    aspect_ratio: str = "16:9"
    resolution: str = "1080p"
    frame_rate: str = "24fps"
    source: AnalysisSource = AnalysisSource.AI

    def to_dict(self) -> dict:
        return {
            "enhanced_prompt": self.enhanced_prompt,
            "cinematic_elements": self.cinematic_elements.to_dict(),
            "scene_breakdown": list(self.scene_breakdown),
            "technical_specs": {
                "aspect_ratio": self.aspect_ratio,
                "resolution": self.resolution,
                "frame_rate": self.frame_rate,
            },
            "source": self.source.value,
        }


@dataclass
class PromptPart:
    """One clip of a two-clip split."""

    prompt: str
    description: str
    duration: int
    word_budget: int

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "description": self.description,
            "duration": self.duration,
            "word_budget": self.word_budget,
        }


@dataclass
class SplitPrompt:
    """A full-length prompt divided into two continuous clips.

    ``part1.duration + part2.duration`` always equals the requested total.
    """

    part1: PromptPart
    part2: PromptPart
    continuity_hints: str
    transition_note: str
    full_narrative: str
    source: AnalysisSource = AnalysisSource.AI

    @property
    def total_duration(self) -> int:
        return self.part1.duration + self.part2.duration

    def to_dict(self) -> dict:
        return {
            "part1": self.part1.to_dict(),
            "part2": self.part2.to_dict(),
            "continuity_hints": self.continuity_hints,
            "transition_note": self.transition_note,
            "full_narrative": self.full_narrative,
            "total_duration": self.total_duration,
            "source": self.source.value,
        }
