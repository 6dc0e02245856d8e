"""Unit tests for ProductAnalyzer."""

import pytest

from fakes import FakeAIService
from models.product import AnalysisSource
from models.website import EnrichedContext
from services.ai_service import AIServiceError
from services.content_parser import parse_markdown_content
from services.product_analyzer import (
    ANALYSIS_TEMPERATURE,
    DEFAULT_KEY_VISUALS,
    DEFAULT_WORKFLOW,
    MAX_TRANSCRIPT_CHARS,
    ProductAnalyzer,
    fallback_understanding,
    format_enrichment,
    structure_analysis,
)


@pytest.fixture
def parsed(sample_markdown):
    return parse_markdown_content(sample_markdown, {"description": "Live dashboards for every team"})


class TestStructureAnalysis:
    @pytest.mark.unit
    def test_empty_response_is_fully_backfilled(self, parsed):
        understanding = structure_analysis({}, parsed, "Meta")

        assert understanding.what_it_does == "Live dashboards for every team"
        assert understanding.workflow_steps == DEFAULT_WORKFLOW
        assert understanding.video_guidance.key_visuals == DEFAULT_KEY_VISUALS
        assert understanding.video_guidance.callout == "Meta"
        assert understanding.source == AnalysisSource.AI

    @pytest.mark.unit
    def test_malformed_fields_are_ignored(self, parsed):
        raw = {
            "whatItDoes": 42,
            "userWorkflow": "not a dict",
            "enrichedFeatures": [{"name": "Alerts"}, "junk", {}, {"name": "extra"}],
            "videoGuidance": {"keyVisualsToShow": ["Dashboard", 7, ""]},
        }
        understanding = structure_analysis(raw, parsed, "")

        assert understanding.what_it_does == "Live dashboards for every team"
        assert [f.title for f in understanding.features] == ["Alerts", "Feature", "Feature"]
        assert understanding.features[0].what_it_does == "Provides functionality"
        assert understanding.video_guidance.key_visuals == ["Dashboard"]

    @pytest.mark.unit
    def test_optional_fourth_step(self, parsed):
        raw = {"userWorkflow": {"step1": "Connect", "step2": "Ask", "step3": "Share", "step4": "Act"}}
        assert structure_analysis(raw, parsed, "").workflow_steps == ["Connect", "Ask", "Share", "Act"]


@pytest.mark.unit
def test_fallback_understanding_uses_parsed_sections(parsed):
    understanding = fallback_understanding(parsed, "Acme Analytics", "")

    assert understanding.source == AnalysisSource.TEMPLATE
    assert understanding.workflow_steps == ["Connect", "Explore", "Share"]
    assert [f.title for f in understanding.features] == ["Live dashboards", "Anomaly alerts"]
    assert understanding.video_guidance.opening_hook == "Show the problem that Acme Analytics solves"


@pytest.mark.unit
def test_format_enrichment_truncates_transcript():
    context = EnrichedContext(youtube_transcript="x" * (MAX_TRANSCRIPT_CHARS + 50), voice_brief="Keep it calm")
    text = format_enrichment(context)

    assert "YOUTUBE DEMO TRANSCRIPT" in text
    assert "x" * MAX_TRANSCRIPT_CHARS + "..." in text
    assert "Keep it calm" in text
    assert format_enrichment(EnrichedContext()) == ""
    assert format_enrichment(None) == ""


class TestProductAnalyzer:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_calls_model_at_low_temperature(self, parsed):
        ai = FakeAIService(response={"whatItDoes": "Turns warehouse data into live dashboards"})
        understanding = await ProductAnalyzer(ai).analyze_product(parsed, "Acme Analytics", "Meta")

        assert understanding.what_it_does == "Turns warehouse data into live dashboards"
        assert ai.calls[0]["temperature"] == ANALYSIS_TEMPERATURE == 0.3
        assert ai.calls[0]["operation"] == "analyze_product/v1"
        assert "Acme Analytics" in ai.calls[0]["prompt"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_model_failure_falls_back(self, parsed):
        ai = FakeAIService(error=AIServiceError("quota exceeded"))
        understanding = await ProductAnalyzer(ai).analyze_product(parsed, "Acme Analytics")

        assert understanding.source == AnalysisSource.TEMPLATE
        assert understanding.what_it_does == "Live dashboards for every team"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_enrichment_reaches_prompt(self, parsed):
        ai = FakeAIService(response={})
        await ProductAnalyzer(ai).analyze_product(
            parsed, "Acme Analytics", enrichment=EnrichedContext(voice_brief="Mention the free tier")
        )

        assert "Mention the free tier" in ai.calls[0]["prompt"]
