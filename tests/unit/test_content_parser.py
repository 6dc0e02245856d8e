"""Unit tests for the markdown section parser."""

import pytest

from services.content_parser import parse_markdown_content, section_key, split_into_sections


@pytest.mark.unit
class TestParseMarkdownContent:
    def test_hero(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown, {"description": "Live dashboards for every team"})

        assert parsed.hero.heading == "Acme Analytics"
        assert parsed.hero.subheading == "Turn raw product data into decisions your whole team trusts"
        assert parsed.hero.description == "Live dashboards for every team"

    def test_hero_description_from_paragraphs_without_metadata(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown)
        assert parsed.hero.description.startswith("Acme Analytics connects to your warehouse")

    def test_features_from_feature_section(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown)

        assert [f.title for f in parsed.features] == ["Live dashboards", "Anomaly alerts"]
        assert parsed.features[0].description == (
            "Watch metrics update the moment data lands in your warehouse."
        )

    def test_features_from_h3_blocks_when_no_feature_section(self):
        markdown = "## Overview\n\n### Instant exports\nOne click CSV.\n### Shared workspaces\nInvite anyone.\n"
        parsed = parse_markdown_content(markdown)

        assert [f.title for f in parsed.features] == ["Instant exports", "Shared workspaces"]

    def test_how_it_works_steps(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown)

        assert [s.title for s in parsed.how_it_works_steps] == ["Connect", "Explore", "Share"]
        assert parsed.how_it_works_steps[0].description == "your warehouse in two minutes"
        assert parsed.workflow.startswith("- **Connect**")

    def test_testimonials(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown)
        assert parsed.testimonials == [
            "Acme cut our weekly reporting time from a full day to fifteen minutes."
        ]

    def test_use_cases_and_benefits(self):
        markdown = (
            "## Use cases\n"
            "- **Agencies**: report to clients automatically\n"
            "## Why choose us\n"
            "- Setup takes less than five minutes\n"
            "- Short\n"
        )
        parsed = parse_markdown_content(markdown)

        assert parsed.use_cases[0].scenario == "Agencies"
        assert parsed.use_cases[0].description == "report to clients automatically"
        assert parsed.benefits == ["Setup takes less than five minutes"]

    def test_raw_sections_keyed_by_slug(self, sample_markdown):
        parsed = parse_markdown_content(sample_markdown)
        assert "how_it_works" in parsed.raw_sections
        assert "features" in parsed.raw_sections

    def test_empty_markdown(self):
        parsed = parse_markdown_content("")
        assert parsed.features == []
        assert parsed.how_it_works_steps == []


@pytest.mark.unit
def test_text_before_first_h2_is_not_a_section():
    sections = split_into_sections("# Title\nintro\n## First\nbody\n## Second\n")
    assert [s.title for s in sections] == ["First", "Second"]
    assert sections[0].content == "body"


@pytest.mark.unit
def test_section_key():
    assert section_key("How It Works?") == "how_it_works_"
