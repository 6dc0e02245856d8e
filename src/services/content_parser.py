"""Markdown section parser.

Turns scraped page markdown into the structured sections the product
analyzer reads: hero, features, how-it-works steps, use cases, benefits,
social proof and every H2 section verbatim. Pure functions, no I/O.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from models.website import (
    HeroSection,
    HowItWorksStep,
    ParsedContent,
    ParsedFeature,
    UseCase,
)

logger = logging.getLogger(__name__)

FEATURE_SECTION = re.compile(r"(features|capabilities|what (?:you can do|we offer)|key benefits)", re.I)
HOW_IT_WORKS_SECTION = re.compile(
    r"(how (?:it works|to (?:get started|use))|(?:our )?process|workflow|steps)", re.I
)
USE_CASE_SECTION = re.compile(r"(use cases?|examples|scenarios|who (?:is this|it's) for|perfect for)", re.I)
BENEFIT_SECTION = re.compile(r"(benefits|why choose|advantages|what you (?:get|gain))", re.I)

BOLD_STEP = re.compile(r"(?:^|\n)(?:\d+\.|[-*])\s+\*\*([^*]+)\*\*[:\s]*([^\n]+)")
BOLD_BULLET = re.compile(r"(?:^|\n)[-*]\s+\*\*([^*]+)\*\*[:\s]*([^\n]+)")
PLAIN_BULLET = re.compile(r"(?:^|\n)[-*]\s+([^\n]+)")
TESTIMONIAL = re.compile(r'"([^"]{30,300})"')
METRIC = re.compile(r"(\d+[+%k]?\s+[a-z\s]{3,30})", re.I)

H2_SPLIT = re.compile(r"^##\s+", re.M)
H3_SPLIT = re.compile(r"^###\s+", re.M)

MAX_FEATURES = 5
MAX_USE_CASES = 5
MAX_BENEFITS = 5
MAX_TESTIMONIALS = 3
MAX_METRICS = 5


@dataclass
class Section:
    title: str
    content: str


def split_into_sections(markdown: str) -> list[Section]:
    """Split on H2 headings. Text before the first H2 is not a section."""
    sections = []
    for chunk in H2_SPLIT.split(markdown)[1:]:
        lines = chunk.split("\n")
        sections.append(Section(title=lines[0].strip(), content="\n".join(lines[1:]).strip()))
    return sections


def extract_hero(lines: list[str], metadata: Optional[dict] = None) -> HeroSection:
    metadata = metadata or {}
    heading = ""
    subheading = ""
    description = metadata.get("description") or metadata.get("og:description") or ""

    for raw in lines[:30]:
        line = raw.strip()
        if line.startswith("# ") and not heading:
            heading = re.sub(r"^#\s+", "", line).strip()
        elif heading and not subheading:
            if line.startswith("## "):
                subheading = re.sub(r"^##\s+", "", line).strip()
            elif len(line) > 30 and not line.startswith(("#", "[")):
                subheading = line

    if not description:
        paragraphs = [
            line.strip()
            for line in lines
            if len(line.strip()) > 50 and not line.strip().startswith(("#", "[", "-", "*"))
        ]
        description = " ".join(paragraphs[:3])[:300]

    return HeroSection(heading=heading, subheading=subheading, description=description)


def extract_features(sections: list[Section], markdown: str) -> list[ParsedFeature]:
    """Features from feature-titled sections, else the first H3 blocks of the page."""
    features: list[ParsedFeature] = []

    for section in sections:
        if not FEATURE_SECTION.search(section.title):
            continue
        current: Optional[ParsedFeature] = None
        for raw in section.content.split("\n"):
            line = raw.strip()
            if re.match(r"^###\s+", line):
                if current:
                    features.append(current)
                current = ParsedFeature(title=re.sub(r"^###\s+", "", line).strip())
            elif current and len(line) > 20:
                if line.startswith(("- ", "* ")):
                    current.details += re.sub(r"^[-*]\s+", "", line) + ". "
                elif not line.startswith("#"):
                    current.description += line + " "
        if current:
            features.append(current)

    if not features:
        for chunk in H3_SPLIT.split(markdown)[1:MAX_FEATURES + 1]:
            chunk_lines = chunk.split("\n")
            title = chunk_lines[0].strip()
            content = "\n".join(chunk_lines[1:]).strip()
            if 10 < len(title) < 100:
                features.append(
                    ParsedFeature(title=title, description=content[:200], details=content[200:500])
                )

    for feature in features:
        feature.description = feature.description.strip()
        feature.details = feature.details.strip()

    return features[:MAX_FEATURES]


def extract_how_it_works(sections: list[Section]) -> tuple[list[HowItWorksStep], str]:
    steps: list[HowItWorksStep] = []
    workflow = ""

    for section in sections:
        if not HOW_IT_WORKS_SECTION.search(section.title):
            continue
        workflow = section.content[:500]

        section_steps = [
            HowItWorksStep(title=m.group(1).strip(), description=m.group(2).strip())
            for m in BOLD_STEP.finditer(section.content)
        ]

        if not steps and not section_steps:
            for sub in H3_SPLIT.split(section.content)[1:5]:
                sub_lines = sub.split("\n")
                section_steps.append(
                    HowItWorksStep(
                        title=sub_lines[0].strip(),
                        description=" ".join(sub_lines[1:]).strip()[:150],
                    )
                )
        steps.extend(section_steps)

    return steps, workflow


def extract_use_cases(sections: list[Section]) -> list[UseCase]:
    use_cases = []
    for section in sections:
        if USE_CASE_SECTION.search(section.title):
            for m in BOLD_BULLET.finditer(section.content):
                use_cases.append(UseCase(scenario=m.group(1).strip(), description=m.group(2).strip()))
    return use_cases[:MAX_USE_CASES]


def extract_benefits(sections: list[Section]) -> list[str]:
    benefits = []
    for section in sections:
        if BENEFIT_SECTION.search(section.title):
            for m in PLAIN_BULLET.finditer(section.content):
                benefit = m.group(1).strip()
                if 15 < len(benefit) < 200:
                    benefits.append(benefit)
    return benefits[:MAX_BENEFITS]


def extract_social_proof(markdown: str) -> tuple[list[str], list[str]]:
    testimonials = [m.group(1) for m in TESTIMONIAL.finditer(markdown)]
    metrics = [m.group(1).strip() for m in METRIC.finditer(markdown)]
    metrics = [metric for metric in metrics if len(metric) > 10]
    return testimonials[:MAX_TESTIMONIALS], metrics[:MAX_METRICS]


def section_key(title: str) -> str:
    """``"How It Works?"`` -> ``"how_it_works_"``"""
    return re.sub(r"[^a-z0-9]+", "_", title.lower())


def parse_markdown_content(markdown: str, metadata: Optional[dict] = None) -> ParsedContent:
    """Parse page markdown into ParsedContent."""
    lines = markdown.split("\n")
    sections = split_into_sections(markdown)

    steps, workflow = extract_how_it_works(sections)
    testimonials, metrics = extract_social_proof(markdown)

    parsed = ParsedContent(
        hero=extract_hero(lines, metadata),
        features=extract_features(sections, markdown),
        how_it_works_steps=steps,
        workflow=workflow,
        use_cases=extract_use_cases(sections),
        benefits=extract_benefits(sections),
        testimonials=testimonials,
        metrics=metrics,
        raw_sections={section_key(s.title): s.content[:1000] for s in sections},
    )

    logger.debug(
        f"Parsed {len(markdown)} chars: {len(parsed.features)} features, "
        f"{len(parsed.how_it_works_steps)} steps, {len(parsed.use_cases)} use cases, "
        f"{len(parsed.benefits)} benefits"
    )
    return parsed
