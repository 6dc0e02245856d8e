"""Unit tests for keyword brand inference."""

import pytest

from services.brand_inference import (
    BOLD_FALLBACK_COLORS,
    ELEGANT_COLORS,
    INDUSTRY_COLORS,
    MINIMAL_COLORS,
    brand_colors,
    detect_audience,
    detect_industry,
    detect_tone,
    detect_visual_style,
    infer_brand,
)

pytestmark = pytest.mark.unit


def test_first_matching_industry_wins():
    # "app" (SaaS) is listed before "shop" (e-commerce)
    assert detect_industry("ShopApp", "The app for your shop", "") == "Technology / SaaS"
    assert detect_industry("Bloom", "Online flower shop", "") == "E-commerce / Retail"
    assert detect_industry("Nothing", "Here", "") == "Professional Services"


def test_audience_and_tone():
    assert detect_audience("Devly", "Tools for every developer", "") == "Developers and technical teams"
    assert detect_tone("Acme", "Simple invoicing", "") == "Approachable and user-friendly"
    assert detect_tone("Acme", "Invoices", "") == "Professional and trustworthy"


def test_visual_style_defaults_to_industry_look():
    assert detect_visual_style("Acme", "Invoices", "", "Finance / FinTech") == "Professional and trustworthy"
    assert detect_visual_style("Acme", "Invoices", "", "Unknown") == "Modern and professional"
    assert detect_visual_style("Acme", "A minimal notes app", "", "Technology / SaaS") == "Minimalist and clean"


class TestBrandColors:
    def test_bold_uses_industry_palette(self):
        assert brand_colors("Marketing / Agency", "Bold and vibrant") == INDUSTRY_COLORS["Marketing / Agency"]

    def test_bold_without_industry_palette_uses_reds(self):
        assert brand_colors("Professional Services", "Bold and vibrant") == BOLD_FALLBACK_COLORS

    def test_minimal_is_monochrome(self):
        assert brand_colors("Technology / SaaS", "Minimalist and clean") == MINIMAL_COLORS

    def test_elegant_is_desaturated(self):
        assert brand_colors("Technology / SaaS", "Classic and elegant") == ELEGANT_COLORS

    @pytest.mark.parametrize("industry", list(INDUSTRY_COLORS) + ["Professional Services", "Other"])
    @pytest.mark.parametrize(
        "style",
        ["Bold and vibrant", "Minimalist and clean", "Classic and elegant", "Modern and sleek", ""],
    )
    def test_always_three_colors(self, industry, style):
        assert len(brand_colors(industry, style)) == 3

    def test_palette_is_a_copy(self):
        colors = brand_colors("Technology / SaaS", "Modern and sleek")
        colors.append("#000000")
        assert len(INDUSTRY_COLORS["Technology / SaaS"]) == 3


def test_infer_brand_key_message_fallbacks():
    assert infer_brand("Acme", "Hero line", "Desc", "", "Other").key_message == "Hero line"
    assert infer_brand("Acme", "", "Desc", "", "Other").key_message == "Desc"
    assert infer_brand("Acme", "", "", "", "Other").key_message == "Acme's innovative solutions"
