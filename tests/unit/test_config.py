"""Unit tests for configuration loading and validation."""

import logging

import pytest

from utils.config import check_environment, is_placeholder, load_config, validate_config

pytestmark = pytest.mark.unit


def test_defaults(monkeypatch):
    for name in ("GENERATION_STRATEGY", "POLL_INTERVAL_SECONDS", "POLL_MAX_ATTEMPTS", "STITCH_TRANSITION"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config["generation_strategy"] == "two_clip"
    assert config["poll_interval_seconds"] == 5.0
    assert config["poll_max_attempts"] == 60
    assert config["stitch_transition"] == "cut"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GENERATION_STRATEGY", "SINGLE")
    monkeypatch.setenv("POLL_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("DATABASE_PATH", "/tmp/demodrop-test.db")

    config = load_config()

    assert config["generation_strategy"] == "single"
    assert config["poll_max_attempts"] == 3
    assert config["database_path"] == "/tmp/demodrop-test.db"


def test_valid_config_has_no_errors(sample_config):
    assert validate_config(sample_config) == []


def test_missing_and_placeholder_keys(sample_config):
    sample_config["gemini_api_key"] = None
    sample_config["supabase_anon_key"] = "your-anon-key"

    errors = validate_config(sample_config)

    assert "GEMINI_API_KEY is not set" in errors
    assert "SUPABASE_ANON_KEY contains a placeholder value" in errors


def test_invalid_choices(sample_config):
    sample_config["generation_strategy"] = "three_clip"
    sample_config["stitch_transition"] = "wipe"
    sample_config["poll_max_attempts"] = 0

    errors = validate_config(sample_config)

    assert len(errors) == 3


def test_check_environment_only_warns(sample_config, caplog):
    sample_config["openai_api_key"] = ""

    with caplog.at_level(logging.WARNING):
        assert check_environment(sample_config) is False

    assert "OPENAI_API_KEY is not set" in caplog.text


@pytest.mark.parametrize(
    "value,expected",
    [("sk_placeholder", True), ("your_key_here", True), ("sk_live_123", False)],
)
def test_is_placeholder(value, expected):
    assert is_placeholder(value) is expected
