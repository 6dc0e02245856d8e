"""Shared pytest fixtures for DemoDrop tests."""

import sys
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest
import pytest_asyncio

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from api.project_store import ProjectStore  # noqa: E402
from fakes import FakeStorage, FakeVideoService  # noqa: E402


SAMPLE_MARKDOWN = """# Acme Analytics

## Turn raw product data into decisions your whole team trusts

Acme Analytics connects to your warehouse and gives every team live dashboards without writing SQL.

![Acme logo](/static/acme-logo.svg)

- Home
- Pricing
- Real-time dashboards for every team
- Automated anomaly alerts in Slack
- One-click warehouse integrations
- Role-based access for enterprise teams

## Features

### Live dashboards
Watch metrics update the moment data lands in your warehouse.

### Anomaly alerts
Get notified in Slack before a dip turns into a crisis.

## How it works

- **Connect** your warehouse in two minutes
- **Explore** metrics with natural-language questions
- **Share** dashboards with your team

## Testimonials

"Acme cut our weekly reporting time from a full day to fifteen minutes."

10,000+ teams
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config() -> Dict:
    """Sample configuration for testing."""
    return {
        "openai_api_key": "test_openai_key",
        "gemini_api_key": "test_gemini_key",
        "gemini_model": "gemini-3-flash-preview",
        "dumpling_api_key": "test_dumpling_key",
        "supabase_url": "https://auth.example.test",
        "supabase_anon_key": "test_anon_key",
        "stripe_secret_key": "sk_test_123",
        "stripe_webhook_secret": "whsec_test",
        "app_url": "http://localhost:3000",
        "database_path": ":memory:",
        "generation_strategy": "two_clip",
        "poll_interval_seconds": 5.0,
        "poll_max_attempts": 60,
        "stitch_transition": "cut",
        "stitch_transition_duration": 0.5,
    }


@pytest.fixture
def sample_markdown() -> str:
    return SAMPLE_MARKDOWN


@pytest.fixture
def website_data():
    """WebsiteData built from the sample page."""
    from services.scraper import build_website_data

    return build_website_data(
        "https://www.acme-analytics.com",
        "Acme Analytics",
        SAMPLE_MARKDOWN,
        {"description": "Live dashboards for every team"},
    )


@pytest_asyncio.fixture
async def store() -> ProjectStore:
    """Connected in-memory project store."""
    project_store = ProjectStore(":memory:")
    await project_store.connect()
    yield project_store
    await project_store.close()


@pytest.fixture
def fake_video_service():
    return FakeVideoService()


@pytest.fixture
def fake_storage():
    return FakeStorage()
