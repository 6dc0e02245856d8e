#!/usr/bin/env python3
"""CLI for generating a demo video from a website URL.

Usage:
    # Show the scraped brand profile and the production prompt only
    python -m cli.generate https://example.com --preset product-demo --prompt-only

    # Run the whole pipeline against the local database
    python -m cli.generate https://example.com --preset startup-energy --style cinematic
"""

import argparse
import asyncio
import sys
import uuid
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from api.project_store import ProjectStore
from models.website import WebsiteData
from services.ai_service import AIService
from services.content_parser import parse_markdown_content
from services.generation_pipeline import GenerationPipeline, GenerationRequest
from services.product_analyzer import ProductAnalyzer
from services.prompt_builder import AESTHETIC_DESCRIPTIONS, STYLE_PRESETS, DEFAULT_PRESET, get_preset
from services.prompt_orchestrator import PromptOrchestrator
from services.prompt_splitter import PromptSplitter
from services.scraper import WebsiteScraper
from services.video_gen_service import VideoGenService
from services.video_stitcher import FFmpegStitcher, StitchOptions
from services.video_storage import get_video_storage
from utils.config import check_environment, load_config, setup_logging

console = Console()


def show_website(website: WebsiteData) -> None:
    """Print the scraped brand profile."""
    table = Table(title=website.title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("URL", website.url)
    table.add_row("Scraped", "yes" if website.scraped else "[yellow]no (fallback data)[/yellow]")
    table.add_row("Industry", website.industry)
    table.add_row("Audience", website.target_audience)
    table.add_row("Hero", website.hero_text)
    table.add_row("Features", "\n".join(website.features))
    table.add_row("Colors", ", ".join(website.brand.colors))
    table.add_row("Tone", website.brand.tone)
    table.add_row("Visual style", website.brand.visual_style)
    table.add_row("Key message", website.brand.key_message)

    console.print(table)


async def build_prompt_only(args: argparse.Namespace, config: dict) -> int:
    ai_service = AIService(config.get("gemini_api_key"), config["gemini_model"])
    scraper = WebsiteScraper(api_key=config.get("dumpling_api_key"), base_url=config["dumpling_base_url"])
    preset = get_preset(args.preset)

    try:
        with console.status(f"Scraping {args.url}..."):
            website = await scraper.scrape_website(args.url)
        show_website(website)

        if website.markdown:
            with console.status("Analyzing product..."):
                parsed = parse_markdown_content(website.markdown, website.page_metadata)
                website.product_understanding = await ProductAnalyzer(ai_service).analyze_product(
                    parsed, website.title, website.meta_description
                )

        duration = args.duration or preset.duration
        with console.status("Writing production prompt..."):
            prompt = await PromptOrchestrator(ai_service).create_production_prompt(
                website, preset, args.instructions, duration, args.style
            )
    finally:
        await scraper.close()

    console.print(Panel(prompt, title=f"{preset.name} ({duration}s)", expand=False))
    return 0


async def run_pipeline(args: argparse.Namespace, config: dict) -> int:
    store = ProjectStore(config["database_path"])
    await store.connect()

    ai_service = AIService(config.get("gemini_api_key"), config["gemini_model"])
    scraper = WebsiteScraper(api_key=config.get("dumpling_api_key"), base_url=config["dumpling_base_url"])
    video_service = VideoGenService(
        api_key=config.get("openai_api_key"),
        base_url=config["video_api_base_url"],
        model=config["video_model"],
        size=config["video_size"],
    )
    pipeline = GenerationPipeline(
        store=store,
        scraper=scraper,
        analyzer=ProductAnalyzer(ai_service),
        orchestrator=PromptOrchestrator(ai_service),
        splitter=PromptSplitter(ai_service),
        video_service=video_service,
        stitcher=FFmpegStitcher(),
        storage=get_video_storage(config),
        strategy=args.strategy or config["generation_strategy"],
        poll_interval=config["poll_interval_seconds"],
        max_attempts=config["poll_max_attempts"],
        stitch_options=StitchOptions(
            transition=args.transition or config["stitch_transition"],
            transition_duration=config["stitch_transition_duration"],
        ),
    )

    project_id = str(uuid.uuid4())
    await store.create_project(
        project_id,
        website_url=args.url,
        style_preset=args.preset,
        custom_instructions=args.instructions,
        video_style=args.style,
    )
    console.print(f"[dim]Project {project_id}[/dim]")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=100)
            run = asyncio.create_task(pipeline.run(GenerationRequest(
                project_id=project_id,
                website_url=args.url,
                style_preset=args.preset,
                custom_instructions=args.instructions,
                video_style=args.style,
            )))

            while not run.done():
                project = await store.get_project(project_id)
                if project:
                    progress.update(task, completed=project.progress, description=project.status.value)
                await asyncio.sleep(1)

            project = run.result()
            progress.update(task, completed=project.progress, description=project.status.value)
    finally:
        await scraper.close()
        await video_service.close()
        await store.close()

    if project.video_url:
        console.print(f"[green]✓ Video ready: {project.video_url}[/green]")
        return 0

    console.print(f"[red]✗ Generation failed: {project.error}[/red]")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate an AI demo video for a website")
    parser.add_argument("url", help="Website URL")
    parser.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        choices=list(STYLE_PRESETS),
        help=f"Style preset (default: {DEFAULT_PRESET})",
    )
    parser.add_argument("--style", choices=list(AESTHETIC_DESCRIPTIONS), help="Video aesthetic")
    parser.add_argument("--instructions", help="Custom instructions for the director")
    parser.add_argument("--duration", type=int, help="Override the preset duration (prompt only)")
    parser.add_argument("--strategy", choices=["single", "two_clip"], help="Generation strategy")
    parser.add_argument("--transition", choices=["cut", "fade", "dissolve"], help="Two-clip transition")
    parser.add_argument("--prompt-only", action="store_true", help="Print the prompt without generating")
    parser.add_argument("--log-level", default=None, help="Log level (default from LOG_LEVEL)")
    args = parser.parse_args()

    config = load_config()
    setup_logging(args.log_level or config["log_level"])
    check_environment(config)

    if args.prompt_only:
        sys.exit(asyncio.run(build_prompt_only(args, config)))
    sys.exit(asyncio.run(run_pipeline(args, config)))


if __name__ == "__main__":
    main()
