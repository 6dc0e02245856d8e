#!/usr/bin/env python
"""FastAPI server for the DemoDrop API."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import get_config, get_store
from api.project_store import close_project_store
from api.routers import billing, core, generation, videos
from utils.config import check_environment
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    config = get_config()
    setup_logging(config["log_level"], json_output=config["log_json"])
    check_environment(config)
    await get_store()
    logger.info("DemoDrop API started")
    yield
    await close_project_store()


app = FastAPI(title="DemoDrop API", version=core.API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_config()["app_url"], "http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(core.router)
app.include_router(generation.router)
app.include_router(videos.router)
app.include_router(billing.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
