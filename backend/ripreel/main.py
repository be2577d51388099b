from __future__ import annotations
"""RipReel FastAPI application entry point.

Mounts the API routes (including the n8n webhook receivers), configures
CORS and serves the durable media volume.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ripreel.api.router import api_router
from ripreel.config import get_settings
from ripreel.database import close_db
from ripreel.services import storage

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: prepare media volume, release pools on shutdown."""
    logger.info("%s starting up...", settings.APP_NAME)
    logger.info("Video concurrency cap: %d", settings.MAX_CONCURRENT_VIDEO_JOBS)
    os.makedirs(settings.MEDIA_VOLUME, exist_ok=True)

    yield

    await storage.close_http_client()
    await close_db()
    logger.info("%s shut down", settings.APP_NAME)


app = FastAPI(
    title="RipReel API",
    description="AI film pre-production: Bible, scenes and n8n-driven media generation",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

_cors_origins = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
).split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)

os.makedirs(settings.MEDIA_VOLUME, exist_ok=True)
app.mount("/media", StaticFiles(directory=settings.MEDIA_VOLUME), name="media")


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "max_concurrent_video_jobs": settings.MAX_CONCURRENT_VIDEO_JOBS,
    }
