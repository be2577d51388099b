from __future__ import annotations
"""Master API router: mounts all sub-routers."""

from fastapi import APIRouter

from ripreel.api.bible import router as bible_router
from ripreel.api.models import router as models_router
from ripreel.api.projects import router as projects_router
from ripreel.api.scenes import router as scenes_router
from ripreel.api.videos import router as videos_router
from ripreel.api.webhooks import router as webhooks_router

api_router = APIRouter(prefix="/api", redirect_slashes=False)

api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(scenes_router, prefix="/projects/{project_id}/scenes", tags=["Scenes"])
api_router.include_router(bible_router, tags=["Bible"])
api_router.include_router(videos_router, tags=["Videos"])
api_router.include_router(models_router, prefix="/models", tags=["Models"])
api_router.include_router(webhooks_router, prefix="/webhooks/n8n", tags=["n8n Webhooks"])
