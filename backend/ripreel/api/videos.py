from __future__ import annotations
"""Scene video queue API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.api.deps import get_video_dispatcher
from ripreel.database import get_db
from ripreel.errors import ConflictError, NotFoundError
from ripreel.models.project import Project
from ripreel.models.scene import Scene, Shot
from ripreel.models.video import SceneVideo
from ripreel.schemas.video import QueueResult, VideoRead, VideoStats
from ripreel.services import video_queue
from ripreel.services.video_queue import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects/{project_id}/videos", response_model=list[VideoRead])
async def list_videos(project_id: str, db: AsyncSession = Depends(get_db)):
    """All scene videos of a project in (scene, shot) order."""
    result = await db.execute(
        select(SceneVideo)
        .join(Shot, SceneVideo.shot_id == Shot.id)
        .join(Scene, Shot.scene_id == Scene.id)
        .where(Scene.project_id == project_id)
        .order_by(Scene.scene_number, Shot.shot_number)
    )
    return result.scalars().all()


@router.get("/projects/{project_id}/videos/stats", response_model=VideoStats)
async def video_stats(project_id: str, db: AsyncSession = Depends(get_db)):
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await video_queue.get_video_stats(db, project_id)


@router.post("/projects/{project_id}/videos/generate", response_model=QueueResult)
async def generate_videos(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_video_dispatcher),
):
    """Queue every approved shot without a video, then start up to the cap."""
    try:
        queued = await video_queue.enqueue_project_videos(db, project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    triggered = await video_queue.process_video_queue(db, project_id, dispatcher)
    return {"queued": queued, "triggered": triggered}


@router.post("/projects/{project_id}/videos/process", response_model=QueueResult)
async def process_queue(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_video_dispatcher),
):
    """Run the reconciler by hand."""
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    triggered = await video_queue.process_video_queue(db, project_id, dispatcher)
    return {"queued": 0, "triggered": triggered}


@router.get("/videos/{video_id}", response_model=VideoRead)
async def get_video(video_id: str, db: AsyncSession = Depends(get_db)):
    video = await db.get(SceneVideo, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


@router.post("/videos/{video_id}/regenerate", response_model=VideoRead)
async def regenerate_video(
    video_id: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_video_dispatcher),
):
    """Re-queue a ready or failed video and reconcile its project."""
    try:
        video = await video_queue.regenerate_video(db, video_id)
    except (NotFoundError, ConflictError) as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    project_id = await video_queue.project_id_for_video(db, video)
    if project_id:
        await video_queue.process_video_queue(db, project_id, dispatcher)
    await db.refresh(video)
    return video


@router.delete("/videos/{video_id}", status_code=204)
async def cancel_video(
    video_id: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_video_dispatcher),
):
    """Drop a (stuck) video so its shot can be queued again."""
    try:
        project_id = await video_queue.cancel_video(db, video_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    if project_id:
        await video_queue.process_video_queue(db, project_id, dispatcher)
