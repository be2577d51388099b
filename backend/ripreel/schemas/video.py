from __future__ import annotations
"""Pydantic v2 schemas for the scene video queue."""

from pydantic import BaseModel


class VideoRead(BaseModel):
    id: str
    scene_id: str
    shot_id: str
    status: str
    dispatch_status: str
    video_url: str | None = None
    duration_seconds: int | None = None
    n8n_job_id: str | None = None
    error_message: str | None = None

    model_config = {"from_attributes": True}


class VideoStats(BaseModel):
    queued: int
    generating: int
    ready: int
    failed: int
    pending: int
    total: int


class QueueResult(BaseModel):
    queued: int
    triggered: int
