from __future__ import annotations
"""Pydantic v2 schemas for Scene and Shot models."""

from typing import Any

from pydantic import BaseModel, Field


class ShotCreate(BaseModel):
    shot_number: int = Field(1, ge=1)
    shot_type: str | None = None
    shot_duration_seconds: int = Field(8, ge=1)
    action_prompt: str | None = None
    dialogue_segment: str | None = None
    composition_instruction: str | None = None
    approved_image_url: str | None = None


class ShotUpdate(BaseModel):
    shot_type: str | None = None
    shot_duration_seconds: int | None = Field(None, ge=1)
    action_prompt: str | None = None
    dialogue_segment: str | None = None
    composition_instruction: str | None = None
    approved_image_url: str | None = None


class ShotRead(BaseModel):
    id: str
    scene_id: str
    shot_number: int
    shot_type: str | None = None
    shot_duration_seconds: int
    action_prompt: str | None = None
    dialogue_segment: str | None = None
    composition_instruction: str | None = None
    approved_image_url: str | None = None

    model_config = {"from_attributes": True}


class SceneCreate(BaseModel):
    """Schema for creating a single scene with its shots."""

    scene_number: int = Field(..., ge=0)
    slugline: str = ""
    time_of_day: str | None = None
    interior_exterior: str | None = None
    action_text: str | None = None
    raw_scene_data: dict[str, Any] | None = None
    shots: list[ShotCreate] = Field(default_factory=list)


class SceneBulkCreate(BaseModel):
    """Schema for bulk creating scenes."""

    scenes: list[SceneCreate]


class SceneRead(BaseModel):
    """Schema for reading a scene."""

    id: str
    project_id: str
    scene_number: int
    slugline: str
    time_of_day: str | None = None
    interior_exterior: str | None = None
    action_text: str | None = None
    shots: list[ShotRead] = []

    model_config = {"from_attributes": True}
