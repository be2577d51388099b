from __future__ import annotations
"""Pydantic v2 schemas for Project model."""

from datetime import datetime

from pydantic import BaseModel, Field

from ripreel.models.project import ProjectStatus, VisualStyle


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""

    title: str = Field(..., min_length=1, max_length=255)
    visual_style: VisualStyle = VisualStyle.CLASSIC_NOIR


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    title: str | None = Field(None, min_length=1, max_length=255)
    visual_style: VisualStyle | None = None
    status: ProjectStatus | None = None


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    id: str
    title: str
    visual_style: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProjectStatusRead(BaseModel):
    """Lightweight status poll response."""

    status: str
    sceneCount: int
