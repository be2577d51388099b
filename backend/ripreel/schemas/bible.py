from __future__ import annotations
"""Pydantic v2 schemas for Bible assets and maintenance requests."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class BibleProjectRequest(BaseModel):
    """Body of the reset/cleanup endpoints."""

    project_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("projectId", "project_id")
    )


class VariantRead(BaseModel):
    id: str
    project_id: str
    asset_type: str
    asset_id: str
    shot_type: str | None = None
    image_url: str
    storage_path: str
    model: str
    status: str
    is_selected: bool
    generation_order: int
    error_message: str | None = None

    model_config = {"from_attributes": True}


class CharacterRead(BaseModel):
    id: str
    project_id: str
    name: str
    role: str
    tier: str
    scene_count: int
    visual_dna: str
    approved_image_url: str | None = None
    image_status: str
    selected_model: str | None = None
    error_message: str | None = None
    approved_at: datetime | None = None

    model_config = {"from_attributes": True}


class LocationRead(BaseModel):
    id: str
    project_id: str
    name: str
    type: str
    visual_description: str
    approved_image_url: str | None = None
    image_status: str
    selected_model: str | None = None
    error_message: str | None = None
    approved_at: datetime | None = None

    model_config = {"from_attributes": True}


class BibleRead(BaseModel):
    characters: list[CharacterRead]
    locations: list[LocationRead]
    variants: list[VariantRead]
