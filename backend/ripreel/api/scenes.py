from __future__ import annotations
"""Scene and shot management API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ripreel.database import get_db
from ripreel.models.project import Project
from ripreel.models.scene import Scene, Shot
from ripreel.schemas.scene import SceneBulkCreate, SceneRead, ShotRead, ShotUpdate

router = APIRouter()


@router.get("", response_model=list[SceneRead])
async def list_scenes(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    limit: int = 200,
    offset: int = 0,
):
    """List a project's scenes with their shots, in screenplay order."""
    result = await db.execute(
        select(Scene)
        .where(Scene.project_id == project_id)
        .options(selectinload(Scene.shots))
        .order_by(Scene.scene_number)
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


@router.post("/bulk", response_model=list[SceneRead], status_code=201)
async def bulk_create_scenes(
    project_id: str,
    data: SceneBulkCreate,
    db: AsyncSession = Depends(get_db),
):
    """Bulk create scenes and their shots."""
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    scenes = []
    for scene_data in data.scenes:
        scene = Scene(
            project_id=project_id,
            shots=[Shot(**shot.model_dump()) for shot in scene_data.shots],
            **scene_data.model_dump(exclude={"shots"}),
        )
        db.add(scene)
        scenes.append(scene)

    await db.flush()
    return scenes


@router.patch("/{scene_id}/shots/{shot_id}", response_model=ShotRead)
async def update_shot(
    project_id: str,
    scene_id: str,
    shot_id: str,
    data: ShotUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit a shot, e.g. to approve its start frame."""
    shot = (
        await db.execute(
            select(Shot)
            .join(Scene, Shot.scene_id == Scene.id)
            .where(
                Shot.id == shot_id,
                Shot.scene_id == scene_id,
                Scene.project_id == project_id,
            )
        )
    ).scalar_one_or_none()
    if not shot:
        raise HTTPException(status_code=404, detail="Shot not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(shot, key, value)
    await db.flush()
    return shot
