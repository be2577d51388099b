from __future__ import annotations
"""Project CRUD API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.database import get_db
from ripreel.models.project import Project
from ripreel.models.scene import Scene
from ripreel.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectStatusRead,
    ProjectUpdate,
)

router = APIRouter()


@router.get("", response_model=list[ProjectRead])
async def list_projects(db: AsyncSession = Depends(get_db)):
    """List all projects, newest first."""
    result = await db.execute(
        select(Project).order_by(Project.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """Create a project in parsing status."""
    project = Project(title=data.title, visual_style=data.visual_style.value)
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: str, data: ProjectUpdate, db: AsyncSession = Depends(get_db)
):
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    for key, value in data.model_dump(exclude_unset=True, mode="json").items():
        setattr(project, key, value)

    await db.flush()
    await db.refresh(project)
    return project


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a project and everything it owns."""
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    await db.delete(project)


@router.get("/{project_id}/status", response_model=ProjectStatusRead)
async def get_project_status(project_id: str, db: AsyncSession = Depends(get_db)):
    """Status poll used while n8n parses the screenplay."""
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    scene_count = (
        await db.execute(
            select(func.count(Scene.id)).where(Scene.project_id == project_id)
        )
    ).scalar_one()
    return {"status": project.status, "sceneCount": scene_count}
