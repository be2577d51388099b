from __future__ import annotations
"""Bible API: asset listing, variant selection and stuck-variant maintenance."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.api.deps import get_variant_dispatcher
from ripreel.api.webhooks import GENERIC_ERROR, error_response
from ripreel.database import get_db
from ripreel.errors import ConflictError, NotFoundError, WebhookValidationError
from ripreel.models.bible_variant import BibleImageVariant
from ripreel.models.character import Character, Location
from ripreel.models.project import Project
from ripreel.schemas.bible import BibleProjectRequest, BibleRead, VariantRead
from ripreel.schemas.webhooks import parse_payload
from ripreel.services import bible_maintenance
from ripreel.services.bible_maintenance import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


async def _project_id_from(request: Request) -> str:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise WebhookValidationError("Request body must be valid JSON") from e
    return parse_payload(BibleProjectRequest, body).project_id


@router.post("/bible/cleanup")
async def cleanup_variants(request: Request, db: AsyncSession = Depends(get_db)):
    """Delete stuck (generating) variants without regenerating them."""
    try:
        project_id = await _project_id_from(request)
        deleted = await bible_maintenance.cleanup_stuck_variants(db, project_id)
    except WebhookValidationError as e:
        return error_response(400, e.message)
    except Exception:
        await db.rollback()
        logger.exception("Bible cleanup failed")
        return error_response(500, GENERIC_ERROR)
    return {"success": True, "deleted": deleted}


@router.post("/bible/reset")
async def reset_variants(
    request: Request,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_variant_dispatcher),
):
    """Delete stuck variants and regenerate each of them."""
    try:
        project_id = await _project_id_from(request)
        stats = await bible_maintenance.reset_stuck_variants(db, project_id, dispatcher)
    except WebhookValidationError as e:
        return error_response(400, e.message)
    except Exception:
        await db.rollback()
        logger.exception("Bible reset failed")
        return error_response(500, GENERIC_ERROR)
    return JSONResponse(content={"success": True, "stats": stats})


@router.get("/projects/{project_id}/bible", response_model=BibleRead)
async def get_bible(project_id: str, db: AsyncSession = Depends(get_db)):
    """Characters, locations and all their image variants."""
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    characters = await db.execute(
        select(Character).where(Character.project_id == project_id).order_by(Character.name)
    )
    locations = await db.execute(
        select(Location).where(Location.project_id == project_id).order_by(Location.name)
    )
    variants = await db.execute(
        select(BibleImageVariant)
        .where(BibleImageVariant.project_id == project_id)
        .order_by(BibleImageVariant.asset_id, BibleImageVariant.generation_order)
    )
    return {
        "characters": characters.scalars().all(),
        "locations": locations.scalars().all(),
        "variants": variants.scalars().all(),
    }


@router.post("/bible/variants/{variant_id}/select", response_model=VariantRead)
async def select_variant(variant_id: str, db: AsyncSession = Depends(get_db)):
    """Approve a ready variant as its asset's reference image."""
    try:
        return await bible_maintenance.select_variant(db, variant_id)
    except (NotFoundError, ConflictError) as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
