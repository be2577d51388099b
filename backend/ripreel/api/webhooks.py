from __future__ import annotations
"""n8n webhook receivers.

Every receiver answers ``{success, message?, error?}``:
200 applied, 400 bad payload, 404 unknown target, 500 anything else.
Nothing is retried here; n8n owns the retry policy.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.api.deps import get_video_dispatcher
from ripreel.database import get_db
from ripreel.errors import RipreelError
from ripreel.schemas.webhooks import (
    BibleParsedPayload,
    CharacterImageResult,
    LocationImageResult,
    SceneImageResult,
    SceneImageVariantResult,
    VideoGeneratedResult,
    parse_payload,
)
from ripreel.services import webhook_handlers
from ripreel.services.video_queue import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_ERROR = "Internal server error"


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def receive(
    request: Request,
    db: AsyncSession,
    schema: type[BaseModel],
    handler: Callable[[Any], Awaitable[str]],
    name: str,
) -> JSONResponse:
    """Decode, normalize and apply one webhook delivery."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return error_response(400, "Request body must be valid JSON")

    logger.info("Webhook %s received", name)
    try:
        payload = parse_payload(schema, body)
        message = await handler(payload)
    except RipreelError as e:
        await db.rollback()
        if e.status_code >= 500:
            logger.error("Webhook %s failed: %s", name, e.message)
            return error_response(e.status_code, GENERIC_ERROR)
        logger.warning("Webhook %s rejected (%d): %s", name, e.status_code, e.message)
        return error_response(e.status_code, e.message)
    except Exception:
        await db.rollback()
        logger.exception("Webhook %s failed", name)
        return error_response(500, GENERIC_ERROR)

    return JSONResponse(content={"success": True, "message": message})


@router.post("/bible/location-image")
async def location_image(request: Request, db: AsyncSession = Depends(get_db)):
    """Location reference image finished."""
    return await receive(
        request, db, LocationImageResult,
        lambda p: webhook_handlers.handle_location_image(db, p),
        "location-image",
    )


@router.post("/bible/character-image")
async def character_image(request: Request, db: AsyncSession = Depends(get_db)):
    """Character shot or Bible variant finished."""
    return await receive(
        request, db, CharacterImageResult,
        lambda p: webhook_handlers.handle_character_image(db, p),
        "character-image",
    )


@router.post("/nano-banana-complete")
async def nano_banana_complete(request: Request, db: AsyncSession = Depends(get_db)):
    """Scene still from the Nano Banana workflow finished."""
    return await receive(
        request, db, SceneImageResult,
        lambda p: webhook_handlers.handle_scene_image(db, p),
        "nano-banana-complete",
    )


@router.post("/scene-image-variant")
async def scene_image_variant(request: Request, db: AsyncSession = Depends(get_db)):
    """One candidate still for a scene finished."""
    return await receive(
        request, db, SceneImageVariantResult,
        lambda p: webhook_handlers.handle_scene_image_variant(db, p),
        "scene-image-variant",
    )


@router.post("/video-generated")
async def video_generated(
    request: Request,
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_video_dispatcher),
):
    """Scene video finished; refills the project's video queue."""
    return await receive(
        request, db, VideoGeneratedResult,
        lambda p: webhook_handlers.handle_video_generated(db, p, dispatcher),
        "video-generated",
    )


@router.post("/bible-parsed")
async def bible_parsed(request: Request, db: AsyncSession = Depends(get_db)):
    """Stage 1 screenplay breakdown: Bible assets plus raw scenes."""
    return await receive(
        request, db, BibleParsedPayload,
        lambda p: webhook_handlers.handle_bible_parsed(db, p),
        "bible-parsed",
    )
