from __future__ import annotations
"""Celery tasks that start generation jobs on n8n.

Each task:
1. Reads the claimed row and builds the request (short session)
2. Calls the n8n workflow with no session held
3. Records the dispatch outcome in a new session

Provider failures never raise to the broker; they are written to the row.
A failed video dispatch frees a slot, so the project queue is reconciled.
"""

import logging

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ripreel.models.bible_variant import BibleAssetType, BibleImageVariant, VariantStatus
from ripreel.models.character import Character, Location
from ripreel.models.scene import Scene, Shot
from ripreel.models.video import SceneVideo, VideoStatus
from ripreel.services import n8n_client
from ripreel.services.bible_maintenance import get_asset
from ripreel.services.model_registry import (
    get_default_aspect_ratio,
    get_supported_aspect_ratios,
    is_aspect_ratio_supported,
)
from ripreel.services.video_queue import (
    Dispatcher,
    compose_video_prompt,
    mark_dispatch_accepted,
    mark_dispatch_failed,
    process_video_queue,
)
from ripreel.tasks import run_async

logger = logging.getLogger(__name__)

LOCATION_ASPECT_RATIO = "16:9"


def _default_factory() -> async_sessionmaker[AsyncSession]:
    from ripreel.database import async_session_factory

    return async_session_factory


@shared_task(name="ripreel.tasks.dispatch_tasks.dispatch_scene_video")
def dispatch_scene_video(video_id: str):
    """Start image-to-video generation for a claimed SceneVideo."""
    return run_async(dispatch_scene_video_async(video_id))


@shared_task(name="ripreel.tasks.dispatch_tasks.dispatch_bible_variant")
def dispatch_bible_variant(variant_id: str):
    """Start generation of one Bible image variant."""
    return run_async(dispatch_bible_variant_async(variant_id))


# ---------------------------------------------------------------------------
# Scene video
# ---------------------------------------------------------------------------

async def dispatch_scene_video_async(
    video_id: str,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    dispatcher: Dispatcher | None = None,
) -> dict:
    factory = session_factory or _default_factory()

    async with factory() as session:
        video = await session.get(SceneVideo, video_id)
        if video is None or video.status != VideoStatus.GENERATING.value:
            logger.info("Video %s no longer generating, dispatch skipped", video_id)
            return {"video_id": video_id, "status": "skipped"}
        shot = await session.get(Shot, video.shot_id)
        scene = await session.get(Scene, video.scene_id)
        project_id = scene.project_id
        shot_id = video.shot_id
        image_url = shot.approved_image_url if shot else None
        prompt = compose_video_prompt(shot, scene)
        duration = shot.shot_duration_seconds if shot else 8

    if image_url:
        result = await n8n_client.generate_video(
            scene_video_id=video_id,
            shot_id=shot_id,
            image_url=image_url,
            prompt=prompt,
            duration=duration,
        )
        error = result.error or "Video dispatch failed"
    else:
        result = n8n_client.WorkflowResult(success=False)
        error = "Shot has no approved image"

    async with factory() as session:
        if result.success:
            await mark_dispatch_accepted(session, video_id, result.execution_id)
            await session.commit()
            logger.info("Video %s dispatched (execution=%s)", video_id, result.execution_id)
            return {"video_id": video_id, "status": "accepted"}

        await mark_dispatch_failed(session, video_id, error)
        await session.commit()
        logger.error("Video %s dispatch failed: %s", video_id, error)
        await process_video_queue(session, project_id, dispatcher)
    return {"video_id": video_id, "status": "failed", "error": error}


# ---------------------------------------------------------------------------
# Bible variant
# ---------------------------------------------------------------------------

def _aspect_ratio_for(variant: BibleImageVariant) -> str:
    if variant.asset_type == BibleAssetType.CHARACTER.value and variant.shot_type:
        ratio = get_default_aspect_ratio(variant.shot_type)
    else:
        ratio = LOCATION_ASPECT_RATIO
    if is_aspect_ratio_supported(variant.model, ratio):
        return ratio
    return get_supported_aspect_ratios(variant.model)[0]


def _asset_prompt(asset: Character | Location | None, model: str) -> str | None:
    if asset is None:
        return None
    nano = model.startswith("nano-banana")
    if isinstance(asset, Character):
        return asset.portrait_prompt_nano_banana if nano else asset.portrait_prompt_seedream
    return asset.prompt_nano_banana if nano else asset.prompt_seedream


async def dispatch_bible_variant_async(
    variant_id: str,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> dict:
    factory = session_factory or _default_factory()

    async with factory() as session:
        variant = await session.get(BibleImageVariant, variant_id)
        if variant is None or variant.status != VariantStatus.GENERATING.value:
            logger.info("Variant %s no longer generating, dispatch skipped", variant_id)
            return {"variant_id": variant_id, "status": "skipped"}
        asset = await get_asset(session, variant.asset_type, variant.asset_id)
        prompt = variant.prompt or _asset_prompt(asset, variant.model) or ""
        request = {
            "asset_type": variant.asset_type,
            "asset_id": variant.asset_id,
            "prompt": prompt,
            "model": variant.model,
            "aspect_ratio": _aspect_ratio_for(variant),
            "shot_type": variant.shot_type,
            "variant_id": variant.id,
        }

    result = await n8n_client.generate_bible_image(**request)

    async with factory() as session:
        variant = await session.get(BibleImageVariant, variant_id)
        if variant is None:
            return {"variant_id": variant_id, "status": "skipped"}
        if result.success:
            variant.n8n_job_id = result.execution_id
            status = "accepted"
        elif variant.status == VariantStatus.GENERATING.value:
            variant.status = VariantStatus.FAILED.value
            variant.error_message = result.error or "Image dispatch failed"
            status = "failed"
        else:
            status = "skipped"
        await session.commit()

    logger.info("Variant %s dispatch %s", variant_id, status)
    return {"variant_id": variant_id, "status": status}
