"""Bible variant maintenance: operator cleanup/reset and variant selection.

A variant gets stuck in ``generating`` when its n8n callback never arrives.
Both cleanup and reset scope by asset ownership: only variants whose
``asset_id`` belongs to one of the project's characters or locations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, update, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.errors import ConflictError, NotFoundError
from ripreel.models.bible_variant import BibleAssetType, BibleImageVariant, VariantStatus
from ripreel.models.character import BibleAssetStatus, Character, Location

logger = logging.getLogger(__name__)

Dispatcher = Callable[[str], Any]


def enqueue_variant_dispatch(variant_id: str) -> None:
    from ripreel.tasks.dispatch_tasks import dispatch_bible_variant

    dispatch_bible_variant.delay(variant_id)


def _project_asset_ids(project_id: str):
    return union_all(
        select(Character.id).where(Character.project_id == project_id),
        select(Location.id).where(Location.project_id == project_id),
    )


def _stuck_filter(project_id: str):
    return (
        BibleImageVariant.asset_id.in_(_project_asset_ids(project_id)),
        BibleImageVariant.status == VariantStatus.GENERATING.value,
    )


async def cleanup_stuck_variants(db: AsyncSession, project_id: str) -> int:
    """Delete the project's generating variants. Returns the count deleted."""
    result = await db.execute(
        delete(BibleImageVariant)
        .where(*_stuck_filter(project_id))
        .execution_options(synchronize_session=False)
    )
    logger.info("Deleted %d stuck variant(s) for project %s", result.rowcount, project_id)
    return result.rowcount


async def reset_stuck_variants(
    db: AsyncSession,
    project_id: str,
    dispatcher: Dispatcher | None = None,
) -> dict[str, int]:
    """Replace every stuck variant with a fresh one and dispatch it.

    The replacement keeps asset, shot type, model, prompt and order.
    """
    stuck = (
        await db.execute(select(BibleImageVariant).where(*_stuck_filter(project_id)))
    ).scalars().all()
    if not stuck:
        return {"reset": 0, "regenerating": 0}

    fresh: list[BibleImageVariant] = []
    for old in stuck:
        fresh.append(BibleImageVariant(
            project_id=old.project_id,
            asset_type=old.asset_type,
            asset_id=old.asset_id,
            shot_type=old.shot_type,
            model=old.model,
            prompt=old.prompt,
            generation_order=old.generation_order,
            status=VariantStatus.GENERATING.value,
        ))
        await db.delete(old)
    db.add_all(fresh)
    await db.commit()

    logger.info("Reset %d stuck variant(s) for project %s", len(stuck), project_id)

    dispatch = dispatcher or enqueue_variant_dispatch
    regenerating = 0
    for variant in fresh:
        try:
            dispatch(variant.id)
            regenerating += 1
        except Exception as e:
            logger.exception("Could not enqueue dispatch for variant %s", variant.id)
            variant.status = VariantStatus.FAILED.value
            variant.error_message = f"Dispatch enqueue failed: {e}"
    await db.commit()

    return {"reset": len(stuck), "regenerating": regenerating}


async def get_asset(db: AsyncSession, asset_type: str, asset_id: str) -> Character | Location | None:
    if asset_type == BibleAssetType.CHARACTER.value:
        return await db.get(Character, asset_id)
    if asset_type == BibleAssetType.LOCATION.value:
        return await db.get(Location, asset_id)
    return None


async def select_variant(db: AsyncSession, variant_id: str) -> BibleImageVariant:
    """Approve one ready variant as its asset's reference image."""
    variant = await db.get(BibleImageVariant, variant_id)
    if variant is None:
        raise NotFoundError("Variant not found")
    if variant.status != VariantStatus.READY.value:
        raise ConflictError(f"Variant is {variant.status}, only ready variants can be selected")

    asset = await get_asset(db, variant.asset_type, variant.asset_id)
    if asset is None:
        raise NotFoundError(f"{variant.asset_type.capitalize()} not found")

    await db.execute(
        update(BibleImageVariant)
        .where(
            BibleImageVariant.asset_id == variant.asset_id,
            BibleImageVariant.id != variant.id,
        )
        .values(is_selected=False)
    )
    variant.is_selected = True

    asset.approved_image_url = variant.image_url
    asset.approved_image_storage_path = variant.storage_path or None
    asset.image_status = BibleAssetStatus.APPROVED.value
    asset.selected_model = variant.model
    asset.approved_at = datetime.now(timezone.utc).replace(tzinfo=None)
    await db.flush()

    logger.info("Selected variant %s for %s %s", variant.id, variant.asset_type, variant.asset_id)
    return variant
