"""n8n completion handlers.

Each handler receives an already-normalized payload, resolves its target
row (NotFoundError before any write), applies the result and returns a
human-readable message for the response body. Image results are copied
into durable storage first; a failed copy keeps the provider's temporary URL.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.errors import NotFoundError, PersistenceError
from ripreel.models.bible_variant import BibleImageVariant, VariantStatus
from ripreel.models.character import BibleAssetStatus, Character, CharacterTier, Location
from ripreel.models.project import Project, ProjectStatus
from ripreel.models.scene import Scene, Shot
from ripreel.models.scene_image import (
    AssetStatus,
    SceneImage,
    SceneImageVariant,
    SceneVariantStatus,
)
from ripreel.models.video import SceneVideo, VideoStatus
from ripreel.schemas.webhooks import (
    BibleParsedPayload,
    CharacterImageResult,
    LocationImageResult,
    ParsedCharacter,
    SceneImageResult,
    SceneImageVariantResult,
    VideoGeneratedResult,
)
from ripreel.services import storage
from ripreel.services.storage import StoredFile
from ripreel.services.video_queue import Dispatcher, process_video_queue, project_id_for_video

logger = logging.getLogger(__name__)

TIER_MAP: dict[str, str] = {
    "TIER_1": CharacterTier.MAIN.value,
    "TIER_2": CharacterTier.SUPPORTING.value,
    "TIER_3": CharacterTier.EXTRA.value,
    "1": CharacterTier.MAIN.value,
    "2": CharacterTier.SUPPORTING.value,
    "3": CharacterTier.EXTRA.value,
}


async def _flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Database write failed: {e.__class__.__name__}") from e


async def _durable_copy(
    image_url: str | None,
    bucket: str,
    path: str,
    fallback_path: str | None = None,
) -> StoredFile:
    if not image_url:
        return StoredFile(url=None, path=fallback_path, durable=False)
    return await storage.persist_remote_image(image_url, bucket, path, fallback_path)


# ---------------------------------------------------------------------------
# Bible images
# ---------------------------------------------------------------------------

async def handle_location_image(db: AsyncSession, payload: LocationImageResult) -> str:
    if payload.variant_id:
        return await _apply_variant_result(
            db, payload.variant_id, payload,
            storage.BUCKET_LOCATIONS,
            lambda filename: storage.location_image_path(payload.location_id, filename),
        )

    location = await db.get(Location, payload.location_id)
    if location is None:
        raise NotFoundError("Location not found")

    if payload.is_failed:
        location.image_status = BibleAssetStatus.FAILED.value
        location.error_message = payload.error_message
        location.n8n_job_id = None
        await _flush(db)
        logger.info("Location %s image marked as failed", location.id)
        return "Location image marked as failed"

    filename = storage.timestamped_filename(location.id)
    stored = await _durable_copy(
        payload.image_url,
        storage.BUCKET_LOCATIONS,
        storage.location_image_path(location.id, filename),
        payload.storage_path,
    )
    location.approved_image_url = stored.url
    location.approved_image_storage_path = stored.path
    location.image_status = BibleAssetStatus.READY.value
    location.error_message = None
    location.n8n_job_id = None
    await _flush(db)

    logger.info("Location %s image ready (durable=%s)", location.id, stored.durable)
    return "Location image updated successfully"


async def handle_character_image(db: AsyncSession, payload: CharacterImageResult) -> str:
    if payload.variant_id:
        return await _apply_variant_result(
            db, payload.variant_id, payload,
            storage.BUCKET_CHARACTERS,
            lambda filename: storage.character_shot_path(payload.character_id, payload.shot_type, filename),
        )

    character = await db.get(Character, payload.character_id)
    if character is None:
        raise NotFoundError("Character not found")

    if payload.is_failed:
        character.image_status = BibleAssetStatus.FAILED.value
        character.error_message = payload.error_message
        character.n8n_job_id = None
        await _flush(db)
        return f"Character {payload.shot_type} image marked as failed"

    filename = storage.timestamped_filename(f"{character.id}_{payload.shot_type}")
    stored = await _durable_copy(
        payload.image_url,
        storage.BUCKET_CHARACTERS,
        storage.character_shot_path(character.id, payload.shot_type, filename),
        payload.storage_path,
    )
    character.approved_image_url = stored.url
    character.approved_image_storage_path = stored.path
    character.image_status = BibleAssetStatus.READY.value
    character.error_message = None
    character.n8n_job_id = None
    await _flush(db)

    logger.info("Character %s %s image ready", character.id, payload.shot_type)
    return f"Character {payload.shot_type} image updated successfully"


async def _apply_variant_result(
    db: AsyncSession,
    variant_id: str,
    payload: LocationImageResult | CharacterImageResult,
    bucket: str,
    path_for: Callable[[str], str],
) -> str:
    """Record a Bible variant result; the asset waits for an explicit selection."""
    variant = await db.get(BibleImageVariant, variant_id)
    if variant is None:
        raise NotFoundError("Variant not found")

    if payload.is_failed:
        variant.status = VariantStatus.FAILED.value
        variant.error_message = payload.error_message
        variant.n8n_job_id = None
        await _flush(db)
        logger.info("Variant %s marked as failed", variant.id)
        return f"Variant {variant.id} marked as failed"

    stored = await _durable_copy(
        payload.image_url,
        bucket,
        path_for(storage.timestamped_filename(variant.id)),
        payload.storage_path,
    )
    variant.image_url = stored.url or ""
    variant.storage_path = stored.path or ""
    variant.status = VariantStatus.READY.value
    variant.error_message = None
    variant.n8n_job_id = None
    await _flush(db)

    logger.info("Variant %s ready (durable=%s)", variant.id, stored.durable)
    return f"Variant {variant.id} updated successfully"


# ---------------------------------------------------------------------------
# Scene media
# ---------------------------------------------------------------------------

async def handle_scene_image(db: AsyncSession, payload: SceneImageResult) -> str:
    image = await db.get(SceneImage, payload.scene_image_id)
    if image is None:
        raise NotFoundError("Scene image not found")

    if payload.is_failed:
        image.status = AssetStatus.FAILED.value
        image.error_message = payload.error_message
        image.n8n_job_id = None
        await _flush(db)
        return "Scene image marked as failed"

    stored = await _durable_copy(
        payload.image_url,
        storage.BUCKET_SCENE_IMAGES,
        storage.scene_image_path(image.id, storage.timestamped_filename(image.id)),
    )
    image.image_url = stored.url
    image.image_storage_path = stored.path
    image.status = AssetStatus.READY.value
    image.error_message = None
    image.n8n_job_id = None
    await _flush(db)
    return "Scene image updated successfully"


async def handle_scene_image_variant(db: AsyncSession, payload: SceneImageVariantResult) -> str:
    """Record one scene variant result; selection stays with the user."""
    variant = await db.get(SceneImageVariant, payload.variant_id)
    if variant is None:
        raise NotFoundError("Variant not found")

    if payload.is_failed:
        variant.status = SceneVariantStatus.FAILED.value
        variant.error_message = payload.error_message
        variant.n8n_job_id = None
        await _flush(db)
        logger.info("Scene variant %s marked as failed", variant.id)
        return f"Scene variant {variant.id} marked as failed"

    stored = await _durable_copy(
        payload.image_url,
        storage.BUCKET_SCENE_IMAGES,
        storage.scene_variant_path(variant.scene_id, storage.timestamped_filename(variant.id)),
    )
    variant.image_url = stored.url or ""
    variant.storage_path = stored.path or ""
    variant.status = SceneVariantStatus.READY.value
    variant.error_message = None
    variant.n8n_job_id = None
    await _flush(db)

    logger.info("Scene variant %s ready (durable=%s)", variant.id, stored.durable)
    return f"Scene variant {variant.id} updated successfully"


async def handle_video_generated(
    db: AsyncSession,
    payload: VideoGeneratedResult,
    dispatcher: Dispatcher | None = None,
) -> str:
    """Record a finished video job, then refill the project's queue."""
    video = await db.get(SceneVideo, payload.scene_video_id)
    if video is None:
        raise NotFoundError("Video record not found")
    project_id = await project_id_for_video(db, video)

    if payload.is_failed:
        video.status = VideoStatus.FAILED.value
        video.error_message = payload.error_message
        message = f"Video {video.id} marked as failed"
    else:
        video.status = VideoStatus.READY.value
        video.video_url = payload.video_url
        video.duration_seconds = payload.duration_seconds
        video.error_message = None
        message = f"Video {video.id} updated successfully"
    video.n8n_job_id = None
    await _flush(db)
    logger.info("Video %s -> %s", video.id, video.status)

    if project_id:
        try:
            triggered = await process_video_queue(db, project_id, dispatcher)
        except SQLAlchemyError as e:
            raise PersistenceError("Video queue reconciliation failed") from e
        logger.info("Video queue after %s: %d started", video.id, triggered)
    return message


# ---------------------------------------------------------------------------
# Bible parse
# ---------------------------------------------------------------------------

def _character_row(project_id: str, parsed: ParsedCharacter) -> Character:
    tier = TIER_MAP.get(str(parsed.tier), CharacterTier.SUPPORTING.value)
    extra = parsed.model_extra or {}
    return Character(
        project_id=project_id,
        name=parsed.name,
        role="lead" if tier == CharacterTier.MAIN.value else "supporting",
        tier=tier,
        scene_count=parsed.scene_count or 1,
        visual_dna=parsed.visual_dna_reference or parsed.visual_dna or "",
        backstory=parsed.backstory,
        portrait_prompt_seedream=parsed.portrait_prompt_seedream or None,
        portrait_prompt_nano_banana=parsed.portrait_prompt_nano_banana or None,
        raw_data={
            "emotional_archetype": extra.get("emotional_archetype"),
            "first_appearance": extra.get("first_appearance"),
        },
    )


async def handle_bible_parsed(db: AsyncSession, payload: BibleParsedPayload) -> str:
    """Store the Stage 1 breakdown and move the project to Bible review."""
    project = await db.get(Project, payload.project_id)
    if project is None:
        raise NotFoundError("Project not found")

    characters = [_character_row(project.id, c) for c in payload.bible.characters]
    locations = [
        Location(
            project_id=project.id,
            name=loc.name,
            type="interior" if loc.type == "INT" else "exterior",
            visual_description=loc.visual_dna or loc.visual_description or "",
            prompt_seedream=loc.prompt_seedream or None,
            prompt_nano_banana=loc.prompt_nano_banana or None,
            time_variants=loc.time_variants,
            raw_data={"atmosphere": (loc.model_extra or {}).get("atmosphere")},
        )
        for loc in payload.bible.locations
    ]
    db.add_all(characters)
    db.add_all(locations)

    shot_count = 0
    for raw in payload.raw_scenes:
        action = raw.action_description or raw.action_summary or ""
        scene = Scene(
            project_id=project.id,
            scene_number=raw.scene_number,
            slugline=raw.slugline or f"Scene {raw.scene_number}",
            time_of_day=raw.time_of_day,
            interior_exterior=raw.interior_exterior or "INT",
            action_text=action or "No action description",
            raw_scene_data=raw.model_dump(mode="json"),
        )
        db.add(scene)
        for idx, parsed_shot in enumerate(raw.shots, start=1):
            db.add(Shot(
                scene=scene,
                shot_number=parsed_shot.shot_number or idx,
                shot_type=parsed_shot.shot_type,
                shot_duration_seconds=parsed_shot.shot_duration_seconds,
                action_prompt=parsed_shot.action_prompt,
                dialogue_segment=parsed_shot.dialogue_segment,
                composition_instruction=parsed_shot.composition_instruction,
            ))
            shot_count += 1

    project.status = ProjectStatus.BIBLE_REVIEW.value
    await _flush(db)

    logger.info(
        "Bible stored for project %s: %d characters, %d locations, %d scenes, %d shots",
        project.id, len(characters), len(locations), len(payload.raw_scenes), shot_count,
    )
    return (
        f"Stored {len(characters)} characters, {len(locations)} locations "
        f"and {len(payload.raw_scenes)} scenes"
    )
