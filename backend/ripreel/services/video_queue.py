"""Scene video queue.

Videos are created ``queued`` and the reconciler promotes them to
``generating`` while the project is below MAX_CONCURRENT_VIDEO_JOBS. It runs
after every video webhook and after every queue mutation; there is no
background scheduler.

The cap holds across concurrent reconciliations because:
  1. the project row is locked (SELECT ... FOR UPDATE) for the pass, and
  2. each claim is ``UPDATE ... WHERE id = :id AND status = 'queued'`` and
     only counts when exactly one row changed; a lost claim re-reads the
     generating count before the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ripreel.config import get_settings
from ripreel.errors import ConflictError, NotFoundError
from ripreel.models.project import Project
from ripreel.models.scene import Scene, Shot
from ripreel.models.video import DispatchStatus, SceneVideo, VideoStatus

logger = logging.getLogger(__name__)
settings = get_settings()

Dispatcher = Callable[[str], Any]

_TERMINAL = (VideoStatus.READY.value, VideoStatus.FAILED.value)
_VEO3_COMPONENTS = ("subject", "action", "scene", "style", "dialogue", "sounds", "technical")


def enqueue_video_dispatch(video_id: str) -> None:
    """Default dispatcher: hand the claimed video to the Celery worker."""
    from ripreel.tasks.dispatch_tasks import dispatch_scene_video

    dispatch_scene_video.delay(video_id)


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------

async def _count_generating(db: AsyncSession, project_id: str) -> int:
    return (
        await db.execute(
            select(func.count(SceneVideo.id))
            .join(Scene, SceneVideo.scene_id == Scene.id)
            .where(
                Scene.project_id == project_id,
                SceneVideo.status == VideoStatus.GENERATING.value,
            )
        )
    ).scalar_one()


async def process_video_queue(
    db: AsyncSession,
    project_id: str,
    dispatcher: Dispatcher | None = None,
) -> int:
    """Promote queued videos to generating up to the concurrency cap.

    Commits the claims before dispatching, then hands every claimed id to
    ``dispatcher``. Returns how many videos were newly triggered.
    """
    project = (
        await db.execute(
            select(Project).where(Project.id == project_id).with_for_update()
        )
    ).scalar_one_or_none()
    if project is None:
        logger.warning("Video queue: project %s not found", project_id)
        return 0

    cap = settings.MAX_CONCURRENT_VIDEO_JOBS
    rows = (
        await db.execute(
            select(SceneVideo.id, SceneVideo.status)
            .join(Shot, SceneVideo.shot_id == Shot.id)
            .join(Scene, Shot.scene_id == Scene.id)
            .where(Scene.project_id == project_id)
            .order_by(Scene.scene_number, Shot.shot_number)
        )
    ).all()

    generating = sum(1 for _, status in rows if status == VideoStatus.GENERATING.value)
    candidates = [vid for vid, status in rows if status == VideoStatus.QUEUED.value]

    claimed: list[str] = []
    for video_id in candidates:
        if generating >= cap:
            break
        result = await db.execute(
            update(SceneVideo)
            .where(
                SceneVideo.id == video_id,
                SceneVideo.status == VideoStatus.QUEUED.value,
            )
            .values(
                status=VideoStatus.GENERATING.value,
                dispatch_status=DispatchStatus.PENDING.value,
                error_message=None,
            )
        )
        if result.rowcount == 1:
            claimed.append(video_id)
            generating += 1
        else:
            # another pass took it; the snapshot count is stale
            generating = await _count_generating(db, project_id)

    await db.commit()

    if not claimed:
        logger.info(
            "Video queue %s: nothing to start (%d generating, %d queued, cap %d)",
            project_id, generating, len(candidates), cap,
        )
        return 0

    logger.info("Video queue %s: claimed %d video(s)", project_id, len(claimed))
    dispatch = dispatcher or enqueue_video_dispatch
    for video_id in claimed:
        try:
            dispatch(video_id)
        except Exception as e:
            logger.exception("Video queue: could not enqueue dispatch for %s", video_id)
            await mark_dispatch_failed(db, video_id, f"Dispatch enqueue failed: {e}")
            await db.commit()
    return len(claimed)


# ---------------------------------------------------------------------------
# Dispatch outcome
# ---------------------------------------------------------------------------

async def mark_dispatch_accepted(
    db: AsyncSession, video_id: str, execution_id: str | None
) -> bool:
    result = await db.execute(
        update(SceneVideo)
        .where(
            SceneVideo.id == video_id,
            SceneVideo.status == VideoStatus.GENERATING.value,
        )
        .values(dispatch_status=DispatchStatus.ACCEPTED.value, n8n_job_id=execution_id)
    )
    return result.rowcount == 1


async def mark_dispatch_failed(db: AsyncSession, video_id: str, error: str) -> bool:
    """Fail a generating video whose job never started. Frees its slot."""
    result = await db.execute(
        update(SceneVideo)
        .where(
            SceneVideo.id == video_id,
            SceneVideo.status == VideoStatus.GENERATING.value,
        )
        .values(
            status=VideoStatus.FAILED.value,
            dispatch_status=DispatchStatus.FAILED.value,
            error_message=error,
            n8n_job_id=None,
        )
    )
    return result.rowcount == 1


# ---------------------------------------------------------------------------
# Queue mutations
# ---------------------------------------------------------------------------

async def project_id_for_video(db: AsyncSession, video: SceneVideo) -> str | None:
    return (
        await db.execute(select(Scene.project_id).where(Scene.id == video.scene_id))
    ).scalar_one_or_none()


async def enqueue_project_videos(db: AsyncSession, project_id: str) -> int:
    """Queue a video for every shot with an approved start frame and no video."""
    if await db.get(Project, project_id) is None:
        raise NotFoundError("Project not found")

    shots = (
        await db.execute(
            select(Shot)
            .join(Scene, Shot.scene_id == Scene.id)
            .outerjoin(SceneVideo, SceneVideo.shot_id == Shot.id)
            .where(
                Scene.project_id == project_id,
                Shot.approved_image_url.is_not(None),
                SceneVideo.id.is_(None),
            )
            .order_by(Scene.scene_number, Shot.shot_number)
        )
    ).scalars().all()

    for shot in shots:
        db.add(SceneVideo(scene_id=shot.scene_id, shot_id=shot.id))
    await db.flush()

    logger.info("Queued %d video(s) for project %s", len(shots), project_id)
    return len(shots)


async def regenerate_video(db: AsyncSession, video_id: str) -> SceneVideo:
    """Put a ready or failed video back in the queue."""
    video = await db.get(SceneVideo, video_id)
    if video is None:
        raise NotFoundError("Video not found")
    if video.status not in _TERMINAL:
        raise ConflictError(f"Video is {video.status}, only ready or failed videos can be regenerated")

    video.status = VideoStatus.QUEUED.value
    video.dispatch_status = DispatchStatus.PENDING.value
    video.video_url = None
    video.duration_seconds = None
    video.error_message = None
    video.n8n_job_id = None
    await db.flush()
    return video


async def cancel_video(db: AsyncSession, video_id: str) -> str | None:
    """Delete a video row so its shot can be queued again.

    Returns the owning project id.
    """
    video = await db.get(SceneVideo, video_id)
    if video is None:
        raise NotFoundError("Video not found")

    project_id = await project_id_for_video(db, video)
    await db.delete(video)
    await db.flush()
    logger.info("Cancelled video %s", video_id)
    return project_id


async def get_video_stats(db: AsyncSession, project_id: str) -> dict[str, int]:
    counts = dict(
        (
            await db.execute(
                select(SceneVideo.status, func.count(SceneVideo.id))
                .join(Scene, SceneVideo.scene_id == Scene.id)
                .where(Scene.project_id == project_id)
                .group_by(SceneVideo.status)
            )
        ).all()
    )
    pending = (
        await db.execute(
            select(func.count(Shot.id))
            .join(Scene, Shot.scene_id == Scene.id)
            .outerjoin(SceneVideo, SceneVideo.shot_id == Shot.id)
            .where(
                Scene.project_id == project_id,
                Shot.approved_image_url.is_not(None),
                SceneVideo.id.is_(None),
            )
        )
    ).scalar_one()

    stats = {status.value: counts.get(status.value, 0) for status in VideoStatus}
    stats["pending"] = pending
    stats["total"] = sum(counts.values())
    return stats


# ---------------------------------------------------------------------------
# Prompt composition
# ---------------------------------------------------------------------------

def compose_video_prompt(shot: Shot | None, scene: Scene) -> str:
    """Build the image-to-video prompt for a shot.

    Priority: shot action prompt, scene Veo 3 components, scene action,
    slugline, then a generic fallback.
    """
    if shot is not None and shot.action_prompt:
        parts = [shot.action_prompt]
        if shot.dialogue_segment:
            parts.append(f'Dialogue: "{shot.dialogue_segment}"')
        if shot.composition_instruction:
            parts.append(shot.composition_instruction)
        return ". ".join(parts)

    raw = scene.raw_scene_data or {}
    veo3 = raw.get("video_prompt_veo3")
    if isinstance(veo3, dict):
        parts = [veo3[key] for key in _VEO3_COMPONENTS if veo3.get(key)]
        if parts:
            return ". ".join(parts)

    action = raw.get("action_description") or raw.get("action_summary") or scene.action_text
    if action:
        return action
    return scene.slugline or "Generate video"
