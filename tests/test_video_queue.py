"""Scene video queue: reconciler cap, ordering and queue mutations."""
import pytest
from sqlalchemy import select, update

from factories import reload, seed_project, seed_videos, video_statuses
from ripreel.errors import ConflictError, NotFoundError
from ripreel.models import DispatchStatus, Scene, SceneVideo, Shot
from ripreel.services import video_queue
from ripreel.services.video_queue import (
    cancel_video,
    compose_video_prompt,
    enqueue_project_videos,
    get_video_stats,
    mark_dispatch_accepted,
    mark_dispatch_failed,
    process_video_queue,
    regenerate_video,
)


@pytest.fixture
def cap(monkeypatch):
    def _set(value: int) -> None:
        monkeypatch.setattr(video_queue.settings, "MAX_CONCURRENT_VIDEO_JOBS", value)
    return _set


async def test_reconcile_starts_up_to_cap(db, cap, video_dispatch):
    cap(2)
    project, ids = await seed_videos(db, ["queued"] * 5)

    triggered = await process_video_queue(db, project.id, video_dispatch)

    assert triggered == 2
    assert video_dispatch.calls == ids[:2]
    assert await video_statuses(db, ids) == ["generating", "generating", "queued", "queued", "queued"]


async def test_completion_frees_exactly_one_slot(client, db, cap, video_dispatch):
    cap(2)
    project, ids = await seed_videos(db, ["queued"] * 5)
    assert await process_video_queue(db, project.id, video_dispatch) == 2

    resp = await client.post(
        "/api/webhooks/n8n/video-generated",
        json={"scene_video_id": ids[0], "status": "ready", "video_url": "https://cdn.test/v0.mp4"},
    )

    assert resp.status_code == 200
    assert video_dispatch.calls == ids[:3]
    assert await video_statuses(db, ids) == ["ready", "generating", "generating", "queued", "queued"]


async def test_reconcile_is_idempotent(db, cap, video_dispatch):
    cap(3)
    project, ids = await seed_videos(db, ["queued"] * 4)

    assert await process_video_queue(db, project.id, video_dispatch) == 3
    assert await process_video_queue(db, project.id, video_dispatch) == 0
    assert await process_video_queue(db, project.id, video_dispatch) == 0
    assert video_dispatch.calls == ids[:3]


async def test_cap_holds_across_sessions(session_factory, cap, video_dispatch):
    cap(2)
    async with session_factory() as seed:
        project, ids = await seed_videos(seed, ["generating", "queued", "queued", "queued"])

    async with session_factory() as first, session_factory() as second:
        assert await process_video_queue(first, project.id, video_dispatch) == 1
        assert await process_video_queue(second, project.id, video_dispatch) == 0

        await mark_dispatch_failed(second, ids[0], "boom")
        await second.commit()
        assert await process_video_queue(first, project.id, video_dispatch) == 1
        assert await process_video_queue(second, project.id, video_dispatch) == 0

        statuses = await video_statuses(first, ids)
    assert statuses.count("generating") == 2
    assert video_dispatch.calls == [ids[1], ids[2]]


async def test_existing_generating_count_against_cap(db, cap, video_dispatch):
    cap(2)
    project, ids = await seed_videos(db, ["generating", "generating", "queued"])

    assert await process_video_queue(db, project.id, video_dispatch) == 0
    assert video_dispatch.calls == []


async def test_lost_claim_recounts_before_next_claim(db, cap, video_dispatch, monkeypatch):
    cap(2)
    project, ids = await seed_videos(db, ["queued", "queued", "queued"])
    execute = db.execute
    interleaved = []

    async def racing_execute(statement, *args, **kwargs):
        # a concurrent pass takes the first video after this pass has counted
        if getattr(statement, "is_dml", False) and not interleaved:
            interleaved.append(statement)
            await execute(
                update(SceneVideo)
                .where(SceneVideo.id == ids[0])
                .values(status="generating")
            )
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", racing_execute)

    triggered = await process_video_queue(db, project.id, video_dispatch)

    assert triggered == 1
    assert video_dispatch.calls == [ids[1]]
    assert await video_statuses(db, ids) == ["generating", "generating", "queued"]


async def test_claims_follow_scene_then_shot_order(db, cap, video_dispatch):
    cap(3)
    project = await seed_project(db, scenes=2, shots_per_scene=2)
    shots = await _ordered_shots(db, project.id)
    # insert in reverse so creation order does not match queue order
    videos = [SceneVideo(scene_id=s.scene_id, shot_id=s.id) for s in reversed(shots)]
    db.add_all(videos)
    await db.commit()
    by_shot = {v.shot_id: v.id for v in videos}

    await process_video_queue(db, project.id, video_dispatch)

    assert video_dispatch.calls == [by_shot[s.id] for s in shots[:3]]


async def test_unknown_project_triggers_nothing(db, video_dispatch):
    assert await process_video_queue(db, "missing", video_dispatch) == 0
    assert video_dispatch.calls == []


async def test_enqueue_failure_marks_video_failed(db, cap):
    cap(2)
    project, ids = await seed_videos(db, ["queued", "queued"])

    def broken(video_id):
        raise ConnectionError("broker down")

    assert await process_video_queue(db, project.id, broken) == 2

    video = await reload(db, SceneVideo, ids[0])
    assert video.status == "failed"
    assert video.dispatch_status == DispatchStatus.FAILED.value
    assert "broker down" in video.error_message


async def test_dispatch_outcome_only_applies_to_generating(db):
    _, ids = await seed_videos(db, ["generating", "ready"])

    assert await mark_dispatch_accepted(db, ids[0], "exec-1") is True
    assert await mark_dispatch_failed(db, ids[1], "late failure") is False
    await db.commit()

    accepted = await reload(db, SceneVideo, ids[0])
    assert accepted.dispatch_status == "accepted"
    assert accepted.n8n_job_id == "exec-1"
    assert (await reload(db, SceneVideo, ids[1])).status == "ready"


async def test_enqueue_project_videos_skips_unapproved_and_existing(db):
    project = await seed_project(db, scenes=2, shots_per_scene=2)
    shots = await _ordered_shots(db, project.id)
    shots[0].approved_image_url = None
    await db.commit()

    assert await enqueue_project_videos(db, project.id) == 3
    await db.commit()
    assert await enqueue_project_videos(db, project.id) == 0

    stats = await get_video_stats(db, project.id)
    assert stats == {"queued": 3, "generating": 0, "ready": 0, "failed": 0, "pending": 0, "total": 3}


async def test_enqueue_unknown_project(db):
    with pytest.raises(NotFoundError):
        await enqueue_project_videos(db, "missing")


async def test_regenerate_resets_terminal_video(db):
    _, ids = await seed_videos(db, ["failed"])
    video = await reload(db, SceneVideo, ids[0])
    video.error_message = "timeout"
    video.video_url = "https://cdn.test/old.mp4"
    await db.commit()

    video = await regenerate_video(db, ids[0])

    assert video.status == "queued"
    assert video.error_message is None
    assert video.video_url is None


async def test_regenerate_rejects_active_video(db):
    _, ids = await seed_videos(db, ["generating"])
    with pytest.raises(ConflictError):
        await regenerate_video(db, ids[0])
    with pytest.raises(NotFoundError):
        await regenerate_video(db, "missing")


async def test_cancel_removes_video_and_reports_project(db):
    project, ids = await seed_videos(db, ["generating", "queued"])

    assert await cancel_video(db, ids[0]) == project.id
    await db.commit()

    assert await reload(db, SceneVideo, ids[0]) is None
    stats = await get_video_stats(db, project.id)
    assert stats["queued"] == 1
    assert stats["pending"] == 1


def test_compose_prompt_prefers_shot_fields():
    scene = Scene(slugline="EXT. PIER - DAWN", raw_scene_data={"action_description": "Fog rolls in"})
    shot = Shot(
        action_prompt="Camera tracks Marlowe",
        dialogue_segment="Nobody leaves",
        composition_instruction="Low angle",
    )
    assert compose_video_prompt(shot, scene) == (
        'Camera tracks Marlowe. Dialogue: "Nobody leaves". Low angle'
    )


def test_compose_prompt_falls_back_through_scene_data():
    veo3 = {"subject": "A detective", "action": "walks", "style": "noir"}
    scene = Scene(slugline="EXT. PIER - DAWN", raw_scene_data={"video_prompt_veo3": veo3})
    assert compose_video_prompt(Shot(), scene) == "A detective. walks. noir"

    scene = Scene(slugline="EXT. PIER - DAWN", raw_scene_data={"action_summary": "Fog rolls in"})
    assert compose_video_prompt(None, scene) == "Fog rolls in"

    assert compose_video_prompt(None, Scene(slugline="EXT. PIER - DAWN")) == "EXT. PIER - DAWN"
    assert compose_video_prompt(None, Scene(slugline="")) == "Generate video"



async def _ordered_shots(db, project_id):
    result = await db.execute(
        select(Shot)
        .join(Scene, Shot.scene_id == Scene.id)
        .where(Scene.project_id == project_id)
        .order_by(Scene.scene_number, Shot.shot_number)
    )
    return list(result.scalars().all())
