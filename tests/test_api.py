"""REST endpoints around projects, scenes, videos, the Bible and models."""
from factories import reload, seed_bible, seed_project, seed_variant, seed_videos, video_statuses
from ripreel.models import BibleImageVariant, SceneVideo
from ripreel.services import video_queue


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


# ---------------------------------------------------------------------------
# Projects and scenes
# ---------------------------------------------------------------------------

async def test_project_crud(client):
    resp = await client.post("/api/projects", json={"title": "Chinatown", "visual_style": "70s-crime-drama"})
    assert resp.status_code == 201
    project = resp.json()
    assert project["status"] == "parsing"
    assert project["visual_style"] == "70s-crime-drama"

    resp = await client.patch(f"/api/projects/{project['id']}", json={"title": "Chinatown (1974)"})
    assert resp.json()["title"] == "Chinatown (1974)"

    listing = (await client.get("/api/projects")).json()
    assert [p["id"] for p in listing] == [project["id"]]

    assert (await client.delete(f"/api/projects/{project['id']}")).status_code == 204
    assert (await client.get(f"/api/projects/{project['id']}")).status_code == 404


async def test_project_rejects_unknown_style(client):
    resp = await client.post("/api/projects", json={"title": "X", "visual_style": "vaporwave"})
    assert resp.status_code == 422


async def test_project_status_poll(client, db):
    project = await seed_project(db, scenes=3)
    resp = await client.get(f"/api/projects/{project.id}/status")
    assert resp.json() == {"status": "parsing", "sceneCount": 3}
    assert (await client.get("/api/projects/nope/status")).status_code == 404


async def test_bulk_scenes_and_shot_patch(client, db):
    project = await seed_project(db, scenes=0)

    resp = await client.post(f"/api/projects/{project.id}/scenes/bulk", json={"scenes": [
        {"scene_number": 1, "slugline": "EXT. PIER - NIGHT", "shots": [{"shot_number": 1}, {"shot_number": 2}]},
    ]})
    assert resp.status_code == 201
    scene = resp.json()[0]
    assert len(scene["shots"]) == 2

    shot_id = scene["shots"][0]["id"]
    resp = await client.patch(
        f"/api/projects/{project.id}/scenes/{scene['id']}/shots/{shot_id}",
        json={"approved_image_url": "https://cdn.test/frame.png"},
    )
    assert resp.status_code == 200
    assert resp.json()["approved_image_url"] == "https://cdn.test/frame.png"

    listed = (await client.get(f"/api/projects/{project.id}/scenes")).json()
    assert listed[0]["shots"][0]["approved_image_url"] == "https://cdn.test/frame.png"


async def test_bulk_scenes_unknown_project(client):
    resp = await client.post("/api/projects/nope/scenes/bulk", json={"scenes": []})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------

async def test_generate_queues_and_starts_up_to_cap(client, db, video_dispatch, monkeypatch):
    monkeypatch.setattr(video_queue.settings, "MAX_CONCURRENT_VIDEO_JOBS", 2)
    project = await seed_project(db, scenes=2, shots_per_scene=2)

    resp = await client.post(f"/api/projects/{project.id}/videos/generate")

    assert resp.json() == {"queued": 4, "triggered": 2}
    assert len(video_dispatch.calls) == 2
    stats = (await client.get(f"/api/projects/{project.id}/videos/stats")).json()
    assert stats == {"queued": 2, "generating": 2, "ready": 0, "failed": 0, "pending": 0, "total": 4}

    videos = (await client.get(f"/api/projects/{project.id}/videos")).json()
    assert [v["status"] for v in videos] == ["generating", "generating", "queued", "queued"]


async def test_process_endpoint(client, db, video_dispatch):
    project, ids = await seed_videos(db, ["queued"])
    resp = await client.post(f"/api/projects/{project.id}/videos/process")
    assert resp.json() == {"queued": 0, "triggered": 1}
    assert video_dispatch.calls == ids
    assert (await client.post("/api/projects/nope/videos/process")).status_code == 404


async def test_regenerate_endpoint(client, db, video_dispatch):
    _, ids = await seed_videos(db, ["failed", "generating"])

    resp = await client.post(f"/api/videos/{ids[0]}/regenerate")
    assert resp.status_code == 200
    assert resp.json()["status"] == "generating"
    assert video_dispatch.calls == [ids[0]]

    assert (await client.post(f"/api/videos/{ids[1]}/regenerate")).status_code == 409
    assert (await client.post("/api/videos/nope/regenerate")).status_code == 404


async def test_cancel_endpoint_refills_queue(client, db, video_dispatch, monkeypatch):
    monkeypatch.setattr(video_queue.settings, "MAX_CONCURRENT_VIDEO_JOBS", 1)
    _, ids = await seed_videos(db, ["generating", "queued"])

    assert (await client.delete(f"/api/videos/{ids[0]}")).status_code == 204

    assert await reload(db, SceneVideo, ids[0]) is None
    assert await video_statuses(db, ids[1:]) == ["generating"]
    assert video_dispatch.calls == [ids[1]]
    assert (await client.get(f"/api/videos/{ids[0]}")).status_code == 404


# ---------------------------------------------------------------------------
# Bible
# ---------------------------------------------------------------------------

async def test_bible_cleanup_endpoint(client, db):
    project = await seed_project(db)
    character, _ = await seed_bible(db, project)
    await seed_variant(db, project, character, "generating")
    await seed_variant(db, project, character, "ready")

    resp = await client.post("/api/bible/cleanup", json={"projectId": project.id})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "deleted": 1}


async def test_bible_reset_endpoint(client, db, variant_dispatch):
    project = await seed_project(db)
    character, location = await seed_bible(db, project)
    await seed_variant(db, project, character, "generating")
    await seed_variant(db, project, location, "generating")

    resp = await client.post("/api/bible/reset", json={"project_id": project.id})

    assert resp.json() == {"success": True, "stats": {"reset": 2, "regenerating": 2}}
    assert len(variant_dispatch.calls) == 2


async def test_bible_maintenance_requires_project_id(client):
    for path in ("/api/bible/cleanup", "/api/bible/reset"):
        resp = await client.post(path, json={})
        assert resp.status_code == 400
        assert resp.json()["success"] is False


async def test_bible_listing_and_selection(client, db):
    project = await seed_project(db)
    character, location = await seed_bible(db, project)
    variant = await seed_variant(db, project, location, "ready", image_url="https://x/loc.png")

    bible = (await client.get(f"/api/projects/{project.id}/bible")).json()
    assert [c["name"] for c in bible["characters"]] == ["Philip Marlowe"]
    assert [v["id"] for v in bible["variants"]] == [variant.id]

    resp = await client.post(f"/api/bible/variants/{variant.id}/select")
    assert resp.status_code == 200
    assert resp.json()["is_selected"] is True

    bible = (await client.get(f"/api/projects/{project.id}/bible")).json()
    assert bible["locations"][0]["image_status"] == "approved"
    assert bible["locations"][0]["approved_image_url"] == "https://x/loc.png"


async def test_select_variant_conflict(client, db):
    project = await seed_project(db)
    character, _ = await seed_bible(db, project)
    variant = await seed_variant(db, project, character, "failed")

    assert (await client.post(f"/api/bible/variants/{variant.id}/select")).status_code == 409
    assert (await client.post("/api/bible/variants/nope/select")).status_code == 404
    assert (await reload(db, BibleImageVariant, variant.id)).is_selected is False


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

async def test_list_image_models(client):
    body = (await client.get("/api/models/image")).json()
    assert body["total"] == 6
    assert "ByteDance" in body["providers"]

    body = (await client.get("/api/models/image", params={"type": "image-to-image"})).json()
    assert body["total"] == 3
    assert {m["type"] for m in body["models"]} == {"image-to-image"}


async def test_get_image_model(client):
    body = (await client.get("/api/models/image/flux-2-text-to-image")).json()
    assert body["provider"] == "Black Forest Labs"
    assert (await client.get("/api/models/image/unknown")).status_code == 404
