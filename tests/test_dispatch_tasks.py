"""Outbound dispatch: n8n client and the Celery task bodies."""
import json

import httpx
import pytest

from factories import reload, seed_bible, seed_project, seed_variant, seed_videos, video_statuses
from ripreel.models import BibleImageVariant, Character, SceneVideo
from ripreel.services import n8n_client
from ripreel.services.n8n_client import WorkflowResult
from ripreel.tasks.dispatch_tasks import dispatch_bible_variant_async, dispatch_scene_video_async


@pytest.fixture
def n8n_http(monkeypatch):
    """Route the n8n client through a MockTransport and record request bodies."""
    sent = []

    def _install(response: httpx.Response):
        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content))
            return response

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        monkeypatch.setattr(n8n_client, "_http_client", client)
        return sent

    return _install


# ---------------------------------------------------------------------------
# n8n client
# ---------------------------------------------------------------------------

async def test_invoke_without_url_reports_error():
    result = await n8n_client.invoke_workflow("", {"a": 1})
    assert not result.success
    assert "not configured" in result.error


async def test_invoke_unwraps_n8n_item_list(n8n_http):
    sent = n8n_http(httpx.Response(200, json=[{"json": {"executionId": "exec-7", "ok": True}}]))

    result = await n8n_client.invoke_workflow("https://n8n.test/webhook/x", {"a": 1}, callback="https://cb")

    assert result.success
    assert result.data == {"executionId": "exec-7", "ok": True}
    assert sent == [{"a": 1, "callback_url": "https://cb"}]


async def test_invoke_execution_id_from_object(n8n_http):
    n8n_http(httpx.Response(200, json={"execution_id": "exec-8", "data": {"queued": True}}))

    result = await n8n_client.invoke_workflow("https://n8n.test/webhook/x", {})

    assert result.execution_id == "exec-8"
    assert result.data == {"queued": True}


async def test_invoke_http_error(n8n_http):
    n8n_http(httpx.Response(502, text="bad gateway"))
    result = await n8n_client.invoke_workflow("https://n8n.test/webhook/x", {})
    assert not result.success
    assert result.error == "Workflow execution failed: HTTP 502"


async def test_invoke_non_json_body(n8n_http):
    n8n_http(httpx.Response(200, text="Workflow was started"))
    result = await n8n_client.invoke_workflow("https://n8n.test/webhook/x", {})
    assert not result.success
    assert result.error == "Invalid JSON response from n8n"


async def test_generate_video_payload(n8n_http, monkeypatch):
    monkeypatch.setattr(n8n_client.settings, "N8N_VIDEO_WEBHOOK_URL", "https://n8n.test/webhook/video")
    sent = n8n_http(httpx.Response(200, json={"executionId": "e1"}))

    await n8n_client.generate_video(
        scene_video_id="v1", shot_id="s1", image_url="https://x/a.png", prompt="walk", duration=6,
    )

    body = sent[0]
    assert body["sceneVideoId"] == "v1"
    assert body["duration"] == 6
    assert body["callback_url"].endswith("/api/webhooks/n8n/video-generated")


async def test_generate_bible_image_payload(n8n_http, monkeypatch):
    monkeypatch.setattr(n8n_client.settings, "N8N_IMAGE_WEBHOOK_URL", "https://n8n.test/webhook/image")
    sent = n8n_http(httpx.Response(200, json={}))

    await n8n_client.generate_bible_image(
        asset_type="location", asset_id="l1", prompt="pier at dawn",
        model="flux-2-text-to-image", aspect_ratio="16:9",
    )

    body = sent[0]
    assert body["location_id"] == "l1"
    assert body["model"] == "flux-2/pro-text-to-image"
    assert "shot_type" not in body
    assert body["next_js_callback_url"].endswith("/api/webhooks/n8n/bible/location-image")


# ---------------------------------------------------------------------------
# Scene video task
# ---------------------------------------------------------------------------

async def test_video_dispatch_accepted(db, session_factory, monkeypatch, video_dispatch):
    _, ids = await seed_videos(db, ["generating"])
    calls = []

    async def fake_generate(**kwargs):
        calls.append(kwargs)
        return WorkflowResult(success=True, execution_id="exec-1")

    monkeypatch.setattr(n8n_client, "generate_video", fake_generate)

    result = await dispatch_scene_video_async(ids[0], session_factory, video_dispatch)

    assert result["status"] == "accepted"
    assert calls[0]["image_url"] == "https://cdn.test/s1-1.png"
    assert calls[0]["prompt"] == "Slow push in, shot 1"
    video = await reload(db, SceneVideo, ids[0])
    assert video.status == "generating"
    assert video.dispatch_status == "accepted"
    assert video.n8n_job_id == "exec-1"


async def test_video_dispatch_failure_frees_slot(db, session_factory, monkeypatch, video_dispatch):
    _, ids = await seed_videos(db, ["generating", "queued"])

    async def fake_generate(**kwargs):
        return WorkflowResult(success=False, error="Workflow execution timed out")

    monkeypatch.setattr(n8n_client, "generate_video", fake_generate)

    result = await dispatch_scene_video_async(ids[0], session_factory, video_dispatch)

    assert result == {"video_id": ids[0], "status": "failed", "error": "Workflow execution timed out"}
    assert await video_statuses(db, ids) == ["failed", "generating"]
    assert video_dispatch.calls == [ids[1]]
    video = await reload(db, SceneVideo, ids[0])
    assert video.dispatch_status == "failed"
    assert video.error_message == "Workflow execution timed out"


async def test_video_dispatch_skips_non_generating(db, session_factory, monkeypatch):
    _, ids = await seed_videos(db, ["ready"])

    async def fail_if_called(**kwargs):
        raise AssertionError("should not dispatch")

    monkeypatch.setattr(n8n_client, "generate_video", fail_if_called)

    result = await dispatch_scene_video_async(ids[0], session_factory)
    assert result["status"] == "skipped"


# ---------------------------------------------------------------------------
# Bible variant task
# ---------------------------------------------------------------------------

async def test_variant_dispatch_request(db, session_factory, monkeypatch):
    project = await seed_project(db)
    character, _ = await seed_bible(db, project)
    character = await reload(db, Character, character.id)
    character.portrait_prompt_nano_banana = "Marlowe, nano prompt"
    character.portrait_prompt_seedream = "Marlowe, seedream prompt"
    await db.commit()
    variant = await seed_variant(
        db, project, character, "generating",
        shot_type="full_body", model="nano-banana-pro-text-to-image",
    )
    requests = []

    async def fake_generate(**kwargs):
        requests.append(kwargs)
        return WorkflowResult(success=True, execution_id="exec-2")

    monkeypatch.setattr(n8n_client, "generate_bible_image", fake_generate)

    result = await dispatch_bible_variant_async(variant.id, session_factory)

    assert result["status"] == "accepted"
    assert requests[0]["prompt"] == "Marlowe, nano prompt"
    assert requests[0]["aspect_ratio"] == "9:16"
    assert requests[0]["variant_id"] == variant.id
    assert (await reload(db, BibleImageVariant, variant.id)).n8n_job_id == "exec-2"


async def test_variant_dispatch_failure(db, session_factory, monkeypatch):
    project = await seed_project(db)
    _, location = await seed_bible(db, project)
    variant = await seed_variant(db, project, location, "generating", prompt="Pier at dawn")
    requests = []

    async def fake_generate(**kwargs):
        requests.append(kwargs)
        return WorkflowResult(success=False, error="n8n webhook URL is not configured")

    monkeypatch.setattr(n8n_client, "generate_bible_image", fake_generate)

    result = await dispatch_bible_variant_async(variant.id, session_factory)

    assert result["status"] == "failed"
    assert requests[0]["aspect_ratio"] == "16:9"
    variant = await reload(db, BibleImageVariant, variant.id)
    assert variant.status == "failed"
    assert variant.error_message == "n8n webhook URL is not configured"
