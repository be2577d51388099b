"""Outbound n8n workflow invocation.

Each workflow is a webhook URL configured in settings. Requests are JSON
POSTs; async workflows receive a ``callback_url`` pointing back at the
matching receiver under /api/webhooks/n8n/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ripreel.config import get_settings
from ripreel.services.model_registry import map_model_to_n8n_name

logger = logging.getLogger(__name__)
settings = get_settings()

WEBHOOK_PREFIX = "/api/webhooks/n8n"

_CALLBACK_PATHS = {
    "character": f"{WEBHOOK_PREFIX}/bible/character-image",
    "location": f"{WEBHOOK_PREFIX}/bible/location-image",
}


@dataclass
class WorkflowResult:
    success: bool
    execution_id: str | None = None
    data: Any = None
    error: str | None = None


_http_client: httpx.AsyncClient | None = None


def _get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=settings.N8N_TIMEOUT)
    return _http_client


def callback_url(path: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}{path}"


def _extract_execution_id(result: Any) -> str | None:
    if isinstance(result, dict):
        for key in ("execution_id", "executionId"):
            value = result.get(key)
            if isinstance(value, str):
                return value
    return None


def _extract_data(result: Any) -> Any:
    """Unwrap the shapes n8n responds with: [{json: ...}], {data: ...} or plain."""
    if isinstance(result, list):
        items = [item.get("json", item) if isinstance(item, dict) else item for item in result]
        return items[0] if len(items) == 1 else items
    if isinstance(result, dict) and "data" in result:
        return result["data"]
    return result


async def invoke_workflow(
    webhook_url: str,
    payload: dict[str, Any],
    *,
    callback: str | None = None,
    timeout: float | None = None,
) -> WorkflowResult:
    """POST ``payload`` to an n8n webhook.

    Transport errors, non-2xx responses and non-JSON bodies are reported
    through ``WorkflowResult.error`` rather than raised.
    """
    if not webhook_url:
        return WorkflowResult(success=False, error="n8n webhook URL is not configured")

    body = dict(payload)
    if callback:
        body["callback_url"] = callback

    client = _get_http_client()
    try:
        resp = await client.post(
            webhook_url,
            json=body,
            timeout=timeout if timeout is not None else settings.N8N_TIMEOUT,
        )
        resp.raise_for_status()
        result = resp.json()
    except httpx.TimeoutException:
        logger.error("n8n workflow %s timed out", webhook_url)
        return WorkflowResult(success=False, error="Workflow execution timed out")
    except httpx.HTTPStatusError as e:
        logger.error("n8n workflow %s failed: HTTP %d", webhook_url, e.response.status_code)
        return WorkflowResult(
            success=False,
            error=f"Workflow execution failed: HTTP {e.response.status_code}",
        )
    except httpx.HTTPError as e:
        logger.error("n8n workflow %s request error: %s", webhook_url, e)
        return WorkflowResult(success=False, error=str(e) or type(e).__name__)
    except ValueError:
        logger.error("n8n workflow %s returned a non-JSON body", webhook_url)
        return WorkflowResult(success=False, error="Invalid JSON response from n8n")

    execution_id = _extract_execution_id(result)
    logger.info("n8n workflow invoked (execution=%s)", execution_id)
    return WorkflowResult(success=True, execution_id=execution_id, data=_extract_data(result))


async def generate_video(
    *,
    scene_video_id: str,
    shot_id: str,
    image_url: str,
    prompt: str,
    duration: int = 8,
) -> WorkflowResult:
    """Start image-to-video generation for one shot."""
    payload = {
        "sceneVideoId": scene_video_id,
        "shotId": shot_id,
        "imageUrl": image_url,
        "prompt": prompt,
        "duration": duration or 8,
        "model": settings.VIDEO_MODEL,
        "aspectRatio": settings.VIDEO_ASPECT_RATIO,
    }
    return await invoke_workflow(
        settings.N8N_VIDEO_WEBHOOK_URL,
        payload,
        callback=callback_url(f"{WEBHOOK_PREFIX}/video-generated"),
    )


async def generate_bible_image(
    *,
    asset_type: str,
    asset_id: str,
    prompt: str,
    model: str,
    aspect_ratio: str | None = None,
    shot_type: str | None = None,
    variant_id: str | None = None,
) -> WorkflowResult:
    """Start one Bible image generation; results arrive on the asset's receiver."""
    callback = callback_url(_CALLBACK_PATHS[asset_type])
    payload: dict[str, Any] = {
        "asset_type": asset_type,
        "asset_id": asset_id,
        f"{asset_type}_id": asset_id,
        "prompt": prompt,
        "model": map_model_to_n8n_name(model),
        "aspect_ratio": aspect_ratio,
        "shot_type": shot_type,
        "variant_id": variant_id,
        "next_js_callback_url": callback,
    }
    return await invoke_workflow(
        settings.N8N_IMAGE_WEBHOOK_URL,
        {k: v for k, v in payload.items() if v is not None},
        callback=callback,
    )
