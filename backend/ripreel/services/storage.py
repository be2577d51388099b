"""Durable media storage for generated assets.

Provider URLs returned by n8n expire after a few hours, so completed images
are downloaded and written into the media volume, which is served under
PUBLIC_MEDIA_URL. Re-upload is best-effort: any failure leaves the caller
with the temporary URL.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

import httpx

from ripreel.config import get_settings
from ripreel.errors import UpstreamFetchError

logger = logging.getLogger(__name__)
settings = get_settings()

BUCKET_CHARACTERS = "bible-characters-uploads"
BUCKET_LOCATIONS = "bible-locations-uploads"
BUCKET_SCENE_IMAGES = "scene-images"

# Module-level httpx client for connection reuse (lazy init)
_http_client: httpx.AsyncClient | None = None


def _get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=settings.STORAGE_FETCH_TIMEOUT,
            follow_redirects=True,
        )
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


@dataclass(frozen=True)
class StoredFile:
    url: str | None
    path: str | None
    durable: bool = True


def timestamped_filename(prefix: str, ext: str = "png") -> str:
    return f"{prefix}_{int(time.time() * 1000)}.{ext}"


def location_image_path(location_id: str, filename: str) -> str:
    return f"{location_id}/{filename}"


def character_shot_path(character_id: str, shot_type: str, filename: str) -> str:
    return f"{character_id}/{shot_type}/{filename}"


def scene_image_path(scene_image_id: str, filename: str) -> str:
    return f"{scene_image_id}/{filename}"


def scene_variant_path(scene_id: str, filename: str) -> str:
    return f"scenes/{scene_id}/{filename}"


def public_url(bucket: str, path: str) -> str:
    return f"{settings.PUBLIC_MEDIA_URL.rstrip('/')}/{bucket}/{path}"


async def fetch_remote(url: str) -> bytes:
    """Download a remote file. Raises UpstreamFetchError on any failure."""
    client = _get_http_client()
    try:
        resp = await client.get(url)
        resp.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise UpstreamFetchError(f"Failed to download {url[:80]}: {e}") from e
    return resp.content


def save_file(bucket: str, path: str, data: bytes) -> StoredFile:
    """Write bytes into the media volume under ``bucket/path``."""
    filepath = os.path.join(settings.MEDIA_VOLUME, bucket, path)
    try:
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
        with open(filepath, "wb") as f:
            f.write(data)
    except OSError as e:
        raise UpstreamFetchError(f"Failed to store {bucket}/{path}: {e}") from e
    return StoredFile(url=public_url(bucket, path), path=path)


async def persist_remote_image(
    temp_url: str,
    bucket: str,
    path: str,
    fallback_path: str | None = None,
) -> StoredFile:
    """Copy a provider's temporary image into durable storage.

    Falls back to ``temp_url`` (and ``fallback_path``) when the download or
    the write fails.
    """
    try:
        data = await fetch_remote(temp_url)
        logger.info("Downloaded %d bytes from %s...", len(data), temp_url[:50])
        stored = save_file(bucket, path, data)
    except UpstreamFetchError as e:
        logger.warning("Keeping temporary URL, durable copy failed: %s", e.message)
        return StoredFile(url=temp_url, path=fallback_path, durable=False)

    logger.info("Stored %s/%s", bucket, path)
    return stored
