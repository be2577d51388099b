"""Durable media storage."""
import httpx
import pytest

from ripreel.errors import UpstreamFetchError
from ripreel.services import storage
from ripreel.services.storage import fetch_remote as real_fetch_remote


@pytest.fixture
def mock_http(monkeypatch):
    def _install(handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        monkeypatch.setattr(storage, "_http_client", client)
        return client
    return _install


async def test_fetch_remote_returns_body(mock_http):
    mock_http(lambda request: httpx.Response(200, content=b"image-bytes"))
    assert await real_fetch_remote("https://tmp.provider/a.png") == b"image-bytes"


async def test_fetch_remote_wraps_http_errors(mock_http):
    mock_http(lambda request: httpx.Response(403, content=b"expired"))
    with pytest.raises(UpstreamFetchError):
        await real_fetch_remote("https://tmp.provider/a.png")


async def test_fetch_remote_rejects_malformed_url(mock_http):
    mock_http(lambda request: httpx.Response(200, content=b"never"))
    with pytest.raises(UpstreamFetchError):
        await real_fetch_remote("http://cdn.test:notaport/x.png")


async def test_persist_keeps_malformed_temporary_url(monkeypatch, mock_http):
    mock_http(lambda request: httpx.Response(200, content=b"never"))
    monkeypatch.setattr(storage, "fetch_remote", real_fetch_remote)

    stored = await storage.persist_remote_image(
        "http://cdn.test:notaport/x.png", storage.BUCKET_LOCATIONS, "loc/x.png"
    )

    assert stored.durable is False
    assert stored.url == "http://cdn.test:notaport/x.png"


async def test_persist_writes_into_media_volume(monkeypatch, offline_storage):
    async def fetch(url):
        return b"png"

    monkeypatch.setattr(storage, "fetch_remote", fetch)

    stored = await storage.persist_remote_image(
        "https://tmp.provider/a.png", storage.BUCKET_SCENE_IMAGES, "img-1/a.png"
    )

    assert stored.durable
    assert stored.path == "img-1/a.png"
    assert stored.url == storage.public_url(storage.BUCKET_SCENE_IMAGES, "img-1/a.png")
    assert (offline_storage / storage.BUCKET_SCENE_IMAGES / "img-1" / "a.png").read_bytes() == b"png"


async def test_persist_falls_back_on_download_failure():
    stored = await storage.persist_remote_image(
        "https://tmp.provider/a.png", storage.BUCKET_LOCATIONS, "loc/a.png", "provider/a.png"
    )
    assert not stored.durable
    assert stored.url == "https://tmp.provider/a.png"
    assert stored.path == "provider/a.png"


async def test_persist_falls_back_on_write_failure(monkeypatch, tmp_path):
    async def fetch(url):
        return b"png"

    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    monkeypatch.setattr(storage, "fetch_remote", fetch)
    monkeypatch.setattr(storage.settings, "MEDIA_VOLUME", str(blocker))

    stored = await storage.persist_remote_image(
        "https://tmp.provider/a.png", storage.BUCKET_LOCATIONS, "loc/a.png"
    )
    assert not stored.durable
    assert stored.url == "https://tmp.provider/a.png"


def test_paths():
    assert storage.character_shot_path("c1", "portrait", "f.png") == "c1/portrait/f.png"
    assert storage.location_image_path("l1", "f.png") == "l1/f.png"
    name = storage.timestamped_filename("l1")
    assert name.startswith("l1_") and name.endswith(".png")
