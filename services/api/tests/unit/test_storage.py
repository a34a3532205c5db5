from __future__ import annotations

import re
from pathlib import Path

import pytest

import app.services.storage as storage_mod
from app.services.storage import LocalStorage, SupabaseStorage, infer_ext, scan_object_key, upload_scan_image


def test_local_storage_creates_nested_key_directories(storage_root: Path):
    storage = LocalStorage(root=str(storage_root / "nested"))

    path = Path(storage.put_bytes("scans/a/b.png", b"png", content_type="image/png"))

    assert path == storage_root / "nested" / "scans" / "a" / "b.png"
    assert path.read_bytes() == b"png"


def test_scan_object_key_shape():
    key = scan_object_key("image/png", None)
    assert re.fullmatch(r"scans/\d{13}-[0-9a-f]{12}\.png", key)
    assert scan_object_key(None, "wall.JPEG").endswith(".jpg")


@pytest.mark.parametrize(
    "content_type, filename, expected",
    [
        ("image/jpeg", None, "jpg"),
        ("image/webp", None, "webp"),
        (None, "photo.png", "png"),
        ("application/octet-stream", "noext", "jpg"),
    ],
)
def test_infer_ext(content_type, filename, expected):
    assert infer_ext(content_type, filename) == expected


def test_upload_scan_image_writes_under_scans(storage_root: Path):
    storage = LocalStorage(root=str(storage_root))
    url = upload_scan_image(storage, b"\xff\xd8data", content_type="image/jpeg", filename="wall.jpg")

    path = Path(url)
    assert path.parent == storage_root / "scans"
    assert path.read_bytes() == b"\xff\xd8data"


class _Resp:
    def __init__(self, status_code: int, text: str = "", content: bytes = b"") -> None:
        self.status_code = status_code
        self.text = text
        self.content = content


def test_supabase_storage_posts_object_and_returns_public_url(monkeypatch):
    calls: dict = {}

    def fake_post(url, headers=None, data=None, timeout=None):
        calls.update(url=url, headers=headers, data=data)
        return _Resp(200)

    monkeypatch.setattr(storage_mod.requests, "post", fake_post)
    storage = SupabaseStorage(base_url="https://proj.supabase.co/", service_role_key="svc", bucket="scan-images")

    url = storage.put_bytes("scans/1-ab.jpg", b"img", content_type="image/jpeg")

    assert calls["url"] == "https://proj.supabase.co/storage/v1/object/scan-images/scans/1-ab.jpg"
    assert calls["headers"]["Authorization"] == "Bearer svc"
    assert calls["headers"]["apikey"] == "svc"
    assert calls["headers"]["x-upsert"] == "true"
    assert calls["data"] == b"img"
    assert url == "https://proj.supabase.co/storage/v1/object/public/scan-images/scans/1-ab.jpg"


def test_supabase_storage_raises_on_error_status(monkeypatch):
    monkeypatch.setattr(storage_mod.requests, "post", lambda *a, **kw: _Resp(403, text="forbidden"))
    storage = SupabaseStorage(base_url="https://proj.supabase.co", service_role_key="svc", bucket="scan-images")

    with pytest.raises(RuntimeError, match="403"):
        storage.put_bytes("scans/x.jpg", b"img")


def test_get_storage_prefers_supabase_when_configured(monkeypatch, storage_root: Path):
    monkeypatch.setattr(storage_mod.settings, "supabase_url", None)
    monkeypatch.setattr(storage_mod.settings, "local_storage_root", str(storage_root))
    assert isinstance(storage_mod.get_storage(), LocalStorage)

    monkeypatch.setattr(storage_mod.settings, "supabase_url", "https://proj.supabase.co")
    monkeypatch.setattr(storage_mod.settings, "supabase_service_role_key", "svc")
    assert isinstance(storage_mod.get_storage(), SupabaseStorage)
