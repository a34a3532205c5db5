from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import requests

from app.core.config import settings


class StorageBackend:
    def put_bytes(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """Store ``data`` under ``key`` and return a URL (or path) the scan row can keep."""
        raise NotImplementedError


@dataclass(slots=True)
class LocalStorage(StorageBackend):
    root: str

    def __post_init__(self) -> None:
        Path(self.root).mkdir(parents=True, exist_ok=True)

    def put_bytes(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        path = Path(self.root) / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)


@dataclass(slots=True)
class SupabaseStorage(StorageBackend):
    """Supabase Storage over its REST API; objects are served from the public bucket URL."""

    base_url: str
    service_role_key: str
    bucket: str
    timeout_sec: float = 20.0

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }
        if content_type:
            headers["Content-Type"] = content_type
            headers["x-upsert"] = "true"
        return headers

    def _encoded(self, key: str) -> str:
        return quote(key, safe="/._-")

    def public_url(self, key: str) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}/storage/v1/object/public/{self.bucket}/{self._encoded(key)}"

    def put_bytes(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        base = self.base_url.rstrip("/")
        upload_url = f"{base}/storage/v1/object/{self.bucket}/{self._encoded(key)}"
        resp = requests.post(
            upload_url,
            headers=self._headers(content_type or "application/octet-stream"),
            data=data,
            timeout=self.timeout_sec,
        )
        if resp.status_code >= 400:
            raise RuntimeError(f"Storage upload failed: {resp.status_code} {resp.text[:300]}")
        return self.public_url(key)


def get_storage() -> StorageBackend:
    if settings.supabase_url and settings.supabase_service_role_key:
        return SupabaseStorage(
            base_url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            bucket=settings.supabase_storage_bucket,
        )
    return LocalStorage(root=settings.local_storage_root)


def infer_ext(content_type: str | None, filename: str | None) -> str:
    if filename and "." in filename:
        tail = filename.rsplit(".", 1)[-1].lower().strip()
        if tail in {"jpg", "jpeg", "png", "webp", "heic"}:
            return "jpg" if tail == "jpeg" else tail
    if content_type:
        c = content_type.lower().strip()
        if c in {"image/jpeg", "image/jpg"}:
            return "jpg"
        if c == "image/png":
            return "png"
        if c == "image/webp":
            return "webp"
    return "jpg"


def scan_object_key(content_type: str | None, filename: str | None) -> str:
    millis = int(time.time() * 1000)
    return f"scans/{millis}-{secrets.token_hex(6)}.{infer_ext(content_type, filename)}"


def upload_scan_image(
    storage: StorageBackend,
    image_bytes: bytes,
    content_type: str | None,
    filename: str | None,
) -> str:
    key = scan_object_key(content_type, filename)
    return storage.put_bytes(key, image_bytes, content_type=content_type or "application/octet-stream")
