from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_pipeline, get_storage_backend
from app.core.config import settings
from app.core.rate_limit import analyze_rate_limiter
from app.schemas.analyze import AnalyzeResponse, OverlayResponse
from app.services.analyze import (
    AnalyzePipeline,
    ScanProcessingError,
    UserNotFoundError,
    process_overlay,
    process_scan,
)
from app.services.storage import StorageBackend
from shoewall_core.errors import RenderError

router = APIRouter()

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}


def _enforce_rate_limit(request: Request) -> None:
    client = request.client.host if request.client else "unknown"
    if not analyze_rate_limiter.allow(client):
        raise HTTPException(status_code=429, detail="Too many requests")


async def _read_image(image: UploadFile | None) -> tuple[bytes, str]:
    if image is None:
        raise HTTPException(status_code=400, detail='Missing image file field "image"')
    payload = await image.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Empty image payload")
    if len(payload) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds upload limit")
    content_type = image.content_type or "application/octet-stream"
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported content type: {content_type}")
    return payload, content_type


@router.post("/analyze", response_model=AnalyzeResponse, dependencies=[Depends(_enforce_rate_limit)])
async def analyze(
    user_id: str = Query(default=""),
    image: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    pipeline: AnalyzePipeline = Depends(get_pipeline),
    storage: StorageBackend = Depends(get_storage_backend),
) -> AnalyzeResponse:
    try:
        user_uuid = str(uuid.UUID(user_id))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid user_id")

    payload, content_type = await _read_image(image)
    try:
        return await process_scan(
            db=db,
            pipeline=pipeline,
            storage=storage,
            user_id=user_uuid,
            image_bytes=payload,
            content_type=content_type,
            filename=image.filename if image else None,
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ScanProcessingError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/analyze/overlay", response_model=OverlayResponse, dependencies=[Depends(_enforce_rate_limit)])
async def analyze_overlay(
    image: UploadFile | None = File(default=None),
    pipeline: AnalyzePipeline = Depends(get_pipeline),
) -> OverlayResponse:
    payload, content_type = await _read_image(image)
    try:
        return await process_overlay(pipeline, payload, content_type)
    except RenderError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
