from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.endpoints import analyze
from app.api.v1.endpoints import scans

api_router = APIRouter(prefix="/v1")
api_router.include_router(analyze.router, tags=["analyze"])
api_router.include_router(scans.router, tags=["scans"])
