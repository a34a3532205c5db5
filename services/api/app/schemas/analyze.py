from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from shoewall_core.contracts import AvoidEntry, RankedRecommendation, RecommendationsResult, VisionResult


class AnalyzeResponse(BaseModel):
    scan_id: str
    image_url: str
    vision: VisionResult
    recommendations: RecommendationsResult


class BBoxSummaryOut(BaseModel):
    total_candidates: int
    localized_candidates: int
    missing_bbox: int


class OverlayResponse(BaseModel):
    request_id: str
    width: int
    height: int
    bbox_summary: BBoxSummaryOut
    vision: VisionResult
    overlay_png_base64: str


class RecommendationOut(BaseModel):
    ranked: list[RankedRecommendation]
    avoid: list[AvoidEntry]
    fallback_needed: bool
    created_at: datetime | None = None


class ScanOut(BaseModel):
    id: str
    user_id: str
    image_url: str
    created_at: datetime | None = None
    recommendation: RecommendationOut | None = None
