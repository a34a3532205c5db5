from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.context import bind_scan_id
from app.models import Recommendation, Scan, User
from app.schemas.analyze import AnalyzeResponse, BBoxSummaryOut, OverlayResponse
from app.services.catalog import load_catalog
from app.services.storage import StorageBackend, upload_scan_image
from shoewall_core.contracts import UserProfile
from shoewall_core.overlay import read_image_size, render_overlay, summarize_bboxes
from shoewall_core.ranking import RankingStage
from shoewall_core.vision import VisionStage

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when the analyze request names a user with no stored profile."""


class ScanProcessingError(RuntimeError):
    """Raised when storing the image or persisting the scan fails."""


@dataclass(slots=True)
class AnalyzePipeline:
    vision: VisionStage
    ranking: RankingStage

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyzePipeline":
        config = settings.pipeline_config()
        return cls(vision=VisionStage(config), ranking=RankingStage(config))


def load_profile(db: Session, user_id: str) -> UserProfile:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return UserProfile(arch_type=user.arch_type, usage=user.usage, weekly_mileage=user.weekly_mileage)


async def process_scan(
    db: Session,
    pipeline: AnalyzePipeline,
    storage: StorageBackend,
    user_id: str,
    image_bytes: bytes,
    content_type: str,
    filename: str | None = None,
) -> AnalyzeResponse:
    """Store the photo, then run vision, catalog lookup and ranking in sequence and persist."""
    profile = load_profile(db, user_id)
    logger.info("[ANALYZE] ── START ── user=%s, content_type=%s, size=%d bytes", user_id, content_type, len(image_bytes))

    try:
        image_url = upload_scan_image(storage, image_bytes, content_type=content_type, filename=filename)
    except Exception as exc:
        logger.exception("[ANALYZE] image upload failed")
        raise ScanProcessingError(f"Storage upload failed: {exc}") from exc

    try:
        scan = Scan(user_id=user_id, image_url=image_url)
        db.add(scan)
        db.commit()
        db.refresh(scan)
    except SQLAlchemyError as exc:
        db.rollback()
        raise ScanProcessingError(f"Failed to create scan: {exc}") from exc

    with bind_scan_id(scan.id):
        vision = await pipeline.vision.run(image_bytes, content_type)
        vision_failed = len(vision.candidates) == 0

        try:
            catalog = load_catalog(db)
        except SQLAlchemyError as exc:
            raise ScanProcessingError(f"Failed to load shoes: {exc}") from exc

        recommendations = await pipeline.ranking.run(
            request_id=vision.request_id,
            profile=profile,
            candidates=vision.candidates,
            catalog_by_name=catalog,
            vision_failed=vision_failed,
        )

        try:
            db.add(
                Recommendation(
                    scan_id=scan.id,
                    ranked=[r.model_dump(mode="json") for r in recommendations.ranked],
                    avoid=[a.model_dump(mode="json") for a in recommendations.avoid],
                    fallback_needed=recommendations.fallback_needed,
                )
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise ScanProcessingError(f"Failed to save recommendations: {exc}") from exc

        logger.info(
            "[ANALYZE] ── DONE ── scan=%s, candidates=%d, ranked=%d, fallback=%s",
            scan.id,
            len(vision.candidates),
            len(recommendations.ranked),
            recommendations.fallback_needed,
        )
        return AnalyzeResponse(scan_id=scan.id, image_url=image_url, vision=vision, recommendations=recommendations)


async def process_overlay(pipeline: AnalyzePipeline, image_bytes: bytes, content_type: str) -> OverlayResponse:
    """Run detection only and return the annotated PNG; ``RenderError`` propagates."""
    width, height = read_image_size(image_bytes)
    vision = await pipeline.vision.run(image_bytes, content_type)
    png = render_overlay(image_bytes, vision.candidates)
    summary = summarize_bboxes(vision.candidates)
    logger.info(
        "overlay_rendered request_id=%s total=%d localized=%d",
        vision.request_id,
        summary.total_candidates,
        summary.localized_candidates,
    )
    return OverlayResponse(
        request_id=vision.request_id,
        width=width,
        height=height,
        bbox_summary=BBoxSummaryOut(
            total_candidates=summary.total_candidates,
            localized_candidates=summary.localized_candidates,
            missing_bbox=summary.missing_bbox,
        ),
        vision=vision,
        overlay_png_base64=base64.b64encode(png).decode("ascii"),
    )
