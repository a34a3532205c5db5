from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models import Scan
from app.schemas.analyze import RecommendationOut, ScanOut

router = APIRouter()


@router.get("/scans/{scan_id}", response_model=ScanOut)
def get_scan(scan_id: str, db: Session = Depends(get_db)) -> ScanOut:
    scan = db.get(Scan, scan_id)
    if scan is None:
        raise HTTPException(status_code=404, detail="Scan not found")

    rec = scan.recommendation
    return ScanOut(
        id=scan.id,
        user_id=scan.user_id,
        image_url=scan.image_url,
        created_at=scan.created_at,
        recommendation=(
            RecommendationOut(
                ranked=rec.ranked,
                avoid=rec.avoid,
                fallback_needed=rec.fallback_needed,
                created_at=rec.created_at,
            )
            if rec is not None
            else None
        ),
    )
