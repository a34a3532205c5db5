from __future__ import annotations

import csv
import logging
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.models import Shoe
from shoewall_core.contracts import ShoeSpec

logger = logging.getLogger(__name__)


def load_catalog(db: Session) -> dict[str, ShoeSpec]:
    """All catalog shoes keyed by ``"{brand} {model}"``."""
    catalog: dict[str, ShoeSpec] = {}
    for row in db.query(Shoe).all():
        try:
            spec = ShoeSpec.model_validate(row)
        except ValidationError:
            logger.warning("catalog_row_invalid brand=%s model=%s", row.brand, row.model)
            continue
        catalog[spec.catalog_key] = spec
    return catalog


def _opt_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(float(value))


def ingest_shoes_csv(db: Session, csv_path: str) -> int:
    """Upsert shoes from a CSV by (brand, model); returns the number of rows written."""
    path = Path(csv_path)
    if not path.exists():
        logger.warning("catalog_csv_missing path=%s", csv_path)
        return 0

    written = 0
    with path.open("r", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            try:
                spec = ShoeSpec(
                    brand=(row.get("brand") or "").strip(),
                    model=(row.get("model") or "").strip(),
                    terrain=(row.get("terrain") or "").strip(),
                    stability=(row.get("stability") or "").strip(),
                    cushion=(row.get("cushion") or "").strip(),
                    drop_mm=_opt_int(row.get("drop_mm")),
                    weight_g=_opt_int(row.get("weight_g")),
                )
            except (ValidationError, ValueError):
                logger.warning("catalog_csv_row_skipped path=%s line=%d", csv_path, line_no)
                continue
            if not spec.brand or not spec.model:
                logger.warning("catalog_csv_row_skipped path=%s line=%d", csv_path, line_no)
                continue

            existing = db.query(Shoe).filter(Shoe.brand == spec.brand, Shoe.model == spec.model).first()
            if existing is None:
                existing = Shoe(brand=spec.brand, model=spec.model)
                db.add(existing)
            existing.terrain = spec.terrain
            existing.stability = spec.stability
            existing.cushion = spec.cushion
            existing.drop_mm = spec.drop_mm
            existing.weight_g = spec.weight_g
            written += 1

    db.commit()
    logger.info("catalog_csv_ingested path=%s rows=%d", csv_path, written)
    return written
