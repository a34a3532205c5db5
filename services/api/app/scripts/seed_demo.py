#!/usr/bin/env python3
from __future__ import annotations

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.models import User
from app.services.catalog import ingest_shoes_csv

DEMO_USER_ID = "00000000-0000-4000-8000-000000000001"


def main() -> None:
    configure_logging(settings.log_level)
    db = SessionLocal()
    try:
        user = db.get(User, DEMO_USER_ID)
        if user is None:
            user = User(id=DEMO_USER_ID, arch_type="normal", usage="road", weekly_mileage=20)
            db.add(user)
            db.commit()
        count = ingest_shoes_csv(db, settings.shoe_catalog_csv_path)
        print(f"seeded user={user.id} shoes={count}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
