from __future__ import annotations

import os
from io import BytesIO
from pathlib import Path

# Settings and the engine are built at import time; keep them off Postgres and in mock mode.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("MOCK_AI", "true")
os.environ.setdefault("OPENAI_API_KEY", "")

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.models import Shoe, User

DEMO_USER_ID = "11111111-2222-4333-8444-555555555555"


@pytest.fixture()
def db_session(tmp_path: Path):
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite+pysqlite:///{db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)

    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def seeded_db(db_session):
    db_session.add(User(id=DEMO_USER_ID, arch_type="normal", usage="road", weekly_mileage=20))
    db_session.add_all(
        [
            Shoe(brand="Nike", model="Pegasus 40", terrain="road", stability="neutral", cushion="medium", drop_mm=10, weight_g=285),
            Shoe(brand="Brooks", model="Ghost 15", terrain="road", stability="neutral", cushion="medium", drop_mm=12, weight_g=286),
            Shoe(brand="Hoka", model="Clifton 9", terrain="road", stability="neutral", cushion="high", drop_mm=5, weight_g=248),
            Shoe(brand="Brooks", model="Cascadia 17", terrain="trail", stability="stable", cushion="medium", drop_mm=8, weight_g=300),
        ]
    )
    db_session.commit()
    return db_session


@pytest.fixture()
def sample_image_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (800, 600), color=(170, 160, 150)).save(buf, "JPEG")
    return buf.getvalue()


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    uploads = tmp_path / "uploads"
    uploads.mkdir(parents=True, exist_ok=True)
    return uploads
