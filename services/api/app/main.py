from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import engine
from app.middleware.request_context import RequestContextMiddleware

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="ShoeWall API", version="0.1.0")
app.add_middleware(RequestContextMiddleware)
cors_origins = {origin.rstrip("/") for origin in settings.cors_origins}
cors_origins.update({"http://localhost:5173", "http://127.0.0.1:5173"})
app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)

logger.info(
    "app_configured env=%s mock_vision=%s mock_ranking=%s max_candidates=%d",
    settings.app_env,
    settings.mock_vision,
    settings.mock_ranking,
    settings.vision_max_candidates,
)


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict:
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.warning("readyz_db_unreachable")
        db_ok = False

    return {"ready": db_ok, "db": db_ok}
