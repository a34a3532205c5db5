from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db_session
from app.services.analyze import AnalyzePipeline
from app.services.storage import StorageBackend, get_storage


def get_db() -> Session:
    yield from get_db_session()


@lru_cache(maxsize=1)
def get_pipeline() -> AnalyzePipeline:
    return AnalyzePipeline.from_settings(settings)


@lru_cache(maxsize=1)
def get_storage_backend() -> StorageBackend:
    return get_storage()
