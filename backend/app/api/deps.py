from __future__ import annotations

from typing import Generator

from backend.app.core.config import DATA_DIR, STORAGE_BACKEND
from backend.app.db.session import SessionLocal
from backend.services.storage import JsonFileStorage, SqlStorage, Storage


def get_storage() -> Generator[Storage, None, None]:
    if STORAGE_BACKEND == "json":
        yield JsonFileStorage(DATA_DIR)
        return

    db = SessionLocal()
    try:
        yield SqlStorage(db)
    finally:
        db.close()
