from __future__ import annotations

from backend.app.core.config import DATA_DIR, STORAGE_BACKEND
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.services.catalog import seed_default_categories
from backend.services.storage import JsonFileStorage, SqlStorage


def run_seed():
    if STORAGE_BACKEND == "json":
        seeded = seed_default_categories(JsonFileStorage(DATA_DIR))
    else:
        # schéma minimal si alembic n'a pas encore tourné
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            seeded = seed_default_categories(SqlStorage(db))
        finally:
            db.close()

    print("SEED OK: default categories" if seeded else "SEED SKIPPED: categories already present")


if __name__ == "__main__":
    run_seed()
