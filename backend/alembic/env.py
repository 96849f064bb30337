from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from backend.app.db.base import Base
from backend.app.db.models import models_v1  # noqa: F401  (tables enregistrées sur Base.metadata)
from backend.app.db.session import engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# même moteur que l'app : DATABASE_URL fait foi, pas d'URL dans alembic.ini
with engine.connect() as connection:
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()
