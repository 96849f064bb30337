import os

# avant tout import backend.* : pas de Postgres pendant les tests
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["SEED_CATEGORIES"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.app.api.deps import get_storage  # noqa: E402
from backend.app.db.base import Base  # noqa: E402
from backend.app.db.models.models_v1 import Stock  # noqa: E402
from backend.app.main import app  # noqa: E402
from backend.services.storage import JsonFileStorage, SqlStorage  # noqa: E402


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test.

    SQLite en mémoire, une connexion partagée (StaticPool) pour que le
    TestClient (thread du threadpool) voie les mêmes données.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def json_storage(tmp_path) -> JsonFileStorage:
    return JsonFileStorage(str(tmp_path / "data"))


@pytest.fixture(params=["sql", "json"])
def storage(request):
    """Chaque test métier tourne sur les deux backends."""
    if request.param == "json":
        return request.getfixturevalue("json_storage")
    return SqlStorage(request.getfixturevalue("db_session"))


@pytest.fixture
def make_stock(storage):
    def _make(sizes, *, stock_id=None, name="Hoodie noir", category="hoodie"):
        with storage.transaction():
            stock = storage.add_stock(Stock(id=stock_id, category=category, name=name, sizes=dict(sizes)))
        return stock.id

    return _make


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
