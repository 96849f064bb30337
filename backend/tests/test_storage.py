import json
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from backend.app.db import session as db_session_module

from backend.app.db.models.core_types import Collection
from backend.app.db.models.models_v1 import Stock
from backend.app.schemas.order import OrderCreate
from backend.services.catalog import DEFAULT_CATEGORIES, seed_default_categories
from backend.services.errors import InsufficientStock
from backend.services.orders import create_order
from backend.services.storage import SqlStorage


def test_json_files_are_arrays_keyed_by_id(json_storage):
    with json_storage.transaction():
        json_storage.add_stock(Stock(id="stk-1", category="hoodie", name="Hoodie", sizes={"M": 2}))
    create_order(json_storage, OrderCreate(customerName="Hina", phone="87", itemId="stk-1", size="M"))

    with open(json_storage.path(Collection.stocks), encoding="utf-8") as f:
        stocks = json.load(f)
    with open(json_storage.path(Collection.orders), encoding="utf-8") as f:
        orders = json.load(f)

    assert [s["id"] for s in stocks] == ["stk-1"]
    assert stocks[0]["sizes"] == {"M": 1}
    assert len(orders) == 1
    assert orders[0]["itemId"] == "stk-1"
    assert orders[0]["createdAt"]


def test_json_failed_operation_writes_nothing(json_storage):
    with json_storage.transaction():
        json_storage.add_stock(Stock(id="stk-1", category="hoodie", name="Hoodie", sizes={"M": 0}))
    with open(json_storage.path(Collection.stocks), encoding="utf-8") as f:
        before = f.read()

    with pytest.raises(InsufficientStock):
        create_order(json_storage, OrderCreate(customerName="Hina", phone="87", itemId="stk-1", size="M"))

    with open(json_storage.path(Collection.stocks), encoding="utf-8") as f:
        assert f.read() == before
    assert json_storage.load(Collection.orders) == []


def test_json_write_outside_transaction_is_refused(json_storage):
    with pytest.raises(RuntimeError):
        json_storage.add_stock(Stock(category="hoodie", name="Hoodie", sizes={}))


def test_sql_rollback_on_error(db_session):
    storage = SqlStorage(db_session)
    with storage.transaction():
        storage.add_stock(Stock(id="stk-1", category="hoodie", name="Hoodie", sizes={"M": 1}))

    with pytest.raises(RuntimeError):
        with storage.transaction():
            stock = storage.get_stock("stk-1", for_update=True)
            stock.sizes = {"M": 0}
            storage.save_stock(stock)
            raise RuntimeError("boom")

    assert storage.get_stock("stk-1").sizes == {"M": 1}


def test_stocks_listed_newest_first(storage, make_stock):
    first = make_stock({"M": 1})
    second = make_stock({"M": 1})
    with storage.transaction():
        older = storage.get_stock(first)
        newer = storage.get_stock(second)
        assert older.created_at <= newer.created_at

    ids = [s.id for s in storage.list_stocks()]
    assert set(ids) == {first, second}
    if older.created_at < newer.created_at:
        assert ids == [second, first]


def test_seed_default_categories_only_once(storage):
    assert seed_default_categories(storage) is True
    assert seed_default_categories(storage) is False

    slugs = [c.slug for c in storage.list_categories()]
    assert sorted(slugs) == sorted(c["slug"] for c in DEFAULT_CATEGORIES)
    assert storage.get_category("jeans").sizes == ["30", "32", "34", "36", "38"]


def test_migrations_create_tables_on_app_engine(tmp_path, monkeypatch):
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}")
    monkeypatch.setattr(db_session_module, "engine", engine)

    cfg = Config()
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "alembic"))
    command.upgrade(cfg, "head")

    tables = set(inspect(engine).get_table_names())
    assert {"categories", "stocks", "orders", "alembic_version"} <= tables
    engine.dispose()
