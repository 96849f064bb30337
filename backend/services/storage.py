"""
Storage adapter.

Les services (réconciliation, commandes, catalogue) ne parlent qu'à
l'interface ``Storage`` : le backend (SQLAlchemy ou fichiers JSON) est
interchangeable sans toucher à la logique stock.

Toute écriture passe par ``transaction()`` : stock ET commande sont
persistés ensemble, ou pas du tout.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import Collection, new_id, utcnow
from backend.app.db.models.models_v1 import Category, Order, Stock
from backend.app.schemas.category import CategoryRead
from backend.app.schemas.order import OrderRead
from backend.app.schemas.stock import StockRead

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def transaction(self) -> Iterator["Storage"]: ...

    # stocks
    def list_stocks(self) -> list[Stock]: ...
    def get_stock(self, stock_id: str, *, for_update: bool = False) -> Stock | None: ...
    def get_stocks(self, stock_ids: Iterable[str], *, for_update: bool = False) -> dict[str, Stock]: ...
    def stocks_in_category(self, slug: str) -> list[Stock]: ...
    def add_stock(self, stock: Stock) -> Stock: ...
    def save_stock(self, stock: Stock) -> Stock: ...
    def delete_stock(self, stock_id: str) -> None: ...

    # orders
    def list_orders(self) -> list[Order]: ...
    def get_order(self, order_id: str, *, for_update: bool = False) -> Order | None: ...
    def add_order(self, order: Order) -> Order: ...
    def save_order(self, order: Order) -> Order: ...
    def delete_order(self, order_id: str) -> int: ...
    def delete_orders_for_items(self, item_ids: Iterable[str]) -> int: ...

    # categories
    def list_categories(self) -> list[Category]: ...
    def count_categories(self) -> int: ...
    def get_category(self, slug: str) -> Category | None: ...
    def add_category(self, category: Category) -> Category: ...
    def delete_category(self, slug: str) -> None: ...


def _stamp_new(obj):
    now = utcnow()
    if not obj.id:
        obj.id = new_id()
    obj.created_at = obj.created_at or now
    obj.updated_at = now
    return obj


# ---------- SQLAlchemy ----------
class SqlStorage:
    """Backend SQL. Verrouille les lignes stock (FOR UPDATE) pendant la transaction."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["SqlStorage"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ---------- stocks ----------
    def list_stocks(self) -> list[Stock]:
        stmt = select(Stock).order_by(Stock.created_at.desc(), Stock.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_stock(self, stock_id: str, *, for_update: bool = False) -> Stock | None:
        return self.get_stocks([stock_id], for_update=for_update).get(stock_id)

    def get_stocks(self, stock_ids: Iterable[str], *, for_update: bool = False) -> dict[str, Stock]:
        # ordre stable des verrous : évite les deadlocks entre deux transferts croisés
        ids = sorted({str(sid) for sid in stock_ids if sid})
        if not ids:
            return {}

        stmt = select(Stock).where(Stock.id.in_(ids)).order_by(Stock.id)
        if for_update:
            stmt = stmt.with_for_update()
        return {s.id: s for s in self.db.execute(stmt).scalars().all()}

    def stocks_in_category(self, slug: str) -> list[Stock]:
        return list(self.db.execute(select(Stock).where(Stock.category == slug)).scalars().all())

    def add_stock(self, stock: Stock) -> Stock:
        self.db.add(_stamp_new(stock))
        self.db.flush()
        return stock

    def save_stock(self, stock: Stock) -> Stock:
        stock.updated_at = utcnow()
        self.db.add(stock)
        self.db.flush()
        return stock

    def delete_stock(self, stock_id: str) -> None:
        self.db.execute(delete(Stock).where(Stock.id == stock_id))

    # ---------- orders ----------
    def list_orders(self) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_order(self, order_id: str, *, for_update: bool = False) -> Order | None:
        if for_update:
            # relit la ligne même si elle est déjà dans la session
            return self.db.get(Order, order_id, with_for_update=True, populate_existing=True)
        return self.db.get(Order, order_id)

    def add_order(self, order: Order) -> Order:
        self.db.add(_stamp_new(order))
        self.db.flush()
        return order

    def save_order(self, order: Order) -> Order:
        order.updated_at = utcnow()
        self.db.add(order)
        self.db.flush()
        return order

    def delete_order(self, order_id: str) -> int:
        result = self.db.execute(delete(Order).where(Order.id == order_id))
        return int(result.rowcount or 0)

    def delete_orders_for_items(self, item_ids: Iterable[str]) -> int:
        ids = list(item_ids)
        if not ids:
            return 0
        result = self.db.execute(delete(Order).where(Order.item_id.in_(ids)))
        return int(result.rowcount or 0)

    # ---------- categories ----------
    def list_categories(self) -> list[Category]:
        stmt = select(Category).order_by(Category.created_at.asc(), Category.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def count_categories(self) -> int:
        return int(self.db.scalar(select(func.count()).select_from(Category)) or 0)

    def get_category(self, slug: str) -> Category | None:
        return self.db.execute(select(Category).where(Category.slug == slug)).scalar_one_or_none()

    def add_category(self, category: Category) -> Category:
        self.db.add(_stamp_new(category))
        self.db.flush()
        return category

    def delete_category(self, slug: str) -> None:
        self.db.execute(delete(Category).where(Category.slug == slug))


# ---------- Fichiers JSON ----------
_MODELS = {
    Collection.categories: (Category, CategoryRead),
    Collection.stocks: (Stock, StockRead),
    Collection.orders: (Order, OrderRead),
}

_DIR_LOCKS: dict[str, threading.RLock] = {}
_DIR_LOCKS_GUARD = threading.Lock()


def _lock_for(data_dir: str) -> threading.RLock:
    key = os.path.abspath(data_dir)
    with _DIR_LOCKS_GUARD:
        if key not in _DIR_LOCKS:
            _DIR_LOCKS[key] = threading.RLock()
        return _DIR_LOCKS[key]


class JsonFileStorage:
    """
    Backend fichiers : un tableau JSON par collection (stocks.json, orders.json,
    categories.json), chaque enregistrement identifié par "id".

    - réécriture complète du fichier à chaque mutation (tmp + os.replace)
    - un verrou par répertoire : un seul écrivain à la fois dans le process
    - hors transaction, chaque lecture relit le disque

    Limite connue : stocks.json et orders.json sont remplacés l'un après
    l'autre ; un crash entre les deux les laisse désynchronisés.
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._lock = _lock_for(data_dir)
        self._cache: dict[Collection, list[dict]] | None = None
        self._dirty: set[Collection] = set()
        os.makedirs(data_dir, exist_ok=True)

    def path(self, collection: Collection) -> str:
        return os.path.join(self.data_dir, f"{collection.value}.json")

    # ---------- load / save ----------
    def load(self, collection: Collection) -> list[dict]:
        path = self.path(collection)
        if not os.path.exists(path):
            return []
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON array")
        return data

    def save(self, collection: Collection, records: list[dict]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection.value}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path(collection))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    @contextmanager
    def transaction(self) -> Iterator["JsonFileStorage"]:
        with self._lock:
            outer = self._cache is not None
            if outer:
                # transaction imbriquée : fait partie de l'englobante
                yield self
                return

            self._cache, self._dirty = {}, set()
            try:
                yield self
                for collection in Collection:
                    if collection in self._dirty:
                        self.save(collection, self._cache[collection])
                if self._dirty:
                    logger.debug("json storage wrote %s", sorted(c.value for c in self._dirty))
            finally:
                self._cache, self._dirty = None, set()

    def _records(self, collection: Collection) -> list[dict]:
        if self._cache is None:
            return self.load(collection)
        if collection not in self._cache:
            self._cache[collection] = self.load(collection)
        return self._cache[collection]

    def _write(self, collection: Collection, records: list[dict]) -> None:
        if self._cache is None:
            raise RuntimeError("JsonFileStorage writes require an open transaction()")
        self._cache[collection] = records
        self._dirty.add(collection)

    # ---------- conversions ----------
    def _to_record(self, collection: Collection, obj) -> dict:
        _, schema = _MODELS[collection]
        return schema.model_validate(obj).to_client()

    def _from_record(self, collection: Collection, record: dict):
        model, schema = _MODELS[collection]
        return model(**schema.model_validate(record).model_dump())

    def _all(self, collection: Collection) -> list:
        return [self._from_record(collection, r) for r in self._records(collection)]

    def _find(self, collection: Collection, key: str, value):
        for r in self._records(collection):
            if r.get(key) == value:
                return self._from_record(collection, r)
        return None

    def _insert(self, collection: Collection, obj):
        records = list(self._records(collection))
        records.append(self._to_record(collection, _stamp_new(obj)))
        self._write(collection, records)
        return obj

    def _replace(self, collection: Collection, obj):
        obj.updated_at = utcnow()
        record = self._to_record(collection, obj)
        records = [record if r.get("id") == obj.id else r for r in self._records(collection)]
        self._write(collection, records)
        return obj

    def _remove(self, collection: Collection, key: str, values: set) -> int:
        records = self._records(collection)
        kept = [r for r in records if r.get(key) not in values]
        removed = len(records) - len(kept)
        if removed:
            self._write(collection, kept)
        return removed

    @staticmethod
    def _newest_first(rows: list) -> list:
        return sorted(rows, key=lambda o: (o.created_at, o.id), reverse=True)

    # ---------- stocks ----------
    def list_stocks(self) -> list[Stock]:
        return self._newest_first(self._all(Collection.stocks))

    def get_stock(self, stock_id: str, *, for_update: bool = False) -> Stock | None:
        return self._find(Collection.stocks, "id", stock_id)

    def get_stocks(self, stock_ids: Iterable[str], *, for_update: bool = False) -> dict[str, Stock]:
        ids = {str(sid) for sid in stock_ids if sid}
        return {s.id: s for s in self._all(Collection.stocks) if s.id in ids}

    def stocks_in_category(self, slug: str) -> list[Stock]:
        return [s for s in self._all(Collection.stocks) if s.category == slug]

    def add_stock(self, stock: Stock) -> Stock:
        return self._insert(Collection.stocks, stock)

    def save_stock(self, stock: Stock) -> Stock:
        return self._replace(Collection.stocks, stock)

    def delete_stock(self, stock_id: str) -> None:
        self._remove(Collection.stocks, "id", {stock_id})

    # ---------- orders ----------
    def list_orders(self) -> list[Order]:
        return self._newest_first(self._all(Collection.orders))

    def get_order(self, order_id: str, *, for_update: bool = False) -> Order | None:
        return self._find(Collection.orders, "id", order_id)

    def add_order(self, order: Order) -> Order:
        return self._insert(Collection.orders, order)

    def save_order(self, order: Order) -> Order:
        return self._replace(Collection.orders, order)

    def delete_order(self, order_id: str) -> int:
        return self._remove(Collection.orders, "id", {order_id})

    def delete_orders_for_items(self, item_ids: Iterable[str]) -> int:
        return self._remove(Collection.orders, "itemId", set(item_ids))

    # ---------- categories ----------
    def list_categories(self) -> list[Category]:
        return sorted(self._all(Collection.categories), key=lambda c: (c.created_at, c.id))

    def count_categories(self) -> int:
        return len(self._records(Collection.categories))

    def get_category(self, slug: str) -> Category | None:
        return self._find(Collection.categories, "slug", slug)

    def add_category(self, category: Category) -> Category:
        return self._insert(Collection.categories, category)

    def delete_category(self, slug: str) -> None:
        self._remove(Collection.categories, "slug", {slug})
