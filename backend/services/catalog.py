"""
Catalogue : catégories et stocks (CRUD simple, sans logique de quantité).

Les compteurs ``sizes`` ne sont modifiés ici que par édition directe ;
les mouvements liés aux commandes passent par backend.services.orders.
"""

from __future__ import annotations

import logging
import re

from backend.app.db.models.models_v1 import Category, Stock
from backend.app.schemas.category import CategoryCreate
from backend.app.schemas.stock import StockCreate, StockUpdate
from backend.services.errors import CategoryExists, StockNotFound, ValidationError
from backend.services.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"slug": "hoodie", "name": "Hoodie", "sizes": ["M", "L", "XL", "2XL"]},
    {"slug": "pants", "name": "Pants", "sizes": ["M", "L", "XL", "2XL"]},
    {"slug": "jeans", "name": "Jeans", "sizes": ["30", "32", "34", "36", "38"]},
]


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


# ---------- CATEGORIES ----------
def create_category(storage: Storage, payload: CategoryCreate) -> Category:
    if not payload.name:
        raise ValidationError("name required")

    slug = slugify(payload.name)
    with storage.transaction():
        if storage.get_category(slug) is not None:
            raise CategoryExists("category exists")
        category = storage.add_category(Category(slug=slug, name=payload.name, sizes=list(payload.sizes)))

    logger.info("category created: %s", slug)
    return category


def delete_category(storage: Storage, slug: str) -> int:
    """Supprime la catégorie, ses stocks et les commandes de ces stocks. Retourne le nb de commandes supprimées."""
    with storage.transaction():
        storage.delete_category(slug)
        stock_ids = [s.id for s in storage.stocks_in_category(slug)]
        removed_orders = storage.delete_orders_for_items(stock_ids)
        for stock_id in stock_ids:
            storage.delete_stock(stock_id)

    logger.info("category %s deleted: %s stocks, %s orders", slug, len(stock_ids), removed_orders)
    return removed_orders


def seed_default_categories(storage: Storage) -> bool:
    with storage.transaction():
        if storage.count_categories() > 0:
            return False
        for cat in DEFAULT_CATEGORIES:
            storage.add_category(Category(slug=cat["slug"], name=cat["name"], sizes=list(cat["sizes"])))

    logger.info("seeded default categories: %s", ", ".join(c["slug"] for c in DEFAULT_CATEGORIES))
    return True


# ---------- STOCKS ----------
def create_stock(storage: Storage, payload: StockCreate) -> Stock:
    if not payload.category or not payload.name:
        raise ValidationError("category and name required")

    with storage.transaction():
        stock = storage.add_stock(Stock(category=payload.category, name=payload.name, sizes=dict(payload.sizes)))
    return stock


def update_stock(storage: Storage, stock_id: str, payload: StockUpdate) -> Stock:
    changes = payload.model_dump(exclude_unset=True)

    with storage.transaction():
        stock = storage.get_stock(stock_id, for_update=True)
        if stock is None:
            raise StockNotFound("stock not found")

        if changes.get("category") is not None:
            stock.category = changes["category"]
        if changes.get("name") is not None:
            stock.name = changes["name"]
        if changes.get("sizes") is not None:
            # remplace le mapping entier (correction manuelle d'inventaire)
            stock.sizes = dict(changes["sizes"])
        storage.save_stock(stock)

    return stock


def delete_stock(storage: Storage, stock_id: str) -> None:
    with storage.transaction():
        if storage.get_stock(stock_id) is None:
            raise StockNotFound("stock not found")
        # les commandes qui le référencent restent en place
        storage.delete_stock(stock_id)
