"""
Cycle de vie des commandes.

Chaque opération (création, modification, suppression) :
    1) verrouille la commande, puis les stocks concernés
    2) calcule les nouveaux compteurs via backend.services.reconciliation
    3) persiste stock(s) + commande dans UNE transaction
    4) renvoie la liste des stocks rechargée après commit

Aucune logique de calcul de stock ici : tout passe par reconciliation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from backend.app.db.models.core_types import DEFAULT_ORDER_STATUS, DEFAULT_PAYMENT
from backend.app.db.models.models_v1 import Order, Stock
from backend.app.schemas.order import OrderCreate, OrderUpdate
from backend.services.errors import (
    InsufficientStock,
    InvalidQuantity,
    OrderNotFound,
    UnknownStockItem,
    ValidationError,
)
from backend.services.reconciliation import (
    adjust_on_qty_change,
    release,
    reserve,
    transfer_reservation,
)
from backend.services.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    order: Order | None
    stocks: list[Stock] = field(default_factory=list)


def _order_qty(qty) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise InvalidQuantity("qty must be a positive integer")
    return qty


def create_order(storage: Storage, payload: OrderCreate) -> OrderResult:
    if not payload.customer_name or not payload.phone or not payload.item_id or not payload.size:
        raise ValidationError("missing fields")

    want = _order_qty(payload.qty if payload.qty is not None else 1)

    with storage.transaction():
        stock = storage.get_stock(payload.item_id, for_update=True)
        if stock is None:
            raise UnknownStockItem("stock item not found")

        try:
            stock.sizes = reserve(stock.sizes, payload.size, want)
        except InsufficientStock:
            logger.info("order refused: item=%s size=%s want=%s", stock.id, payload.size, want)
            raise
        storage.save_stock(stock)

        order = storage.add_order(
            Order(
                customer_name=payload.customer_name,
                phone=payload.phone,
                address=payload.address or "",
                payment=payload.payment or DEFAULT_PAYMENT,
                category=payload.category or stock.category,
                item_id=stock.id,
                item_name=payload.item_name or stock.name,
                size=payload.size,
                qty=want,
                notes=payload.notes or "",
                price=float(payload.price or 0),
                status=payload.status or DEFAULT_ORDER_STATUS,
            )
        )

    logger.info("order created: id=%s item=%s size=%s qty=%s", order.id, order.item_id, order.size, order.qty)
    return OrderResult(order=order, stocks=storage.list_stocks())


def update_order(storage: Storage, order_id: str, patch: OrderUpdate) -> OrderResult:
    changes = patch.changes()

    with storage.transaction():
        order = storage.get_order(order_id, for_update=True)
        if order is None:
            raise OrderNotFound("order not found")

        old_item, old_size, old_qty = order.item_id, order.size, order.qty
        # "" pour itemId / size = inchangé
        new_item = changes.pop("item_id", None) or old_item
        new_size = changes.pop("size", None) or old_size
        new_qty = _order_qty(changes.pop("qty", old_qty))

        stocks = storage.get_stocks({old_item, new_item}, for_update=True)

        if new_item == old_item and new_size == old_size:
            stock = stocks.get(new_item)
            if stock is None:
                raise UnknownStockItem("stock item missing")
            try:
                stock.sizes = adjust_on_qty_change(stock.sizes, new_size, old_qty, new_qty)
            except InsufficientStock as exc:
                raise InsufficientStock(exc.available, "not enough stock to increase") from None
            storage.save_stock(stock)
        else:
            old_stock = stocks.get(old_item)
            new_stock = stocks.get(new_item)
            if new_stock is None:
                raise UnknownStockItem("new stock item missing")
            if old_stock is None:
                logger.warning("order %s: old stock %s is gone, %s x %s not restored", order.id, old_item, old_qty, old_size)

            same_stock = new_item == old_item
            try:
                old_sizes, new_sizes = transfer_reservation(
                    (old_stock.sizes or {}) if old_stock is not None else None,
                    old_size,
                    old_qty,
                    new_stock.sizes,
                    new_size,
                    new_qty,
                    same_stock=same_stock,
                )
            except InsufficientStock as exc:
                raise InsufficientStock(exc.available, "not enough stock for new item") from None

            if old_stock is not None and not same_stock:
                old_stock.sizes = old_sizes
                storage.save_stock(old_stock)
            new_stock.sizes = new_sizes
            storage.save_stock(new_stock)

        for name, value in changes.items():
            setattr(order, name, value)
        order.item_id = new_item
        order.size = new_size
        order.qty = new_qty
        storage.save_order(order)

    logger.info(
        "order updated: id=%s %s/%s x%s -> %s/%s x%s",
        order.id, old_item, old_size, old_qty, new_item, new_size, new_qty,
    )
    return OrderResult(order=order, stocks=storage.list_stocks())


def delete_order(storage: Storage, order_id: str) -> OrderResult:
    with storage.transaction():
        order = storage.get_order(order_id, for_update=True)
        if order is None:
            raise OrderNotFound("order not found")

        stock = storage.get_stock(order.item_id, for_update=True)
        if stock is not None:
            stock.sizes = release(stock.sizes, order.size, order.qty)
            storage.save_stock(stock)
        else:
            # stock supprimé entre-temps : la quantité n'est pas restituée
            logger.warning("order %s: stock %s is gone, %s x %s not restored", order.id, order.item_id, order.qty, order.size)

        if storage.delete_order(order.id) == 0:
            # supprimée entre-temps par une autre requête : sa quantité est déjà rendue
            raise OrderNotFound("order not found")

    logger.info("order deleted: id=%s", order_id)
    return OrderResult(order=None, stocks=storage.list_stocks())
