from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    String,
    Integer,
    Float,
    DateTime,
    Text,
    JSON,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base
from backend.app.db.models.core_types import (
    DEFAULT_ORDER_STATUS,
    DEFAULT_PAYMENT,
    new_id,
    utcnow,
)


# ---------- CATALOG ----------
class Category(Base):
    __tablename__ = "categories"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)  # "hoodie"
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sizes: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)  # ["M", "L", "XL"]

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


# ---------- INVENTORY ----------
class Stock(Base):
    __tablename__ = "stocks"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    category: Mapped[str] = mapped_column(String(128), nullable=False, index=True)  # slug de catégorie
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # { "M": 4, "L": 2 } : quantité DISPONIBLE par taille, jamais < 0
    sizes: Mapped[dict[str, int]] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (Index("ix_stocks_created", "created_at"),)


# ---------- SALES ----------
class Order(Base):
    __tablename__ = "orders"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    address: Mapped[str] = mapped_column(Text, default="", nullable=False)
    payment: Mapped[str] = mapped_column(String(32), default=DEFAULT_PAYMENT, nullable=False)

    category: Mapped[str | None] = mapped_column(String(128))
    # pas de FK : supprimer un stock laisse ses commandes en place
    item_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    size: Mapped[str] = mapped_column(String(32), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    price: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(64), default=DEFAULT_ORDER_STATUS, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_order_qty_pos"),
        Index("ix_orders_created", "created_at"),
    )
