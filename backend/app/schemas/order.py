from datetime import datetime

from backend.app.schemas.base import CamelModel


class OrderCreate(CamelModel):
    # obligatoires côté métier (customerName, phone, itemId, size) :
    # vérifiés par le service pour renvoyer "missing fields"
    customer_name: str | None = None
    phone: str | None = None
    address: str | None = None
    payment: str | None = None
    category: str | None = None
    item_id: str | None = None
    item_name: str | None = None
    size: str | None = None
    qty: int | None = None
    notes: str | None = None
    price: float | None = None
    status: str | None = None


class OrderUpdate(CamelModel):
    """Patch partiel : seuls les champs présents (et non null) sont appliqués."""

    customer_name: str | None = None
    phone: str | None = None
    address: str | None = None
    payment: str | None = None
    category: str | None = None
    item_id: str | None = None
    item_name: str | None = None
    size: str | None = None
    qty: int | None = None
    notes: str | None = None
    price: float | None = None
    status: str | None = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class OrderRead(CamelModel):
    id: str
    customer_name: str
    phone: str
    address: str = ""
    payment: str = "cash"
    category: str | None = None
    item_id: str | None = None
    item_name: str = ""
    size: str
    qty: int
    notes: str = ""
    price: float = 0
    status: str = "pending"
    created_at: datetime | None = None
    updated_at: datetime | None = None
