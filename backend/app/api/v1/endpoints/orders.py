from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_storage
from backend.app.schemas.order import OrderCreate, OrderRead, OrderUpdate
from backend.app.schemas.stock import StockRead
from backend.services import orders as order_service
from backend.services.orders import OrderResult
from backend.services.storage import Storage

router = APIRouter(prefix="/orders")


def _result_to_client(result: OrderResult) -> dict:
    body = {"ok": True}
    if result.order is not None:
        body["order"] = OrderRead.model_validate(result.order).to_client()
    body["stocks"] = [StockRead.model_validate(s).to_client() for s in result.stocks]
    return body


@router.get("")
def list_orders(storage: Storage = Depends(get_storage)):
    return [OrderRead.model_validate(o).to_client() for o in storage.list_orders()]


@router.post("")
def create_order(payload: OrderCreate, storage: Storage = Depends(get_storage)):
    return _result_to_client(order_service.create_order(storage, payload))


@router.put("/{order_id}")
def update_order(order_id: str, payload: OrderUpdate, storage: Storage = Depends(get_storage)):
    return _result_to_client(order_service.update_order(storage, order_id, payload))


@router.delete("/{order_id}")
def delete_order(order_id: str, storage: Storage = Depends(get_storage)):
    return _result_to_client(order_service.delete_order(storage, order_id))
