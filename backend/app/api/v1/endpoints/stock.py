from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_storage
from backend.app.schemas.stock import StockCreate, StockRead, StockUpdate
from backend.services import catalog
from backend.services.storage import Storage

router = APIRouter(prefix="/stocks")


@router.get("")
def list_stocks(storage: Storage = Depends(get_storage)):
    """
    Stocks, plus récents d'abord.
    - sizes = quantité DISPONIBLE par taille (déjà déduite des commandes)
    """
    return [StockRead.model_validate(s).to_client() for s in storage.list_stocks()]


@router.post("")
def create_stock(payload: StockCreate, storage: Storage = Depends(get_storage)):
    stock = catalog.create_stock(storage, payload)
    return {"ok": True, "stock": StockRead.model_validate(stock).to_client()}


@router.put("/{stock_id}")
def update_stock(stock_id: str, payload: StockUpdate, storage: Storage = Depends(get_storage)):
    stock = catalog.update_stock(storage, stock_id, payload)
    return {"ok": True, "stock": StockRead.model_validate(stock).to_client()}


@router.delete("/{stock_id}")
def delete_stock(stock_id: str, storage: Storage = Depends(get_storage)):
    catalog.delete_stock(storage, stock_id)
    return {"ok": True}
