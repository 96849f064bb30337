from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_storage
from backend.app.schemas.category import CategoryCreate, CategoryRead
from backend.services import catalog
from backend.services.storage import Storage

router = APIRouter(prefix="/categories")


@router.get("")
def list_categories(storage: Storage = Depends(get_storage)):
    return [CategoryRead.model_validate(c).to_client() for c in storage.list_categories()]


@router.post("")
def create_category(payload: CategoryCreate, storage: Storage = Depends(get_storage)):
    category = catalog.create_category(storage, payload)
    return {"ok": True, "category": CategoryRead.model_validate(category).to_client()}


@router.delete("/{slug}")
def delete_category(slug: str, storage: Storage = Depends(get_storage)):
    """Cascade : catégorie -> stocks de la catégorie -> commandes de ces stocks."""
    catalog.delete_category(storage, slug)
    return {"ok": True, "message": f"category {slug} deleted with its stocks and orders"}
