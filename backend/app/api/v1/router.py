from fastapi import APIRouter

from backend.app.api.v1.endpoints.categories import router as categories_router
from backend.app.api.v1.endpoints.stock import router as stock_router
from backend.app.api.v1.endpoints.orders import router as orders_router

router = APIRouter()
router.include_router(categories_router, tags=["categories"])
router.include_router(stock_router, tags=["stocks"])
router.include_router(orders_router, tags=["orders"])
