from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.router import router as v1_router
from backend.app.core.config import LOG_LEVEL, SEED_CATEGORIES, STORAGE_BACKEND
from backend.services.errors import ServiceError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from backend.app.db.seed import run_seed

    if SEED_CATEGORIES:
        run_seed()
    logger.info("orders api ready (storage=%s)", STORAGE_BACKEND)
    yield


app = FastAPI(title="Orders API", version="0.1.0", lifespan=lifespan)
app.include_router(health_router, prefix="/api", tags=["health"])
app.include_router(v1_router, prefix="/api")


# ---------- Errors -> {"error": ...} ----------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "invalid payload", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "server error"})
