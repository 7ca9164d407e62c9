"""FastAPI application: entry point for the car-hire booking service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from carhire.deps import database, settings
from carhire.domain.errors import CarHireError, PersistenceError
from carhire.repos.memory import seed_demo_data
from carhire.routes import bookings as bookings_router
from carhire.routes import clients as clients_router
from carhire.routes import vehicles as vehicles_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    database.connect()
    if settings.SEED_DEMO_DATA:
        seed_demo_data(database)
    yield
    database.disconnect()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ── Error responses: always {success: false, message} ─────────────────


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("storage failure on %s %s: %s", request.method, request.url.path, exc.message)
    return _failure(500, "Something went wrong on our side. Please try again.")


@app.exception_handler(CarHireError)
async def carhire_error_handler(request: Request, exc: CarHireError) -> JSONResponse:
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"] if part != "body")
    return _failure(400, f"{field}: {first['msg']}" if field else first["msg"])


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return _failure(exc.status_code, str(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _failure(500, "Something went wrong on our side. Please try again.")


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/")
def read_root() -> dict:
    """Health check; does not touch any collection."""
    return {
        "message": settings.PROJECT_NAME,
        "status": "running",
        "version": settings.VERSION,
        "database": "connected" if database.is_connected else "disconnected",
    }


app.include_router(clients_router.router, prefix="/api/clients", tags=["clients"])
app.include_router(vehicles_router.router, prefix="/api/vehicles", tags=["vehicles"])
app.include_router(bookings_router.router, prefix="/api/bookings", tags=["bookings"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("carhire.main:app", host="0.0.0.0", port=8000, reload=True)
