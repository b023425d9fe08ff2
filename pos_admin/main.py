"""
Main FastAPI application - POS Admin API.
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pos_admin.api.routers import (
    auth,
    cash,
    dashboard,
    inventory,
    outlets,
    pos,
    pricing,
    products,
    receipts,
    reports,
    settings,
    users,
)
from pos_admin.core.config import get_settings
from pos_admin.core.exceptions import PosAdminError
from pos_admin.core.logging_config import RequestContext, configure_logging, get_logger
from pos_admin.infrastructure.database import init_db

logger = get_logger("http")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan - startup and shutdown events."""
    config = get_settings()
    configure_logging(config.log_level, config.log_format)
    init_db()
    yield


app = FastAPI(
    title="POS Admin API",
    description="""
## Point-of-sale back office

### Features:
- **Register**: product catalog, cart pricing, checkout and receipts
- **Inventory**: stock levels, valuation and stock in/out
- **Cash flow**: daily cash position, incomes and expenses
- **Reports**: sales summary by date range, CSV export
- **Outlets & users**: branches, staff roles and access
    """,
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(pos.router)
app.include_router(receipts.router)
app.include_router(products.router)
app.include_router(inventory.router)
app.include_router(outlets.router)
app.include_router(settings.router)
app.include_router(users.router)
app.include_router(cash.router)
app.include_router(reports.router)
app.include_router(dashboard.router)
app.include_router(pricing.router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag each request with an id and log its outcome."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    RequestContext.set(request_id=request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        extra = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        user_id = getattr(request.state, "user_id", None)
        if user_id is not None:
            extra["user_id"] = user_id
        logger.info("request_completed", extra=extra)
        response.headers["X-Request-ID"] = request_id
        return response
    except Exception:
        logger.exception("request_failed", extra={"method": request.method, "path": request.url.path})
        raise
    finally:
        RequestContext.clear()


@app.get("/")
def root():
    return {
        "name": "POS Admin API",
        "version": "0.1.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "database": "connected"}


@app.exception_handler(PosAdminError)
async def pos_admin_error_handler(request: Request, exc: PosAdminError):
    """Map domain errors to their HTTP status."""
    logger.info("request_rejected", extra={"code": exc.code, "status": exc.status_code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
