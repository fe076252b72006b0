"""
Pickup Point Orders — FastAPI Application

Courier intake, customer pickup, refunds and courier returns for a parcel
pickup point, with a read-through listing cache.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import engine, init_db
from deps import configure_services
from domain.errors import DomainError
from domain.responses import error_response
from exceptions import StorageError
from routes import health, orders
from services.order_cache import build_cache
from services.order_store import SqlOrderStore

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create DB tables, connect the cache. Shutdown: release both."""
    # Ensure data/ directory exists for SQLite
    if settings.database_url.startswith("sqlite"):
        os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    await init_db()
    logger.info("Database initialized")

    cache = build_cache(settings)
    configure_services(
        app,
        store=SqlOrderStore(engine),
        cache=cache,
        timeout=settings.request_timeout,
    )
    logger.info(f"Order services ready (environment={settings.environment})")

    yield  # app runs here

    await cache.close()
    await engine.dispose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Pickup Point Orders API",
    description="Order intake, pickup, refunds and courier returns for a pickup point",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(orders.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never returns raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("internal_server_error", "Internal server error"),
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request, exc: StorageError):
    """Database unavailable or failing: 503 so clients may retry."""
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content=error_response("storage_unavailable", "Order storage is unavailable"),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request, exc: RequestValidationError):
    """Malformed request body or parameters."""
    return JSONResponse(
        status_code=422,
        content=error_response(
            "request_validation",
            "Request body or parameters are malformed",
            {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for API consumers.

    Keeps the original HTTP status code, but wraps the payload.
    """
    if isinstance(exc, DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
        )

    # Regular HTTPException
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            "http_error",
            message,
            detail if not isinstance(detail, str) else None,
        ),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
