"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from deps import get_order_cache, get_order_store
from exceptions import CacheBackendError, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(store=Depends(get_order_store), cache=Depends(get_order_cache)):
    """Health check — verifies database and cache connectivity."""
    checks = {"database": True, "cache": True}
    errors = {}

    try:
        await store.ping()
    except StorageError as e:
        logger.error(f"Health check: database unreachable: {e}")
        checks["database"] = False
        errors["database"] = str(e)

    try:
        await cache.ping()
    except CacheBackendError as e:
        logger.error(f"Health check: cache unreachable: {e}")
        checks["cache"] = False
        errors["cache"] = str(e)

    if errors:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                **checks,
                "errors": errors,
            },
        )
    return {
        "status": "healthy",
        **checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
