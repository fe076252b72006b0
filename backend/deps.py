"""
Shared FastAPI dependencies.

The lifespan in main.py builds the store, cache and services once and
attaches them to ``app.state`` via configure_services(); routers pull them
back out through the dependencies below. Tests call configure_services()
with their own store, cache and clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, TypedDict

from fastapi import FastAPI, Query, Request

from domain.order import utc_now
from services.order_facade import OrderFacade
from services.order_metrics import OrderMetrics
from services.order_service import OrderService


class Paging(TypedDict):
    page: int
    limit: int


def configure_services(
    app: FastAPI,
    *,
    store,
    cache,
    clock: Optional[Callable[[], datetime]] = None,
    timeout: Optional[float] = None,
) -> OrderFacade:
    """Wire store → service → facade and publish them on ``app.state``."""
    metrics = OrderMetrics()
    service = OrderService(store, clock=clock or utc_now, metrics=metrics, timeout=timeout)
    facade = OrderFacade(service, cache)

    app.state.order_store = store
    app.state.order_cache = cache
    app.state.order_metrics = metrics
    app.state.order_service = service
    app.state.order_facade = facade
    return facade


def get_order_facade(request: Request) -> OrderFacade:
    return request.app.state.order_facade


def get_order_metrics(request: Request) -> OrderMetrics:
    return request.app.state.order_metrics


def get_order_store(request: Request):
    return request.app.state.order_store


def get_order_cache(request: Request):
    return request.app.state.order_cache


def paging_params(
    page: int = Query(0, description="Zero-based page number"),
    limit: int = Query(0, ge=0, le=1000, description="Page size; 0 returns every refund"),
) -> Paging:
    return {"page": page, "limit": limit}
