"""
Pytest configuration and shared fixtures for Pickup Point Orders tests.

Provides an in-memory SQLite store, a controllable clock, the order
services wired together, and an httpx client over the FastAPI app.
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from database import init_db
from services.order_cache import MemoryOrderCache
from services.order_facade import OrderFacade
from services.order_metrics import OrderMetrics
from services.order_service import OrderService
from services.order_store import SqlOrderStore

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeTime:
    """Monotonic time source for cache TTL tests."""

    def __init__(self, value: float = 1000.0):
        self.value = value

    def __call__(self) -> float:
        return self.value


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with the orders table created.

    Uses StaticPool so every session shares the one in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine) -> SqlOrderStore:
    return SqlOrderStore(engine)


# ── Service Fixtures ─────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> OrderMetrics:
    return OrderMetrics()


@pytest.fixture
def service(store, clock, metrics) -> OrderService:
    return OrderService(store, clock=clock, metrics=metrics)


@pytest.fixture
def cache_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def cache(cache_time) -> MemoryOrderCache:
    return MemoryOrderCache(ttl_seconds=60, time_func=cache_time)


@pytest.fixture
def facade(service, cache) -> OrderFacade:
    return OrderFacade(service, cache)


@pytest.fixture
def add_held(service):
    """Factory creating a held order that expires a day from NOW."""
    async def _add(order_id: int, customer_id: int = 1, package_kind: str = "box",
                   weight="5", cost: int = 100, expires_in: timedelta = timedelta(days=1)):
        return await service.add_order(
            order_id=order_id,
            customer_id=customer_id,
            expiration_time=service.clock() + expires_in,
            package_kind=package_kind,
            weight=Decimal(weight),
            cost=cost,
        )
    return _add


# ── HTTP Client ──────────────────────────────────────────────────────


@pytest.fixture
async def client(store, cache, clock) -> AsyncGenerator[AsyncClient, None]:
    """httpx client over the app, wired to the test store, cache and clock."""
    from deps import configure_services
    from main import app

    configure_services(app, store=store, cache=cache, clock=clock)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
