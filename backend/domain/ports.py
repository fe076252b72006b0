"""
Capability interfaces the order services depend on.

OrderService only talks to an OrderStore; OrderFacade only talks to an
OrderCache. Concrete implementations live in services/order_store.py and
services/order_cache.py.
"""
from __future__ import annotations

from datetime import datetime
from typing import AsyncContextManager, Protocol

from domain.order import Order


class OrderStore(Protocol):
    """Durable keyed storage for orders."""

    def transaction(self) -> AsyncContextManager["OrderStore"]:
        """Open a repeatable-read transaction and yield a store bound to it."""
        ...

    async def add_order(self, order: Order) -> None: ...

    async def get_order(self, order_id: int) -> Order: ...

    async def get_customer_orders(self, customer_id: int) -> list[Order]: ...

    async def get_refunds(self) -> list[Order]: ...

    async def change_order(self, order: Order) -> None: ...

    async def receive_order(self, order_id: int, received_at: datetime | None = None) -> Order: ...

    async def return_order(self, order_id: int, returned_at: datetime | None = None) -> Order: ...


class OrderCache(Protocol):
    """Time-bounded cache of order listings."""

    async def get(self, key: str) -> list[Order] | None: ...

    async def set(self, key: str, orders: list[Order]) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...
