"""
Order Facade — read-through caching around OrderService.

Routes call the facade, never the service directly. Listings are served
from the cache when possible; every successful mutation drops the affected
customer's cached listing before returning.

A failing cache never changes the outcome of a request: read and populate
errors count as a miss, invalidation errors are logged.
"""
import logging

from domain.constants import customer_orders_key, refunds_page_key
from domain.order import Order
from domain.ports import OrderCache
from exceptions import CacheBackendError
from services.order_service import OrderService, first_n

logger = logging.getLogger(__name__)


class OrderFacade:
    def __init__(self, service: OrderService, cache: OrderCache):
        self.service = service
        self.cache = cache

    # ── Cache helpers ───────────────────────────────────────────────

    async def _cached(self, key: str) -> list[Order] | None:
        try:
            return await self.cache.get(key)
        except CacheBackendError as e:
            logger.warning(f"Cache read failed, falling back to store: {e}")
            return None

    async def _populate(self, key: str, orders: list[Order]) -> None:
        if not orders:
            return
        try:
            await self.cache.set(key, orders)
        except CacheBackendError as e:
            logger.warning(f"Cache populate failed: {e}")

    async def _invalidate(self, customer_id: int) -> None:
        key = customer_orders_key(customer_id)
        try:
            await self.cache.delete(key)
        except CacheBackendError as e:
            logger.error(f"Cache invalidation of {key} failed: {e}")

    # ── Mutations ───────────────────────────────────────────────────

    async def add_order(self, order_id, customer_id, expiration_time, package_kind, weight, cost) -> Order:
        order = await self.service.add_order(
            order_id, customer_id, expiration_time, package_kind, weight, cost
        )
        await self._invalidate(order.customer_id)
        return order

    async def return_order(self, order_id: int) -> Order:
        order = await self.service.return_order(order_id)
        await self._invalidate(order.customer_id)
        return order

    async def receive_orders(self, order_ids: list[int]) -> list[Order]:
        orders = await self.service.receive_orders(order_ids)
        # One owner per batch
        await self._invalidate(orders[0].customer_id)
        return orders

    async def refund_order(self, customer_id: int, order_id: int) -> Order:
        order = await self.service.refund_order(customer_id, order_id)
        await self._invalidate(order.customer_id)
        return order

    # ── Listings ────────────────────────────────────────────────────

    async def get_orders(self, customer_id: int, n: int = 0) -> list[Order]:
        """Customer's orders; the cache holds the full list, ``n`` is applied after."""
        key = customer_orders_key(customer_id)
        orders = await self._cached(key)
        if orders is None:
            orders = await self.service.get_orders(customer_id)
            await self._populate(key, orders)
        else:
            logger.debug(f"Cache hit: {key}")
        return first_n(orders, n)

    async def get_refunds(self, page: int = 0, limit: int = 0) -> list[Order]:
        key = refunds_page_key(page, limit)
        refunds = await self._cached(key)
        if refunds is None:
            refunds = await self.service.get_refunds(page, limit)
            await self._populate(key, refunds)
        else:
            logger.debug(f"Cache hit: {key}")
        return refunds
