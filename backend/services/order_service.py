"""
Order Service — pickup-point order lifecycle.

Applies the business rules before touching the OrderStore:

    add       held order created (cost = declared cost + packaging cost)
    receive   held → received, whole batch or nothing
    refund    received → refunded, within REFUND_WINDOW of receipt
    return    order handed back to the courier and deleted; its id stays taken
    list      customer orders / paginated refunds

Read-then-write operations run inside one store transaction so that two
concurrent callers can not both pass the same rule check.
"""
import asyncio
import logging
from datetime import datetime
from functools import wraps
from typing import Callable, Optional

from domain.constants import MAX_STORED_INT
from domain.errors import (
    CannotReceiveError,
    CannotRefundError,
    CannotReturnError,
    DeadlineExceededError,
    OrderExistsError,
    OrderNotFoundError,
    PaginationError,
    ValidationError,
    WrongExpirationError,
)
from domain.order import Order, ensure_utc, utc_now
from domain.ports import OrderStore
from exceptions import ConcurrentUpdateError
from services import packaging_service
from services.order_metrics import OrderMetrics
from utils.validators import validate_cost, validate_positive_id, validate_weight

logger = logging.getLogger(__name__)


def first_n(orders: list[Order], n: int) -> list[Order]:
    """All orders when ``n <= 0``, otherwise the first ``n``."""
    if n <= 0:
        return orders
    return orders[:n]


def paginate(orders: list[Order], page: int, limit: int) -> list[Order]:
    """
    Zero-based page slice of ``orders``.

    ``limit <= 0`` returns everything. A page starting past the end of the
    set raises PaginationError; a page starting exactly at the end is empty.
    """
    if limit <= 0:
        return orders
    start = page * limit
    if page < 0 or start > len(orders):
        raise PaginationError(page, limit, len(orders))
    end = min(start + limit, len(orders))
    return orders[start:end]


def with_deadline(operation: str):
    """Run the wrapped coroutine under the service's per-call timeout."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            if self.timeout is None:
                return await func(self, *args, **kwargs)
            try:
                return await asyncio.wait_for(func(self, *args, **kwargs), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                logger.warning(f"{operation} exceeded its {self.timeout}s deadline")
                raise DeadlineExceededError(operation, self.timeout) from e
        return wrapper
    return decorator


class OrderService:
    """Lifecycle rules for pickup-point orders."""

    def __init__(
        self,
        store: OrderStore,
        clock: Callable[[], datetime] = utc_now,
        metrics: Optional[OrderMetrics] = None,
        timeout: Optional[float] = None,
    ):
        self.store = store
        self.clock = clock
        self.metrics = metrics
        self.timeout = timeout

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    # ── Mutations ───────────────────────────────────────────────────

    @with_deadline("add_order")
    async def add_order(
        self,
        order_id: int,
        customer_id: int,
        expiration_time: datetime,
        package_kind: str,
        weight,
        cost: int,
    ) -> Order:
        """Create a held order. Returns the stored order."""
        order_id = validate_positive_id(order_id, "order_id")
        customer_id = validate_positive_id(customer_id, "customer_id")
        weight = validate_weight(weight)
        cost = validate_cost(cost)

        expiration_time = ensure_utc(expiration_time)
        if expiration_time <= self._now():
            raise WrongExpirationError(expiration_time)

        policy = packaging_service.resolve(package_kind)
        policy.validate_weight(weight)
        if cost + policy.cost > MAX_STORED_INT:
            raise ValidationError("cost plus packaging is too large", field="cost", details={"cost": cost})

        order = Order(
            order_id=order_id,
            customer_id=customer_id,
            expiration_time=expiration_time,
            package_kind=policy.kind,
            weight=weight,
            cost=cost + policy.cost,
            package_cost=policy.cost,
        )

        async with self.store.transaction() as tx:
            try:
                await tx.get_order(order_id)
            except OrderNotFoundError:
                pass
            else:
                raise OrderExistsError(order_id)
            await tx.add_order(order)

        logger.info(
            f"Order {order_id} added for customer {customer_id} "
            f"({policy.kind.value}, cost {order.cost})"
        )
        if self.metrics:
            self.metrics.record_added()
        return order

    @with_deadline("return_order")
    async def return_order(self, order_id: int) -> Order:
        """Hand an order back to the courier. Returns the deleted order."""
        order_id = validate_positive_id(order_id, "order_id")

        now = self._now()
        try:
            async with self.store.transaction() as tx:
                order = await tx.get_order(order_id)
                if not order.is_returnable(now):
                    logger.warning(f"Order {order_id} is not eligible for courier return")
                    raise CannotReturnError(order_id)
                returned = await tx.return_order(order_id, returned_at=now)
        except ConcurrentUpdateError as e:
            logger.warning(f"Return of order {order_id} lost a concurrent update: {e}")
            raise CannotReturnError(order_id) from e

        logger.info(f"Order {order_id} returned to courier")
        if self.metrics:
            self.metrics.record_returned()
        return returned

    @with_deadline("receive_orders")
    async def receive_orders(self, order_ids: list[int]) -> list[Order]:
        """
        Hand a batch of orders to their customer.

        The owner is taken from the first id; every order in the batch must
        belong to that owner, be unexpired and not yet received. Nothing is
        marked received unless the whole batch qualifies.
        """
        order_ids = list(order_ids or [])
        if not order_ids:
            raise CannotReceiveError(order_ids, reason="no order ids given")
        order_ids = [validate_positive_id(order_id, "order_ids") for order_id in order_ids]
        if len(set(order_ids)) != len(order_ids):
            raise CannotReceiveError(order_ids, reason="duplicate order ids")

        now = self._now()
        received = []
        try:
            async with self.store.transaction() as tx:
                try:
                    owner_id = (await tx.get_order(order_ids[0])).customer_id
                except OrderNotFoundError:
                    raise CannotReceiveError(order_ids, reason=f"order {order_ids[0]} not found")

                for order_id in order_ids:
                    try:
                        order = await tx.get_order(order_id)
                    except OrderNotFoundError:
                        raise CannotReceiveError(order_ids, reason=f"order {order_id} not found")
                    if not order.can_be_received_by(owner_id, now):
                        logger.warning(f"Order {order_id} can not be received by customer {owner_id}")
                        raise CannotReceiveError(order_ids, reason=f"order {order_id} is not receivable")

                for order_id in order_ids:
                    received.append(await tx.receive_order(order_id, received_at=now))
        except ConcurrentUpdateError as e:
            logger.warning(f"Receipt of orders {order_ids} lost a concurrent update: {e}")
            raise CannotReceiveError(order_ids, reason="changed by a concurrent request") from e

        logger.info(f"Customer {owner_id} received orders {order_ids}")
        if self.metrics:
            self.metrics.record_received(len(received))
        return received

    @with_deadline("refund_order")
    async def refund_order(self, customer_id: int, order_id: int) -> Order:
        """Accept a refund for a received order within the refund window."""
        customer_id = validate_positive_id(customer_id, "customer_id")
        order_id = validate_positive_id(order_id, "order_id")

        try:
            async with self.store.transaction() as tx:
                order = await tx.get_order(order_id)
                if not order.can_be_refunded_by(customer_id, self._now()):
                    logger.warning(f"Order {order_id} can not be refunded by customer {customer_id}")
                    raise CannotRefundError(order_id, customer_id)
                refunded = order.mark_refunded()
                await tx.change_order(refunded)
        except ConcurrentUpdateError as e:
            logger.warning(f"Refund of order {order_id} lost a concurrent update: {e}")
            raise CannotRefundError(order_id, customer_id) from e

        logger.info(f"Order {order_id} refunded for customer {customer_id}")
        if self.metrics:
            self.metrics.record_refunded()
        return refunded

    # ── Listings ────────────────────────────────────────────────────

    @with_deadline("get_orders")
    async def get_orders(self, customer_id: int, n: int = 0) -> list[Order]:
        """Customer's orders by ascending id; the first ``n`` when ``n > 0``."""
        customer_id = validate_positive_id(customer_id, "customer_id")
        orders = await self.store.get_customer_orders(customer_id)
        return first_n(orders, n)

    @with_deadline("get_refunds")
    async def get_refunds(self, page: int = 0, limit: int = 0) -> list[Order]:
        """Refunded orders, paginated by zero-based ``page`` when ``limit > 0``."""
        refunds = await self.store.get_refunds()
        return paginate(refunds, page, limit)

