"""
Order Store — SQLAlchemy persistence for pickup-point orders.

Every read and write of the ``orders`` table goes through SqlOrderStore.
Read-then-write sequences run inside ``transaction()``, which opens a
REPEATABLE READ transaction and yields a store bound to it; operations on
the bound store join that transaction instead of opening their own.

SQLite has no REPEATABLE READ level and allows a single writer, so on
SQLite every store call is serialised behind one asyncio.Lock.

Errors:
    OrderNotFoundError / OrderExistsError — row-level outcomes
    ConcurrentUpdateError — a concurrent transaction changed the same row
    StorageError — anything else raised by the database layer
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy import select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from db_models import OrderRecord, ReturnedOrderRecord
from domain.errors import OrderExistsError, OrderNotFoundError
from domain.order import Order, ensure_utc, utc_now
from exceptions import ConcurrentUpdateError, StorageError

logger = logging.getLogger(__name__)

# SQLSTATE raised by PostgreSQL when a repeatable-read writer loses a race
SERIALIZATION_FAILURE = "40001"


def _is_serialization_failure(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == SERIALIZATION_FAILURE


def _wrap(operation: str, exc: SQLAlchemyError) -> StorageError:
    if _is_serialization_failure(exc):
        return ConcurrentUpdateError(f"storage.{operation}: order was changed by a concurrent transaction")
    logger.error(f"storage.{operation} failed: {type(exc).__name__}: {exc}")
    return StorageError(f"storage.{operation} failed: {exc}")


class SqlOrderStore:
    """OrderStore backed by an AsyncEngine."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        session: AsyncSession | None = None,
        lock: asyncio.Lock | None = None,
    ):
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        self._session = session

        is_sqlite = engine.dialect.name == "sqlite"
        self.isolation_level = None if is_sqlite else "REPEATABLE READ"
        if lock is None and is_sqlite and session is None:
            lock = asyncio.Lock()
        self._lock = lock

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    # ── Transactions ────────────────────────────────────────────────

    @asynccontextmanager
    async def _serialized(self) -> AsyncIterator[None]:
        if self._lock is None:
            yield
        else:
            async with self._lock:
                yield

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqlOrderStore"]:
        """
        Scoped repeatable-read transaction.

        Commits when the block exits normally, rolls back on any exception
        and always returns the connection to the pool. Nested calls on a
        bound store reuse the open transaction.
        """
        if self._session is not None:
            yield self
            return

        async with self._serialized():
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        if self.isolation_level:
                            await session.connection(
                                execution_options={"isolation_level": self.isolation_level}
                            )
                        yield SqlOrderStore(self._engine, session=session)
            except SQLAlchemyError as e:
                raise _wrap("transaction", e) from e

    @asynccontextmanager
    async def _use_session(self, operation: str) -> AsyncIterator[AsyncSession]:
        if self._session is not None:
            try:
                yield self._session
            except SQLAlchemyError as e:
                raise _wrap(operation, e) from e
            return

        async with self._serialized():
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        yield session
            except SQLAlchemyError as e:
                raise _wrap(operation, e) from e

    # ── Reads ───────────────────────────────────────────────────────

    async def get_order(self, order_id: int) -> Order:
        async with self._use_session("get_order") as session:
            record = await session.get(OrderRecord, order_id)
            if record is None:
                raise OrderNotFoundError(order_id)
            return record.to_domain()

    async def get_customer_orders(self, customer_id: int) -> list[Order]:
        """All orders of a customer, any state, by ascending order_id."""
        async with self._use_session("get_customer_orders") as session:
            result = await session.execute(
                select(OrderRecord)
                .where(OrderRecord.customer_id == customer_id)
                .order_by(OrderRecord.order_id)
            )
            return [record.to_domain() for record in result.scalars()]

    async def get_refunds(self) -> list[Order]:
        """All refunded orders by ascending order_id."""
        async with self._use_session("get_refunds") as session:
            result = await session.execute(
                select(OrderRecord)
                .where(OrderRecord.refunded.is_(True))
                .order_by(OrderRecord.order_id)
            )
            return [record.to_domain() for record in result.scalars()]

    async def ping(self) -> None:
        async with self._use_session("ping") as session:
            await session.execute(text("SELECT 1"))

    # ── Writes ──────────────────────────────────────────────────────

    async def add_order(self, order: Order) -> None:
        """Insert a new order; ids of returned orders count as taken."""
        async with self._use_session("add_order") as session:
            if await session.get(ReturnedOrderRecord, order.order_id) is not None:
                raise OrderExistsError(order.order_id)
            session.add(OrderRecord.from_domain(order))
            try:
                await session.flush()
            except IntegrityError as e:
                raise OrderExistsError(order.order_id) from e

    async def change_order(self, order: Order) -> None:
        """Full-row update by order_id, inside a repeatable-read transaction."""
        async with self.transaction() as tx:
            async with tx._use_session("change_order") as session:
                record = await session.get(OrderRecord, order.order_id)
                if record is None:
                    raise OrderNotFoundError(order.order_id)
                for column, value in OrderRecord.columns_from_domain(order).items():
                    setattr(record, column, value)
                await session.flush()

    async def receive_order(self, order_id: int, received_at: datetime | None = None) -> Order:
        """Mark an order collected and return the updated row."""
        async with self._use_session("receive_order") as session:
            record = await session.get(OrderRecord, order_id)
            if record is None:
                raise OrderNotFoundError(order_id)
            record.received_time = ensure_utc(received_at or utc_now())
            record.received_by_customer = True
            await session.flush()
            return record.to_domain()

    async def return_order(self, order_id: int, returned_at: datetime | None = None) -> Order:
        """Delete an order, keep its id as a tombstone and return the order as it was."""
        async with self._use_session("return_order") as session:
            record = await session.get(OrderRecord, order_id)
            if record is None:
                raise OrderNotFoundError(order_id)
            order = record.to_domain()
            await session.delete(record)
            session.add(ReturnedOrderRecord(
                order_id=order_id,
                returned_at=ensure_utc(returned_at or utc_now()),
            ))
            await session.flush()
            return order
