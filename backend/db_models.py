"""
SQLAlchemy ORM models for the Pickup Point Orders service.

Tables:
    orders          — one row per parcel held, collected or refunded at the pickup point
    returned_orders — ids of orders handed back to the courier; never reused
"""
from sqlalchemy import (
    Column, BigInteger, Boolean, DateTime, Numeric, String, Index,
)

from database import Base
from domain.enums import PackageKind
from domain.order import Order, ensure_utc


class OrderRecord(Base):
    """Persisted state of a single order."""
    __tablename__ = "orders"

    order_id = Column(BigInteger, primary_key=True, autoincrement=False)
    customer_id = Column(BigInteger, nullable=False)
    expiration_time = Column(DateTime(timezone=True), nullable=False)
    received_time = Column(DateTime(timezone=True), nullable=True)  # null until collected
    received_by_customer = Column(Boolean, nullable=False, default=False)
    refunded = Column(Boolean, nullable=False, default=False)
    package_kind = Column(String(10), nullable=False)  # "bag" | "box" | "wrap"
    weight = Column(Numeric(10, 3), nullable=False)
    cost = Column(BigInteger, nullable=False)
    package_cost = Column(BigInteger, nullable=False)

    __table_args__ = (
        # Customer listing
        Index("ix_orders_customer_id", "customer_id"),
        # Refund listing
        Index("ix_orders_refunded", "refunded"),
    )

    @classmethod
    def from_domain(cls, order: Order) -> "OrderRecord":
        return cls(order_id=order.order_id, **cls.columns_from_domain(order))

    @staticmethod
    def columns_from_domain(order: Order) -> dict:
        """Every column except the primary key, ready for INSERT/UPDATE."""
        return {
            "customer_id": order.customer_id,
            "expiration_time": ensure_utc(order.expiration_time),
            "received_time": ensure_utc(order.received_time),
            "received_by_customer": order.received_by_customer,
            "refunded": order.refunded,
            "package_kind": PackageKind(order.package_kind).value,
            "weight": order.weight,
            "cost": order.cost,
            "package_cost": order.package_cost,
        }

    def to_domain(self) -> Order:
        # SQLite drops tzinfo; every stored timestamp is UTC
        return Order(
            order_id=self.order_id,
            customer_id=self.customer_id,
            expiration_time=ensure_utc(self.expiration_time),
            received_time=ensure_utc(self.received_time),
            received_by_customer=bool(self.received_by_customer),
            refunded=bool(self.refunded),
            package_kind=PackageKind(self.package_kind),
            weight=self.weight,
            cost=self.cost,
            package_cost=self.package_cost,
        )


class ReturnedOrderRecord(Base):
    """Tombstone left by a courier return so the order id stays taken."""
    __tablename__ = "returned_orders"

    order_id = Column(BigInteger, primary_key=True, autoincrement=False)
    returned_at = Column(DateTime(timezone=True), nullable=False)
