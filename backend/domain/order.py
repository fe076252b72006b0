"""
Domain model for the pickup-point Order.

An order is held at the pickup point until the customer collects it,
may be refunded within REFUND_WINDOW after collection, and may be handed
back to the courier once the return rule allows it.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal

from domain.constants import REFUND_WINDOW
from domain.enums import PackageKind


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalise a timestamp to an aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Order:
    """Order aggregate. Instances are immutable; transitions return a new Order."""

    order_id: int
    customer_id: int
    expiration_time: datetime
    package_kind: PackageKind
    weight: Decimal
    cost: int
    package_cost: int
    received_time: datetime | None = None
    received_by_customer: bool = False
    refunded: bool = False

    def is_expired(self, now: datetime) -> bool:
        return self.expiration_time <= now

    def can_be_received_by(self, customer_id: int, now: datetime) -> bool:
        """Order is still held, unexpired and belongs to ``customer_id``."""
        return (
            self.customer_id == customer_id
            and not self.received_by_customer
            and self.expiration_time > now
        )

    def can_be_refunded_by(self, customer_id: int, now: datetime) -> bool:
        if self.customer_id != customer_id or not self.received_by_customer or self.refunded:
            return False
        if self.received_time is None:
            return False
        return now <= self.received_time + REFUND_WINDOW

    def is_returnable(self, now: datetime) -> bool:
        """
        Courier return rule.

        Kept exactly as the pickup point has always applied it: the order
        must already be received by the customer AND past its expiration
        time. This is very likely inverted (a courier normally reclaims an
        uncollected, expired parcel) and is pending product clarification.
        """
        return self.received_by_customer and self.is_expired(now)

    def mark_received(self, received_at: datetime) -> Order:
        return replace(self, received_time=ensure_utc(received_at), received_by_customer=True)

    def mark_refunded(self) -> Order:
        if not self.received_by_customer:
            raise ValueError("Can only refund received orders")
        return replace(self, refunded=True)
