"""
Order lifecycle metrics.

Simple in-memory counters exposed at GET /metrics/orders.
"""
import time
from dataclasses import dataclass, field


@dataclass
class OrderMetrics:
    """In-memory counters for order lifecycle events."""

    orders_added_total: int = 0
    orders_received_total: int = 0
    orders_refunded_total: int = 0
    orders_returned_total: int = 0
    started_at: float = field(default_factory=time.monotonic)

    def record_added(self) -> None:
        self.orders_added_total += 1

    def record_received(self, count: int = 1) -> None:
        self.orders_received_total += count

    def record_refunded(self) -> None:
        self.orders_refunded_total += 1

    def record_returned(self) -> None:
        self.orders_returned_total += 1

    def to_dict(self) -> dict:
        return {
            "orders_added_total": self.orders_added_total,
            "orders_received_total": self.orders_received_total,
            "orders_refunded_total": self.orders_refunded_total,
            "orders_returned_total": self.orders_returned_total,
            "uptime_seconds": round(time.monotonic() - self.started_at, 1),
        }
