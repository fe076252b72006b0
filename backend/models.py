"""
Pydantic models for request/response validation.

Field names are camelCase on the wire and snake_case in Python; every model
accepts either form.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from domain.enums import PackageKind
from domain.order import Order


class OrderBase(BaseModel):
    """Shared base — allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Requests ────────────────────────────────────────────────────────

# Range checks on ids, weight and cost are business rules and are raised by
# OrderService as 400s, so the request models only check types.

class AddOrderRequest(OrderBase):
    """Accept a parcel from the courier."""
    order_id: int = Field(..., alias="orderId")
    customer_id: int = Field(..., alias="customerId")
    expiration_time: datetime = Field(
        ...,
        alias="expirationTime",
        description="Last moment the parcel may be collected (ISO 8601; naive values are UTC)",
    )
    package_kind: str = Field(..., alias="packageKind", description="bag | box | wrap")
    weight: Decimal = Field(..., description="Weight in kilograms")
    cost: int = Field(..., description="Declared order cost, packaging excluded")


class ReceiveOrdersRequest(OrderBase):
    """Hand a batch of orders to one customer."""
    order_ids: List[int] = Field(..., alias="orderIds")


class RefundRequest(OrderBase):
    """Accept a refund from the customer who received the order."""
    customer_id: int = Field(..., alias="customerId")


# ── Responses ───────────────────────────────────────────────────────

class OrderResponse(OrderBase):
    """Wire and cache representation of an Order."""
    order_id: int = Field(..., alias="orderId")
    customer_id: int = Field(..., alias="customerId")
    expiration_time: datetime = Field(..., alias="expirationTime")
    received_time: Optional[datetime] = Field(default=None, alias="receivedTime")
    received_by_customer: bool = Field(False, alias="receivedByCustomer")
    refunded: bool = False
    package_kind: PackageKind = Field(..., alias="packageKind")
    weight: Decimal
    cost: int
    package_cost: int = Field(..., alias="packageCost")

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            customer_id=order.customer_id,
            expiration_time=order.expiration_time,
            received_time=order.received_time,
            received_by_customer=order.received_by_customer,
            refunded=order.refunded,
            package_kind=order.package_kind,
            weight=order.weight,
            cost=order.cost,
            package_cost=order.package_cost,
        )

    def to_domain(self) -> Order:
        return Order(
            order_id=self.order_id,
            customer_id=self.customer_id,
            expiration_time=self.expiration_time,
            package_kind=self.package_kind,
            weight=self.weight,
            cost=self.cost,
            package_cost=self.package_cost,
            received_time=self.received_time,
            received_by_customer=self.received_by_customer,
            refunded=self.refunded,
        )


def serialize_orders(orders: List[Order]) -> List[dict]:
    """JSON-ready camelCase dicts for a list of orders."""
    return [OrderResponse.from_domain(o).model_dump(by_alias=True, mode="json") for o in orders]


def serialize_order(order: Order) -> dict:
    return OrderResponse.from_domain(order).model_dump(by_alias=True, mode="json")


class OrderMetricsResponse(BaseModel):
    """Order lifecycle counters."""
    orders_added_total: int
    orders_received_total: int
    orders_refunded_total: int
    orders_returned_total: int
    uptime_seconds: float
