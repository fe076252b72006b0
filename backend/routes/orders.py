"""
Order endpoints — courier intake, customer pickup, refunds and courier returns.
"""

import logging
from fastapi import APIRouter, Depends, Query, status

from deps import Paging, get_order_facade, get_order_metrics, paging_params
from domain.responses import page_meta, success_response
from models import (
    AddOrderRequest,
    OrderMetricsResponse,
    ReceiveOrdersRequest,
    RefundRequest,
    serialize_order,
    serialize_orders,
)
from services.order_facade import OrderFacade
from services.order_metrics import OrderMetrics
from utils.validators import validated_customer_id, validated_order_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["orders"])


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def add_order(
    request: AddOrderRequest,
    facade: OrderFacade = Depends(get_order_facade),
):
    """Accept a parcel from the courier."""
    order = await facade.add_order(
        order_id=request.order_id,
        customer_id=request.customer_id,
        expiration_time=request.expiration_time,
        package_kind=request.package_kind,
        weight=request.weight,
        cost=request.cost,
    )
    return success_response(serialize_order(order))


@router.delete("/orders/{order_id}")
async def return_order(
    order_id: int = Depends(validated_order_id),
    facade: OrderFacade = Depends(get_order_facade),
):
    """Hand an order back to the courier and delete it."""
    order = await facade.return_order(order_id)
    return success_response(serialize_order(order))


@router.post("/orders/receive")
async def receive_orders(
    request: ReceiveOrdersRequest,
    facade: OrderFacade = Depends(get_order_facade),
):
    """Hand every order in the batch to its customer, or none of them."""
    orders = await facade.receive_orders(request.order_ids)
    return success_response(serialize_orders(orders))


@router.post("/orders/{order_id}/refund")
async def refund_order(
    request: RefundRequest,
    order_id: int = Depends(validated_order_id),
    facade: OrderFacade = Depends(get_order_facade),
):
    order = await facade.refund_order(request.customer_id, order_id)
    return success_response(serialize_order(order))


@router.get("/customers/{customer_id}/orders")
async def get_customer_orders(
    customer_id: int = Depends(validated_customer_id),
    n: int = Query(0, description="Return only the first n orders; 0 returns all"),
    facade: OrderFacade = Depends(get_order_facade),
):
    orders = await facade.get_orders(customer_id, n)
    return success_response(serialize_orders(orders), meta={"count": len(orders)})


@router.get("/refunds")
async def get_refunds(
    paging: Paging = Depends(paging_params),
    facade: OrderFacade = Depends(get_order_facade),
):
    """Refunded orders by ascending id, one page at a time."""
    refunds = await facade.get_refunds(paging["page"], paging["limit"])
    return success_response(
        serialize_orders(refunds),
        meta=page_meta(paging["page"], paging["limit"], len(refunds)),
    )


@router.get("/metrics/orders", response_model=OrderMetricsResponse, tags=["metrics"])
async def get_order_metrics_counters(metrics: OrderMetrics = Depends(get_order_metrics)):
    return metrics.to_dict()
