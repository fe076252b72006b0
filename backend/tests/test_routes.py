"""
Tests for API route endpoints.

Tests: order intake, pickup, refunds, returns, listings, metrics, health
and the error envelope.
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from exceptions import CacheBackendError, StorageError
from tests.conftest import NOW

pytestmark = pytest.mark.api


def order_body(order_id=1, customer_id=1, **overrides):
    body = {
        "orderId": order_id,
        "customerId": customer_id,
        "expirationTime": (NOW + timedelta(hours=1)).isoformat(),
        "packageKind": "box",
        "weight": "5",
        "cost": 100,
    }
    body.update(overrides)
    return body


class TestAddOrder:
    async def test_created(self, client):
        r = await client.post("/orders", json=order_body())
        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        data = body["data"]
        assert data["orderId"] == 1
        assert data["cost"] == 120
        assert data["packageCost"] == 20
        assert data["packageKind"] == "box"
        assert Decimal(data["weight"]) == Decimal("5")
        assert data["receivedByCustomer"] is False
        assert data["receivedTime"] is None

    async def test_duplicate_is_conflict(self, client):
        await client.post("/orders", json=order_body())
        r = await client.post("/orders", json=order_body(packageKind="bag"))
        assert r.status_code == 409
        assert r.json() == {
            "success": False,
            "error": {
                "code": "order_exists",
                "message": "order already exists: 1",
                "details": {"order_id": 1},
            },
        }

    @pytest.mark.parametrize("overrides,code", [
        ({"orderId": 0}, "incorrect_id"),
        ({"orderId": 2**63}, "incorrect_id"),
        ({"weight": "5.1234"}, "validation_error"),
        ({"cost": 2**63}, "validation_error"),
        ({"weight": "-1"}, "negative_weight"),
        ({"cost": -1}, "negative_cost"),
        ({"packageKind": "crate"}, "invalid_package"),
        ({"packageKind": "bag", "weight": "10"}, "weight_exceeded"),
        ({"expirationTime": (NOW - timedelta(hours=1)).isoformat()}, "wrong_expiration"),
    ])
    async def test_rule_violations_are_400(self, client, overrides, code):
        r = await client.post("/orders", json=order_body(**overrides))
        assert r.status_code == 400
        assert r.json()["error"]["code"] == code

    async def test_malformed_body_is_422(self, client):
        r = await client.post("/orders", json={"orderId": "one"})
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert body["error"]["code"] == "request_validation"


class TestReceiveAndRefund:
    async def test_receive_then_refund(self, client):
        await client.post("/orders", json=order_body(1))
        await client.post("/orders", json=order_body(2))

        r = await client.post("/orders/receive", json={"orderIds": [1, 2]})
        assert r.status_code == 200
        assert [o["orderId"] for o in r.json()["data"]] == [1, 2]
        assert all(o["receivedByCustomer"] for o in r.json()["data"])

        r = await client.post("/orders/1/refund", json={"customerId": 1})
        assert r.status_code == 200
        assert r.json()["data"]["refunded"] is True

    async def test_receive_mixed_customers_is_conflict(self, client):
        await client.post("/orders", json=order_body(1, customer_id=1))
        await client.post("/orders", json=order_body(2, customer_id=2))

        r = await client.post("/orders/receive", json={"orderIds": [1, 2]})
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "cannot_receive"

    async def test_refund_after_window_is_conflict(self, client, clock):
        await client.post("/orders", json=order_body(1, expirationTime=(NOW + timedelta(days=5)).isoformat()))
        await client.post("/orders/receive", json={"orderIds": [1]})
        clock.advance(hours=48, seconds=1)

        r = await client.post("/orders/1/refund", json={"customerId": 1})
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "cannot_refund"

    async def test_refund_missing_order_is_404(self, client):
        r = await client.post("/orders/9/refund", json={"customerId": 1})
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "order_not_found"


class TestReturnOrder:
    async def test_return_received_expired_order(self, client, clock):
        await client.post("/orders", json=order_body(1))
        await client.post("/orders/receive", json={"orderIds": [1]})
        clock.advance(hours=2)

        r = await client.delete("/orders/1")
        assert r.status_code == 200
        assert r.json()["data"]["orderId"] == 1

        r = await client.get("/customers/1/orders")
        assert r.json()["data"] == []

    async def test_returned_id_can_not_be_reused(self, client, clock):
        await client.post("/orders", json=order_body(1))
        await client.post("/orders/receive", json={"orderIds": [1]})
        clock.advance(hours=2)
        await client.delete("/orders/1")

        later = (clock.now + timedelta(days=1)).isoformat()
        r = await client.post("/orders", json=order_body(1, expirationTime=later))
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "order_exists"

    async def test_return_held_order_is_conflict(self, client):
        await client.post("/orders", json=order_body(1))
        r = await client.delete("/orders/1")
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "cannot_return"

    async def test_non_positive_path_id_is_400(self, client):
        r = await client.delete("/orders/0")
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "incorrect_id"


class TestListings:
    async def test_customer_orders_first_n(self, client):
        for order_id in (3, 1, 2):
            await client.post("/orders", json=order_body(order_id))

        r = await client.get("/customers/1/orders", params={"n": 2})
        assert r.status_code == 200
        assert [o["orderId"] for o in r.json()["data"]] == [1, 2]
        assert r.json()["meta"]["count"] == 2

    async def test_customer_listing_sees_new_orders(self, client):
        await client.post("/orders", json=order_body(1))
        await client.get("/customers/1/orders")
        await client.post("/orders", json=order_body(2))

        r = await client.get("/customers/1/orders")
        assert [o["orderId"] for o in r.json()["data"]] == [1, 2]

    async def test_refund_pages(self, client):
        for order_id in range(1, 16):
            await client.post("/orders", json=order_body(order_id))
        await client.post("/orders/receive", json={"orderIds": list(range(1, 16))})
        for order_id in range(1, 16):
            await client.post(f"/orders/{order_id}/refund", json={"customerId": 1})

        r = await client.get("/refunds", params={"page": 1, "limit": 10})
        assert r.status_code == 200
        assert [o["orderId"] for o in r.json()["data"]] == list(range(11, 16))
        assert r.json()["meta"] == {"page": 1, "limit": 10, "count": 5}

        r = await client.get("/refunds", params={"page": 2, "limit": 10})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "pagination"

    async def test_empty_refunds(self, client):
        r = await client.get("/refunds")
        assert r.status_code == 200
        assert r.json()["data"] == []


async def test_order_metrics(client):
    await client.post("/orders", json=order_body(1))
    await client.post("/orders/receive", json={"orderIds": [1]})

    r = await client.get("/metrics/orders")
    assert r.status_code == 200
    body = r.json()
    assert body["orders_added_total"] == 1
    assert body["orders_received_total"] == 1
    assert body["orders_refunded_total"] == 0
    assert body["orders_returned_total"] == 0


async def test_end_to_end_scenario(client):
    r = await client.post("/orders", json=order_body(1, customer_id=1))
    assert r.status_code == 201

    r = await client.get("/customers/1/orders", params={"n": 0})
    assert [o["cost"] for o in r.json()["data"]] == [120]

    r = await client.post("/orders/receive", json={"orderIds": [1]})
    assert r.json()["data"][0]["receivedByCustomer"] is True

    r = await client.post("/orders/1/refund", json={"customerId": 1})
    assert r.status_code == 200

    r = await client.get("/refunds", params={"page": 0, "limit": 0})
    data = r.json()["data"]
    assert len(data) == 1
    assert data[0]["orderId"] == 1
    assert data[0]["refunded"] is True


class TestHealthEndpoint:
    async def test_healthy(self, client):
        r = await client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "healthy"
        assert body["database"] is True
        assert body["cache"] is True

    async def test_cache_down_is_503(self, client, cache, monkeypatch):
        monkeypatch.setattr(cache, "ping", AsyncMock(side_effect=CacheBackendError("refused")))
        r = await client.get("/health")
        assert r.status_code == 503
        assert r.json()["cache"] is False

    async def test_storage_failure_is_503(self, client, store, monkeypatch):
        monkeypatch.setattr(store, "get_customer_orders", AsyncMock(side_effect=StorageError("down")))
        r = await client.get("/customers/1/orders")
        assert r.status_code == 503
        assert r.json()["error"]["code"] == "storage_unavailable"
