"""
Unit tests for the Order aggregate rules.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.enums import PackageKind
from domain.order import Order, ensure_utc
from tests.conftest import NOW

pytestmark = pytest.mark.unit


@pytest.fixture
def held() -> Order:
    return Order(
        order_id=1,
        customer_id=1,
        expiration_time=NOW + timedelta(days=1),
        package_kind=PackageKind.BOX,
        weight=Decimal("5"),
        cost=120,
        package_cost=20,
    )


class TestReceive:
    def test_owner_can_receive(self, held):
        assert held.can_be_received_by(1, NOW)

    def test_other_customer_cannot_receive(self, held):
        assert not held.can_be_received_by(2, NOW)

    def test_expired_cannot_be_received(self, held):
        assert not held.can_be_received_by(1, held.expiration_time)

    def test_mark_received_returns_new_order(self, held):
        received = held.mark_received(NOW)
        assert received.received_by_customer is True
        assert received.received_time == NOW
        assert held.received_by_customer is False
        assert not received.can_be_received_by(1, NOW)


class TestRefund:
    def test_window_is_inclusive(self, held):
        received = held.mark_received(NOW)
        assert received.can_be_refunded_by(1, NOW + timedelta(hours=48))
        assert not received.can_be_refunded_by(1, NOW + timedelta(hours=48, seconds=1))

    def test_held_order_cannot_be_refunded(self, held):
        assert not held.can_be_refunded_by(1, NOW)
        with pytest.raises(ValueError):
            held.mark_refunded()

    def test_refunded_order_cannot_be_refunded_again(self, held):
        refunded = held.mark_received(NOW).mark_refunded()
        assert refunded.refunded is True
        assert not refunded.can_be_refunded_by(1, NOW)


class TestReturnRule:
    """The rule requires both receipt and expiry; held orders are never returnable."""

    def test_held_expired(self, held):
        assert not held.is_returnable(held.expiration_time + timedelta(days=1))

    def test_received_unexpired(self, held):
        assert not held.mark_received(NOW).is_returnable(NOW)

    def test_received_expired(self, held):
        assert held.mark_received(NOW).is_returnable(held.expiration_time)


class TestEnsureUtc:
    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_is_assumed_utc(self):
        assert ensure_utc(datetime(2024, 1, 1, 10)) == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_other_zone_converted(self):
        plus_three = timezone(timedelta(hours=3))
        value = ensure_utc(datetime(2024, 1, 1, 13, tzinfo=plus_three))
        assert value.tzinfo == timezone.utc
        assert value.hour == 10
