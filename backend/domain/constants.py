"""
Domain constants used across services/routers.
"""
from datetime import timedelta
from decimal import Decimal

# A received order may be refunded until received_time + REFUND_WINDOW
REFUND_WINDOW = timedelta(hours=48)

# Largest value a BIGINT column holds (ids, costs)
MAX_STORED_INT = 2**63 - 1

# Weights are stored as NUMERIC(10, 3): kilograms to the gram, below 10 000 t
WEIGHT_QUANTUM = Decimal("0.001")
MAX_WEIGHT = Decimal("10000000")

# Read-through cache keys
CUSTOMER_ORDERS_KEY = "getOrders_{customer_id}"
REFUNDS_PAGE_KEY = "getRefunds_p{page}_l{limit}"


def customer_orders_key(customer_id: int) -> str:
    return CUSTOMER_ORDERS_KEY.format(customer_id=customer_id)


def refunds_page_key(page: int, limit: int) -> str:
    return REFUNDS_PAGE_KEY.format(page=page, limit=limit)
