"""
Input validation utilities for the Pickup Point Orders service.

Provides reusable validators for order/customer ids, weights and costs.
They raise domain validation errors, so the same checks serve the service
layer, the HTTP routes and the command-line client.
"""
from decimal import Decimal, InvalidOperation

from fastapi import Path

from domain.constants import MAX_STORED_INT, MAX_WEIGHT, WEIGHT_QUANTUM
from domain.errors import IncorrectIdError, NegativeCostError, NegativeWeightError, ValidationError


def validate_positive_id(value, field: str = "id") -> int:
    """
    Validate an order or customer id.

    Args:
        value: Candidate id
        field: Field name used in the error message

    Returns:
        The id as int

    Raises:
        IncorrectIdError if the id is missing, not an integer, not positive
        or too large to store
    """
    # bool is an int subclass; True must not pass as id 1
    if value is None or isinstance(value, bool):
        raise IncorrectIdError(field, value)
    if not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except ValueError:
            raise IncorrectIdError(field, value)
    if value <= 0 or value > MAX_STORED_INT:
        raise IncorrectIdError(field, value)
    return value


def validate_weight(weight) -> Decimal:
    """
    Parse a weight in kilograms.

    Must be a finite, non-negative number below MAX_WEIGHT with at most
    three decimal places, so the stored value equals the one given.
    """
    try:
        value = weight if isinstance(weight, Decimal) else Decimal(str(weight).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("weight must be a number", field="weight", details={"weight": str(weight)})
    if not value.is_finite():
        raise ValidationError("weight must be a number", field="weight", details={"weight": str(weight)})
    if value < 0:
        raise NegativeWeightError(weight)
    if value >= MAX_WEIGHT:
        raise ValidationError(
            f"weight must be below {MAX_WEIGHT} kg", field="weight", details={"weight": str(weight)}
        )
    if value != value.quantize(WEIGHT_QUANTUM):
        raise ValidationError(
            "weight must have at most 3 decimal places", field="weight", details={"weight": str(weight)}
        )
    return value


def validate_cost(cost) -> int:
    """Parse a declared cost; must be a non-negative integer that fits a BIGINT."""
    if isinstance(cost, bool):
        raise ValidationError("cost must be an integer", field="cost", details={"cost": str(cost)})
    if not isinstance(cost, int):
        try:
            cost = int(str(cost).strip())
        except ValueError:
            raise ValidationError("cost must be an integer", field="cost", details={"cost": str(cost)})
    if cost < 0:
        raise NegativeCostError(cost)
    if cost > MAX_STORED_INT:
        raise ValidationError("cost is too large", field="cost", details={"cost": str(cost)})
    return cost


def validated_order_id(order_id: int = Path(..., description="Order id")) -> int:
    """FastAPI dependency for validating order id path parameters."""
    return validate_positive_id(order_id, "order_id")


def validated_customer_id(customer_id: int = Path(..., description="Customer id")) -> int:
    """FastAPI dependency for validating customer id path parameters."""
    return validate_positive_id(customer_id, "customer_id")
