"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py. Each error carries a stable ``code`` used in the error envelope.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    code = "domain_error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Resource not found (404)."""
    code = "not_found"

    def __init__(self, resource_type: str, identifier, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    code = "conflict"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


# ── Validation errors ───────────────────────────────────────────────


class IncorrectIdError(ValidationError):
    code = "incorrect_id"

    def __init__(self, field: str = "id", value=None):
        super().__init__(
            "empty or non-positive order or customer id",
            field=field,
            details={"value": value},
        )


class WrongExpirationError(ValidationError):
    code = "wrong_expiration"

    def __init__(self, expiration_time=None):
        super().__init__(
            "expiration time must be in the future",
            field="expiration_time",
            details={"expiration_time": str(expiration_time)} if expiration_time else None,
        )


class WeightExceededError(ValidationError):
    code = "weight_exceeded"

    def __init__(self, package_kind: str, weight, ceiling):
        super().__init__(
            f"weight {weight} kg exceeds the {package_kind} limit of {ceiling} kg",
            field="weight",
            details={"package_kind": package_kind, "weight": str(weight), "ceiling": str(ceiling)},
        )


class NegativeWeightError(ValidationError):
    code = "negative_weight"

    def __init__(self, weight=None):
        super().__init__("weight can not be negative", field="weight", details={"weight": str(weight)})


class NegativeCostError(ValidationError):
    code = "negative_cost"

    def __init__(self, cost=None):
        super().__init__("cost can not be negative", field="cost", details={"cost": str(cost)})


class InvalidPackageError(ValidationError):
    code = "invalid_package"

    def __init__(self, package_kind):
        super().__init__(
            f"unknown package kind {package_kind!r}",
            field="package_kind",
            details={"package_kind": str(package_kind)},
        )


# ── State-conflict errors ───────────────────────────────────────────


class OrderNotFoundError(NotFoundError):
    code = "order_not_found"

    def __init__(self, order_id):
        super().__init__("Order", order_id, details={"order_id": order_id})


class OrderExistsError(ConflictError):
    code = "order_exists"

    def __init__(self, order_id):
        super().__init__(f"order already exists: {order_id}", details={"order_id": order_id})


class CannotReturnError(ConflictError):
    code = "cannot_return"

    def __init__(self, order_id):
        super().__init__(
            "can not return this order to the courier: it must be received by the customer "
            "and its expiration time must have passed",
            details={"order_id": order_id},
        )


class CannotReceiveError(ConflictError):
    code = "cannot_receive"

    def __init__(self, order_ids=None, reason: str | None = None):
        message = (
            "can not receive these orders: each one must exist, belong to the same customer, "
            "not be received yet and not be expired"
        )
        details = {"order_ids": list(order_ids or [])}
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details)


class CannotRefundError(ConflictError):
    code = "cannot_refund"

    def __init__(self, order_id, customer_id):
        super().__init__(
            "can not refund this order: make sure it is yours, you received it "
            "and the refund window (2 days) has not passed",
            details={"order_id": order_id, "customer_id": customer_id},
        )


class PaginationError(DomainError):
    """Requested page lies beyond the result set (400)."""
    code = "pagination"

    def __init__(self, page: int, limit: int, total: int):
        super().__init__(
            "page is out of range",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"page": page, "limit": limit, "total": total},
        )


# ── Infrastructure-facing errors ────────────────────────────────────


class DeadlineExceededError(DomainError):
    """Operation did not finish before its deadline (504)."""
    code = "deadline_exceeded"

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"{operation} did not complete within {timeout} seconds",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            details={"operation": operation, "timeout": timeout},
        )
