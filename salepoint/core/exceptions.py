"""
Domain exceptions for the point-of-sale service.

Every error carries a machine-readable ``code`` shared by the API error
body and the terminal gateway, so a failure raised on the server can be
re-raised as the same exception type on the client.
"""

from typing import Any


class POSError(Exception):
    """Base exception for all point-of-sale errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(POSError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidQuantityError(ValidationError):
    """Quantity is not a positive integer."""

    def __init__(self, quantity: Any, product_id: int | None = None):
        super().__init__(
            field="quantity",
            message="Quantity must be a positive integer",
            value=quantity,
        )
        self.code = "INVALID_QUANTITY"
        self.details["product_id"] = product_id


class StockExceededError(ValidationError):
    """Requested quantity exceeds the stock snapshot known to the terminal."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            field="quantity",
            message=f"Only {available} unit(s) in stock, {requested} requested",
            value=requested,
        )
        self.code = "STOCK_EXCEEDED"
        self.details.update(
            {
                "product_id": product_id,
                "requested": requested,
                "available": available,
            }
        )


class PaymentDetailsIncompleteError(ValidationError):
    """Required payment detail fields are missing or blank."""

    def __init__(self, method: str, missing: list[str]):
        super().__init__(
            field="payment_details",
            message=f"Missing {', '.join(missing)} for {method}",
        )
        self.code = "PAYMENT_DETAILS_INCOMPLETE"
        self.details.update({"payment_method": method, "missing": missing})


class InsufficientPaymentError(ValidationError):
    """Cash received does not cover the sale total."""

    def __init__(self, amount_received: Any, total: Any):
        super().__init__(
            field="amount_received",
            message=f"Amount received must be at least {total}",
            value=amount_received,
        )
        self.code = "INSUFFICIENT_PAYMENT"
        self.details.update(
            {"amount_received": str(amount_received), "total": str(total)}
        )


# Not-found Exceptions
class NotFoundError(POSError):
    """Referenced entity does not exist."""

    pass


class CustomerNotFoundError(NotFoundError):
    """Customer not found."""

    def __init__(self, customer_id: int | None = None, identification: str | None = None):
        ref = customer_id if customer_id is not None else identification
        super().__init__(
            f"Customer not found: {ref}",
            code="CUSTOMER_NOT_FOUND",
            details={"customer_id": customer_id, "identification": identification},
        )


class ProductNotFoundError(NotFoundError):
    """One or more products not found."""

    def __init__(self, product_ids: list[int]):
        super().__init__(
            f"Product(s) not found: {', '.join(str(p) for p in product_ids)}",
            code="PRODUCT_NOT_FOUND",
            details={"product_ids": product_ids},
        )


class SaleNotFoundError(NotFoundError):
    """Sale not found."""

    def __init__(self, sale_id: int):
        super().__init__(
            f"Sale not found: {sale_id}",
            code="SALE_NOT_FOUND",
            details={"sale_id": sale_id},
        )


# Conflict Exceptions
class ConflictError(POSError):
    """Request conflicts with the current authoritative state."""

    pass


class InsufficientStockError(ConflictError):
    """Authoritative stock is lower than the quantity being sold."""

    def __init__(
        self,
        product_id: int,
        requested: int,
        available: int,
        product_name: str | None = None,
    ):
        label = product_name or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}: available {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )


class RequestIdReusedError(ConflictError):
    """A committed sale already holds this request id with different contents."""

    def __init__(self, request_id: str, sale_id: int | None, differences: list[str]):
        super().__init__(
            f"Request id {request_id} already committed sale {sale_id} with different contents",
            code="REQUEST_ID_REUSED",
            details={
                "request_id": request_id,
                "sale_id": sale_id,
                "differences": differences,
            },
        )


class DuplicateCustomerError(ConflictError):
    """A customer with the same identification already exists."""

    def __init__(self, id_type: str, id_number: str, existing_id: int | None = None):
        super().__init__(
            f"Customer already exists: {id_type} {id_number}",
            code="DUPLICATE_CUSTOMER",
            details={
                "id_type": id_type,
                "id_number": id_number,
                "existing_id": existing_id,
            },
        )


# Transient Exceptions
class TransientError(POSError):
    """Failure that may succeed if retried by the operator."""

    retryable = True


class SubmissionTimeoutError(TransientError):
    """Sale submission did not complete in time; outcome unknown."""

    def __init__(self, timeout: float):
        super().__init__(
            f"Sale submission timed out after {timeout} seconds",
            code="SUBMISSION_TIMEOUT",
            details={"timeout": timeout},
        )


class GatewayUnavailableError(TransientError):
    """Sale API could not be reached."""

    def __init__(self, url: str, reason: str | None = None):
        super().__init__(
            f"Sale service unavailable at {url}" + (f" - {reason}" if reason else ""),
            code="GATEWAY_UNAVAILABLE",
            details={"url": url, "reason": reason},
        )


class SubmissionFailedError(POSError):
    """Server rejected the submission without a recognised error code."""

    def __init__(self, status_code: int, reason: str | None = None):
        super().__init__(
            f"Sale submission failed (HTTP {status_code})"
            + (f": {reason}" if reason else ""),
            code="SUBMISSION_FAILED",
            details={"status_code": status_code, "reason": reason},
        )


# Draft Exceptions
class DraftError(POSError):
    """Base exception for draft state machine errors."""

    pass


class DraftLockedError(DraftError):
    """Draft cannot change while a submission is in flight."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation} while the sale is being submitted",
            code="DRAFT_LOCKED",
            details={"operation": operation},
        )


class DraftNotReadyError(DraftError):
    """Draft does not satisfy the submission gate."""

    def __init__(self, reasons: list[str]):
        super().__init__(
            f"Sale cannot be submitted: {'; '.join(reasons)}",
            code="DRAFT_NOT_READY",
            details={"reasons": reasons},
        )


class DraftCacheError(DraftError):
    """Persisted draft could not be read back."""

    def __init__(self, session_key: str, reason: str):
        super().__init__(
            f"Cached draft for '{session_key}' is unusable: {reason}",
            code="DRAFT_CACHE_ERROR",
            details={"session_key": session_key, "reason": reason},
        )


# Storage Exceptions
class StorageError(POSError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(POSError):
    """Configuration error."""

    pass


# Error codes the terminal gateway can turn back into typed exceptions
ERROR_CODE_REGISTRY: dict[str, type[POSError]] = {
    "INVALID_QUANTITY": InvalidQuantityError,
    "STOCK_EXCEEDED": StockExceededError,
    "PAYMENT_DETAILS_INCOMPLETE": PaymentDetailsIncompleteError,
    "CUSTOMER_NOT_FOUND": CustomerNotFoundError,
    "PRODUCT_NOT_FOUND": ProductNotFoundError,
    "SALE_NOT_FOUND": SaleNotFoundError,
    "INSUFFICIENT_STOCK": InsufficientStockError,
    "DUPLICATE_CUSTOMER": DuplicateCustomerError,
    "REQUEST_ID_REUSED": RequestIdReusedError,
}
ERROR_CODE_REGISTRY.update(
    {
        "VALIDATION_ERROR": ValidationError,
        "INSUFFICIENT_PAYMENT": InsufficientPaymentError,
        "DATABASE_ERROR": DatabaseError,
    }
)


def error_from_payload(
    code: str | None,
    message: str,
    details: dict[str, Any] | None = None,
) -> POSError | None:
    """Rebuild the typed exception for an API error body.

    Returns None when ``code`` is not a registered error code.
    """
    cls = ERROR_CODE_REGISTRY.get(code or "")
    if cls is None:
        return None
    exc = cls.__new__(cls)
    POSError.__init__(exc, message, code=code, details=details)
    return exc
