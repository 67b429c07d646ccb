"""Tests for domain exceptions."""

import pytest

from salepoint.core.exceptions import (
    ERROR_CODE_REGISTRY,
    ConflictError,
    CustomerNotFoundError,
    DraftLockedError,
    GatewayUnavailableError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    PaymentDetailsIncompleteError,
    POSError,
    ProductNotFoundError,
    StockExceededError,
    SubmissionTimeoutError,
    TransientError,
    ValidationError,
    error_from_payload,
)


class TestPOSError:
    def test_default_code_is_class_name(self):
        err = POSError("boom")
        assert err.code == "POSError"
        assert err.details == {}
        assert str(err) == "boom"

    def test_to_dict(self):
        err = POSError("boom", code="X", details={"a": 1})
        assert err.to_dict() == {"error": "X", "message": "boom", "details": {"a": 1}}


class TestTaxonomy:
    def test_validation_errors(self):
        assert isinstance(InvalidQuantityError(0), ValidationError)
        assert isinstance(StockExceededError(1, 5, 3), ValidationError)
        assert isinstance(PaymentDetailsIncompleteError("CASH", ["x"]), ValidationError)

    def test_not_found_errors(self):
        assert isinstance(CustomerNotFoundError(customer_id=1), NotFoundError)
        assert isinstance(ProductNotFoundError([1]), NotFoundError)

    def test_insufficient_stock_is_conflict(self):
        err = InsufficientStockError(4, requested=2, available=1, product_name="Milk")
        assert isinstance(err, ConflictError)
        assert err.code == "INSUFFICIENT_STOCK"
        assert err.details == {
            "product_id": 4,
            "product_name": "Milk",
            "requested": 2,
            "available": 1,
        }
        assert "Milk" in err.message

    def test_network_errors_are_retryable(self):
        assert SubmissionTimeoutError(15.0).retryable is True
        assert isinstance(GatewayUnavailableError("http://pos"), TransientError)

    def test_stock_exceeded_details(self):
        err = StockExceededError(product_id=3, requested=5, available=2)
        assert err.code == "STOCK_EXCEEDED"
        assert err.details["requested"] == 5
        assert err.details["available"] == 2

    def test_draft_locked(self):
        err = DraftLockedError("add an item")
        assert err.code == "DRAFT_LOCKED"
        assert "add an item" in err.message


class TestErrorFromPayload:
    def test_rebuilds_typed_exception(self):
        details = {"product_id": 4, "requested": 2, "available": 1, "product_name": "Milk"}
        err = error_from_payload("INSUFFICIENT_STOCK", "Insufficient stock for Milk", details)

        assert isinstance(err, InsufficientStockError)
        assert err.code == "INSUFFICIENT_STOCK"
        assert err.message == "Insufficient stock for Milk"
        assert err.details == details

    @pytest.mark.parametrize("code", ["SOMETHING_ELSE", None, ""])
    def test_unknown_code_returns_none(self, code):
        assert error_from_payload(code, "message") is None

    def test_every_registered_code_round_trips(self):
        for code, cls in ERROR_CODE_REGISTRY.items():
            err = error_from_payload(code, "msg", {})
            assert type(err) is cls
            assert err.code == code
