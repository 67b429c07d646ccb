"""Tests for FinalizeSaleUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from salepoint.application.dto.requests import FinalizeSaleRequest, SaleLineRequest
from salepoint.application.use_cases.finalize_sale import FinalizeSaleUseCase
from salepoint.core.entities import PaymentMethod, Sale, SaleItem, SaleStatus
from salepoint.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    PaymentDetailsIncompleteError,
    ValidationError,
)


def _request(**overrides) -> FinalizeSaleRequest:
    data = {
        "request_id": "req-1",
        "customer_id": 7,
        "lines": [
            SaleLineRequest(product_id=1, quantity=2, unit_price=Decimal("10.00")),
            SaleLineRequest(product_id=2, quantity=3, unit_price=Decimal("5.50")),
        ],
        "client_total": Decimal("99.99"),
    }
    data.update(overrides)
    return FinalizeSaleRequest(**data)


def _committed(submission, user_id) -> Sale:
    return Sale(
        id=1,
        request_id=submission.request_id,
        customer_id=submission.customer_id,
        user_id=user_id,
        payment_method=submission.payment_method,
        status=SaleStatus.COMPLETED,
        items=[
            SaleItem(product_id=line.product_id, quantity=line.quantity, unit_price=line.unit_price)
            for line in submission.lines
        ],
    )


@pytest.fixture
def mock_sales_store():
    store = AsyncMock()
    store.finalize_sale.side_effect = _committed
    return store


@pytest.fixture
def use_case(mock_sales_store):
    return FinalizeSaleUseCase(sales_store=mock_sales_store, default_user_id=5)


class TestFinalizeSaleUseCase:
    async def test_commits_submission(self, use_case, mock_sales_store):
        result = await use_case.execute(_request())

        submission, user_id = mock_sales_store.finalize_sale.await_args.args
        assert submission.request_id == "req-1"
        assert [(line.product_id, line.quantity) for line in submission.lines] == [(1, 2), (2, 3)]
        assert submission.client_total == Decimal("99.99")
        assert user_id == 5
        assert result.sale.total_amount == Decimal("36.50")

    async def test_request_user_overrides_default(self, use_case, mock_sales_store):
        await use_case.execute(_request(user_id=9))
        assert mock_sales_store.finalize_sale.await_args.args[1] == 9

    async def test_empty_lines_rejected(self, use_case, mock_sales_store):
        with pytest.raises(ValidationError):
            await use_case.execute(_request(lines=[]))
        mock_sales_store.finalize_sale.assert_not_awaited()

    async def test_non_positive_quantity_rejected(self, use_case, mock_sales_store):
        lines = [SaleLineRequest(product_id=1, quantity=0, unit_price=Decimal("1.00"))]
        with pytest.raises(InvalidQuantityError):
            await use_case.execute(_request(lines=lines))
        mock_sales_store.finalize_sale.assert_not_awaited()

    async def test_negative_price_rejected(self, use_case):
        lines = [SaleLineRequest(product_id=1, quantity=1, unit_price=Decimal("-1.00"))]
        with pytest.raises(ValidationError):
            await use_case.execute(_request(lines=lines))

    async def test_incomplete_payment_details_rejected(self, use_case, mock_sales_store):
        request = _request(
            payment_method=PaymentMethod.BANK_TRANSFER,
            payment_details={"source_bank": "0102"},
        )
        with pytest.raises(PaymentDetailsIncompleteError) as exc_info:
            await use_case.execute(request)

        assert exc_info.value.details["missing"] == ["target_bank", "reference"]
        mock_sales_store.finalize_sale.assert_not_awaited()

    async def test_store_errors_propagate(self, use_case, mock_sales_store):
        mock_sales_store.finalize_sale.side_effect = InsufficientStockError(2, 3, 1, "Milk")
        with pytest.raises(InsufficientStockError):
            await use_case.execute(_request())

    async def test_to_response(self, use_case):
        result = await use_case.execute(_request())
        response = use_case.to_response(result)

        assert response.id == 1
        assert response.total_amount == Decimal("36.50")
        assert response.status is SaleStatus.COMPLETED
        assert len(response.items) == 2
