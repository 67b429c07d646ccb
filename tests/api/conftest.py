"""API test fixtures: the real app with stores replaced by mocks."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from salepoint.api.dependencies import get_cust_store, get_prod_store, get_sale_store
from salepoint.api.main import app
from salepoint.core.entities import (
    Invoice,
    PaymentMethod,
    Sale,
    SaleItem,
    SaleStatus,
)
from salepoint.core.interfaces import ICustomerStore, IProductStore, ISalesStore


@pytest.fixture
def sales_store_mock():
    return AsyncMock(spec=ISalesStore)


@pytest.fixture
def product_store_mock():
    return AsyncMock(spec=IProductStore)


@pytest.fixture
def customer_store_mock():
    return AsyncMock(spec=ICustomerStore)


@pytest.fixture
def committed_sale(customer) -> Sale:
    """Completed sale of 2 x 10.00 and 3 x 5.50."""
    now = datetime(2026, 1, 5, 10, 30)
    return Sale(
        id=9,
        request_id="req-1",
        customer_id=customer.id,
        user_id=1,
        sale_date=now,
        payment_method=PaymentMethod.CASH,
        status=SaleStatus.COMPLETED,
        items=[
            SaleItem(id=1, sale_id=9, product_id=1, product_name="Coffee 500g", quantity=2, unit_price="10.00"),
            SaleItem(id=2, sale_id=9, product_id=2, product_name="Milk 1L", quantity=3, unit_price="5.50"),
        ],
        customer=customer,
        invoice=Invoice(id=1, sale_id=9, number="INV-000009", date=now),
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
async def client(sales_store_mock, product_store_mock, customer_store_mock):
    """Async client with every store dependency overridden."""
    app.dependency_overrides[get_sale_store] = lambda: sales_store_mock
    app.dependency_overrides[get_prod_store] = lambda: product_store_mock
    app.dependency_overrides[get_cust_store] = lambda: customer_store_mock
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
