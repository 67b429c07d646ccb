"""Pytest fixtures for SQLite storage tests."""

from decimal import Decimal

import pytest

from salepoint.core.entities import Customer, IdType, Product
from salepoint.infrastructure.storage.sqlite import (
    SQLiteCustomerStore,
    SQLiteProductStore,
    SQLiteSalesStore,
)


@pytest.fixture
def product_store(pos_db) -> SQLiteProductStore:
    return SQLiteProductStore()


@pytest.fixture
def customer_store(pos_db) -> SQLiteCustomerStore:
    return SQLiteCustomerStore()


@pytest.fixture
def sales_store(pos_db) -> SQLiteSalesStore:
    return SQLiteSalesStore(invoice_prefix="INV-")


@pytest.fixture
async def seeded(product_store, customer_store) -> dict:
    """Two products and one customer persisted in the temp database."""
    coffee = await product_store.create(
        Product(name="Coffee 500g", description="Ground", selling_price=Decimal("10.00"), stock=10)
    )
    milk = await product_store.create(
        Product(name="Milk 1L", description="Whole milk", selling_price=Decimal("5.50"), stock=5)
    )
    customer = await customer_store.create(
        Customer(name="Ana Perez", id_type=IdType.NATIONAL, id_number="12345678")
    )
    return {"coffee": coffee, "milk": milk, "customer": customer}
