"""SQLite storage implementations."""

from salepoint.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from salepoint.infrastructure.storage.sqlite.customer_store import SQLiteCustomerStore
from salepoint.infrastructure.storage.sqlite.draft_store import SQLiteDraftStore
from salepoint.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from salepoint.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore

# Singleton instances
_product_store: SQLiteProductStore | None = None
_customer_store: SQLiteCustomerStore | None = None
_sales_store: SQLiteSalesStore | None = None


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


async def get_customer_store() -> SQLiteCustomerStore:
    """Get singleton customer store instance."""
    global _customer_store
    if _customer_store is None:
        _customer_store = SQLiteCustomerStore()
    return _customer_store


async def get_sales_store() -> SQLiteSalesStore:
    """Get singleton sales store instance."""
    global _sales_store
    if _sales_store is None:
        _sales_store = SQLiteSalesStore()
    return _sales_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteProductStore",
    "SQLiteCustomerStore",
    "SQLiteSalesStore",
    "SQLiteDraftStore",
    # Factory functions
    "get_product_store",
    "get_customer_store",
    "get_sales_store",
]
