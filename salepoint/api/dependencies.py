"""
Dependency injection container for FastAPI.

Provides store and use case instances to route handlers.
"""

from fastapi import Depends

from salepoint.application.use_cases import (
    FinalizeSaleUseCase,
    GetReceiptUseCase,
    RegisterCustomerUseCase,
)
from salepoint.config import Settings, get_settings
from salepoint.core.interfaces import ICustomerStore, IProductStore, ISalesStore
from salepoint.infrastructure.storage.sqlite import (
    get_customer_store,
    get_product_store,
    get_sales_store,
)


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


# Store dependencies
async def get_prod_store() -> IProductStore:
    """Get product store."""
    return await get_product_store()


async def get_cust_store() -> ICustomerStore:
    """Get customer store."""
    return await get_customer_store()


async def get_sale_store() -> ISalesStore:
    """Get sales store."""
    return await get_sales_store()


# Use case dependencies
def get_finalize_sale_use_case(
    store: ISalesStore = Depends(get_sale_store),
) -> FinalizeSaleUseCase:
    """Get finalize sale use case."""
    return FinalizeSaleUseCase(sales_store=store)


def get_register_customer_use_case(
    store: ICustomerStore = Depends(get_cust_store),
) -> RegisterCustomerUseCase:
    """Get register customer use case."""
    return RegisterCustomerUseCase(customer_store=store)


def get_receipt_use_case(
    store: ISalesStore = Depends(get_sale_store),
    settings: Settings = Depends(get_app_settings),
) -> GetReceiptUseCase:
    """Get receipt use case."""
    return GetReceiptUseCase(sales_store=store, settings=settings)
