"""API route modules."""

from salepoint.api.routes.catalog import router as catalog_router
from salepoint.api.routes.customers import router as customers_router
from salepoint.api.routes.health import router as health_router
from salepoint.api.routes.sales import router as sales_router

__all__ = [
    "health_router",
    "catalog_router",
    "customers_router",
    "sales_router",
]
