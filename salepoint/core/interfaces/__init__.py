"""Core interfaces (ports) for dependency injection."""

from salepoint.core.interfaces.catalog_store import ICustomerStore, IProductStore
from salepoint.core.interfaces.draft_store import IDraftStore
from salepoint.core.interfaces.gateway import ICatalogGateway, ISaleGateway
from salepoint.core.interfaces.sales_store import ISalesStore

__all__ = [
    # Storage interfaces
    "IProductStore",
    "ICustomerStore",
    "ISalesStore",
    "IDraftStore",
    # Gateway interfaces
    "ISaleGateway",
    "ICatalogGateway",
]
