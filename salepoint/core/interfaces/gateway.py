"""Abstract interfaces for the terminal's connection to the sale service."""

from abc import ABC, abstractmethod

from salepoint.core.entities.catalog import Customer, IdType, Product
from salepoint.core.entities.sale import Sale, SaleSubmission


class ISaleGateway(ABC):
    """Submits finalized drafts to the sale service."""

    @abstractmethod
    async def submit_sale(self, submission: SaleSubmission) -> Sale:
        """Submit a sale and return the committed record.

        Raises a POSError subclass on any failure. Never retried implicitly.
        """
        pass


class ICatalogGateway(ABC):
    """Catalog and customer lookups from the terminal."""

    @abstractmethod
    async def search_products(self, term: str) -> list[Product]:
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Product:
        pass

    @abstractmethod
    async def find_customer(self, id_type: IdType, id_number: str) -> Customer | None:
        pass

    @abstractmethod
    async def create_customer(self, customer: Customer) -> Customer:
        pass
