"""Abstract interface for sale storage."""

from abc import ABC, abstractmethod

from salepoint.core.entities.sale import Sale, SaleStatus, SaleSubmission


class ISalesStore(ABC):
    """Interface for sale finalization and retrieval."""

    @abstractmethod
    async def finalize_sale(self, submission: SaleSubmission, user_id: int) -> Sale:
        """Commit a sale atomically.

        Creates the sale, its items and its invoice and decrements stock in
        one transaction. Either everything is committed or nothing is.
        A repeated ``request_id`` returns the sale already committed for it.
        """
        pass

    @abstractmethod
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items, customer and invoice."""
        pass

    @abstractmethod
    async def get_sale_by_request_id(self, request_id: str) -> Sale | None:
        """Get the sale committed for an idempotency key."""
        pass

    @abstractmethod
    async def list_sales(
        self,
        limit: int = 100,
        offset: int = 0,
        customer_id: int | None = None,
        status: SaleStatus | None = None,
    ) -> list[Sale]:
        """List sales, newest first."""
        pass
