"""Abstract interfaces for product and customer storage."""

from abc import ABC, abstractmethod

from salepoint.core.entities.catalog import Customer, IdType, Product


class IProductStore(ABC):
    """Interface for product catalog persistence."""

    @abstractmethod
    async def search(self, term: str, limit: int = 20) -> list[Product]:
        """Case-insensitive search over product name and description."""
        pass

    @abstractmethod
    async def get(self, product_id: int) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_many(self, product_ids: list[int]) -> dict[int, Product]:
        """Get several products keyed by ID. Missing IDs are omitted."""
        pass

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """Create a product."""
        pass


class ICustomerStore(ABC):
    """Interface for customer persistence."""

    @abstractmethod
    async def find_by_identification(
        self, id_type: IdType, id_number: str
    ) -> Customer | None:
        """Exact lookup by identification document."""
        pass

    @abstractmethod
    async def get(self, customer_id: int) -> Customer | None:
        """Get customer by ID."""
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        """Create a customer.

        Raises DuplicateCustomerError if the identification is taken.
        """
        pass
