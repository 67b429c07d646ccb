"""Register Customer Use Case."""

from dataclasses import dataclass

from salepoint.application.dto.requests import CreateCustomerRequest, CustomerSearchRequest
from salepoint.application.dto.responses import CustomerResponse, customer_to_response
from salepoint.config import get_logger
from salepoint.core.entities.catalog import Customer
from salepoint.core.exceptions import CustomerNotFoundError, ValidationError
from salepoint.core.interfaces.catalog_store import ICustomerStore

logger = get_logger(__name__)


@dataclass
class RegisterCustomerResult:
    """Result of registering a customer."""

    customer: Customer


class RegisterCustomerUseCase:
    """Register a new customer and look customers up by identification."""

    def __init__(self, customer_store: ICustomerStore | None = None):
        self._customer_store = customer_store

    async def _get_customer_store(self) -> ICustomerStore:
        if self._customer_store is None:
            from salepoint.infrastructure.storage.sqlite import get_customer_store

            self._customer_store = await get_customer_store()
        return self._customer_store

    async def execute(self, request: CreateCustomerRequest) -> RegisterCustomerResult:
        """Create the customer. Raises DuplicateCustomerError if already registered."""
        name = request.name.strip()
        id_number = request.id_number.strip()
        if not name:
            raise ValidationError("name", "Name is required")
        if not id_number:
            raise ValidationError("id_number", "Identification number is required")

        store = await self._get_customer_store()
        customer = await store.create(
            Customer(
                name=name,
                id_type=request.id_type,
                id_number=id_number,
                email=(request.email or "").strip() or None,
                phone=(request.phone or "").strip() or None,
            )
        )
        logger.info("customer_registered", customer_id=customer.id)
        return RegisterCustomerResult(customer=customer)

    async def lookup(self, request: CustomerSearchRequest) -> Customer:
        """Exact lookup. Raises CustomerNotFoundError when not registered."""
        store = await self._get_customer_store()
        id_number = request.id_number.strip()
        customer = await store.find_by_identification(request.id_type, id_number)
        if customer is None:
            raise CustomerNotFoundError(
                identification=f"{request.id_type.value} {id_number}"
            )
        return customer

    def to_response(self, result: RegisterCustomerResult) -> CustomerResponse:
        """Convert result to API response."""
        return customer_to_response(result.customer)
