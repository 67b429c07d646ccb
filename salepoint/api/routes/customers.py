"""
Customer endpoints.
"""

from fastapi import APIRouter, Depends, status

from salepoint.api.dependencies import get_cust_store, get_register_customer_use_case
from salepoint.application.dto.requests import CreateCustomerRequest, CustomerSearchRequest
from salepoint.application.dto.responses import (
    CustomerResponse,
    ErrorResponse,
    customer_to_response,
)
from salepoint.application.use_cases.register_customer import RegisterCustomerUseCase
from salepoint.core.exceptions import CustomerNotFoundError
from salepoint.core.interfaces import ICustomerStore

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.post(
    "/search",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def search_customer(
    request: CustomerSearchRequest,
    use_case: RegisterCustomerUseCase = Depends(get_register_customer_use_case),
) -> CustomerResponse:
    """Exact lookup by identification document."""
    customer = await use_case.lookup(request)
    return customer_to_response(customer)


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Identification already registered"},
    },
)
async def create_customer(
    request: CreateCustomerRequest,
    use_case: RegisterCustomerUseCase = Depends(get_register_customer_use_case),
) -> CustomerResponse:
    """Register a customer."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_customer(
    customer_id: int,
    store: ICustomerStore = Depends(get_cust_store),
) -> CustomerResponse:
    """Get a customer by ID."""
    customer = await store.get(customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id=customer_id)
    return customer_to_response(customer)
