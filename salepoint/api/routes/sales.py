"""Sale endpoints."""

from fastapi import APIRouter, Depends, Query, status

from salepoint.api.dependencies import (
    get_finalize_sale_use_case,
    get_receipt_use_case,
    get_sale_store,
)
from salepoint.application.dto.requests import FinalizeSaleRequest
from salepoint.application.dto.responses import (
    ErrorResponse,
    ReceiptResponse,
    SaleListResponse,
    SaleResponse,
    sale_to_response,
)
from salepoint.application.use_cases.finalize_sale import FinalizeSaleUseCase
from salepoint.application.use_cases.get_receipt import GetReceiptUseCase
from salepoint.core.entities.sale import SaleStatus
from salepoint.core.exceptions import SaleNotFoundError
from salepoint.core.interfaces import ISalesStore

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Insufficient stock"},
    },
)
async def finalize_sale(
    request: FinalizeSaleRequest,
    use_case: FinalizeSaleUseCase = Depends(get_finalize_sale_use_case),
) -> SaleResponse:
    """Commit a sale: items, stock decrement and invoice in one transaction."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    customer_id: int | None = None,
    sale_status: SaleStatus | None = Query(default=None, alias="status"),
    store: ISalesStore = Depends(get_sale_store),
) -> SaleListResponse:
    """List sales, newest first."""
    sales = await store.list_sales(
        limit=limit,
        offset=offset,
        customer_id=customer_id,
        status=sale_status,
    )
    return SaleListResponse(
        sales=[sale_to_response(s) for s in sales],
        total=len(sales),
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{sale_id}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: int,
    store: ISalesStore = Depends(get_sale_store),
) -> SaleResponse:
    """Get a sale with items, customer and invoice."""
    sale = await store.get_sale(sale_id)
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return sale_to_response(sale)


@router.get(
    "/{sale_id}/receipt",
    response_model=ReceiptResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale_receipt(
    sale_id: int,
    use_case: GetReceiptUseCase = Depends(get_receipt_use_case),
) -> ReceiptResponse:
    """Structured receipt content for a committed sale."""
    receipt = await use_case.execute(sale_id)
    return use_case.to_response(receipt)
