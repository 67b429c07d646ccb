"""
Product catalog endpoints.
"""

from fastapi import APIRouter, Depends, Query

from salepoint.api.dependencies import get_app_settings, get_prod_store
from salepoint.application.dto.responses import (
    ErrorResponse,
    ProductResponse,
    ProductSearchResponse,
    product_to_response,
)
from salepoint.config import Settings
from salepoint.core.exceptions import ProductNotFoundError
from salepoint.core.interfaces import IProductStore

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("/products/search", response_model=ProductSearchResponse)
async def search_products(
    term: str = Query(default="", max_length=100, description="Name or description fragment"),
    store: IProductStore = Depends(get_prod_store),
    settings: Settings = Depends(get_app_settings),
) -> ProductSearchResponse:
    """Search products by name or description (case-insensitive)."""
    products = await store.search(term, limit=settings.sales.product_search_limit)
    return ProductSearchResponse(
        products=[product_to_response(p) for p in products],
        total=len(products),
        term=term,
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    store: IProductStore = Depends(get_prod_store),
) -> ProductResponse:
    """Get a product with its current stock."""
    product = await store.get(product_id)
    if product is None:
        raise ProductNotFoundError([product_id])
    return product_to_response(product)
