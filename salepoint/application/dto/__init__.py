"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from salepoint.application.dto.requests import (
    CreateCustomerRequest,
    CustomerSearchRequest,
    FinalizeSaleRequest,
    SaleLineRequest,
)
from salepoint.application.dto.responses import (
    ComponentHealthResponse,
    CustomerResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceResponse,
    ProductResponse,
    ProductSearchResponse,
    ReceiptLineResponse,
    ReceiptResponse,
    SaleItemResponse,
    SaleListResponse,
    SaleResponse,
    customer_to_response,
    product_to_response,
    sale_to_response,
)

__all__ = [
    # Requests
    "FinalizeSaleRequest",
    "SaleLineRequest",
    "CustomerSearchRequest",
    "CreateCustomerRequest",
    # Responses
    "ProductResponse",
    "ProductSearchResponse",
    "CustomerResponse",
    "SaleItemResponse",
    "InvoiceResponse",
    "SaleResponse",
    "SaleListResponse",
    "ReceiptLineResponse",
    "ReceiptResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
    # Converters
    "product_to_response",
    "customer_to_response",
    "sale_to_response",
]
