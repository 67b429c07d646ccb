"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
Money fields serialize as decimal strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from salepoint.core.entities.catalog import Customer, IdType, Product
from salepoint.core.entities.sale import InvoiceStatus, PaymentMethod, Sale, SaleStatus


class ProductResponse(BaseModel):
    """Product with current stock."""

    id: int
    name: str
    description: str = ""
    selling_price: Decimal
    stock: int
    min_stock: int = 0
    category_id: int | None = None
    is_low_stock: bool = False


class ProductSearchResponse(BaseModel):
    """Product search results."""

    products: list[ProductResponse]
    total: int
    term: str


class CustomerResponse(BaseModel):
    """Registered customer."""

    id: int
    name: str
    id_type: IdType
    id_number: str
    email: str | None = None
    phone: str | None = None
    created_at: datetime


class SaleItemResponse(BaseModel):
    """Committed sale line."""

    id: int | None = None
    sale_id: int | None = None
    product_id: int
    product_name: str = ""
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class InvoiceResponse(BaseModel):
    """Invoice issued for a sale."""

    id: int | None = None
    sale_id: int | None = None
    number: str
    date: datetime
    status: InvoiceStatus


class SaleResponse(BaseModel):
    """Committed sale with items, customer and invoice."""

    id: int
    request_id: str
    customer_id: int
    user_id: int
    sale_date: datetime
    payment_method: PaymentMethod
    payment_details: dict[str, str] = Field(default_factory=dict)
    total_amount: Decimal
    status: SaleStatus
    items: list[SaleItemResponse] = Field(default_factory=list)
    customer: CustomerResponse | None = None
    invoice: InvoiceResponse | None = None
    created_at: datetime
    updated_at: datetime


class SaleListResponse(BaseModel):
    """Page of sales."""

    sales: list[SaleResponse]
    total: int
    limit: int
    offset: int


class ReceiptLineResponse(BaseModel):
    """Printed receipt line."""

    product_id: int
    description: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class ReceiptResponse(BaseModel):
    """Structured receipt content."""

    company_name: str
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_tax_id: str = ""
    sale_id: int
    invoice_number: str | None = None
    sale_date: datetime
    customer_name: str
    customer_identification: str
    payment_method: PaymentMethod
    payment_label: str
    payment_details: dict[str, str] = Field(default_factory=dict)
    lines: list[ReceiptLineResponse]
    subtotal: Decimal
    tax_label: str = ""
    tax: Decimal
    total: Decimal
    currency_code: str
    currency_symbol: str
    amount_received: Decimal | None = None
    change_due: Decimal | None = None
    footer: str = ""


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - details: structured context (product, requested, available, ...)
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Structured error context"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


# Entity conversions shared by use cases and routes


def product_to_response(product: Product) -> ProductResponse:
    """Convert a Product entity to response DTO."""
    return ProductResponse(
        id=product.id,  # type: ignore[arg-type]
        name=product.name,
        description=product.description,
        selling_price=product.selling_price,
        stock=product.stock,
        min_stock=product.min_stock,
        category_id=product.category_id,
        is_low_stock=product.is_low_stock,
    )


def customer_to_response(customer: Customer) -> CustomerResponse:
    """Convert a Customer entity to response DTO."""
    return CustomerResponse(
        id=customer.id,  # type: ignore[arg-type]
        name=customer.name,
        id_type=customer.id_type,
        id_number=customer.id_number,
        email=customer.email,
        phone=customer.phone,
        created_at=customer.created_at,
    )


def sale_to_response(sale: Sale) -> SaleResponse:
    """Convert a Sale entity to response DTO."""
    return SaleResponse(
        id=sale.id,  # type: ignore[arg-type]
        request_id=sale.request_id,
        customer_id=sale.customer_id,
        user_id=sale.user_id,
        sale_date=sale.sale_date,
        payment_method=sale.payment_method,
        payment_details=sale.payment_details,
        total_amount=sale.total_amount,
        status=sale.status,
        items=[
            SaleItemResponse(
                id=item.id,
                sale_id=item.sale_id,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                subtotal=item.subtotal,
            )
            for item in sale.items
        ],
        customer=customer_to_response(sale.customer) if sale.customer else None,
        invoice=(
            InvoiceResponse(
                id=sale.invoice.id,
                sale_id=sale.invoice.sale_id,
                number=sale.invoice.number,
                date=sale.invoice.date,
                status=sale.invoice.status,
            )
            if sale.invoice
            else None
        ),
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )
