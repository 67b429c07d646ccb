"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from salepoint.core.entities.catalog import IdType
from salepoint.core.entities.sale import PaymentMethod


class SaleLineRequest(BaseModel):
    """One line of a sale as priced by the terminal."""

    product_id: int = Field(..., description="Product ID", examples=[1])
    quantity: int = Field(
        ...,
        strict=True,
        description="Units sold; must be a positive integer",
        examples=[2],
    )
    unit_price: Decimal = Field(
        ...,
        description="Unit price captured when the product was added to the cart",
        examples=["5.50"],
    )
    subtotal: Decimal | None = Field(
        default=None,
        description="Line subtotal as shown to the operator (advisory)",
    )


class FinalizeSaleRequest(BaseModel):
    """Request to commit a sale.

    ``request_id`` is the idempotency key of the draft: resubmitting the
    same key returns the sale already committed for it.
    """

    request_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Idempotency key generated by the terminal for this draft",
        examples=["3f2b9c1e4d5a4b6c8e7f9a0b1c2d3e4f"],
    )
    customer_id: int = Field(..., description="Customer ID", examples=[1])
    user_id: int | None = Field(
        default=None,
        description="Operator ID (defaults to the configured operator)",
    )
    lines: list[SaleLineRequest] = Field(
        default_factory=list,
        description="Sale lines in cart order",
    )
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        description="Payment method",
    )
    payment_details: dict[str, str] = Field(
        default_factory=dict,
        description="Method-specific payment fields",
        examples=[{"phone_number": "04141234567", "bank": "0102", "reference": "123456"}],
    )
    client_total: Decimal | None = Field(
        default=None,
        description="Total shown by the terminal (advisory, recomputed server-side)",
    )


class CustomerSearchRequest(BaseModel):
    """Exact customer lookup by identification document."""

    id_type: IdType = Field(default=IdType.NATIONAL, description="Document type")
    id_number: str = Field(
        ...,
        min_length=1,
        max_length=32,
        description="Document number",
        examples=["12345678"],
    )


class CreateCustomerRequest(BaseModel):
    """Request to register a customer."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Ana Pérez"])
    id_type: IdType = Field(default=IdType.NATIONAL, description="Document type")
    id_number: str = Field(..., min_length=1, max_length=32, examples=["12345678"])
    email: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
