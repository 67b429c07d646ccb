"""Sale domain entities."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from salepoint.core.entities.catalog import Customer
from salepoint.core.entities.money import ZERO, to_money


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    CASH = "CASH"
    MOBILE_PAYMENT = "MOBILE_PAYMENT"
    BANK_TRANSFER = "BANK_TRANSFER"
    POS_TERMINAL = "POS_TERMINAL"


class SaleStatus(str, Enum):
    """Sale lifecycle status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    ISSUED = "ISSUED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class SaleLine(BaseModel):
    """One submitted line of a sale, as priced by the terminal."""

    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal | None = None  # advisory, recomputed server-side

    @field_validator("unit_price", mode="before")
    @classmethod
    def quantize_price(cls, v: object) -> Decimal:
        return to_money(v)

    @field_validator("subtotal", mode="before")
    @classmethod
    def quantize_subtotal(cls, v: object) -> Decimal | None:
        return None if v is None else to_money(v)

    @property
    def line_total(self) -> Decimal:
        """Authoritative line amount: quantity x submitted unit price."""
        return to_money(self.unit_price * self.quantity)


class SaleSubmission(BaseModel):
    """Everything the finalization transaction needs to commit a sale."""

    request_id: str
    customer_id: int
    user_id: int | None = None
    lines: list[SaleLine]
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_details: dict[str, str] = Field(default_factory=dict)
    client_total: Decimal | None = None  # advisory only

    @field_validator("client_total", mode="before")
    @classmethod
    def quantize_total(cls, v: object) -> Decimal | None:
        return None if v is None else to_money(v)

    @property
    def computed_total(self) -> Decimal:
        """Sum of authoritative line totals."""
        return sum((line.line_total for line in self.lines), ZERO)


class SaleItem(BaseModel):
    """A persisted line item. Immutable snapshot of what was sold."""

    id: int | None = None
    sale_id: int | None = None
    product_id: int
    product_name: str = ""
    quantity: int
    unit_price: Decimal
    subtotal: Decimal = ZERO

    @field_validator("unit_price", "subtotal", mode="before")
    @classmethod
    def quantize(cls, v: object) -> Decimal:
        return to_money(v)

    @model_validator(mode="after")
    def compute_subtotal(self) -> "SaleItem":
        """subtotal = quantity * unit_price."""
        self.subtotal = to_money(self.unit_price * self.quantity)
        return self


class Invoice(BaseModel):
    """Invoice issued for a completed sale."""

    id: int | None = None
    sale_id: int | None = None
    number: str
    date: datetime = Field(default_factory=datetime.utcnow)
    status: InvoiceStatus = InvoiceStatus.ISSUED


class Sale(BaseModel):
    """A committed sale with its line items."""

    id: int | None = None
    request_id: str
    customer_id: int
    user_id: int
    sale_date: datetime = Field(default_factory=datetime.utcnow)
    payment_method: PaymentMethod
    payment_details: dict[str, str] = Field(default_factory=dict)
    total_amount: Decimal = ZERO
    status: SaleStatus = SaleStatus.PENDING
    items: list[SaleItem] = Field(default_factory=list)
    customer: Customer | None = None
    invoice: Invoice | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("total_amount", mode="before")
    @classmethod
    def quantize_total(cls, v: object) -> Decimal:
        return to_money(v)

    @model_validator(mode="after")
    def compute_total(self) -> "Sale":
        """total_amount is always the sum of item subtotals."""
        if self.items:
            self.total_amount = sum((i.subtotal for i in self.items), ZERO)
        return self
