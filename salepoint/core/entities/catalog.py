"""Catalog domain entities: products and customers."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from salepoint.core.entities.money import to_money


class IdType(str, Enum):
    """Customer identification document types."""

    NATIONAL = "NATIONAL"
    FOREIGN = "FOREIGN"
    PASSPORT = "PASSPORT"
    LEGAL_ENTITY = "LEGAL_ENTITY"
    OTHER = "OTHER"


class Product(BaseModel):
    """A sellable product with its current stock level."""

    id: int | None = None
    name: str
    description: str = ""
    selling_price: Decimal
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)
    category_id: int | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("selling_price", mode="before")
    @classmethod
    def quantize_price(cls, v: object) -> Decimal:
        return to_money(v)

    @property
    def is_low_stock(self) -> bool:
        """Stock at or below the configured minimum."""
        return self.stock <= self.min_stock


class Customer(BaseModel):
    """A customer identified by document type and number."""

    id: int | None = None
    name: str
    id_type: IdType = IdType.NATIONAL
    id_number: str
    email: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def identification(self) -> str:
        """Identification as shown on receipts, e.g. ``PASSPORT 12345``."""
        return f"{self.id_type.value} {self.id_number}"
