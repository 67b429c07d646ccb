"""Draft states and the versioned snapshot of an in-progress sale."""

from enum import Enum

from pydantic import BaseModel, Field

from salepoint.core.entities.cart import CartItem
from salepoint.core.entities.catalog import Customer
from salepoint.core.entities.sale import PaymentMethod

DRAFT_SCHEMA_VERSION = 1


class DraftState(str, Enum):
    """Checkout states."""

    EMPTY = "EMPTY"
    CUSTOMER_SELECTED = "CUSTOMER_SELECTED"
    HAS_ITEMS = "HAS_ITEMS"
    PAYMENT_READY = "PAYMENT_READY"
    CONFIRMING = "CONFIRMING"
    SUBMITTING = "SUBMITTING"
    COMPLETED = "COMPLETED"


class DraftSnapshot(BaseModel):
    """Serialized form of a draft, cached and restored as one unit."""

    schema_version: int = DRAFT_SCHEMA_VERSION
    request_id: str
    request_id_sent: bool = False
    customer: Customer | None = None
    items: list[CartItem] = Field(default_factory=list)
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_details: dict[str, str] = Field(default_factory=dict)
