"""Core domain entities."""

from salepoint.core.entities.cart import (
    Cart,
    CartItem,
    TaxPolicy,
    validate_quantity,
)
from salepoint.core.entities.catalog import (
    Customer,
    IdType,
    Product,
)
from salepoint.core.entities.draft import DRAFT_SCHEMA_VERSION, DraftSnapshot, DraftState
from salepoint.core.entities.money import ZERO, to_money
from salepoint.core.entities.sale import (
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Sale,
    SaleItem,
    SaleLine,
    SaleStatus,
    SaleSubmission,
)

__all__ = [
    # Catalog entities
    "Product",
    "Customer",
    "IdType",
    # Cart entities
    "Cart",
    "CartItem",
    "TaxPolicy",
    "validate_quantity",
    # Sale entities
    "Sale",
    "SaleItem",
    "SaleLine",
    "SaleSubmission",
    "SaleStatus",
    "PaymentMethod",
    "Invoice",
    "InvoiceStatus",
    # Draft entities
    "DraftState",
    "DraftSnapshot",
    "DRAFT_SCHEMA_VERSION",
    # Money
    "ZERO",
    "to_money",
]
