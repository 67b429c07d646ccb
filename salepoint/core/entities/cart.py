"""Cart model: ordered line items with derived subtotal, tax and total.

Pure data and arithmetic. Stock checks here run against the product
snapshot the terminal holds, which may be stale; the finalization
transaction re-checks against authoritative stock.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from salepoint.core.entities.catalog import Product
from salepoint.core.entities.money import ZERO, to_money
from salepoint.core.exceptions import (
    InvalidQuantityError,
    StockExceededError,
    ValidationError,
)


class TaxPolicy(BaseModel):
    """Tax rate applied on top of the cart subtotal."""

    model_config = ConfigDict(frozen=True)

    rate: Decimal = Decimal("0.16")
    enabled: bool = False
    label: str = "VAT"

    def tax_for(self, amount: Decimal) -> Decimal:
        """Tax owed on ``amount``; zero when tax is disabled."""
        if not self.enabled:
            return ZERO
        return to_money(amount * self.rate)

    @classmethod
    def from_settings(cls, settings: Any) -> "TaxPolicy":
        """Build from ``Settings.sales``."""
        return cls(
            rate=Decimal(str(settings.sales.tax_rate)),
            enabled=settings.sales.tax_enabled,
            label=settings.sales.tax_label,
        )


def validate_quantity(quantity: Any, product_id: int | None = None) -> int:
    """Return ``quantity`` if it is a positive int, else raise InvalidQuantityError."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantityError(quantity, product_id)
    return quantity


class CartItem(BaseModel):
    """One cart line: a product snapshot at a quantity and frozen unit price."""

    product_id: int
    product: Product
    quantity: int = Field(ge=1)
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    @property
    def known_stock(self) -> int:
        """Stock as last seen by the terminal."""
        return self.product.stock


class Cart(BaseModel):
    """Insertion-ordered collection of cart lines."""

    items: list[CartItem] = Field(default_factory=list)
    tax_policy: TaxPolicy = Field(default_factory=TaxPolicy, exclude=True)

    def _find(self, product_id: int) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, product: Product, quantity: int) -> CartItem:
        """Add ``quantity`` of ``product``, merging into an existing line.

        The existing line keeps its original unit price; its stock snapshot
        is refreshed from ``product``. Nothing changes if the check fails.
        """
        if product.id is None:
            raise ValidationError("product_id", "Product has no id")
        validate_quantity(quantity, product.id)

        existing = self._find(product.id)
        resulting = quantity + (existing.quantity if existing else 0)
        if resulting > product.stock:
            raise StockExceededError(product.id, resulting, product.stock)

        if existing is not None:
            existing.quantity = resulting
            existing.product = product
            return existing

        item = CartItem(
            product_id=product.id,
            product=product,
            quantity=quantity,
            unit_price=product.selling_price,
        )
        self.items.append(item)
        return item

    def set_quantity(self, product_id: int, quantity: int) -> CartItem:
        """Replace a line's quantity."""
        validate_quantity(quantity, product_id)
        item = self._find(product_id)
        if item is None:
            raise ValidationError("product_id", "Product is not in the cart", product_id)
        if quantity > item.known_stock:
            raise StockExceededError(product_id, quantity, item.known_stock)
        item.quantity = quantity
        return item

    def remove_item(self, product_id: int) -> None:
        """Remove a line. Absent lines are ignored."""
        self.items = [i for i in self.items if i.product_id != product_id]

    def clear(self) -> None:
        self.items = []

    def quantity_of(self, product_id: int) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def subtotal(self) -> Decimal:
        return sum((i.subtotal for i in self.items), ZERO)

    def tax(self) -> Decimal:
        return self.tax_policy.tax_for(self.subtotal())

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()
