"""
Receipt builder.

Turns a committed sale into the structured content of a receipt. Layout,
printing and PDF rendering are left to whatever displays the result.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from salepoint.core.entities.cart import TaxPolicy
from salepoint.core.entities.catalog import Customer
from salepoint.core.entities.money import ZERO, to_money
from salepoint.core.entities.sale import PaymentMethod, Sale
from salepoint.core.exceptions import ValidationError
from salepoint.core.services.payment_methods import get_cash_strategy, get_payment_strategy


@dataclass
class ReceiptLine:
    """One printed line."""

    product_id: int
    description: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass
class Receipt:
    """Structured receipt content for a committed sale."""

    company_name: str
    company_address: str
    company_phone: str
    company_email: str
    company_tax_id: str
    sale_id: int
    invoice_number: str | None
    sale_date: datetime
    customer_name: str
    customer_identification: str
    payment_method: PaymentMethod
    payment_label: str
    lines: list[ReceiptLine] = field(default_factory=list)
    subtotal: Decimal = ZERO
    tax_label: str = ""
    tax: Decimal = ZERO
    total: Decimal = ZERO
    payment_details: dict[str, str] = field(default_factory=dict)
    amount_received: Decimal | None = None
    change_due: Decimal | None = None
    footer: str = ""


def build_receipt(
    sale: Sale,
    customer: Customer | None,
    company: Any,
    tax_policy: TaxPolicy | None = None,
    amount_received: Decimal | None = None,
) -> Receipt:
    """
    Build receipt content for a committed sale.

    Args:
        sale: Committed sale with its items.
        customer: Customer of the sale; falls back to ``sale.customer``.
        company: Company header fields (``Settings.company``).
        tax_policy: Tax shown on top of the sale subtotal.
        amount_received: Cash handed over; defaults to the value recorded
            in the sale's payment details.

    Returns:
        Receipt with lines in the order they were sold.
    """
    if sale.id is None:
        raise ValidationError("sale", "Receipt requires a committed sale")

    customer = customer or sale.customer
    tax_policy = tax_policy or TaxPolicy()

    lines = [
        ReceiptLine(
            product_id=item.product_id,
            description=item.product_name or f"Product {item.product_id}",
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )
        for item in sale.items
    ]
    subtotal = sum((line.subtotal for line in lines), ZERO)
    tax = tax_policy.tax_for(subtotal)
    total = subtotal + tax

    change_due = None
    if sale.payment_method is PaymentMethod.CASH:
        cash = get_cash_strategy()
        if amount_received is None:
            amount_received = cash.amount_received(sale.payment_details)
        else:
            amount_received = to_money(amount_received)
        if amount_received is not None:
            change_due = cash.change_due(amount_received, total)
    else:
        amount_received = None

    return Receipt(
        company_name=company.name,
        company_address=company.address,
        company_phone=company.phone,
        company_email=company.email,
        company_tax_id=company.tax_id,
        sale_id=sale.id,
        invoice_number=sale.invoice.number if sale.invoice else None,
        sale_date=sale.sale_date,
        customer_name=customer.name if customer else "",
        customer_identification=customer.identification if customer else "",
        payment_method=sale.payment_method,
        payment_label=get_payment_strategy(sale.payment_method).label,
        lines=lines,
        subtotal=subtotal,
        tax_label=tax_policy.label if tax_policy.enabled else "",
        tax=tax,
        total=total,
        payment_details=dict(sale.payment_details),
        amount_received=amount_received,
        change_due=change_due,
        footer=company.receipt_footer,
    )
