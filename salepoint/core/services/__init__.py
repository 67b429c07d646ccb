"""
Core business logic services.

Layer-pure services that depend only on:
- salepoint/core/entities/*
- salepoint/core/interfaces/*
- salepoint/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from salepoint.core.services.payment_methods import (
    PAYMENT_STRATEGIES,
    CashStrategy,
    PaymentMethodStrategy,
    get_cash_strategy,
    get_payment_strategy,
)
from salepoint.core.services.draft import SaleDraft
from salepoint.core.services.receipt import Receipt, ReceiptLine, build_receipt
from salepoint.core.services.checkout import CheckoutSession

__all__ = [
    # Payment methods
    "PaymentMethodStrategy",
    "CashStrategy",
    "PAYMENT_STRATEGIES",
    "get_payment_strategy",
    "get_cash_strategy",
    # Draft
    "SaleDraft",
    # Receipt
    "Receipt",
    "ReceiptLine",
    "build_receipt",
    # Checkout
    "CheckoutSession",
]
