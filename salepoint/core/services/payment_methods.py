"""
Payment method strategies.

Each method declares the detail fields it needs and validates a details
mapping structurally (presence and non-blank values). Bank codes and
references are recorded as entered; nothing here talks to a payment
processor.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from salepoint.core.entities.money import ZERO, to_money
from salepoint.core.entities.sale import PaymentMethod
from salepoint.core.exceptions import (
    InsufficientPaymentError,
    PaymentDetailsIncompleteError,
    ValidationError,
)


@dataclass(frozen=True)
class PaymentMethodStrategy:
    """Field requirements and validation for one payment method."""

    method: PaymentMethod
    label: str
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        """All detail fields in entry order."""
        return self.required_fields + self.optional_fields

    def validate(self, details: Mapping[str, str]) -> list[str]:
        """Required fields that are absent or blank, in declaration order."""
        return [
            name
            for name in self.required_fields
            if not str(details.get(name) or "").strip()
        ]

    def is_valid(self, details: Mapping[str, str]) -> bool:
        return not self.validate(details)

    def ensure_valid(self, details: Mapping[str, str]) -> None:
        """Raise PaymentDetailsIncompleteError if any required field is missing."""
        missing = self.validate(details)
        if missing:
            raise PaymentDetailsIncompleteError(self.method.value, missing)


@dataclass(frozen=True)
class CashStrategy(PaymentMethodStrategy):
    """Cash needs no details to commit; amount received only drives change."""

    method: PaymentMethod = PaymentMethod.CASH
    label: str = "Cash"
    optional_fields: tuple[str, ...] = field(default=("amount_received",))

    @staticmethod
    def amount_received(details: Mapping[str, str]) -> Decimal | None:
        raw = str(details.get("amount_received") or "").strip()
        if not raw:
            return None
        try:
            return to_money(raw)
        except ValueError as e:
            raise ValidationError("amount_received", "Not a valid amount", raw) from e

    @staticmethod
    def change_due(amount_received: Decimal, total: Decimal) -> Decimal:
        """Change to hand back, never negative."""
        return max(to_money(amount_received) - to_money(total), ZERO)

    def check_amount_received(self, details: Mapping[str, str], total: Decimal) -> Decimal:
        """Advisory check used before confirmation. Returns the change due.

        A missing amount is accepted (exact cash assumed).
        """
        received = self.amount_received(details)
        if received is None:
            return ZERO
        if received < total:
            raise InsufficientPaymentError(received, total)
        return self.change_due(received, total)


CASH = CashStrategy()

PAYMENT_STRATEGIES: dict[PaymentMethod, PaymentMethodStrategy] = {
    PaymentMethod.CASH: CASH,
    PaymentMethod.MOBILE_PAYMENT: PaymentMethodStrategy(
        method=PaymentMethod.MOBILE_PAYMENT,
        label="Mobile payment",
        required_fields=("phone_number", "bank", "reference"),
    ),
    PaymentMethod.BANK_TRANSFER: PaymentMethodStrategy(
        method=PaymentMethod.BANK_TRANSFER,
        label="Bank transfer",
        required_fields=("source_bank", "target_bank", "reference"),
    ),
    PaymentMethod.POS_TERMINAL: PaymentMethodStrategy(
        method=PaymentMethod.POS_TERMINAL,
        label="Card terminal",
        required_fields=("bank", "last_digits", "reference"),
    ),
}


def get_payment_strategy(method: PaymentMethod | str) -> PaymentMethodStrategy:
    """Look up the strategy for ``method``."""
    try:
        return PAYMENT_STRATEGIES[PaymentMethod(method)]
    except ValueError as e:
        raise ValidationError("payment_method", "Unsupported payment method", method) from e


def get_cash_strategy() -> CashStrategy:
    return CASH
