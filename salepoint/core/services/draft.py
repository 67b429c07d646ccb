"""
Sale draft: the in-progress sale assembled at the terminal.

The draft owns the customer selection, the cart, the payment method and
the payment detail fields. Its state is derived from that data, except
for the confirmation, submission and completion phases which are set
explicitly by the checkout flow.

The whole draft serializes to a single versioned snapshot so that it can
be cached and resumed as one unit.
"""

import uuid
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from salepoint.core.entities.cart import Cart, CartItem, TaxPolicy
from salepoint.core.entities.catalog import Customer, Product
from salepoint.core.entities.draft import DRAFT_SCHEMA_VERSION, DraftSnapshot, DraftState
from salepoint.core.entities.money import ZERO
from salepoint.core.entities.sale import PaymentMethod, Sale, SaleLine, SaleSubmission
from salepoint.core.exceptions import (
    DraftCacheError,
    DraftLockedError,
    DraftNotReadyError,
    POSError,
    ValidationError,
)
from salepoint.core.services.payment_methods import get_cash_strategy, get_payment_strategy


def _new_request_id() -> str:
    return uuid.uuid4().hex


class SaleDraft:
    """Checkout state machine over customer, cart and payment details."""

    def __init__(
        self,
        tax_policy: TaxPolicy | None = None,
        default_payment_method: PaymentMethod = PaymentMethod.CASH,
        request_id: str | None = None,
    ):
        self.tax_policy = tax_policy or TaxPolicy()
        self.default_payment_method = PaymentMethod(default_payment_method)
        self.request_id = request_id or _new_request_id()

        self.customer: Customer | None = None
        self.cart = Cart(tax_policy=self.tax_policy)
        self.payment_method = self.default_payment_method
        self.payment_details: dict[str, str] = {}

        self.completed_sale: Sale | None = None
        self.last_error: POSError | None = None
        self._phase: DraftState | None = None
        self._customer_before_submit: Customer | None = None
        # request_id has reached the gateway at least once
        self._request_id_sent = False

    # --- Derived state ---

    @property
    def state(self) -> DraftState:
        if self._phase is not None:
            return self._phase
        if not self.cart.is_empty:
            if self.customer is not None and self.payment_is_valid():
                return DraftState.PAYMENT_READY
            return DraftState.HAS_ITEMS
        if self.customer is not None:
            return DraftState.CUSTOMER_SELECTED
        return DraftState.EMPTY

    @property
    def items(self) -> list[CartItem]:
        return list(self.cart.items)

    def subtotal(self) -> Decimal:
        return self.cart.subtotal()

    def tax(self) -> Decimal:
        return self.cart.tax()

    def total(self) -> Decimal:
        return self.cart.total()

    def payment_is_valid(self) -> bool:
        return get_payment_strategy(self.payment_method).is_valid(self.payment_details)

    def submission_blockers(self) -> list[str]:
        """Reasons the draft cannot be submitted; empty when it can."""
        reasons = []
        if self._phase in (DraftState.SUBMITTING, DraftState.COMPLETED):
            reasons.append(f"sale is {self._phase.value.lower()}")
        if self.customer is None:
            reasons.append("no customer selected")
        if self.cart.is_empty:
            reasons.append("cart is empty")
        missing = get_payment_strategy(self.payment_method).validate(
            self.payment_details
        )
        if missing:
            reasons.append(f"missing payment details: {', '.join(missing)}")
        return reasons

    def can_submit(self) -> bool:
        return not self.submission_blockers()

    def change_due(self) -> Decimal:
        """Change owed for a cash sale; zero for other methods."""
        if self.payment_method is not PaymentMethod.CASH:
            return ZERO
        cash = get_cash_strategy()
        received = cash.amount_received(self.payment_details)
        if received is None:
            return ZERO
        return cash.change_due(received, self.total())

    # --- Mutations ---

    def _begin_edit(self, operation: str) -> None:
        if self._phase is DraftState.SUBMITTING:
            raise DraftLockedError(operation)
        if self._phase is DraftState.COMPLETED:
            self.reset()
        elif self._request_id_sent:
            # The earlier attempt may have committed; edits make a different sale
            self.request_id = _new_request_id()
            self._request_id_sent = False
        self._phase = None

    def select_customer(self, customer: Customer) -> None:
        """Replace the current customer."""
        self._begin_edit("select a customer")
        if customer.id is None:
            raise ValidationError("customer", "Customer must be saved before selection")
        self.customer = customer

    def add_item(self, product: Product, quantity: int) -> CartItem:
        self._begin_edit("add an item")
        return self.cart.add_item(product, quantity)

    def set_quantity(self, product_id: int, quantity: int) -> CartItem:
        self._begin_edit("change a quantity")
        return self.cart.set_quantity(product_id, quantity)

    def remove_item(self, product_id: int) -> None:
        self._begin_edit("remove an item")
        self.cart.remove_item(product_id)

    def select_payment_method(self, method: PaymentMethod | str) -> None:
        """Switch payment method. Previously entered details are discarded."""
        self._begin_edit("change the payment method")
        self.payment_method = get_payment_strategy(method).method
        self.payment_details = {}

    def set_payment_detail(self, field: str, value: str) -> None:
        """Merge one payment detail field. Validated only at the submit gate."""
        self._begin_edit("edit payment details")
        if not field:
            raise ValidationError("payment_details", "Field name is required")
        self.payment_details = {**self.payment_details, field: value}

    # --- Checkout phases ---

    def begin_confirmation(self) -> None:
        """Enter the confirmation step.

        Cash sales also require the amount received, when entered, to cover
        the total.
        """
        if self._phase is DraftState.SUBMITTING:
            raise DraftLockedError("confirm")
        blockers = self.submission_blockers()
        if blockers:
            raise DraftNotReadyError(blockers)
        if self.payment_method is PaymentMethod.CASH:
            get_cash_strategy().check_amount_received(self.payment_details, self.total())
        self._phase = DraftState.CONFIRMING

    def back_to_editing(self) -> None:
        if self._phase is DraftState.CONFIRMING:
            self._phase = None

    def to_submission(self, user_id: int | None = None) -> SaleSubmission:
        """Build the finalization payload."""
        if self.customer is None or self.customer.id is None:
            raise DraftNotReadyError(["no customer selected"])
        return SaleSubmission(
            request_id=self.request_id,
            customer_id=self.customer.id,
            user_id=user_id,
            lines=[
                SaleLine(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in self.cart.items
            ],
            payment_method=self.payment_method,
            payment_details=dict(self.payment_details),
            client_total=self.subtotal(),
        )

    def mark_submitting(self) -> None:
        blockers = self.submission_blockers()
        if blockers:
            raise DraftNotReadyError(blockers)
        self._customer_before_submit = self.customer
        self.last_error = None
        self._request_id_sent = True
        self._phase = DraftState.SUBMITTING

    def mark_completed(self, sale: Sale) -> None:
        """Record the committed sale and clear the draft data."""
        self._clear_data()
        self.completed_sale = sale
        self._phase = DraftState.COMPLETED

    def mark_failed(self, error: POSError | None = None) -> None:
        """Return to editing with every entered value intact."""
        if self.customer is None:
            self.customer = self._customer_before_submit
        self._customer_before_submit = None
        self.last_error = error
        self._phase = None

    def reset(self) -> None:
        """Discard everything and start a fresh draft."""
        self._clear_data()
        self.completed_sale = None
        self.last_error = None
        self._phase = None

    def _clear_data(self) -> None:
        self.customer = None
        self.cart.clear()
        self.payment_method = self.default_payment_method
        self.payment_details = {}
        self._customer_before_submit = None
        self.request_id = _new_request_id()
        self._request_id_sent = False

    # --- Serialization ---

    def to_snapshot(self) -> DraftSnapshot:
        return DraftSnapshot(
            request_id=self.request_id,
            request_id_sent=self._request_id_sent,
            customer=self.customer,
            items=[item.model_copy(deep=True) for item in self.cart.items],
            payment_method=self.payment_method,
            payment_details=dict(self.payment_details),
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: DraftSnapshot | dict,
        tax_policy: TaxPolicy | None = None,
        default_payment_method: PaymentMethod = PaymentMethod.CASH,
        session_key: str = "",
    ) -> "SaleDraft":
        """Rebuild a draft from a snapshot.

        Raises DraftCacheError for snapshots of another schema version or
        that do not parse.
        """
        if isinstance(snapshot, dict):
            version = snapshot.get("schema_version")
            if version != DRAFT_SCHEMA_VERSION:
                raise DraftCacheError(session_key, f"unsupported schema version {version}")
            try:
                snapshot = DraftSnapshot.model_validate(snapshot)
            except PydanticValidationError as e:
                raise DraftCacheError(session_key, str(e)) from e
        elif snapshot.schema_version != DRAFT_SCHEMA_VERSION:
            raise DraftCacheError(
                session_key, f"unsupported schema version {snapshot.schema_version}"
            )

        draft = cls(
            tax_policy=tax_policy,
            default_payment_method=default_payment_method,
            request_id=snapshot.request_id,
        )
        draft.customer = snapshot.customer
        draft.cart.items = [item.model_copy(deep=True) for item in snapshot.items]
        draft.payment_method = snapshot.payment_method
        draft.payment_details = dict(snapshot.payment_details)
        draft._request_id_sent = snapshot.request_id_sent
        return draft
