"""Tests for the sale draft state machine."""

from decimal import Decimal

import pytest

from salepoint.core.entities import (
    DRAFT_SCHEMA_VERSION,
    DraftState,
    PaymentMethod,
    Sale,
    SaleItem,
    TaxPolicy,
)
from salepoint.core.exceptions import (
    DraftCacheError,
    DraftLockedError,
    DraftNotReadyError,
    InsufficientPaymentError,
    InsufficientStockError,
    StockExceededError,
    ValidationError,
)
from salepoint.core.services.draft import SaleDraft


@pytest.fixture
def draft() -> SaleDraft:
    return SaleDraft()


@pytest.fixture
def ready_draft(draft, customer, coffee, milk) -> SaleDraft:
    """Customer, two lines and cash: ready to submit."""
    draft.select_customer(customer)
    draft.add_item(coffee, 2)
    draft.add_item(milk, 3)
    return draft


def _committed_sale(request_id: str = "r-1") -> Sale:
    return Sale(
        id=1,
        request_id=request_id,
        customer_id=7,
        user_id=1,
        payment_method=PaymentMethod.CASH,
        items=[SaleItem(product_id=1, quantity=2, unit_price="10.00")],
    )


class TestDerivedState:
    def test_starts_empty(self, draft):
        assert draft.state is DraftState.EMPTY
        assert draft.payment_method is PaymentMethod.CASH
        assert draft.payment_details == {}
        assert draft.can_submit() is False

    def test_customer_selected(self, draft, customer):
        draft.select_customer(customer)
        assert draft.state is DraftState.CUSTOMER_SELECTED

    def test_items_without_customer(self, draft, coffee):
        draft.add_item(coffee, 1)
        assert draft.state is DraftState.HAS_ITEMS
        assert draft.can_submit() is False
        assert "no customer selected" in draft.submission_blockers()

    def test_cash_with_customer_and_items_is_ready(self, ready_draft):
        assert ready_draft.state is DraftState.PAYMENT_READY
        assert ready_draft.can_submit() is True

    def test_incomplete_details_stay_in_has_items(self, ready_draft):
        ready_draft.select_payment_method(PaymentMethod.BANK_TRANSFER)
        assert ready_draft.state is DraftState.HAS_ITEMS
        assert ready_draft.can_submit() is False

    def test_removing_last_item(self, ready_draft):
        ready_draft.remove_item(1)
        ready_draft.remove_item(2)
        assert ready_draft.state is DraftState.CUSTOMER_SELECTED

    def test_customer_must_be_saved(self, draft, customer):
        with pytest.raises(ValidationError):
            draft.select_customer(customer.model_copy(update={"id": None}))
        assert draft.customer is None

    def test_can_replace_customer(self, draft, customer):
        draft.select_customer(customer)
        other = customer.model_copy(update={"id": 8, "name": "Luis"})
        draft.select_customer(other)
        assert draft.customer.id == 8


class TestPaymentDetails:
    def test_switching_method_clears_details(self, ready_draft, mobile_details):
        ready_draft.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        for name, value in mobile_details.items():
            ready_draft.set_payment_detail(name, value)
        assert ready_draft.payment_details == mobile_details

        ready_draft.select_payment_method(PaymentMethod.POS_TERMINAL)
        assert ready_draft.payment_details == {}

    def test_reselecting_same_method_clears_details(self, ready_draft):
        ready_draft.select_payment_method(PaymentMethod.CASH)
        ready_draft.set_payment_detail("amount_received", "50")
        ready_draft.select_payment_method(PaymentMethod.CASH)
        assert ready_draft.payment_details == {}

    def test_submit_gate_follows_validator(self, ready_draft, mobile_details):
        ready_draft.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        ready_draft.set_payment_detail("phone_number", mobile_details["phone_number"])
        ready_draft.set_payment_detail("reference", mobile_details["reference"])
        ready_draft.set_payment_detail("bank", "")
        assert ready_draft.can_submit() is False

        ready_draft.set_payment_detail("bank", mobile_details["bank"])
        assert ready_draft.can_submit() is True
        assert ready_draft.state is DraftState.PAYMENT_READY

    def test_field_name_required(self, draft):
        with pytest.raises(ValidationError):
            draft.set_payment_detail("", "x")

    def test_change_due(self, ready_draft):
        ready_draft.set_payment_detail("amount_received", "50")
        assert ready_draft.change_due() == Decimal("13.50")

    def test_change_due_non_cash(self, ready_draft, mobile_details):
        ready_draft.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        assert ready_draft.change_due() == Decimal("0.00")


class TestConfirmation:
    def test_begin_and_back(self, ready_draft):
        ready_draft.begin_confirmation()
        assert ready_draft.state is DraftState.CONFIRMING

        ready_draft.back_to_editing()
        assert ready_draft.state is DraftState.PAYMENT_READY

    def test_not_ready(self, draft, coffee):
        draft.add_item(coffee, 1)
        with pytest.raises(DraftNotReadyError) as exc_info:
            draft.begin_confirmation()
        assert "no customer selected" in exc_info.value.details["reasons"]

    def test_short_cash_blocks_confirmation(self, ready_draft):
        ready_draft.set_payment_detail("amount_received", "20")
        with pytest.raises(InsufficientPaymentError):
            ready_draft.begin_confirmation()
        assert ready_draft.state is DraftState.PAYMENT_READY

    def test_edit_leaves_confirmation(self, ready_draft):
        ready_draft.begin_confirmation()
        ready_draft.set_quantity(1, 1)
        assert ready_draft.state is DraftState.PAYMENT_READY


class TestSubmissionPhases:
    def test_to_submission(self, ready_draft):
        submission = ready_draft.to_submission(user_id=3)

        assert submission.request_id == ready_draft.request_id
        assert submission.customer_id == 7
        assert submission.user_id == 3
        assert [(line.product_id, line.quantity) for line in submission.lines] == [(1, 2), (2, 3)]
        assert submission.client_total == Decimal("36.50")

    def test_submitting_locks_edits(self, ready_draft, coffee, customer):
        ready_draft.mark_submitting()
        assert ready_draft.state is DraftState.SUBMITTING
        assert ready_draft.can_submit() is False

        with pytest.raises(DraftLockedError):
            ready_draft.add_item(coffee, 1)
        with pytest.raises(DraftLockedError):
            ready_draft.select_customer(customer)
        with pytest.raises(DraftLockedError):
            ready_draft.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        with pytest.raises(DraftLockedError):
            ready_draft.begin_confirmation()

    def test_mark_submitting_requires_gate(self, draft):
        with pytest.raises(DraftNotReadyError):
            draft.mark_submitting()

    def test_failure_preserves_everything(self, ready_draft):
        request_id = ready_draft.request_id
        ready_draft.set_payment_detail("amount_received", "40")
        ready_draft.mark_submitting()

        error = InsufficientStockError(2, 3, 1, "Milk 1L")
        ready_draft.mark_failed(error)

        assert ready_draft.state is DraftState.PAYMENT_READY
        assert ready_draft.customer.id == 7
        assert [i.quantity for i in ready_draft.items] == [2, 3]
        assert ready_draft.payment_details == {"amount_received": "40"}
        assert ready_draft.request_id == request_id
        assert ready_draft.last_error is error

    def test_failure_restores_customer(self, ready_draft):
        ready_draft.mark_submitting()
        ready_draft.customer = None
        ready_draft.mark_failed()
        assert ready_draft.customer.id == 7

    def test_confirming_again_keeps_request_id(self, ready_draft):
        request_id = ready_draft.request_id
        ready_draft.mark_submitting()
        ready_draft.mark_failed()

        ready_draft.begin_confirmation()
        ready_draft.back_to_editing()

        assert ready_draft.request_id == request_id

    @pytest.mark.parametrize(
        "edit",
        [
            lambda d: d.set_quantity(2, 1),
            lambda d: d.remove_item(2),
            lambda d: d.select_payment_method(PaymentMethod.POS_TERMINAL),
            lambda d: d.set_payment_detail("amount_received", "50"),
        ],
    )
    def test_edit_after_submit_attempt_rotates_request_id(self, ready_draft, edit):
        request_id = ready_draft.request_id
        ready_draft.mark_submitting()
        ready_draft.mark_failed()

        edit(ready_draft)
        rotated = ready_draft.request_id
        ready_draft.set_payment_detail("note", "second edit")

        assert rotated != request_id
        assert ready_draft.request_id == rotated

    def test_edit_before_any_submit_keeps_request_id(self, ready_draft):
        request_id = ready_draft.request_id
        ready_draft.set_quantity(2, 1)
        assert ready_draft.request_id == request_id

    def test_completion_clears_data(self, ready_draft):
        request_id = ready_draft.request_id
        ready_draft.mark_submitting()
        sale = _committed_sale(request_id)
        ready_draft.mark_completed(sale)

        assert ready_draft.state is DraftState.COMPLETED
        assert ready_draft.completed_sale is sale
        assert ready_draft.items == []
        assert ready_draft.customer is None
        assert ready_draft.payment_method is PaymentMethod.CASH
        assert ready_draft.request_id != request_id

    def test_edit_after_completion_starts_fresh(self, ready_draft, coffee):
        ready_draft.mark_submitting()
        ready_draft.mark_completed(_committed_sale())

        ready_draft.add_item(coffee, 1)

        assert ready_draft.completed_sale is None
        assert ready_draft.state is DraftState.HAS_ITEMS

    def test_reset(self, ready_draft):
        ready_draft.select_payment_method(PaymentMethod.BANK_TRANSFER)
        ready_draft.reset()

        assert ready_draft.state is DraftState.EMPTY
        assert ready_draft.payment_method is PaymentMethod.CASH

    def test_default_payment_method(self):
        draft = SaleDraft(default_payment_method=PaymentMethod.POS_TERMINAL)
        assert draft.payment_method is PaymentMethod.POS_TERMINAL
        draft.select_payment_method(PaymentMethod.CASH)
        draft.reset()
        assert draft.payment_method is PaymentMethod.POS_TERMINAL


class TestSnapshot:
    def test_restores_whole_draft(self, ready_draft, mobile_details):
        ready_draft.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        for name, value in mobile_details.items():
            ready_draft.set_payment_detail(name, value)

        restored = SaleDraft.from_snapshot(ready_draft.to_snapshot().model_dump(mode="json"))

        assert restored.request_id == ready_draft.request_id
        assert restored.customer == ready_draft.customer
        assert [(i.product_id, i.quantity, i.unit_price) for i in restored.items] == [
            (1, 2, Decimal("10.00")),
            (2, 3, Decimal("5.50")),
        ]
        assert restored.payment_method is PaymentMethod.MOBILE_PAYMENT
        assert restored.payment_details == mobile_details
        assert restored.state is DraftState.PAYMENT_READY

    def test_snapshot_is_detached(self, ready_draft):
        snapshot = ready_draft.to_snapshot()
        ready_draft.set_quantity(1, 5)
        assert snapshot.items[0].quantity == 2

    def test_restored_stock_snapshot_still_enforced(self, ready_draft):
        restored = SaleDraft.from_snapshot(ready_draft.to_snapshot())
        with pytest.raises(StockExceededError):
            restored.set_quantity(2, 4)

    def test_tax_policy_applied_on_restore(self, ready_draft):
        policy = TaxPolicy(rate=Decimal("0.10"), enabled=True)
        restored = SaleDraft.from_snapshot(ready_draft.to_snapshot(), tax_policy=policy)
        assert restored.tax() == Decimal("3.65")

    def test_rejects_other_schema_version(self, ready_draft):
        payload = ready_draft.to_snapshot().model_dump(mode="json")
        payload["schema_version"] = DRAFT_SCHEMA_VERSION + 1

        with pytest.raises(DraftCacheError) as exc_info:
            SaleDraft.from_snapshot(payload, session_key="till-1")
        assert exc_info.value.details["session_key"] == "till-1"

    def test_rejects_unparseable_payload(self):
        with pytest.raises(DraftCacheError):
            SaleDraft.from_snapshot(
                {"schema_version": DRAFT_SCHEMA_VERSION, "items": "not a list"}
            )
