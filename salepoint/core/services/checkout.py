"""
Checkout session: the terminal side of a sale.

Wraps a SaleDraft with its draft cache and the gateway to the sale
service. Every mutation is written through to the cache as one snapshot,
and submission is guarded so that a burst of submit requests results in
exactly one call to the gateway.
"""

import asyncio
import time
from collections.abc import Callable
from decimal import Decimal

from salepoint.config import get_logger, sale_context
from salepoint.core.entities.cart import CartItem, TaxPolicy
from salepoint.core.entities.catalog import Customer, Product
from salepoint.core.entities.draft import DraftState
from salepoint.core.entities.sale import PaymentMethod, Sale, SaleSubmission
from salepoint.core.exceptions import (
    DraftCacheError,
    DraftLockedError,
    POSError,
    StorageError,
)
from salepoint.core.interfaces.draft_store import IDraftStore
from salepoint.core.interfaces.gateway import ISaleGateway
from salepoint.core.services.draft import SaleDraft

logger = get_logger(__name__)


class CheckoutSession:
    """
    One terminal's in-progress sale.

    Cache writes that fail are logged and do not interrupt the sale; the
    in-memory draft stays authoritative for the session.
    """

    def __init__(
        self,
        session_key: str,
        gateway: ISaleGateway,
        draft_store: IDraftStore | None = None,
        tax_policy: TaxPolicy | None = None,
        default_payment_method: PaymentMethod = PaymentMethod.CASH,
        submit_cooldown: float = 0.5,
        user_id: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_key = session_key
        self._gateway = gateway
        self._draft_store = draft_store
        self._tax_policy = tax_policy or TaxPolicy()
        self._default_payment_method = PaymentMethod(default_payment_method)
        self._submit_cooldown = submit_cooldown
        self._user_id = user_id
        self._clock = clock

        self._submit_lock = asyncio.Lock()
        self._cooldown_until = 0.0

        self.draft = SaleDraft(
            tax_policy=self._tax_policy,
            default_payment_method=self._default_payment_method,
        )

    @classmethod
    async def open(
        cls,
        session_key: str,
        gateway: ISaleGateway,
        draft_store: IDraftStore | None = None,
        **kwargs,
    ) -> "CheckoutSession":
        """Create a session, resuming its cached draft if there is one."""
        session = cls(session_key, gateway, draft_store, **kwargs)
        await session.resume()
        return session

    async def resume(self) -> bool:
        """Load the cached draft. Returns True if one was restored."""
        if self._draft_store is None:
            return False

        try:
            snapshot = await self._draft_store.load(self.session_key)
            if snapshot is None:
                return False
            self.draft = SaleDraft.from_snapshot(
                snapshot,
                tax_policy=self._tax_policy,
                default_payment_method=self._default_payment_method,
                session_key=self.session_key,
            )
        except DraftCacheError as e:
            logger.warning(
                "draft_cache_discarded",
                session_key=self.session_key,
                reason=e.details.get("reason"),
            )
            await self._delete_cache()
            return False

        logger.info(
            "draft_resumed",
            session_key=self.session_key,
            items=len(self.draft.items),
            state=self.draft.state.value,
        )
        return True

    # --- Read-only view ---

    @property
    def state(self) -> DraftState:
        return self.draft.state

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    def can_submit(self) -> bool:
        return self.draft.can_submit() and not self._submit_blocked()

    def total(self) -> Decimal:
        return self.draft.total()

    # --- Mutations ---

    async def select_customer(self, customer: Customer) -> None:
        self.draft.select_customer(customer)
        await self._save()

    async def add_item(self, product: Product, quantity: int = 1) -> CartItem:
        item = self.draft.add_item(product, quantity)
        await self._save()
        return item

    async def set_quantity(self, product_id: int, quantity: int) -> CartItem:
        item = self.draft.set_quantity(product_id, quantity)
        await self._save()
        return item

    async def remove_item(self, product_id: int) -> None:
        self.draft.remove_item(product_id)
        await self._save()

    async def select_payment_method(self, method: PaymentMethod | str) -> None:
        self.draft.select_payment_method(method)
        await self._save()

    async def set_payment_detail(self, field: str, value: str) -> None:
        self.draft.set_payment_detail(field, value)
        await self._save()

    def begin_confirmation(self) -> None:
        self.draft.begin_confirmation()

    def back_to_editing(self) -> None:
        self.draft.back_to_editing()

    async def cancel(self) -> None:
        """Discard the draft and its cache entry."""
        if self.is_submitting:
            raise DraftLockedError("cancel the sale")
        self.draft.reset()
        await self._delete_cache()
        logger.info("draft_cancelled", session_key=self.session_key)

    async def dismiss_receipt(self) -> None:
        """Leave the completed state and start an empty draft."""
        if self.draft.state is DraftState.COMPLETED:
            self.draft.reset()

    # --- Submission ---

    def _submit_blocked(self) -> bool:
        return self._submit_lock.locked() or self._clock() < self._cooldown_until

    async def submit(self) -> Sale | None:
        """
        Submit the draft through the gateway.

        Returns the committed sale, or None when the request was absorbed
        because a submission is in flight or just finished.

        Raises:
            DraftNotReadyError: The draft does not pass the submit gate.
            POSError: The gateway reported a failure. The draft is back in
                an editable state with all its data.
        """
        if self._submit_blocked():
            logger.info("duplicate_submit_ignored", session_key=self.session_key)
            return None

        async with self._submit_lock:
            self.draft.mark_submitting()
            submission = self.draft.to_submission(self._user_id)
            try:
                with sale_context(
                    session_key=self.session_key, request_id=submission.request_id
                ):
                    return await self._send(submission)
            finally:
                if self.draft.state is DraftState.SUBMITTING:
                    # Cancelled while awaiting the gateway
                    self.draft.mark_failed()
                self._cooldown_until = self._clock() + self._submit_cooldown

    async def _send(self, submission: SaleSubmission) -> Sale:
        logger.info(
            "sale_submitting",
            lines=len(submission.lines),
            total=str(submission.computed_total),
        )
        try:
            sale = await self._gateway.submit_sale(submission)
        except POSError as e:
            self.draft.mark_failed(e)
            logger.warning("sale_submit_failed", error_code=e.code, error=e.message)
            await self._save()
            raise
        except Exception as e:
            self.draft.mark_failed()
            logger.error("sale_submit_error", error=str(e))
            await self._save()
            raise

        self.draft.mark_completed(sale)
        await self._delete_cache()
        logger.info("sale_submitted", sale_id=sale.id, total=str(sale.total_amount))
        return sale

    # --- Cache ---

    async def _save(self) -> None:
        if self._draft_store is None:
            return
        try:
            await self._draft_store.save(self.session_key, self.draft.to_snapshot())
        except StorageError as e:
            logger.warning(
                "draft_cache_write_failed",
                session_key=self.session_key,
                error=e.message,
            )

    async def _delete_cache(self) -> None:
        if self._draft_store is None:
            return
        try:
            await self._draft_store.delete(self.session_key)
        except StorageError as e:
            logger.warning(
                "draft_cache_delete_failed",
                session_key=self.session_key,
                error=e.message,
            )
