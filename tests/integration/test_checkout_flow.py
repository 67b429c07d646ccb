"""
End-to-end checkout: terminal session -> HTTP gateway -> API -> SQLite.

The gateway talks to the real application in-process, and both the sale
database and the draft cache are temporary SQLite files.
"""

from decimal import Decimal
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from salepoint.api.main import app
from salepoint.core.entities import Customer, DraftState, IdType, PaymentMethod, Product
from salepoint.core.exceptions import InsufficientStockError, SubmissionTimeoutError
from salepoint.core.services.checkout import CheckoutSession
from salepoint.infrastructure.gateway import HttpSaleGateway
from salepoint.infrastructure.storage.sqlite import (
    SQLiteDraftStore,
    get_connection,
    get_customer_store,
    get_product_store,
    get_sales_store,
)


@pytest.fixture
async def catalog(pos_db) -> dict:
    products = await get_product_store()
    customers = await get_customer_store()
    return {
        "beans": await products.create(
            Product(name="Black Beans 1kg", selling_price=Decimal("4.25"), stock=10)
        ),
        "customer": await customers.create(
            Customer(name="Ana Perez", id_type=IdType.NATIONAL, id_number="12345678")
        ),
    }


@pytest.fixture
async def gateway():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield HttpSaleGateway(base_url="http://test", client=client, max_retries=1, retry_delay=0)


@pytest.fixture
async def draft_store(tmp_path: Path):
    store = SQLiteDraftStore(db_path=tmp_path / "drafts.db", busy_timeout=1000)
    try:
        yield store
    finally:
        await store.close()


async def _stock(product_id: int) -> int:
    async with get_connection() as conn:
        cursor = await conn.execute("SELECT stock FROM products WHERE id = ?", (product_id,))
        row = await cursor.fetchone()
    return row["stock"]


class TestCheckoutFlow:
    async def test_mobile_payment_sale(self, catalog, gateway, draft_store):
        session = await CheckoutSession.open(
            "till-1", gateway, draft_store, submit_cooldown=0
        )

        customer = await gateway.find_customer(IdType.NATIONAL, "12345678")
        await session.select_customer(customer)

        [beans] = await gateway.search_products("beans")
        await session.add_item(beans, 3)
        await session.add_item(beans, 2)
        assert [(i.product_id, i.quantity) for i in session.draft.items] == [(beans.id, 5)]

        await session.select_payment_method(PaymentMethod.MOBILE_PAYMENT)
        await session.set_payment_detail("phone_number", "04141234567")
        await session.set_payment_detail("reference", "554433")
        assert session.can_submit() is False

        await session.set_payment_detail("bank", "0102")
        assert session.can_submit() is True
        assert (await draft_store.load("till-1")).payment_details["bank"] == "0102"

        session.begin_confirmation()
        sale = await session.submit()

        assert sale is not None
        assert sale.total_amount == Decimal("21.25")
        assert [(i.product_id, i.quantity, i.subtotal) for i in sale.items] == [
            (beans.id, 5, Decimal("21.25"))
        ]
        assert session.state is DraftState.COMPLETED
        assert await draft_store.load("till-1") is None

        assert await _stock(beans.id) == 5
        stored = await (await get_sales_store()).get_sale(sale.id)
        assert stored.payment_details["bank"] == "0102"
        assert stored.invoice is not None

        await session.dismiss_receipt()
        assert session.state is DraftState.EMPTY
        assert session.draft.request_id != sale.request_id

    async def test_stock_sold_elsewhere(self, catalog, gateway, draft_store):
        beans, customer = catalog["beans"], catalog["customer"]
        session = await CheckoutSession.open(
            "till-1", gateway, draft_store, submit_cooldown=0
        )
        await session.select_customer(customer)
        await session.add_item(beans, 8)
        request_id = session.draft.request_id

        other = await CheckoutSession.open("till-2", gateway, submit_cooldown=0)
        await other.select_customer(customer)
        await other.add_item(beans, 5)
        assert await other.submit() is not None

        with pytest.raises(InsufficientStockError) as exc_info:
            await session.submit()

        assert exc_info.value.details["available"] == 5
        assert session.state is DraftState.PAYMENT_READY
        assert session.draft.request_id == request_id
        assert await _stock(beans.id) == 5

        # The failed draft survives a restart of the terminal
        resumed = await CheckoutSession.open(
            "till-1", gateway, draft_store, submit_cooldown=0
        )
        assert resumed.draft.request_id == request_id
        await resumed.set_quantity(beans.id, 5)
        assert await resumed.submit() is not None
        assert await _stock(beans.id) == 0

    async def test_resubmitted_request_is_not_charged_twice(self, catalog, gateway):
        beans, customer = catalog["beans"], catalog["customer"]
        session = CheckoutSession("till-1", gateway, submit_cooldown=0)
        await session.select_customer(customer)
        await session.add_item(beans, 4)
        submission = session.draft.to_submission()

        first = await gateway.submit_sale(submission)
        second = await gateway.submit_sale(submission)

        assert second.id == first.id
        assert await _stock(beans.id) == 6


class CommitThenTimeoutGateway:
    """Delivers the first submission, then reports a timeout to the terminal."""

    def __init__(self, gateway: HttpSaleGateway):
        self._gateway = gateway
        self.lost_responses = 1

    async def submit_sale(self, submission):
        sale = await self._gateway.submit_sale(submission)
        if self.lost_responses:
            self.lost_responses -= 1
            raise SubmissionTimeoutError(15.0)
        return sale


class TestLostResponse:
    async def test_unchanged_retry_returns_committed_sale(self, catalog, gateway):
        beans, customer = catalog["beans"], catalog["customer"]
        session = CheckoutSession("till-1", CommitThenTimeoutGateway(gateway), submit_cooldown=0)
        await session.select_customer(customer)
        await session.add_item(beans, 2)

        with pytest.raises(SubmissionTimeoutError):
            await session.submit()
        sale = await session.submit()

        assert [(i.product_id, i.quantity) for i in sale.items] == [(beans.id, 2)]
        assert await _stock(beans.id) == 8
        assert len(await (await get_sales_store()).list_sales()) == 1

    async def test_edited_retry_commits_what_was_submitted(self, catalog, gateway):
        beans, customer = catalog["beans"], catalog["customer"]
        session = CheckoutSession("till-1", CommitThenTimeoutGateway(gateway), submit_cooldown=0)
        await session.select_customer(customer)
        await session.add_item(beans, 2)

        with pytest.raises(SubmissionTimeoutError):
            await session.submit()
        await session.set_quantity(beans.id, 3)
        sale = await session.submit()

        assert [(i.product_id, i.quantity) for i in sale.items] == [(beans.id, 3)]
        assert sale.total_amount == Decimal("12.75")
        assert await _stock(beans.id) == 5
        assert len(await (await get_sales_store()).list_sales()) == 2
