"""
SQLite implementation of sale storage.

Finalization runs as a single ``BEGIN IMMEDIATE`` transaction: the write
lock is held from the stock check to the commit, so two terminals selling
the last unit of a product are serialized and the second one sees the
decremented stock.
"""

import json
from datetime import datetime

import aiosqlite

from salepoint.config import get_logger, get_settings
from salepoint.core.entities.catalog import Product
from salepoint.core.entities.sale import (
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Sale,
    SaleItem,
    SaleStatus,
    SaleSubmission,
)
from salepoint.core.exceptions import (
    CustomerNotFoundError,
    DatabaseError,
    InsufficientStockError,
    ProductNotFoundError,
    RequestIdReusedError,
    ValidationError,
)
from salepoint.core.interfaces.sales_store import ISalesStore
from salepoint.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from salepoint.infrastructure.storage.sqlite.customer_store import SQLiteCustomerStore
from salepoint.infrastructure.storage.sqlite.product_store import SQLiteProductStore

logger = get_logger(__name__)


class SQLiteSalesStore(ISalesStore):
    """SQLite implementation of sale finalization and retrieval."""

    def __init__(self, invoice_prefix: str | None = None):
        self._invoice_prefix = invoice_prefix

    @property
    def invoice_prefix(self) -> str:
        if self._invoice_prefix is None:
            self._invoice_prefix = get_settings().sales.invoice_prefix
        return self._invoice_prefix

    async def finalize_sale(self, submission: SaleSubmission, user_id: int) -> Sale:
        """
        Commit a sale with its items and invoice and decrement stock.

        Every check runs before the first write, and any failure rolls the
        whole transaction back.

        Raises:
            ValidationError: The submission has no lines.
            CustomerNotFoundError: Customer does not exist.
            ProductNotFoundError: One or more products do not exist.
            InsufficientStockError: A product has less stock than requested.
        """
        if not submission.lines:
            raise ValidationError("lines", "Sale must have at least one line")

        # Quantity per product, in first-seen order
        requested: dict[int, int] = {}
        for line in submission.lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        try:
            async with get_transaction(immediate=True) as conn:
                existing = await self._fetch_by_request_id(conn, submission.request_id)
                if existing is not None:
                    differences = self._replay_differences(existing, submission)
                    if differences:
                        raise RequestIdReusedError(submission.request_id, existing.id, differences)
                    logger.info(
                        "sale_request_replayed",
                        request_id=submission.request_id,
                        sale_id=existing.id,
                    )
                    return existing

                customer = await SQLiteCustomerStore.fetch(conn, submission.customer_id)
                if customer is None:
                    raise CustomerNotFoundError(customer_id=submission.customer_id)

                products = await SQLiteProductStore.fetch_many(conn, list(requested))
                missing = [pid for pid in requested if pid not in products]
                if missing:
                    raise ProductNotFoundError(missing)

                for product_id, quantity in requested.items():
                    product = products[product_id]
                    if product.stock < quantity:
                        raise InsufficientStockError(
                            product_id, quantity, product.stock, product.name
                        )

                sale = self._build_sale(submission, user_id, products)
                if (
                    submission.client_total is not None
                    and submission.client_total != sale.total_amount
                ):
                    logger.warning(
                        "sale_total_mismatch",
                        request_id=submission.request_id,
                        client_total=str(submission.client_total),
                        computed_total=str(sale.total_amount),
                    )

                await self._insert_sale(conn, sale)
                await self._insert_items(conn, sale)
                await self._decrement_stock(conn, requested, products, sale.sale_date)
                sale.invoice = await self._insert_invoice(conn, sale)

                sale.status = SaleStatus.COMPLETED
                await conn.execute(
                    "UPDATE sales SET status = ?, updated_at = ? WHERE id = ?",
                    (sale.status.value, sale.updated_at.isoformat(), sale.id),
                )
                sale.customer = customer
        except aiosqlite.Error as e:
            logger.error(
                "sale_finalization_failed",
                request_id=submission.request_id,
                error=str(e),
            )
            raise DatabaseError("finalize_sale", str(e)) from e

        logger.info(
            "sale_finalized",
            sale_id=sale.id,
            request_id=sale.request_id,
            customer_id=sale.customer_id,
            items=len(sale.items),
            total=str(sale.total_amount),
            invoice=sale.invoice.number,
        )
        return sale

    @staticmethod
    def _replay_differences(existing: Sale, submission: SaleSubmission) -> list[str]:
        """Fields where a resubmission disagrees with the sale its request id committed."""
        differences = []
        if existing.customer_id != submission.customer_id:
            differences.append("customer_id")
        if existing.payment_method is not submission.payment_method:
            differences.append("payment_method")
        committed = [(item.product_id, item.quantity, item.unit_price) for item in existing.items]
        submitted = [(line.product_id, line.quantity, line.unit_price) for line in submission.lines]
        if committed != submitted:
            differences.append("lines")
        return differences

    @staticmethod
    def _build_sale(
        submission: SaleSubmission, user_id: int, products: dict[int, Product]
    ) -> Sale:
        now = datetime.utcnow()
        items = [
            SaleItem(
                product_id=line.product_id,
                product_name=products[line.product_id].name,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in submission.lines
        ]
        return Sale(
            request_id=submission.request_id,
            customer_id=submission.customer_id,
            user_id=user_id,
            sale_date=now,
            payment_method=submission.payment_method,
            payment_details=dict(submission.payment_details),
            status=SaleStatus.PENDING,
            items=items,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    async def _insert_sale(conn: aiosqlite.Connection, sale: Sale) -> None:
        cursor = await conn.execute(
            """
            INSERT INTO sales (
                request_id, customer_id, user_id, sale_date,
                payment_method, payment_details, total_amount, status,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                sale.request_id,
                sale.customer_id,
                sale.user_id,
                sale.sale_date.isoformat(),
                sale.payment_method.value,
                json.dumps(sale.payment_details),
                str(sale.total_amount),
                sale.status.value,
                sale.created_at.isoformat(),
                sale.updated_at.isoformat(),
            ),
        )
        sale.id = cursor.lastrowid

    @staticmethod
    async def _insert_items(conn: aiosqlite.Connection, sale: Sale) -> None:
        for item in sale.items:
            item.sale_id = sale.id
            cursor = await conn.execute(
                """
                INSERT INTO sale_items (
                    sale_id, product_id, product_name, quantity, unit_price, subtotal
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    item.sale_id,
                    item.product_id,
                    item.product_name,
                    item.quantity,
                    str(item.unit_price),
                    str(item.subtotal),
                ),
            )
            item.id = cursor.lastrowid

    @staticmethod
    async def _decrement_stock(
        conn: aiosqlite.Connection,
        requested: dict[int, int],
        products: dict[int, Product],
        now: datetime,
    ) -> None:
        for product_id, quantity in requested.items():
            cursor = await conn.execute(
                """
                UPDATE products SET stock = stock - ?, updated_at = ?
                WHERE id = ? AND stock >= ?
                """,
                (quantity, now.isoformat(), product_id, quantity),
            )
            if cursor.rowcount != 1:
                stock_cursor = await conn.execute(
                    "SELECT stock FROM products WHERE id = ?", (product_id,)
                )
                row = await stock_cursor.fetchone()
                raise InsufficientStockError(
                    product_id,
                    quantity,
                    row["stock"] if row else 0,
                    products[product_id].name,
                )

    async def _insert_invoice(self, conn: aiosqlite.Connection, sale: Sale) -> Invoice:
        invoice = Invoice(
            sale_id=sale.id,
            number=f"{self.invoice_prefix}{sale.id}",
            date=sale.sale_date,
            status=InvoiceStatus.ISSUED,
        )
        cursor = await conn.execute(
            "INSERT INTO invoices (sale_id, number, date, status) VALUES (?, ?, ?, ?)",
            (invoice.sale_id, invoice.number, invoice.date.isoformat(), invoice.status.value),
        )
        invoice.id = cursor.lastrowid
        return invoice

    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items, customer and invoice."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM sales WHERE id = ?", (sale_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load_sale(conn, row, with_customer=True)

    async def get_sale_by_request_id(self, request_id: str) -> Sale | None:
        """Get the sale committed for an idempotency key."""
        async with get_connection() as conn:
            return await self._fetch_by_request_id(conn, request_id)

    async def _fetch_by_request_id(
        self, conn: aiosqlite.Connection, request_id: str
    ) -> Sale | None:
        cursor = await conn.execute("SELECT * FROM sales WHERE request_id = ?", (request_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_sale(conn, row, with_customer=True)

    async def list_sales(
        self,
        limit: int = 100,
        offset: int = 0,
        customer_id: int | None = None,
        status: SaleStatus | None = None,
    ) -> list[Sale]:
        """List sales, newest first."""
        conditions = []
        params: list = []
        if customer_id is not None:
            conditions.append("customer_id = ?")
            params.append(customer_id)
        if status is not None:
            conditions.append("status = ?")
            params.append(SaleStatus(status).value)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM sales {where}
                ORDER BY sale_date DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [await self._load_sale(conn, row) for row in rows]

    async def _load_sale(
        self,
        conn: aiosqlite.Connection,
        row: aiosqlite.Row,
        with_customer: bool = False,
    ) -> Sale:
        items_cursor = await conn.execute(
            "SELECT * FROM sale_items WHERE sale_id = ? ORDER BY id",
            (row["id"],),
        )
        items = [self._row_to_sale_item(r) for r in await items_cursor.fetchall()]

        invoice_cursor = await conn.execute(
            "SELECT * FROM invoices WHERE sale_id = ?", (row["id"],)
        )
        invoice_row = await invoice_cursor.fetchone()

        customer = None
        if with_customer:
            customer = await SQLiteCustomerStore.fetch(conn, row["customer_id"])

        sale = self._row_to_sale(row, items)
        sale.invoice = self._row_to_invoice(invoice_row) if invoice_row else None
        sale.customer = customer
        return sale

    @staticmethod
    def _row_to_sale(row: aiosqlite.Row, items: list[SaleItem]) -> Sale:
        """Convert a database row to a Sale entity."""
        return Sale(
            id=row["id"],
            request_id=row["request_id"],
            customer_id=row["customer_id"],
            user_id=row["user_id"],
            sale_date=datetime.fromisoformat(row["sale_date"]),
            payment_method=PaymentMethod(row["payment_method"]),
            payment_details=json.loads(row["payment_details"] or "{}"),
            total_amount=row["total_amount"],
            status=SaleStatus(row["status"]),
            items=items,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _row_to_sale_item(row: aiosqlite.Row) -> SaleItem:
        """Convert a database row to a SaleItem entity."""
        return SaleItem(
            id=row["id"],
            sale_id=row["sale_id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            subtotal=row["subtotal"],
        )

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
        """Convert a database row to an Invoice entity."""
        return Invoice(
            id=row["id"],
            sale_id=row["sale_id"],
            number=row["number"],
            date=datetime.fromisoformat(row["date"]),
            status=InvoiceStatus(row["status"]),
        )
