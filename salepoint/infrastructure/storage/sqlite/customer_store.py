"""SQLite implementation of customer storage."""

from datetime import datetime

import aiosqlite

from salepoint.config import get_logger
from salepoint.core.entities.catalog import Customer, IdType
from salepoint.core.exceptions import DuplicateCustomerError
from salepoint.core.interfaces.catalog_store import ICustomerStore
from salepoint.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteCustomerStore(ICustomerStore):
    """SQLite implementation of customer storage."""

    async def find_by_identification(
        self, id_type: IdType, id_number: str
    ) -> Customer | None:
        """Exact lookup by identification document."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM customers WHERE id_type = ? AND id_number = ?",
                (IdType(id_type).value, id_number.strip()),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_customer(row)

    async def get(self, customer_id: int) -> Customer | None:
        """Get customer by ID."""
        async with get_connection() as conn:
            return await self.fetch(conn, customer_id)

    @classmethod
    async def fetch(cls, conn: aiosqlite.Connection, customer_id: int) -> Customer | None:
        """Load a customer on an existing connection."""
        cursor = await conn.execute("SELECT * FROM customers WHERE id = ?", (customer_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return cls._row_to_customer(row)

    async def create(self, customer: Customer) -> Customer:
        """Create a customer. The identification must be unused."""
        now = datetime.utcnow()
        customer.created_at = now
        customer.updated_at = now
        customer.id_number = customer.id_number.strip()

        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                "SELECT id FROM customers WHERE id_type = ? AND id_number = ?",
                (customer.id_type.value, customer.id_number),
            )
            existing = await cursor.fetchone()
            if existing is not None:
                raise DuplicateCustomerError(
                    customer.id_type.value, customer.id_number, existing["id"]
                )

            cursor = await conn.execute(
                """
                INSERT INTO customers (
                    name, id_type, id_number, email, phone, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    customer.name,
                    customer.id_type.value,
                    customer.id_number,
                    customer.email,
                    customer.phone,
                    customer.created_at.isoformat(),
                    customer.updated_at.isoformat(),
                ),
            )
            customer.id = cursor.lastrowid
            logger.info(
                "customer_created",
                customer_id=customer.id,
                id_type=customer.id_type.value,
            )
            return customer

    @staticmethod
    def _row_to_customer(row: aiosqlite.Row) -> Customer:
        """Convert a database row to a Customer entity."""
        return Customer(
            id=row["id"],
            name=row["name"],
            id_type=IdType(row["id_type"]),
            id_number=row["id_number"],
            email=row["email"],
            phone=row["phone"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
