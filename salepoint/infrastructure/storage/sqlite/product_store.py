"""SQLite implementation of product catalog storage."""

from datetime import datetime

import aiosqlite

from salepoint.config import get_logger
from salepoint.core.entities.catalog import Product
from salepoint.core.interfaces.catalog_store import IProductStore
from salepoint.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

# Below SQLITE_MAX_VARIABLE_NUMBER on every SQLite build (999 before 3.32)
IDS_PER_QUERY = 500


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteProductStore(IProductStore):
    """SQLite implementation of product storage."""

    async def search(self, term: str, limit: int = 20) -> list[Product]:
        """Case-insensitive substring search over name and description."""
        term = term.strip()
        if not term:
            return []
        pattern = f"%{_escape_like(term)}%"
        # LIKE is case-insensitive for ASCII in SQLite
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM products
                WHERE name LIKE ? ESCAPE '\\'
                   OR description LIKE ? ESCAPE '\\'
                ORDER BY name COLLATE NOCASE, id
                LIMIT ?
                """,
                (pattern, pattern, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(r) for r in rows]

    async def get(self, product_id: int) -> Product | None:
        """Get product by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_product(row)

    async def get_many(self, product_ids: list[int]) -> dict[int, Product]:
        """Get several products keyed by ID."""
        if not product_ids:
            return {}
        async with get_connection() as conn:
            return await self.fetch_many(conn, product_ids)

    @classmethod
    async def fetch_many(
        cls, conn: aiosqlite.Connection, product_ids: list[int]
    ) -> dict[int, Product]:
        """Batch load on an existing connection, e.g. inside a transaction."""
        ids = sorted(set(product_ids))
        products: dict[int, Product] = {}
        for start in range(0, len(ids), IDS_PER_QUERY):
            chunk = ids[start : start + IDS_PER_QUERY]
            placeholders = ", ".join("?" for _ in chunk)
            cursor = await conn.execute(
                f"SELECT * FROM products WHERE id IN ({placeholders})",
                chunk,
            )
            for row in await cursor.fetchall():
                products[row["id"]] = cls._row_to_product(row)
        return products

    async def create(self, product: Product) -> Product:
        """Create a product."""
        now = datetime.utcnow()
        product.created_at = now
        product.updated_at = now
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO products (
                    name, description, selling_price, stock, min_stock,
                    category_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.name,
                    product.description,
                    str(product.selling_price),
                    product.stock,
                    product.min_stock,
                    product.category_id,
                    product.created_at.isoformat(),
                    product.updated_at.isoformat(),
                ),
            )
            product.id = cursor.lastrowid
            logger.info("product_created", product_id=product.id, stock=product.stock)
            return product

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        return Product(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            selling_price=row["selling_price"],
            stock=row["stock"],
            min_stock=row["min_stock"],
            category_id=row["category_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
