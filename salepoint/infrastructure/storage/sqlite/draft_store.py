"""
SQLite implementation of the terminal draft cache.

Drafts live in their own database file next to the terminal, separate
from the sale service's database. Each save is a single upsert of the
full snapshot, so a reader sees either the previous draft or the new one.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite
from pydantic import ValidationError as PydanticValidationError

from salepoint.config import get_logger, get_settings
from salepoint.core.entities.draft import DRAFT_SCHEMA_VERSION, DraftSnapshot
from salepoint.core.exceptions import DatabaseError, DraftCacheError
from salepoint.core.interfaces.draft_store import IDraftStore
from salepoint.infrastructure.storage.sqlite.connection import ConnectionPool

logger = get_logger(__name__)

DRAFTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS sale_drafts (
    session_key TEXT PRIMARY KEY,
    schema_version INTEGER NOT NULL,
    payload_json TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteDraftStore(IDraftStore):
    """Draft cache backed by a local SQLite file."""

    def __init__(self, db_path: Path | None = None, busy_timeout: int | None = None):
        if db_path is None or busy_timeout is None:
            settings = get_settings()
            db_path = db_path or settings.draft_db_path
            if busy_timeout is None:
                busy_timeout = settings.storage.busy_timeout
        self.db_path = db_path
        self._pool = ConnectionPool(db_path=db_path, pool_size=1, busy_timeout=busy_timeout)
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._pool.acquire() as conn:
            await conn.execute(DRAFTS_SCHEMA)
        self._schema_ready = True

    async def save(self, session_key: str, snapshot: DraftSnapshot) -> None:
        """Upsert the snapshot for a session."""
        try:
            await self._ensure_schema()
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO sale_drafts (session_key, schema_version, payload_json, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(session_key) DO UPDATE SET
                        schema_version = excluded.schema_version,
                        payload_json = excluded.payload_json,
                        updated_at = excluded.updated_at
                    """,
                    (
                        session_key,
                        snapshot.schema_version,
                        snapshot.model_dump_json(),
                        datetime.utcnow().isoformat(),
                    ),
                )
        except aiosqlite.Error as e:
            raise DatabaseError("save_draft", str(e)) from e
        logger.debug("draft_saved", session_key=session_key, items=len(snapshot.items))

    async def load(self, session_key: str) -> DraftSnapshot | None:
        """Read the snapshot for a session."""
        try:
            await self._ensure_schema()
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT schema_version, payload_json FROM sale_drafts WHERE session_key = ?",
                    (session_key,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError("load_draft", str(e)) from e

        if row is None:
            return None
        if row["schema_version"] != DRAFT_SCHEMA_VERSION:
            raise DraftCacheError(
                session_key, f"unsupported schema version {row['schema_version']}"
            )
        try:
            return DraftSnapshot.model_validate_json(row["payload_json"])
        except PydanticValidationError as e:
            raise DraftCacheError(session_key, "payload does not parse") from e

    async def delete(self, session_key: str) -> bool:
        """Remove the snapshot for a session."""
        try:
            await self._ensure_schema()
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "DELETE FROM sale_drafts WHERE session_key = ?", (session_key,)
                )
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise DatabaseError("delete_draft", str(e)) from e
        if deleted:
            logger.debug("draft_deleted", session_key=session_key)
        return deleted

    async def close(self) -> None:
        await self._pool.close()
        self._schema_ready = False
