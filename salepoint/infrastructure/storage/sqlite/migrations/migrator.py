"""
Versioned schema migrations for the sale database.

Migrations are ``vNNN_<name>.sql`` files next to this module, applied in
version order and recorded with a checksum in ``schema_migrations``. An
existing database is copied with SQLite's online backup API before any
migration runs and restored from that copy if the run fails.

Run as a script for status and integrity reports::

    salepoint-migrate --status
    salepoint-migrate --verify
"""

import asyncio
import hashlib
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import aiosqlite

from salepoint.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "products",
    "customers",
    "sales",
    "sale_items",
    "invoices",
    "schema_migrations",
]


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    migrations = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksum."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        # Fresh database
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


async def _copy_database(source: Path, target: Path) -> None:
    async with aiosqlite.connect(source) as src, aiosqlite.connect(target) as dst:
        await src.backup(dst)


async def create_backup(db_path: Path) -> Path:
    """Snapshot the database next to it as ``<name>.backup_<timestamp>.db``."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    await _copy_database(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def restore_backup(db_path: Path, backup_path: Path) -> None:
    await _copy_database(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


# --- Integrity checks ---

SchemaCheck = Callable[[aiosqlite.Connection, set[str]], Awaitable[dict]]


async def _check_foreign_keys(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    return {"check": "foreign_keys", "ok": not violations, "violations": len(violations)}


async def _check_integrity(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    cursor = await conn.execute("PRAGMA integrity_check")
    result = (await cursor.fetchone())[0]
    return {"check": "integrity", "ok": result == "ok", "result": result}


async def _check_required_tables(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    return {"check": "required_tables", "ok": not missing, "missing": missing}


async def _check_stock(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    negative: list[int] = []
    if "products" in tables:
        cursor = await conn.execute("SELECT id FROM products WHERE stock < 0")
        negative = [row[0] for row in await cursor.fetchall()]
    return {"check": "non_negative_stock", "ok": not negative, "products": negative}


async def _check_sale_totals(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    mismatched: list[int] = []
    if {"sales", "sale_items"} <= tables:
        cursor = await conn.execute(
            """
            SELECT s.id, s.total_amount, i.subtotal
            FROM sales s LEFT JOIN sale_items i ON i.sale_id = s.id
            WHERE s.status = 'COMPLETED'
            ORDER BY s.id
            """
        )
        totals: dict[int, tuple[Decimal, Decimal]] = {}
        for sale_id, total, subtotal in await cursor.fetchall():
            recorded, summed = totals.get(sale_id, (Decimal(total), Decimal(0)))
            totals[sale_id] = (recorded, summed + Decimal(subtotal or 0))
        mismatched = [sid for sid, (recorded, summed) in totals.items() if recorded != summed]
    return {"check": "sale_totals", "ok": not mismatched, "sales": mismatched}


async def _check_invoices(conn: aiosqlite.Connection, tables: set[str]) -> dict:
    uninvoiced: list[int] = []
    if {"sales", "invoices"} <= tables:
        cursor = await conn.execute(
            """
            SELECT s.id FROM sales s
            WHERE s.status = 'COMPLETED'
              AND NOT EXISTS (SELECT 1 FROM invoices v WHERE v.sale_id = s.id)
            """
        )
        uninvoiced = [row[0] for row in await cursor.fetchall()]
    return {"check": "completed_sales_invoiced", "ok": not uninvoiced, "sales": uninvoiced}


SCHEMA_CHECKS: list[SchemaCheck] = [
    _check_foreign_keys,
    _check_integrity,
    _check_required_tables,
    _check_stock,
    _check_sale_totals,
    _check_invoices,
]


@dataclass
class Migrator:
    """Applies pending migrations to one database file."""

    db_path: Path
    migrations: list[MigrationInfo] = field(default_factory=discover_migrations)

    async def _apply(self, conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
        logger.info("applying_migration", version=migration.version, name=migration.name)
        started = time.perf_counter()

        def elapsed() -> int:
            return int((time.perf_counter() - started) * 1000)

        try:
            await conn.executescript(migration.path.read_text(encoding="utf-8"))
            await conn.execute(
                """
                INSERT OR REPLACE INTO schema_migrations
                    (version, name, checksum, execution_time_ms)
                VALUES (?, ?, ?, ?)
                """,
                (migration.version, migration.name, migration.checksum, elapsed()),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            logger.error("migration_failed", version=migration.version, error=str(e))
            return MigrationResult(migration.version, migration.name, False, elapsed(), str(e))

        logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed())
        return MigrationResult(migration.version, migration.name, True, elapsed())

    async def _pending(self, conn: aiosqlite.Connection) -> list[MigrationInfo]:
        applied = await get_applied_migrations(conn)
        pending = []
        for migration in self.migrations:
            recorded = applied.get(migration.version)
            if recorded is None:
                pending.append(migration)
            elif recorded != migration.checksum:
                # Edited after being applied; the database keeps the old schema
                logger.error(
                    "migration_checksum_changed",
                    version=migration.version,
                    applied=recorded,
                    current=migration.checksum,
                )
        return pending

    async def run(self, backup: bool = True) -> list[MigrationResult]:
        """Apply every pending migration, stopping at the first failure."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("initializing_database", db_path=str(self.db_path))

        backup_path = await create_backup(self.db_path) if backup and self.db_path.exists() else None
        results: list[MigrationResult] = []
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA foreign_keys=ON")

                for migration in await self._pending(conn):
                    result = await self._apply(conn, migration)
                    results.append(result)
                    if not result.success:
                        break
                    cursor = await conn.execute("PRAGMA foreign_key_check")
                    if await cursor.fetchall():
                        logger.error("migration_left_fk_violations", version=migration.version)
                        results[-1].success = False
                        results[-1].error = "foreign key violations after migration"
                        break
        except Exception as e:
            logger.error("database_initialization_failed", error=str(e))
            if backup_path is not None:
                await restore_backup(self.db_path, backup_path)
            raise

        if backup_path is not None:
            if all(r.success for r in results):
                backup_path.unlink()
                logger.info("backup_cleaned_up")
            else:
                await restore_backup(self.db_path, backup_path)
        return results

    async def status(self) -> dict:
        pending = [m.version for m in self.migrations]
        if not self.db_path.exists():
            return {
                "exists": False,
                "current_version": None,
                "applied_migrations": [],
                "pending_migrations": pending,
            }
        async with aiosqlite.connect(self.db_path) as conn:
            applied = await get_applied_migrations(conn)
        return {
            "exists": True,
            "current_version": max(applied) if applied else None,
            "applied_migrations": list(applied),
            "pending_migrations": [v for v in pending if v not in applied],
            "total_migrations": len(self.migrations),
        }

    async def verify(self) -> list[dict]:
        """Run every schema check; each result has ``check`` and ``status``."""
        results = []
        async with aiosqlite.connect(self.db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            for check in SCHEMA_CHECKS:
                outcome = await check(conn, tables)
                outcome["status"] = "PASS" if outcome.pop("ok") else "FAIL"
                results.append(outcome)
        return results


def _migrator(db_path: Path | None) -> Migrator:
    return Migrator(db_path or get_settings().storage.db_path)


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema.

    Args:
        db_path: Database file (default from settings).
        create_backup_before: Snapshot an existing file first.

    Returns:
        Results for the migrations that were attempted; empty when the
        schema is already current.
    """
    return await _migrator(db_path).run(backup=create_backup_before)


async def get_migration_status(db_path: Path | None = None) -> dict:
    return await _migrator(db_path).status()


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    return await _migrator(db_path).verify()


def _print_report(title: str, rows: list[str]) -> None:
    print(title)
    for row in rows:
        print(f"  {row}")


def main() -> None:
    """CLI entry point for database migration."""
    import argparse

    parser = argparse.ArgumentParser(description="Salepoint database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument("--verify", action="store_true", help="Verify schema integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrations")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            _print_report(
                "Migration status",
                [f"{key}: {value}" for key, value in status.items()],
            )
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            _print_report(
                "Schema integrity",
                [
                    f"[{c['status']}] {c['check']} "
                    + ", ".join(f"{k}={v}" for k, v in c.items() if k not in ("check", "status"))
                    for c in checks
                ],
            )
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        _print_report(
            f"Applied {len(results)} migration(s)",
            [
                f"[{'OK' if r.success else 'FAILED'}] v{r.version} {r.name} "
                f"({r.execution_time_ms}ms){' ' + r.error if r.error else ''}"
                for r in results
            ],
        )
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
