"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Keep settings-created directories out of the working tree
os.environ.setdefault("STORAGE_DATA_DIR", tempfile.mkdtemp(prefix="salepoint-tests-"))

from salepoint.config import reset_settings  # noqa: E402
from salepoint.core.entities import Customer, IdType, Product  # noqa: E402

reset_settings()


@pytest.fixture
def coffee() -> Product:
    """Product with plenty of stock."""
    return Product(id=1, name="Coffee 500g", selling_price=Decimal("10.00"), stock=10)


@pytest.fixture
def milk() -> Product:
    """Cheaper product with little stock."""
    return Product(id=2, name="Milk 1L", selling_price=Decimal("5.50"), stock=3)


@pytest.fixture
def customer() -> Customer:
    """Registered customer."""
    return Customer(id=7, name="Ana Perez", id_type=IdType.NATIONAL, id_number="12345678")


@pytest.fixture
def mobile_details() -> dict[str, str]:
    """Complete MOBILE_PAYMENT details."""
    return {"phone_number": "04141234567", "bank": "0102", "reference": "998877"}


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def pos_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated temporary database wired into the global connection pool."""
    from salepoint.infrastructure.storage.sqlite import connection as conn_module
    from salepoint.infrastructure.storage.sqlite.migrations import initialize_database

    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert results and all(r.success for r in results)

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await conn_module.close_pool()
