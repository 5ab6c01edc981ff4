import os
import sqlite3

import pytest

from rdbscan.domain.models import ConnectionParams
from rdbscan.tests.fake_metadata_resolver import FakeMetadataResolver


@pytest.fixture(scope="function", autouse=True)
def run_eager():
    os.environ["RDBSCAN_RUN_EAGER"] = "true"
    yield


@pytest.fixture
def metadata_resolver():
    return FakeMetadataResolver(
        {
            "orders": {
                "id": "BIGINT",
                "amount": "DECIMAL(10, 2)",
                "status": "VARCHAR(16)",
                "updated_at": "BIGINT",
                "created_at": "TIMESTAMP",
            }
        }
    )


@pytest.fixture
def sqlite_database(tmp_path):
    """An `orders` table with 20 rows, `updated_at` increasing by one day per id."""
    path = tmp_path / "shop.db"
    with sqlite3.connect(path) as conn:
        conn.execute(
            """
            CREATE TABLE orders (
                id INTEGER PRIMARY KEY,
                amount NUMERIC(10, 2),
                status VARCHAR(16),
                updated_at TIMESTAMP
            )
            """
        )
        conn.executemany(
            "INSERT INTO orders VALUES (?, ?, ?, ?)",
            [
                (
                    i,
                    i * 10,
                    "OK" if i % 3 else "CANCELLED",
                    f"2024-01-{i:02d} 10:00:00",
                )
                for i in range(1, 21)
            ],
        )
    conn.close()
    return ConnectionParams(url=f"sqlite:///{path}")
