"""
Fixtures for SQLite-specific integration tests.
"""
import dbshim
import pytest


@pytest.fixture
def sqlite_file_adapters(tmp_path):
    """Two adapters on separate connections to one file-based database.

    Changes made through the first are only visible through the second once
    they are committed.
    """
    path = str(tmp_path / 'shop.db')
    writer = dbshim.connect(drivername='sqlite', database=path)
    writer.query("""
    CREATE TABLE accounts (
        id INTEGER PRIMARY KEY,
        owner TEXT NOT NULL UNIQUE,
        balance INTEGER NOT NULL
    )
    """)
    writer.query("INSERT INTO accounts (owner, balance) VALUES ('alice', 100), ('bob', 50)")

    reader = dbshim.connect(drivername='sqlite', database=path)

    yield writer, reader

    reader.close_connection()
    writer.close_connection()
