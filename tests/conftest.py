"""
Shared fixtures: temporary SQLite stores.
"""
import pytest

from data.storage.database import Database

@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "test_portfolio.db")
    yield database
    database.close()
