import sqlite3

import pytest

from db.schema import INDEXES_SQL, SCHEMA_SQL
from db.store import SQLiteCardStore


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.row_factory = sqlite3.Row
    connection.executescript(SCHEMA_SQL)
    connection.executescript(INDEXES_SQL)
    yield connection
    connection.close()


@pytest.fixture
def store(conn):
    return SQLiteCardStore(conn)
