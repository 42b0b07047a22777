import sqlite3, pytest

from gridsync.connection import EngineConfig
from gridsync.engine import TableSyncEngine

USERS_SCHEMA = """
CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT);
INSERT INTO users (id, name) VALUES (1, 'Ann');
INSERT INTO users (id, name) VALUES (2, 'Bo');
"""


def table_rows(db_path, table):
    """Read a table through an independent connection (what is durably stored)."""
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f'SELECT * FROM "{table}" ORDER BY rowid').fetchall()
    finally:
        conn.close()


@pytest.fixture()
def make_db(tmp_path):
    def _make(script: str, name: str = 'test.db') -> str:
        db_path = tmp_path / name
        conn = sqlite3.connect(db_path)
        try:
            conn.executescript(script)
            conn.commit()
        finally:
            conn.close()
        return str(db_path)
    return _make


@pytest.fixture()
def users_db(make_db):
    return make_db(USERS_SCHEMA)


@pytest.fixture()
def config():
    return EngineConfig(busy_timeout_ms=0)


@pytest.fixture()
def engine(users_db, config):
    eng = TableSyncEngine(config)
    res = eng.open(users_db)
    assert res['success'], res
    yield eng
    eng.close()
