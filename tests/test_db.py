"""
Unit Tests for the shared database helpers

The engine is replaced with an in-memory fake; no connection is opened.
"""

import pytest

import utils
from utils import db


class FakeResult:
    def __init__(self, rowcount):
        self.rowcount = rowcount


class FakeConnection:
    def __init__(self, rowcount=1, error=None):
        self.rowcount = rowcount
        self.error = error
        self.executed = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def execute(self, statement, params=None):
        if self.error:
            raise self.error
        self.executed.append((str(statement), params))
        return FakeResult(self.rowcount)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeEngine:
    def __init__(self, connection):
        self.connection = connection

    def connect(self):
        return self.connection


# =============================================================================
# WRITES
# =============================================================================

class TestExecuteUpdate:

    def test_commits_and_returns_rowcount(self, monkeypatch):
        conn = FakeConnection(rowcount=2)
        monkeypatch.setattr(db, 'get_db_engine', lambda: FakeEngine(conn))

        assert db.execute_update("UPDATE events SET title = :t", {'t': 'Gala'}) == 2
        assert conn.executed == [("UPDATE events SET title = :t", {'t': 'Gala'})]
        assert conn.committed and conn.closed

    def test_rolls_back_and_raises(self, monkeypatch):
        conn = FakeConnection(error=RuntimeError("deadlock"))
        monkeypatch.setattr(db, 'get_db_engine', lambda: FakeEngine(conn))

        with pytest.raises(RuntimeError):
            db.execute_update("UPDATE events SET title = 'x'")
        assert conn.rolled_back and conn.closed
        assert not conn.committed


# =============================================================================
# HEALTH & EXPORTS
# =============================================================================

class TestHealth:

    def test_connection_failure_is_reported(self, monkeypatch):
        def failing():
            raise RuntimeError("no host")

        monkeypatch.setattr(db, 'get_db_engine', failing)
        ok, message = db.check_db_connection()
        assert ok is False
        assert "no host" in message

    def test_public_helpers(self):
        assert set(db.__all__) == {
            'get_db_engine',
            'check_db_connection',
            'get_connection_pool_status',
            'get_connection',
            'execute_update',
        }
        for name in db.__all__:
            assert hasattr(utils, name)
