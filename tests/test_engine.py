# Copyright 2025 sqlite-bench Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""SQLite engine command set tests."""

import os
import sqlite3

import pytest

from sqlite_bench.config import BenchConfig
from sqlite_bench.engine import (
    SCHEMA_SQL,
    SQLiteEngine,
    StoolapEngine,
    StoolapTransaction,
    engine_class,
)
from sqlite_bench.errors import EngineError, FilesystemError, StatError


def open_engine(path, **overrides):
    config = BenchConfig(path=path, **overrides)
    engine = SQLiteEngine.open(config)
    engine.apply_pragmas(config.journal_mode, config.synchronous)
    engine.execute(SCHEMA_SQL)
    return engine


def count_rows(path):
    conn = sqlite3.connect(path)
    try:
        return conn.execute("SELECT COUNT(*) FROM t").fetchone()[0]
    finally:
        conn.close()


# --- Reset ---


def test_reset_removes_file_and_sidecars(db_dir):
    path = os.path.join(db_dir, "bench.db")
    for suffix in ("", "-wal", "-shm", "-journal"):
        with open(path + suffix, "w") as f:
            f.write("stale")

    SQLiteEngine.reset(path)

    assert os.listdir(db_dir) == []


def test_reset_missing_file_is_not_an_error(db_dir):
    SQLiteEngine.reset(os.path.join(db_dir, "missing.db"))


def test_reset_directory_fails(db_dir):
    path = os.path.join(db_dir, "bench.db")
    os.mkdir(path)
    with pytest.raises(FilesystemError):
        SQLiteEngine.reset(path)


# --- Open & pragmas ---


def test_open_failure_is_engine_error(db_dir):
    config = BenchConfig(path=os.path.join(db_dir, "no", "such", "dir", "bench.db"))
    with pytest.raises(EngineError) as exc_info:
        SQLiteEngine.open(config)
    assert exc_info.value.operation == "open"
    assert "unable to open database file" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, sqlite3.Error)


@pytest.mark.parametrize("mode", ["delete", "truncate", "persist", "memory", "wal", "off"])
def test_journal_modes_applied(db_dir, mode):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path, journal_mode=mode) as engine:
        assert engine.journal_mode == mode
        assert engine._conn.execute("PRAGMA journal_mode").fetchone()[0] == mode


@pytest.mark.parametrize("level,code", [("off", 0), ("normal", 1), ("full", 2), ("extra", 3)])
def test_synchronous_levels_applied(db_dir, level, code):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path, synchronous=level) as engine:
        assert engine._conn.execute("PRAGMA synchronous").fetchone()[0] == code


def test_unknown_pragma_values_rejected(db_dir):
    config = BenchConfig(path=os.path.join(db_dir, "bench.db"))
    with SQLiteEngine.open(config) as engine:
        with pytest.raises(EngineError) as exc_info:
            engine.apply_pragmas("bogus", "full")
        assert exc_info.value.operation == "pragma"
        with pytest.raises(EngineError):
            engine.apply_pragmas("wal", "sometimes")


def test_journal_mode_not_kept_by_engine():
    """An in-memory database cannot switch to WAL; SQLite keeps 'memory'."""
    config = BenchConfig(path=":memory:", journal_mode="wal")
    with SQLiteEngine.open(config) as engine:
        with pytest.raises(EngineError, match="journal_mode=wal not applied"):
            engine.apply_pragmas("wal", "full")


# --- Transactions ---


def test_transaction_commit(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with engine.begin() as tx:
            with tx.prepare(engine.insert_sql) as stmt:
                stmt.execute((0, "a"))
                stmt.execute((1, "b"))
            tx.commit()
            assert not tx.active
    assert count_rows(path) == 2


def test_transaction_commits_on_clean_exit(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with engine.begin() as tx:
            with tx.prepare(engine.insert_sql) as stmt:
                stmt.execute((0, "a"))
    assert count_rows(path) == 1


def test_transaction_rollback_on_exception(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with pytest.raises(ValueError):
            with engine.begin() as tx:
                with tx.prepare(engine.insert_sql) as stmt:
                    stmt.execute((0, "a"))
                raise ValueError("test error")
        assert not tx.active
    assert count_rows(path) == 0


def test_execute_failure_is_engine_error(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with pytest.raises(EngineError) as exc_info:
            with engine.begin() as tx:
                with tx.prepare(engine.insert_sql) as stmt:
                    stmt.execute((0, "a"))
                    stmt.execute((0, "duplicate"))
        assert exc_info.value.operation == "execute"
        assert "UNIQUE constraint failed" in str(exc_info.value)
    assert count_rows(path) == 0


def test_invalid_sql_is_engine_error(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with pytest.raises(EngineError) as exc_info:
            engine.execute("SELECTX * FROM foo")
    assert "syntax error" in str(exc_info.value)


def test_commit_failure_rolls_back(db_dir):
    """A reader's SHARED lock blocks COMMIT in rollback-journal mode."""
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path, journal_mode="delete") as engine:
        engine._conn.execute("PRAGMA busy_timeout=0")
        reader = sqlite3.connect(path, timeout=0, isolation_level=None)
        try:
            with pytest.raises(EngineError) as exc_info:
                with engine.begin() as tx:
                    with tx.prepare(engine.insert_sql) as stmt:
                        stmt.execute((0, "a"))
                        stmt.execute((1, "b"))
                    reader.execute("BEGIN")
                    reader.execute("SELECT * FROM t").fetchall()
                    tx.commit()
        finally:
            reader.close()

        assert exc_info.value.operation == "commit"
        assert "database is locked" in str(exc_info.value)
        assert not tx.active
        with pytest.raises(sqlite3.ProgrammingError):
            stmt._cursor.execute("SELECT 1")

        # The handle is usable again once the lock is gone.
        with engine.begin() as tx:
            with tx.prepare(engine.insert_sql) as stmt:
                stmt.execute((2, "c"))
            tx.commit()

    conn = sqlite3.connect(path)
    try:
        assert conn.execute("SELECT id FROM t").fetchall() == [(2,)]
    finally:
        conn.close()


# --- Stoolap transaction bookkeeping (no stoolap install needed) ---


class FakeStoolapError(Exception):
    pass


class FakeStoolapTx:
    def __init__(self, fail_commit=False):
        self.fail_commit = fail_commit
        self.executed = []
        self.rolled_back = False

    def execute(self, sql, params):
        self.executed.append((sql, params))

    def commit(self):
        if self.fail_commit:
            raise FakeStoolapError("write conflict")

    def rollback(self):
        self.rolled_back = True


class FakeStoolapDB:
    def __init__(self, tx):
        self.tx = tx

    def begin(self):
        return self.tx


def test_stoolap_failed_commit_is_rolled_back():
    fake = FakeStoolapTx(fail_commit=True)
    with pytest.raises(EngineError) as exc_info:
        with StoolapTransaction(FakeStoolapDB(fake), (FakeStoolapError,)) as tx:
            tx.commit()
    assert exc_info.value.operation == "commit"
    assert str(exc_info.value) == "write conflict"
    assert fake.rolled_back
    assert not tx.active


def test_stoolap_commit_clears_active():
    fake = FakeStoolapTx()
    with StoolapTransaction(FakeStoolapDB(fake), (FakeStoolapError,)) as tx:
        tx.commit()
        assert not tx.active
    assert not fake.rolled_back


def test_stoolap_statement_sends_sql_through_transaction():
    fake = FakeStoolapTx()
    with StoolapTransaction(FakeStoolapDB(fake), (FakeStoolapError,)) as tx:
        with tx.prepare(StoolapEngine.insert_sql) as stmt:
            stmt.execute((0, "a"))
            stmt.execute((1, "b"))
    assert fake.executed == [
        ("INSERT INTO t (id, name) VALUES ($1, $2)", [0, "a"]),
        ("INSERT INTO t (id, name) VALUES ($1, $2)", [1, "b"]),
    ]


# --- Checkpoint & stat ---


def test_checkpoint_truncates_wal(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path, journal_mode="wal") as engine:
        with engine.begin() as tx:
            with tx.prepare(engine.insert_sql) as stmt:
                for i in range(100):
                    stmt.execute((i, "x" * 100))
            tx.commit()
        assert os.path.getsize(path + "-wal") > 0
        engine.checkpoint()
        assert os.path.getsize(path + "-wal") == 0
        assert engine.file_size(path) == os.path.getsize(path)


def test_checkpoint_noop_outside_wal(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path, journal_mode="delete") as engine:
        engine.checkpoint()


def test_file_size_missing_file(db_dir):
    path = os.path.join(db_dir, "bench.db")
    with open_engine(path) as engine:
        with pytest.raises(StatError):
            engine.file_size(os.path.join(db_dir, "missing.db"))


# --- Registry ---


def test_engine_class_lookup():
    assert engine_class("sqlite") is SQLiteEngine
    assert engine_class("stoolap") is StoolapEngine
    with pytest.raises(EngineError, match="unknown engine"):
        engine_class("postgres")
