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

"""Storage engines under test.

Each engine exposes the same small command set the driver needs:

    engine = SQLiteEngine.open(config)
    engine.apply_pragmas(config.journal_mode, config.synchronous)
    engine.execute(SCHEMA_SQL)
    with engine.begin() as tx:
        with tx.prepare(engine.insert_sql) as stmt:
            stmt.execute((0, "x" * 100))
        tx.commit()
    engine.checkpoint()
    engine.file_size(config.path)
    engine.close()

Engine failures are re-raised as EngineError with the engine's message intact.
"""

from __future__ import annotations

import os
import shutil
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from sqlite_bench.config import JOURNAL_MODES, SYNCHRONOUS_LEVELS, BenchConfig
from sqlite_bench.errors import EngineError, FilesystemError, StatError
from sqlite_bench.logging import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = "CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)"


@contextmanager
def engine_errors(operation: str, errors: tuple[type[BaseException], ...]) -> Iterator[None]:
    """Re-raise engine exceptions as EngineError, keeping the message verbatim."""
    try:
        yield
    except errors as e:
        raise EngineError(str(e), operation=operation) from e


def _remove(path: str) -> bool:
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FilesystemError(str(e)) from e
    return True


class Statement(ABC):
    """A prepared insert statement, valid inside one transaction."""

    sql: str

    @abstractmethod
    def execute(self, params: Sequence) -> None:
        ...

    def close(self) -> None:
        pass

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class Transaction(ABC):
    """One engine transaction.

    Used as a context manager it rolls back when the block raises and
    commits on a clean exit unless commit() was already called.
    """

    @property
    @abstractmethod
    def active(self) -> bool:
        ...

    @abstractmethod
    def prepare(self, sql: str) -> Statement:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            if self.active:
                self.rollback()
        elif self.active:
            self.commit()
        return False


class StorageEngine(ABC):
    """An open handle on the engine being benchmarked."""

    name: str
    insert_sql: str

    @classmethod
    @abstractmethod
    def reset(cls, path: Path) -> None:
        """Delete whatever a previous run left at ``path``."""

    @classmethod
    @abstractmethod
    def open(cls, config: BenchConfig) -> "StorageEngine":
        ...

    @abstractmethod
    def apply_pragmas(self, journal_mode: str, synchronous: str) -> None:
        ...

    @abstractmethod
    def execute(self, sql: str) -> None:
        ...

    @abstractmethod
    def begin(self) -> Transaction:
        ...

    @abstractmethod
    def checkpoint(self) -> None:
        ...

    @abstractmethod
    def file_size(self, path: Path) -> int:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> "StorageEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


# ============================================================
# SQLite (stdlib sqlite3)
# ============================================================

SYNCHRONOUS_CODES = {"off": 0, "normal": 1, "full": 2, "extra": 3}
SQLITE_ERRORS = (sqlite3.Error,)


class SQLiteStatement(Statement):
    """Insert statement bound to one cursor.

    sqlite3 compiles the SQL on first execute and reuses the compiled
    statement for every later execute on the same cursor.
    """

    def __init__(self, conn: sqlite3.Connection, sql: str):
        self.sql = sql
        with engine_errors("prepare", SQLITE_ERRORS):
            self._cursor = conn.cursor()

    def execute(self, params: Sequence) -> None:
        with engine_errors("execute", SQLITE_ERRORS):
            self._cursor.execute(self.sql, params)

    def close(self) -> None:
        self._cursor.close()


class SQLiteTransaction(Transaction):
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        with engine_errors("begin", SQLITE_ERRORS):
            conn.execute("BEGIN")

    @property
    def active(self) -> bool:
        return self._conn.in_transaction

    def prepare(self, sql: str) -> SQLiteStatement:
        return SQLiteStatement(self._conn, sql)

    def commit(self) -> None:
        with engine_errors("commit", SQLITE_ERRORS):
            self._conn.execute("COMMIT")

    def rollback(self) -> None:
        with engine_errors("rollback", SQLITE_ERRORS):
            self._conn.execute("ROLLBACK")


class SQLiteEngine(StorageEngine):
    """SQLite through the standard library driver, in autocommit mode.

    Transactions are issued explicitly (BEGIN/COMMIT) so each batch is
    exactly one engine transaction.
    """

    name = "sqlite"
    insert_sql = "INSERT INTO t (id, name) VALUES (?, ?)"
    SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self.journal_mode: str | None = None

    @classmethod
    def reset(cls, path: Path) -> None:
        for suffix in ("",) + cls.SIDECAR_SUFFIXES:
            target = f"{path}{suffix}"
            if _remove(target):
                logger.info("file.reset", path=target)

    @classmethod
    def open(cls, config: BenchConfig) -> "SQLiteEngine":
        with engine_errors("open", SQLITE_ERRORS):
            conn = sqlite3.connect(str(config.path), isolation_level=None)
        return cls(conn)

    def apply_pragmas(self, journal_mode: str, synchronous: str) -> None:
        if journal_mode not in JOURNAL_MODES:
            raise EngineError(f"unknown journal mode: {journal_mode!r}", operation="pragma")
        if synchronous not in SYNCHRONOUS_LEVELS:
            raise EngineError(f"unknown synchronous level: {synchronous!r}", operation="pragma")

        # SQLite answers an unsupported journal mode with the mode it kept.
        with engine_errors("pragma", SQLITE_ERRORS):
            row = self._conn.execute(f"PRAGMA journal_mode={journal_mode}").fetchone()
        effective = str(row[0]).lower() if row else None
        if effective != journal_mode:
            raise EngineError(
                f"journal_mode={journal_mode} not applied; engine reports {effective}",
                operation="pragma",
            )
        self.journal_mode = effective

        with engine_errors("pragma", SQLITE_ERRORS):
            self._conn.execute(f"PRAGMA synchronous={synchronous}")
            level = self._conn.execute("PRAGMA synchronous").fetchone()[0]
        if level != SYNCHRONOUS_CODES[synchronous]:
            raise EngineError(
                f"synchronous={synchronous} not applied; engine reports {level}",
                operation="pragma",
            )
        logger.info("pragma.applied", journal_mode=effective, synchronous=synchronous)

    def execute(self, sql: str) -> None:
        with engine_errors("execute", SQLITE_ERRORS):
            self._conn.execute(sql)

    def begin(self) -> SQLiteTransaction:
        return SQLiteTransaction(self._conn)

    def checkpoint(self) -> None:
        """Fold the WAL back into the main file. Other journal modes have nothing to merge."""
        if self.journal_mode != "wal":
            return
        with engine_errors("checkpoint", SQLITE_ERRORS):
            busy, log_frames, checkpointed = self._conn.execute(
                "PRAGMA wal_checkpoint(TRUNCATE)"
            ).fetchone()
        if busy:
            raise EngineError("wal_checkpoint did not complete: database busy", operation="checkpoint")
        logger.info("checkpoint", log_frames=log_frames, checkpointed=checkpointed)

    def file_size(self, path: Path) -> int:
        try:
            return os.stat(path).st_size
        except OSError as e:
            raise StatError(str(e)) from e

    def close(self) -> None:
        self._conn.close()


# ============================================================
# Stoolap
# ============================================================

# Stoolap always journals through its WAL; only the sync policy is tunable.
STOOLAP_SYNC_MODES = {"off": "none", "normal": "normal", "full": "full"}


class StoolapStatement(Statement):
    """Insert SQL executed through the owning transaction."""

    def __init__(self, tx, sql: str, errors: tuple[type[BaseException], ...]):
        self.sql = sql
        self._tx = tx
        self._errors = errors

    def execute(self, params: Sequence) -> None:
        with engine_errors("execute", self._errors):
            self._tx.execute(self.sql, list(params))


class StoolapTransaction(Transaction):
    def __init__(self, db, errors: tuple[type[BaseException], ...]):
        self._errors = errors
        self._active = False
        with engine_errors("begin", errors):
            self._tx = db.begin()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def prepare(self, sql: str) -> StoolapStatement:
        return StoolapStatement(self._tx, sql, self._errors)

    def commit(self) -> None:
        with engine_errors("commit", self._errors):
            self._tx.commit()
        self._active = False

    def rollback(self) -> None:
        self._active = False
        with engine_errors("rollback", self._errors):
            self._tx.rollback()


class StoolapEngine(StorageEngine):
    """Stoolap opened from a DSN that carries the sync policy.

    The database path is a directory holding Stoolap's WAL and snapshots.
    """

    name = "stoolap"
    insert_sql = "INSERT INTO t (id, name) VALUES ($1, $2)"

    def __init__(self, db, errors: tuple[type[BaseException], ...]):
        self._db = db
        self._errors = errors

    @staticmethod
    def dsn(path: Path, synchronous: str) -> str:
        if synchronous not in STOOLAP_SYNC_MODES:
            raise EngineError(
                f"stoolap has no synchronous level {synchronous!r}; "
                f"supported: {', '.join(STOOLAP_SYNC_MODES)}",
                operation="pragma",
            )
        return f"file://{path}?sync={STOOLAP_SYNC_MODES[synchronous]}"

    @classmethod
    def reset(cls, path: Path) -> None:
        if os.path.isdir(path):
            try:
                shutil.rmtree(path)
            except OSError as e:
                raise FilesystemError(str(e)) from e
            logger.info("file.reset", path=str(path))
        elif _remove(str(path)):
            logger.info("file.reset", path=str(path))

    @classmethod
    def open(cls, config: BenchConfig) -> "StoolapEngine":
        try:
            from stoolap import Database, StoolapError
        except ImportError as e:
            raise EngineError(
                "stoolap engine requires the 'stoolap' package (pip install sqlite-bench[stoolap])",
                operation="open",
            ) from e

        errors = (StoolapError,)
        dsn = cls.dsn(config.path, config.synchronous)
        with engine_errors("open", errors):
            db = Database.open(dsn)
        return cls(db, errors)

    def apply_pragmas(self, journal_mode: str, synchronous: str) -> None:
        """Check the journal mode; the sync policy was fixed by the DSN at open."""
        if journal_mode != "wal":
            raise EngineError(
                f"stoolap only supports journal mode 'wal', not {journal_mode!r}",
                operation="pragma",
            )
        logger.info("pragma.applied", journal_mode=journal_mode, synchronous=synchronous)

    def execute(self, sql: str) -> None:
        with engine_errors("execute", self._errors):
            self._db.exec(sql)

    def begin(self) -> StoolapTransaction:
        return StoolapTransaction(self._db, self._errors)

    def checkpoint(self) -> None:
        """Stoolap snapshots its WAL on its own schedule and on close."""

    def file_size(self, path: Path) -> int:
        """Total bytes under the database directory (WAL included)."""
        try:
            if not os.path.isdir(path):
                return os.stat(path).st_size
            total = 0
            for root, _dirs, files in os.walk(path):
                for name in files:
                    total += os.stat(os.path.join(root, name)).st_size
            return total
        except OSError as e:
            raise StatError(str(e)) from e

    def close(self) -> None:
        with engine_errors("close", self._errors):
            self._db.close()


ENGINES: dict[str, type[StorageEngine]] = {
    SQLiteEngine.name: SQLiteEngine,
    StoolapEngine.name: StoolapEngine,
}


def engine_class(name: str) -> type[StorageEngine]:
    try:
        return ENGINES[name]
    except KeyError:
        raise EngineError(f"unknown engine: {name!r}", operation="open") from None
