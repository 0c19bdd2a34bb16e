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

"""Benchmark driver: reset, open, configure, insert in batches, measure."""

from __future__ import annotations

import time
from dataclasses import dataclass

from sqlite_bench.config import BenchConfig
from sqlite_bench.engine import SCHEMA_SQL, StorageEngine, engine_class
from sqlite_bench.errors import BenchError
from sqlite_bench.logging import get_logger

logger = get_logger(__name__)

# perf_counter can tick coarser than a very short run on some platforms.
MIN_ELAPSED = 1e-9


class RowIdCounter:
    """Hands out row ids 0, 1, 2, ... and never repeats one."""

    __slots__ = ("_next",)

    def __init__(self, start: int = 0):
        self._next = start

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    @property
    def value(self) -> int:
        """The id the next insert will get."""
        return self._next

    def __repr__(self) -> str:
        return f"RowIdCounter(next={self._next})"


@dataclass(frozen=True)
class BenchResult:
    config: BenchConfig
    rows: int
    elapsed: float
    file_size: int

    @property
    def rate(self) -> float:
        return self.rows / self.elapsed


class BenchmarkDriver:
    """Runs one benchmark configuration end to end.

    Any failure aborts the run and propagates unchanged; batches committed
    before the failure stay committed.
    """

    def __init__(self, config: BenchConfig, counter: RowIdCounter | None = None):
        self.config = config
        self.counter = counter if counter is not None else RowIdCounter()
        self.engine_cls: type[StorageEngine] = engine_class(config.engine)
        self.payload = "x" * config.row_size

    def run(self) -> BenchResult:
        cfg = self.config
        log = logger.bind(engine=cfg.engine, path=str(cfg.path))
        log.info(
            "benchmark.start",
            journal_mode=cfg.journal_mode,
            synchronous=cfg.synchronous,
            batch_size=cfg.batch_size,
            batch_count=cfg.batch_count,
            row_size=cfg.row_size,
        )
        try:
            self.engine_cls.reset(cfg.path)
            with self.engine_cls.open(cfg) as engine:
                engine.apply_pragmas(cfg.journal_mode, cfg.synchronous)
                engine.execute(SCHEMA_SQL)

                t0 = time.perf_counter()
                rows = self.insert_batches(engine)
                elapsed = max(time.perf_counter() - t0, MIN_ELAPSED)

                engine.checkpoint()
                file_size = engine.file_size(cfg.path)
        except BenchError as e:
            log.warning("benchmark.failed", error=str(e), error_type=type(e).__name__)
            raise

        result = BenchResult(config=cfg, rows=rows, elapsed=elapsed, file_size=file_size)
        log.info(
            "benchmark.finished",
            rows=rows,
            elapsed=round(elapsed, 6),
            rate=round(result.rate, 3),
            file_size=file_size,
        )
        return result

    def insert_batches(self, engine: StorageEngine) -> int:
        rows = 0
        for i in range(self.config.batch_count):
            rows += self.insert_batch(engine)
            logger.debug("batch.committed", batch=i, next_id=self.counter.value)
        return rows

    def insert_batch(self, engine: StorageEngine) -> int:
        """One transaction of batch_size inserts. Rolled back if anything fails."""
        with engine.begin() as tx:
            with tx.prepare(engine.insert_sql) as stmt:
                for _ in range(self.config.batch_size):
                    stmt.execute((self.counter.next(), self.payload))
            tx.commit()
        return self.config.batch_size


def run_benchmark(config: BenchConfig, counter: RowIdCounter | None = None) -> BenchResult:
    return BenchmarkDriver(config, counter).run()
