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

"""sqlite-bench - insert throughput benchmark for embedded SQL engines.

Usage:
    from sqlite_bench import BenchConfig, run_benchmark

    config = BenchConfig(path="bench.db", journal_mode="wal", synchronous="normal")
    result = run_benchmark(config)
    print(result.rows, result.elapsed, result.rate, result.file_size)

Command line:
    sqlite-bench --journal-mode wal --batch-size 1000 --batch-count 100 bench.db
"""

from sqlite_bench.config import BenchConfig
from sqlite_bench.driver import BenchmarkDriver, BenchResult, RowIdCounter, run_benchmark
from sqlite_bench.engine import SQLiteEngine, StoolapEngine, StorageEngine
from sqlite_bench.errors import (
    ArgumentError,
    BenchError,
    EngineError,
    FilesystemError,
    StatError,
)

__all__ = [
    "BenchConfig",
    "BenchmarkDriver",
    "BenchResult",
    "RowIdCounter",
    "run_benchmark",
    "StorageEngine",
    "SQLiteEngine",
    "StoolapEngine",
    "BenchError",
    "ArgumentError",
    "FilesystemError",
    "EngineError",
    "StatError",
]
