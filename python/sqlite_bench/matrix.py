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

"""Sweep journal modes and synchronous levels for side-by-side comparison."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Iterable, Iterator

from sqlite_bench.config import (
    DEFAULT_BATCH_COUNT,
    DEFAULT_BATCH_SIZE,
    DEFAULT_ROW_SIZE,
    JOURNAL_MODES,
    SYNCHRONOUS_LEVELS,
    BenchConfig,
)
from sqlite_bench.driver import BenchResult, run_benchmark


def matrix_configs(
    directory: Path,
    journal_modes: Iterable[str] = JOURNAL_MODES,
    synchronous_levels: Iterable[str] = SYNCHRONOUS_LEVELS,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_count: int = DEFAULT_BATCH_COUNT,
    row_size: int = DEFAULT_ROW_SIZE,
    engine: str = "sqlite",
) -> list[BenchConfig]:
    """One config per (journal mode, synchronous level), each with its own file."""
    configs = []
    for journal_mode, synchronous in itertools.product(journal_modes, synchronous_levels):
        configs.append(
            BenchConfig.from_args(
                path=Path(directory) / f"bench-{journal_mode}-{synchronous}.db",
                journal_mode=journal_mode,
                synchronous=synchronous,
                batch_size=batch_size,
                batch_count=batch_count,
                row_size=row_size,
                engine=engine,
            )
        )
    return configs


def run_matrix(configs: Iterable[BenchConfig]) -> Iterator[BenchResult]:
    """Run configs one after another; the first failure stops the sweep."""
    for config in configs:
        yield run_benchmark(config)
