#!/usr/bin/env python3
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

"""Insert throughput across every journal mode and synchronous level.

Each configuration gets a fresh file in a temporary directory. Stoolap
rows are added when the stoolap package is installed.

Run:  python benchmark.py
"""

import importlib.util
import shutil
import tempfile

from sqlite_bench.config import SYNCHRONOUS_LEVELS
from sqlite_bench.logging import setup_logging
from sqlite_bench.matrix import matrix_configs, run_matrix
from sqlite_bench.report import WIDTH, format_table

BATCH_SIZE = 1_000
BATCH_COUNT = 100
ROW_SIZE = 100


def main() -> None:
    setup_logging("ERROR")
    print("sqlite-bench: journal mode x synchronous level")
    print(f"Configuration: {BATCH_COUNT} batches of {BATCH_SIZE} rows, {ROW_SIZE} bytes per row")

    work_dir = tempfile.mkdtemp(prefix="sqlite_bench_")
    try:
        configs = matrix_configs(
            work_dir,
            batch_size=BATCH_SIZE,
            batch_count=BATCH_COUNT,
            row_size=ROW_SIZE,
        )
        results = list(run_matrix(configs))
        print(format_table("SQLITE", results))

        if importlib.util.find_spec("stoolap") is not None:
            stoolap_configs = matrix_configs(
                work_dir,
                journal_modes=["wal"],
                synchronous_levels=[s for s in SYNCHRONOUS_LEVELS if s != "extra"],
                batch_size=BATCH_SIZE,
                batch_count=BATCH_COUNT,
                row_size=ROW_SIZE,
                engine="stoolap",
            )
            stoolap_results = list(run_matrix(stoolap_configs))
            print(format_table("STOOLAP", stoolap_results))
            results += stoolap_results

        fastest = max(results, key=lambda r: r.rate)
        smallest = min(results, key=lambda r: r.file_size)

        print()
        print("=" * WIDTH)
        print(
            f"FASTEST: {fastest.config.engine} {fastest.config.journal_mode}/"
            f"{fastest.config.synchronous} at {fastest.rate:,.0f} insert/sec"
        )
        print(
            f"SMALLEST: {smallest.config.engine} {smallest.config.journal_mode}/"
            f"{smallest.config.synchronous} at {smallest.file_size} bytes"
        )
        print("=" * WIDTH)
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)


if __name__ == "__main__":
    main()
