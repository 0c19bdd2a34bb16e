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

"""Command-line entry point.

Run:  sqlite-bench [flags] PATH
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from sqlite_bench.config import (
    DEFAULT_BATCH_COUNT,
    DEFAULT_BATCH_SIZE,
    DEFAULT_ROW_SIZE,
    ENGINES,
    JOURNAL_MODES,
    SYNCHRONOUS_LEVELS,
    BenchConfig,
)
from sqlite_bench.driver import run_benchmark
from sqlite_bench.errors import ArgumentError, BenchError
from sqlite_bench.logging import LOG_FORMATS, LOG_LEVELS, setup_logging
from sqlite_bench.report import format_result


class ArgumentParser(argparse.ArgumentParser):
    """argparse that raises ArgumentError instead of printing usage and exiting."""

    def error(self, message: str):
        raise ArgumentError(message)

    def exit(self, status: int = 0, message: str | None = None):
        # Only -h gets here. Asking for help is not a run, so it exits 1.
        super().exit(status or 1, message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="sqlite-bench",
        description="Measure insert throughput and file size of an embedded SQL engine.",
    )
    parser.add_argument("path", nargs="*", help="database file to (re)create")
    parser.add_argument("--journal-mode", choices=JOURNAL_MODES, type=str.lower, default=None,
                        help="journal mode pragma (default: delete)")
    parser.add_argument("--use-wal", action="store_true",
                        help="shorthand for --journal-mode wal")
    parser.add_argument("--synchronous", choices=SYNCHRONOUS_LEVELS, type=str.lower, default="full",
                        help="synchronous pragma (default: full)")
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE,
                        help=f"inserts per transaction (default: {DEFAULT_BATCH_SIZE})")
    parser.add_argument("--batch-count", type=int, default=DEFAULT_BATCH_COUNT,
                        help=f"number of transactions (default: {DEFAULT_BATCH_COUNT})")
    parser.add_argument("--row-size", type=int, default=DEFAULT_ROW_SIZE,
                        help=f"payload bytes per row (default: {DEFAULT_ROW_SIZE})")
    parser.add_argument("--engine", choices=ENGINES, default="sqlite",
                        help="engine under test (default: sqlite)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper, default="ERROR")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="console")
    return parser


def parse_config(argv: Sequence[str] | None = None) -> tuple[BenchConfig, argparse.Namespace]:
    args = build_parser().parse_args(argv)

    # Positional count is checked here so the messages match the original tool.
    if not args.path:
        raise ArgumentError("path required")
    if len(args.path) > 1:
        raise ArgumentError("too many args")

    journal_mode = args.journal_mode
    if args.use_wal:
        if journal_mode not in (None, "wal"):
            raise ArgumentError(f"--use-wal conflicts with --journal-mode {journal_mode}")
        journal_mode = "wal"

    config = BenchConfig.from_args(
        path=args.path[0],
        journal_mode=journal_mode or "delete",
        synchronous=args.synchronous,
        batch_size=args.batch_size,
        batch_count=args.batch_count,
        row_size=args.row_size,
        engine=args.engine,
    )
    return config, args


def main(argv: Sequence[str] | None = None) -> int:
    try:
        config, args = parse_config(argv)
        setup_logging(args.log_level, args.log_format)
        result = run_benchmark(config)
    except BenchError as e:
        print(str(e).replace("\n", " "), file=sys.stderr)
        return 1

    print(format_result(result))
    return 0
