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

"""Plain-text output for benchmark results."""

from __future__ import annotations

from typing import Iterable

from sqlite_bench.driver import BenchResult

WIDTH = 80


def format_total(result: BenchResult) -> str:
    return (
        f"TOTAL: {result.rows} inserts over {result.elapsed:0.3f}s; "
        f"{result.rate:0.3f} insert/sec"
    )


def format_size(result: BenchResult) -> str:
    return f"SIZE: {result.file_size} bytes"


def format_result(result: BenchResult) -> str:
    return f"{format_total(result)}\n{format_size(result)}"


def fmt_rate(rate: float) -> str:
    return f"{rate:,.0f}".rjust(15)


def fmt_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MiB".rjust(12)
    if size >= 1024:
        return f"{size / 1024:.1f} KiB".rjust(12)
    return f"{size} B".rjust(12)


def format_header(section: str) -> str:
    lines = [
        "",
        "=" * WIDTH,
        section,
        "=" * WIDTH,
        f"{'Journal':<10} | {'Sync':<8} | {'Seconds':>10} | {'Inserts/sec':>15} | {'Size':>12}",
        "-" * WIDTH,
    ]
    return "\n".join(lines)


def format_row(result: BenchResult) -> str:
    cfg = result.config
    return (
        f"{cfg.journal_mode:<10} | {cfg.synchronous:<8} | "
        f"{result.elapsed:>10.3f} | {fmt_rate(result.rate)} | {fmt_size(result.file_size)}"
    )


def format_table(section: str, results: Iterable[BenchResult]) -> str:
    return "\n".join([format_header(section), *(format_row(r) for r in results)])
