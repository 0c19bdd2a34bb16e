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

"""Benchmark configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sqlite_bench.errors import ArgumentError

JournalMode = Literal["delete", "truncate", "persist", "memory", "wal", "off"]
SynchronousLevel = Literal["off", "normal", "full", "extra"]
EngineName = Literal["sqlite", "stoolap"]

JOURNAL_MODES: tuple[str, ...] = get_args(JournalMode)
SYNCHRONOUS_LEVELS: tuple[str, ...] = get_args(SynchronousLevel)
ENGINES: tuple[str, ...] = get_args(EngineName)

DEFAULT_BATCH_SIZE = 1000
DEFAULT_BATCH_COUNT = 1000
DEFAULT_ROW_SIZE = 100


class BenchConfig(BaseModel):
    """One benchmark run."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Target database file")
    journal_mode: JournalMode = Field(default="delete", description="Journal mode pragma")
    synchronous: SynchronousLevel = Field(default="full", description="Synchronous pragma")
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0, description="Inserts per transaction")
    batch_count: int = Field(default=DEFAULT_BATCH_COUNT, gt=0, description="Number of transactions")
    row_size: int = Field(default=DEFAULT_ROW_SIZE, gt=0, description="Payload length in bytes")
    engine: EngineName = Field(default="sqlite", description="Storage engine under test")

    @field_validator("journal_mode", "synchronous", "engine", mode="before")
    @classmethod
    def _lowercase(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def total_rows(self) -> int:
        return self.batch_size * self.batch_count

    @classmethod
    def from_args(cls, **values: Any) -> "BenchConfig":
        """Build a config, reporting the first invalid value as an ArgumentError."""
        try:
            return cls(**values)
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(part) for part in err["loc"]) or "config"
            raise ArgumentError(f"invalid {field}: {err['msg']}") from e
