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

"""Benchmark errors. Every one of them ends the run."""

from __future__ import annotations


class BenchError(Exception):
    """Base class for all benchmark failures."""


class ArgumentError(BenchError):
    """Bad command-line arguments or configuration values."""


class FilesystemError(BenchError):
    """The target file could not be reset."""


class EngineError(BenchError):
    """The storage engine rejected a command.

    The message is the engine's own, unmodified. ``operation`` names the
    command that failed (open, pragma, execute, prepare, commit, ...).
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class StatError(BenchError):
    """The final file size could not be read."""
