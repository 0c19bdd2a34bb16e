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

"""Shared fixtures."""

import shutil
import tempfile

import pytest
import structlog


@pytest.fixture
def db_dir():
    """Create a temp directory for the database and clean up afterwards."""
    d = tempfile.mkdtemp(prefix="sqlite_bench_test_")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI reconfigures structlog; keep each test on the defaults."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
