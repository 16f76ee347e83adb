# Copyright 2026 Firefly Software Solutions Inc.
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
"""Tests for error reporting adapters."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from finalizers.jobs.ports.outbound import ErrorReporterPort
from finalizers.jobs.reporting import CompositeErrorReporter, LoggingErrorReporter

CONTEXT = {"entity_type": "Vehicle", "entity_id": 1, "attempt": 3}


class TestLoggingErrorReporter:
    def test_implements_port(self):
        assert isinstance(LoggingErrorReporter(), ErrorReporterPort)

    @pytest.mark.asyncio
    async def test_logs_at_error_with_traceback(self, caplog):
        try:
            raise RuntimeError("plate registry down")
        except RuntimeError as exc:
            error = exc

        with caplog.at_level(logging.ERROR, logger="finalizers.jobs.errors"):
            await LoggingErrorReporter().report(error, CONTEXT)

        (record,) = caplog.records
        assert record.levelno == logging.ERROR
        assert "entity_type=Vehicle, entity_id=1, attempt=3" in record.message
        assert record.exc_info is not None
        assert record.exc_info[1] is error


class TestCompositeErrorReporter:
    @pytest.mark.asyncio
    async def test_fans_out_to_every_reporter(self):
        first, second = AsyncMock(), AsyncMock()
        error = RuntimeError("x")

        await CompositeErrorReporter(first, second).report(error, CONTEXT)

        first.report.assert_awaited_once_with(error, CONTEXT)
        second.report.assert_awaited_once_with(error, CONTEXT)

    @pytest.mark.asyncio
    async def test_failing_reporter_does_not_silence_others(self, caplog):
        broken = AsyncMock()
        broken.report.side_effect = ConnectionError("sink offline")
        healthy = AsyncMock()

        with caplog.at_level(logging.ERROR, logger="finalizers.jobs.errors"):
            await CompositeErrorReporter(broken, healthy).report(RuntimeError("x"), CONTEXT)

        healthy.report.assert_awaited_once()
        assert "failed" in caplog.text
