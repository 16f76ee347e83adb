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
"""Error reporting adapters for unexpected finalization failures.

This module provides two ``ErrorReporterPort`` implementations:

* :class:`LoggingErrorReporter` -- logs every reported failure at
  :data:`logging.ERROR` with its traceback and context.
* :class:`CompositeErrorReporter` -- fans-out each report to an ordered
  sequence of child reporters, absorbing individual reporter failures so that
  one broken sink never silences the others.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from finalizers.jobs.ports.outbound import ErrorReporterPort

_logger = logging.getLogger("finalizers.jobs.errors")


class LoggingErrorReporter:
    """Reports failures through the ``finalizers.jobs.errors`` logger."""

    async def report(self, error: BaseException, context: dict[str, Any]) -> None:
        _logger.error(
            "Finalization failed [entity_type=%s, entity_id=%s, attempt=%s]: %s",
            context.get("entity_type"),
            context.get("entity_id"),
            context.get("attempt"),
            error,
            exc_info=(type(error), error, error.__traceback__),
        )


class CompositeErrorReporter:
    """Broadcasts reports to multiple ``ErrorReporterPort`` implementations.

    Args:
        *reporters: Reporters receiving every failure, in order.
    """

    def __init__(self, *reporters: ErrorReporterPort) -> None:
        self._reporters: Sequence[ErrorReporterPort] = reporters

    async def report(self, error: BaseException, context: dict[str, Any]) -> None:
        for reporter in self._reporters:
            try:
                await reporter.report(error, context)
            except Exception:
                _logger.error("Error reporter %r failed", reporter, exc_info=True)
