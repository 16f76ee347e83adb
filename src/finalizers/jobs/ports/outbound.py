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
"""Outbound ports: job transport and error reporting."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

from finalizers.jobs.types import EnqueueOptions, FinalizeJob
from finalizers.kernel.lifecycle import Lifecycle

JobHandler = Callable[[FinalizeJob], Coroutine[Any, Any, Any]]


@runtime_checkable
class JobQueuePort(Lifecycle, Protocol):
    """Transport delivering finalize jobs to a handler.

    Delivery is at-least-once; handlers must tolerate redelivered jobs.
    """

    async def enqueue(self, job: FinalizeJob, options: EnqueueOptions | None = None) -> None: ...

    async def subscribe(self, handler: JobHandler) -> None: ...


@runtime_checkable
class ErrorReporterPort(Protocol):
    """Sink for unexpected finalization failures."""

    async def report(self, error: BaseException, context: dict[str, Any]) -> None: ...
