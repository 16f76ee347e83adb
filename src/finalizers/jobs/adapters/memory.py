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
"""In-memory job queue for tests and single-process tools.

Nothing runs on its own: jobs wait until :meth:`InMemoryJobQueue.perform_enqueued`
is called, which makes every step of a finalization observable from a test.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from finalizers.jobs.ports.outbound import JobHandler
from finalizers.jobs.types import EnqueueOptions, FinalizeJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnqueuedJob:
    job: FinalizeJob
    options: EnqueueOptions

    @property
    def delayed(self) -> bool:
        return self.options.delay_seconds > 0 or self.options.jitter_seconds > 0


class InMemoryJobQueue:
    """Records every enqueued job and performs them on demand.

    Delayed jobs (retries) are skipped by :meth:`perform_enqueued` unless
    ``include_delayed=True``, which stands in for their wait elapsing.
    """

    def __init__(self) -> None:
        self._handlers: list[JobHandler] = []
        self._pending: list[EnqueuedJob] = []
        self.enqueued: list[EnqueuedJob] = []
        self.performed: list[tuple[FinalizeJob, Any]] = []
        self._running = False

    async def enqueue(self, job: FinalizeJob, options: EnqueueOptions | None = None) -> None:
        options = options or EnqueueOptions(priority=job.priority)
        if options.exceeded_by(job):
            logger.warning(
                "Dropping job %s for %s %s: attempt %d exceeds limit %s",
                job.job_id,
                job.entity_type,
                job.entity_id,
                job.attempt_count,
                options.max_attempts,
            )
            return
        entry = EnqueuedJob(job=job, options=options)
        self.enqueued.append(entry)
        self._pending.append(entry)

    async def subscribe(self, handler: JobHandler) -> None:
        self._handlers.append(handler)

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    @property
    def jobs(self) -> list[FinalizeJob]:
        """Every job ever enqueued, in enqueue order."""
        return [entry.job for entry in self.enqueued]

    @property
    def pending(self) -> list[FinalizeJob]:
        return [entry.job for entry in self._pending]

    def clear(self) -> None:
        self._pending.clear()
        self.enqueued.clear()
        self.performed.clear()

    async def perform_enqueued(self, include_delayed: bool = False) -> list[Any]:
        """Perform the jobs pending right now, highest priority first.

        Jobs enqueued while performing (retries, cascaded erases) stay
        pending for the next call. Handler failures propagate.

        Returns:
            The value returned by the last handler for each performed job.
        """
        if not self._handlers:
            raise RuntimeError("No job handler subscribed")

        due = [e for e in self._pending if include_delayed or not e.delayed]
        due.sort(key=lambda e: -e.options.priority)
        results: list[Any] = []
        for entry in due:
            self._pending.remove(entry)
            result = None
            for handler in self._handlers:
                result = await handler(entry.job)
            self.performed.append((entry.job, result))
            results.append(result)
        return results
