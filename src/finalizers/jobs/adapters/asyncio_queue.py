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
"""AsyncIO job queue — in-process worker pool with delayed, prioritised delivery."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from typing import Any

from finalizers.jobs.ports.outbound import JobHandler
from finalizers.jobs.types import EnqueueOptions, FinalizeJob

logger = logging.getLogger(__name__)


class AsyncIOJobQueue:
    """Runs finalize jobs on ``workers`` asyncio tasks.

    Delayed jobs are released by the event loop timer; due jobs are served
    highest priority first, FIFO within a priority. A failing handler is
    logged and the job is dropped. Jobs still waiting at :meth:`stop` are
    lost, so use a durable transport where restarts must not lose work.

    Usage::

        queue = AsyncIOJobQueue(workers=4)
        await queue.subscribe(driver.perform)
        await queue.start()
        # ... application runs ...
        await queue.stop()
    """

    def __init__(
        self,
        workers: int = 4,
        sample_delay: Callable[[EnqueueOptions], float] | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._workers = workers
        self._sample_delay = sample_delay or (lambda options: options.sample_delay())
        self._handlers: list[JobHandler] = []
        self._queue: asyncio.PriorityQueue[tuple[int, int, FinalizeJob]] = asyncio.PriorityQueue()
        self._sequence = itertools.count()
        self._timers: set[asyncio.TimerHandle] = set()
        self._tasks: list[asyncio.Task[Any]] = []
        self._running = False

    @property
    def workers(self) -> int:
        return self._workers

    @property
    def running(self) -> bool:
        return self._running

    @property
    def delayed_count(self) -> int:
        return len(self._timers)

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

        item = (-options.priority, next(self._sequence), job)
        delay = self._sample_delay(options)
        if delay <= 0:
            self._queue.put_nowait(item)
            return

        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def release() -> None:
            self._timers.discard(handle)  # type: ignore[arg-type]
            self._queue.put_nowait(item)

        handle = loop.call_later(delay, release)
        self._timers.add(handle)

    async def subscribe(self, handler: JobHandler) -> None:
        self._handlers.append(handler)

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        for index in range(self._workers):
            task = asyncio.create_task(self._work(), name=f"finalizers-worker-{index}")
            self._tasks.append(task)

    async def stop(self) -> None:
        """Cancel pending timers and workers; jobs in flight are interrupted."""
        self._running = False
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def join(self) -> None:
        """Wait until every due job has been handled. Delayed jobs are not awaited."""
        await self._queue.join()

    async def _work(self) -> None:
        while True:
            _, _, job = await self._queue.get()
            try:
                for handler in self._handlers:
                    await handler(job)
            except Exception:
                logger.error(
                    "Job %s for %s %s failed (attempt=%d)",
                    job.job_id,
                    job.entity_type,
                    job.entity_id,
                    job.attempt_count,
                    exc_info=True,
                )
            finally:
                self._queue.task_done()
