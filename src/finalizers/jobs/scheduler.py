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
"""Finalize scheduler — creates and re-creates finalize jobs on the queue."""

from __future__ import annotations

import logging
from typing import Any

from finalizers.jobs.ports.outbound import JobQueuePort
from finalizers.jobs.properties import RetryProperties
from finalizers.jobs.types import EnqueueOptions, FinalizeJob, RetryPolicy

logger = logging.getLogger(__name__)


class FinalizeScheduler:
    """Single place where finalize jobs enter the queue."""

    def __init__(self, queue: JobQueuePort, properties: RetryProperties | None = None) -> None:
        self._queue = queue
        self._properties = properties or RetryProperties()

    @property
    def properties(self) -> RetryProperties:
        return self._properties

    async def schedule(self, entity_type: str, entity_id: Any) -> FinalizeJob:
        """Enqueue the first finalize job for an entity that just entered ``deleted``."""
        job = FinalizeJob(
            entity_type=entity_type,
            entity_id=entity_id,
            attempt_count=1,
            priority=self._properties.queue_priority,
        )
        await self._queue.enqueue(job, EnqueueOptions(priority=job.priority))
        logger.debug("Scheduled finalization of %s %s [job_id=%s]", entity_type, entity_id, job.job_id)
        return job

    async def reschedule(self, job: FinalizeJob, policy: RetryPolicy | None = None) -> FinalizeJob:
        """Enqueue the next attempt of *job* under *policy* (the retry policy by default)."""
        policy = policy or self._properties.retry_policy()
        retry = FinalizeJob(
            entity_type=job.entity_type,
            entity_id=job.entity_id,
            attempt_count=job.attempt_count + 1,
            priority=policy.priority,
        )
        await self._queue.enqueue(retry, policy.to_options())
        return retry
