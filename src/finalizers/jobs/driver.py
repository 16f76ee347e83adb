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
"""Retry job driver — performs finalize jobs and decides what happens next.

Per job:

1. Resolve the entity type by name and re-load the entity from its store.
   A missing entity (already destroyed, redelivered job) is discarded, as
   is one that is no longer ``deleted``.
2. Run :meth:`LifecycleController.finalize_and_destroy`.
3. Retryable failures are logged at WARNING and re-enqueued with the retry
   policy; concurrency conflicts are re-enqueued with the shorter conflict
   policy. Neither is reported.
4. Anything else is handed to the error reporter and re-raised to the
   transport.
"""

from __future__ import annotations

import logging
from typing import Any

from finalizers.jobs.ports.outbound import ErrorReporterPort
from finalizers.jobs.reporting import LoggingErrorReporter
from finalizers.jobs.scheduler import FinalizeScheduler
from finalizers.jobs.types import FinalizeJob, JobOutcome
from finalizers.kernel.exceptions import (
    ConcurrencyException,
    EntityTypeNotRegisteredError,
    RetryableFinalizationError,
)
from finalizers.lifecycle.classifier import ErrorClassifier
from finalizers.lifecycle.controller import FinalizationStatus, LifecycleController
from finalizers.lifecycle.entity import is_deleted

logger = logging.getLogger(__name__)


class RetryJobDriver:
    """Consumes :class:`FinalizeJob` payloads from the job queue."""

    def __init__(
        self,
        controller: LifecycleController,
        scheduler: FinalizeScheduler,
        reporter: ErrorReporterPort | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._controller = controller
        self._scheduler = scheduler
        self._reporter = reporter or LoggingErrorReporter()
        self._classifier = classifier or ErrorClassifier()

    async def __call__(self, job: FinalizeJob) -> JobOutcome:
        return await self.perform(job)

    async def perform(self, job: FinalizeJob) -> JobOutcome:
        """Finalize the entity named by *job*.

        Raises:
            EntityTypeNotRegisteredError: If the job names an unknown type.
            Exception: Any unexpected failure, after it has been reported.
        """
        context: dict[str, Any] = {
            "job_id": job.job_id,
            "entity_type": job.entity_type,
            "entity_id": job.entity_id,
            "attempt": job.attempt_count,
        }
        try:
            return await self._perform(job)
        except RetryableFinalizationError as exc:
            logger.warning("%s (attempt=%d)", exc, job.attempt_count)
            await self._scheduler.reschedule(job, self._scheduler.properties.retry_policy())
            return JobOutcome.RETRIED
        except ConcurrencyException as exc:
            logger.warning(
                "Concurrency conflict finalizing %s %s, retrying (attempt=%d): %s",
                job.entity_type,
                job.entity_id,
                job.attempt_count,
                exc,
            )
            await self._scheduler.reschedule(job, self._scheduler.properties.conflict_policy())
            return JobOutcome.RETRIED
        except Exception as exc:
            if self._classifier.should_report(exc):
                await self._reporter.report(exc, context)
            raise

    async def _perform(self, job: FinalizeJob) -> JobOutcome:
        definition = self._controller.registry.get(job.entity_type)
        if definition is None:
            raise EntityTypeNotRegisteredError(
                f"Entity type '{job.entity_type}' is not registered",
                context={"entity_type": job.entity_type, "job_id": job.job_id},
            )

        entity = await definition.store.find_by_id(definition.coerce_id(job.entity_id))
        if entity is None:
            logger.debug("Discarding job %s: %s %s no longer exists", job.job_id, job.entity_type, job.entity_id)
            return JobOutcome.DISCARDED
        if not is_deleted(entity):
            logger.debug("Discarding job %s: %s %s is not deleted", job.job_id, job.entity_type, job.entity_id)
            return JobOutcome.DISCARDED

        report = await self._controller.finalize_and_destroy(entity, attempt=job.attempt_count)
        if report.status == FinalizationStatus.ABORTED:
            return JobOutcome.ABORTED
        return JobOutcome.DESTROYED
