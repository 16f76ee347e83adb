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
"""Job types — finalize jobs, enqueue options and retry policies."""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class JobOutcome(StrEnum):
    """What :meth:`RetryJobDriver.perform` did with a job."""

    DESTROYED = "DESTROYED"
    ABORTED = "ABORTED"
    RETRIED = "RETRIED"
    DISCARDED = "DISCARDED"


@dataclass(frozen=True)
class FinalizeJob:
    """Unit of work asking the driver to finalize and destroy one entity.

    Carries identity only: the entity is re-resolved from its store when the
    job runs, so a job stays valid across restarts and redelivery.
    """

    entity_type: str
    entity_id: Any
    attempt_count: int = 1
    priority: int = 0
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    scheduled_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable payload; non-primitive ids are sent as strings."""
        entity_id = self.entity_id
        if not isinstance(entity_id, (str, int, float)) and entity_id is not None:
            entity_id = str(entity_id)
        return {
            "job_id": self.job_id,
            "entity_type": self.entity_type,
            "entity_id": entity_id,
            "attempt_count": self.attempt_count,
            "priority": self.priority,
            "scheduled_at": self.scheduled_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FinalizeJob:
        scheduled_at = data.get("scheduled_at")
        kwargs: dict[str, Any] = {}
        if scheduled_at is not None:
            kwargs["scheduled_at"] = (
                scheduled_at
                if isinstance(scheduled_at, datetime)
                else datetime.fromisoformat(scheduled_at)
            )
        if data.get("job_id"):
            kwargs["job_id"] = data["job_id"]
        return cls(
            entity_type=data["entity_type"],
            entity_id=data["entity_id"],
            attempt_count=int(data.get("attempt_count", 1)),
            priority=int(data.get("priority", 0)),
            **kwargs,
        )


@dataclass(frozen=True)
class EnqueueOptions:
    """Transport options for one enqueue.

    Attributes:
        delay_seconds: Minimum wait before the job becomes due.
        jitter_seconds: Upper bound of a random extra delay.
        priority: Higher numbers are served first.
        max_attempts: Attempts after which the transport drops the job;
            ``None`` means unlimited.
    """

    delay_seconds: float = 0.0
    jitter_seconds: float = 0.0
    priority: int = 0
    max_attempts: int | None = None

    def sample_delay(self, uniform: Callable[[float, float], float] = random.uniform) -> float:
        """Delay plus a random share of the jitter range."""
        if self.jitter_seconds <= 0:
            return self.delay_seconds
        return self.delay_seconds + uniform(0.0, self.jitter_seconds)

    def exceeded_by(self, job: FinalizeJob) -> bool:
        return self.max_attempts is not None and job.attempt_count > self.max_attempts


@dataclass(frozen=True)
class RetryPolicy:
    """How a job is re-enqueued after a recoverable failure."""

    wait_seconds: float
    jitter_seconds: float
    priority: int
    max_attempts: int | None = None

    def to_options(self) -> EnqueueOptions:
        return EnqueueOptions(
            delay_seconds=self.wait_seconds,
            jitter_seconds=self.jitter_seconds,
            priority=self.priority,
            max_attempts=self.max_attempts,
        )
