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
"""Retry properties bound from the ``finalizers.jobs`` configuration section."""

from __future__ import annotations

from dataclasses import dataclass

from finalizers.core.config import config_properties
from finalizers.jobs.types import RetryPolicy


@config_properties(prefix="finalizers.jobs")
@dataclass
class RetryProperties:
    """Scheduling and retry settings for finalize jobs.

    Priorities follow the queue convention: higher numbers are served first.
    """

    queue_priority: int = 10
    retry_wait_seconds: float = 20.0
    retry_jitter_seconds: float = 15.0
    retry_priority: int = 20
    conflict_wait_seconds: float = 10.0
    conflict_jitter_seconds: float = 3.0
    workers: int = 4

    def retry_policy(self) -> RetryPolicy:
        """Policy for finalizers that asked to be retried."""
        return RetryPolicy(
            wait_seconds=self.retry_wait_seconds,
            jitter_seconds=self.retry_jitter_seconds,
            priority=self.retry_priority,
        )

    def conflict_policy(self) -> RetryPolicy:
        """Policy for deadlocks and optimistic-lock conflicts."""
        return RetryPolicy(
            wait_seconds=self.conflict_wait_seconds,
            jitter_seconds=self.conflict_jitter_seconds,
            priority=self.queue_priority,
        )
