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
"""Finalizers Jobs — scheduling, performing and retrying finalize jobs."""

from __future__ import annotations

from finalizers.jobs.adapters.asyncio_queue import AsyncIOJobQueue
from finalizers.jobs.adapters.memory import EnqueuedJob, InMemoryJobQueue
from finalizers.jobs.driver import RetryJobDriver
from finalizers.jobs.ports.outbound import ErrorReporterPort, JobHandler, JobQueuePort
from finalizers.jobs.properties import RetryProperties
from finalizers.jobs.reporting import CompositeErrorReporter, LoggingErrorReporter
from finalizers.jobs.scheduler import FinalizeScheduler
from finalizers.jobs.types import EnqueueOptions, FinalizeJob, JobOutcome, RetryPolicy

__all__ = [
    "AsyncIOJobQueue",
    "CompositeErrorReporter",
    "EnqueueOptions",
    "EnqueuedJob",
    "ErrorReporterPort",
    "FinalizeJob",
    "FinalizeScheduler",
    "InMemoryJobQueue",
    "JobHandler",
    "JobOutcome",
    "JobQueuePort",
    "LoggingErrorReporter",
    "RetryJobDriver",
    "RetryPolicy",
    "RetryProperties",
]
