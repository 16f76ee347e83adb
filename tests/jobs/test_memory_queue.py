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
"""Tests for InMemoryJobQueue."""

from __future__ import annotations

import logging

import pytest

from finalizers.jobs.adapters.memory import InMemoryJobQueue
from finalizers.jobs.ports.outbound import JobQueuePort
from finalizers.jobs.types import EnqueueOptions, FinalizeJob


def job(entity_id: int, attempt: int = 1) -> FinalizeJob:
    return FinalizeJob(entity_type="Vehicle", entity_id=entity_id, attempt_count=attempt)


class TestInMemoryJobQueue:
    def test_implements_port(self):
        assert isinstance(InMemoryJobQueue(), JobQueuePort)

    @pytest.mark.asyncio
    async def test_records_enqueued_jobs(self):
        queue = InMemoryJobQueue()
        await queue.enqueue(job(1))
        await queue.enqueue(job(2), EnqueueOptions(delay_seconds=5))
        assert [j.entity_id for j in queue.jobs] == [1, 2]
        assert [j.entity_id for j in queue.pending] == [1, 2]

    @pytest.mark.asyncio
    async def test_perform_requires_handler(self):
        queue = InMemoryJobQueue()
        await queue.enqueue(job(1))
        with pytest.raises(RuntimeError, match="No job handler"):
            await queue.perform_enqueued()

    @pytest.mark.asyncio
    async def test_delayed_jobs_skipped_by_default(self):
        performed: list[int] = []

        async def handler(j: FinalizeJob) -> str:
            performed.append(j.entity_id)
            return "ok"

        queue = InMemoryJobQueue()
        await queue.subscribe(handler)
        await queue.enqueue(job(1))
        await queue.enqueue(job(2), EnqueueOptions(delay_seconds=20, jitter_seconds=15))

        assert await queue.perform_enqueued() == ["ok"]
        assert performed == [1]
        assert [j.entity_id for j in queue.pending] == [2]

        await queue.perform_enqueued(include_delayed=True)
        assert performed == [1, 2]
        assert queue.pending == []

    @pytest.mark.asyncio
    async def test_highest_priority_first(self):
        performed: list[int] = []

        async def handler(j: FinalizeJob) -> None:
            performed.append(j.entity_id)

        queue = InMemoryJobQueue()
        await queue.subscribe(handler)
        await queue.enqueue(job(1), EnqueueOptions(priority=10))
        await queue.enqueue(job(2), EnqueueOptions(priority=20))
        await queue.enqueue(job(3), EnqueueOptions(priority=10))

        await queue.perform_enqueued()
        assert performed == [2, 1, 3]

    @pytest.mark.asyncio
    async def test_jobs_enqueued_while_performing_wait_for_next_call(self):
        queue = InMemoryJobQueue()

        async def handler(j: FinalizeJob) -> None:
            if j.attempt_count == 1:
                await queue.enqueue(job(j.entity_id, attempt=2))

        await queue.subscribe(handler)
        await queue.enqueue(job(1))

        await queue.perform_enqueued()
        assert [j.attempt_count for j in queue.pending] == [2]
        assert [j.attempt_count for j, _ in queue.performed] == [1]

    @pytest.mark.asyncio
    async def test_over_limit_attempts_dropped(self, caplog):
        queue = InMemoryJobQueue()
        with caplog.at_level(logging.WARNING, logger="finalizers.jobs.adapters.memory"):
            await queue.enqueue(job(1, attempt=4), EnqueueOptions(max_attempts=3))
        assert queue.jobs == []
        assert "exceeds limit 3" in caplog.text

    @pytest.mark.asyncio
    async def test_clear(self):
        queue = InMemoryJobQueue()
        await queue.enqueue(job(1))
        queue.clear()
        assert queue.jobs == []
        assert queue.pending == []
