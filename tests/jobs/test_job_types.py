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
"""Tests for FinalizeJob, EnqueueOptions and RetryProperties."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime

from finalizers.jobs.properties import RetryProperties
from finalizers.jobs.types import EnqueueOptions, FinalizeJob, RetryPolicy


class TestFinalizeJob:
    def test_defaults(self):
        job = FinalizeJob(entity_type="Vehicle", entity_id=1)
        assert job.attempt_count == 1
        assert job.job_id
        assert job.scheduled_at.tzinfo is not None

    def test_payload_is_json_serialisable(self):
        entity_id = uuid.uuid4()
        job = FinalizeJob(entity_type="Vehicle", entity_id=entity_id, priority=10)
        payload = json.loads(json.dumps(job.to_dict()))
        assert payload["entity_type"] == "Vehicle"
        assert payload["entity_id"] == str(entity_id)
        assert payload["priority"] == 10

    def test_from_dict_restores_identity(self):
        job = FinalizeJob(entity_type="Wheel", entity_id=7, attempt_count=3, priority=20)
        restored = FinalizeJob.from_dict(job.to_dict())
        assert restored == job

    def test_from_dict_minimal_payload(self):
        job = FinalizeJob.from_dict({"entity_type": "Wheel", "entity_id": "abc"})
        assert job.attempt_count == 1
        assert job.entity_id == "abc"

    def test_from_dict_accepts_datetime(self):
        when = datetime(2030, 5, 1, tzinfo=UTC)
        job = FinalizeJob.from_dict({"entity_type": "Wheel", "entity_id": 1, "scheduled_at": when})
        assert job.scheduled_at == when


class TestEnqueueOptions:
    def test_no_jitter_means_exact_delay(self):
        assert EnqueueOptions(delay_seconds=20).sample_delay() == 20

    def test_jitter_is_added_on_top(self):
        options = EnqueueOptions(delay_seconds=20, jitter_seconds=15)
        assert options.sample_delay(lambda low, high: high) == 35
        assert options.sample_delay(lambda low, high: low) == 20

    def test_sampled_delay_within_range(self):
        options = EnqueueOptions(delay_seconds=10, jitter_seconds=3)
        for _ in range(50):
            assert 10 <= options.sample_delay() <= 13

    def test_unlimited_attempts(self):
        job = FinalizeJob(entity_type="Vehicle", entity_id=1, attempt_count=10_000)
        assert EnqueueOptions().exceeded_by(job) is False

    def test_limited_attempts(self):
        options = EnqueueOptions(max_attempts=3)
        assert options.exceeded_by(FinalizeJob(entity_type="V", entity_id=1, attempt_count=3)) is False
        assert options.exceeded_by(FinalizeJob(entity_type="V", entity_id=1, attempt_count=4)) is True


class TestRetryProperties:
    def test_defaults(self):
        props = RetryProperties()
        assert props.queue_priority == 10
        assert props.retry_priority > props.queue_priority

    def test_retry_policy(self):
        assert RetryProperties().retry_policy() == RetryPolicy(wait_seconds=20.0, jitter_seconds=15.0, priority=20)

    def test_conflict_policy_is_shorter(self):
        policy = RetryProperties().conflict_policy()
        assert policy.wait_seconds == 10.0
        assert policy.jitter_seconds == 3.0
        assert policy.priority == 10

    def test_policy_to_options(self):
        options = RetryProperties().retry_policy().to_options()
        assert options == EnqueueOptions(delay_seconds=20.0, jitter_seconds=15.0, priority=20, max_attempts=None)
