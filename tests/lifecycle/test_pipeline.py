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
"""Tests for FinalizerPipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from finalizers.data.adapters.memory import InMemoryEntityStore
from finalizers.jobs.adapters.memory import InMemoryJobQueue
from finalizers.jobs.scheduler import FinalizeScheduler
from finalizers.kernel.exceptions import (
    AbortFinalization,
    ConcurrencyException,
    FatalFinalizationError,
    RetryableFinalizationError,
)
from finalizers.lifecycle.builder import EntityTypeBuilder
from finalizers.lifecycle.controller import LifecycleController
from finalizers.lifecycle.entity import FinalizableEntity
from finalizers.lifecycle.outcome import ABORT, CONTINUE, OutcomeKind, Retryable
from finalizers.lifecycle.pipeline import FinalizationContext, FinalizerPipeline
from finalizers.lifecycle.registry import EntityTypeRegistry


@dataclass(eq=False)
class Mailbox(FinalizableEntity):
    pass


def context(*handlers: Any, attempt: int = 1) -> FinalizationContext:
    builder = EntityTypeBuilder(Mailbox).store(InMemoryEntityStore())
    for handler in handlers:
        builder.add_finalizer(handler)
    definition = builder.build()
    registry = EntityTypeRegistry()
    registry.register(definition)
    controller = LifecycleController(registry, FinalizeScheduler(InMemoryJobQueue()))
    return FinalizationContext(definition=definition, controller=controller, attempt=attempt)


class TestFinalizerPipeline:
    @pytest.mark.asyncio
    async def test_runs_all_in_order(self):
        calls: list[str] = []

        def purge_messages(box: Mailbox, ctx: FinalizationContext) -> None:
            calls.append("purge_messages")

        async def drop_aliases(box: Mailbox, ctx: FinalizationContext):
            calls.append("drop_aliases")
            return CONTINUE

        result = await FinalizerPipeline().run(Mailbox(), context(purge_messages, drop_aliases))

        assert result.succeeded
        assert result.stopped_by is None
        assert result.completed == ("purge_messages", "drop_aliases")
        assert calls == ["purge_messages", "drop_aliases"]

    @pytest.mark.asyncio
    async def test_first_non_continue_stops(self):
        calls: list[str] = []

        def first(box: Mailbox, ctx: FinalizationContext):
            return Retryable("quota server busy")

        def second(box: Mailbox, ctx: FinalizationContext) -> None:
            calls.append("second")

        result = await FinalizerPipeline().run(Mailbox(), context(first, second))

        assert result.outcome == Retryable("quota server busy")
        assert result.stopped_by == "first"
        assert result.completed == ()
        assert calls == []

    @pytest.mark.asyncio
    async def test_raised_abort_signal(self):
        def hold(box: Mailbox, ctx: FinalizationContext) -> None:
            raise AbortFinalization

        result = await FinalizerPipeline().run(Mailbox(), context(hold))
        assert result.outcome.kind == OutcomeKind.ABORT

    @pytest.mark.asyncio
    async def test_returned_abort(self):
        result = await FinalizerPipeline().run(Mailbox(), context(lambda b, c: ABORT))
        assert result.outcome is ABORT

    @pytest.mark.asyncio
    async def test_raised_retryable_error(self):
        async def wait(box: Mailbox, ctx: FinalizationContext) -> None:
            raise RetryableFinalizationError("replica lag")

        result = await FinalizerPipeline().run(Mailbox(), context(wait))
        assert result.outcome == Retryable("replica lag")

    @pytest.mark.asyncio
    async def test_unexpected_error_is_fatal(self):
        def broken(box: Mailbox, ctx: FinalizationContext) -> None:
            raise ZeroDivisionError

        result = await FinalizerPipeline().run(Mailbox(), context(broken))
        assert result.outcome.kind == OutcomeKind.FATAL
        assert isinstance(result.outcome.error, ZeroDivisionError)

    @pytest.mark.asyncio
    async def test_unsupported_return_value_is_fatal(self):
        def confused(box: Mailbox, ctx: FinalizationContext) -> bool:
            return True

        result = await FinalizerPipeline().run(Mailbox(), context(confused))
        assert result.outcome.kind == OutcomeKind.FATAL
        assert isinstance(result.outcome.error, TypeError)
        assert result.stopped_by == "confused"

    @pytest.mark.asyncio
    async def test_unsupported_return_value_fails_finalization(self):
        def confused(box: Mailbox, ctx: FinalizationContext) -> bool:
            return True

        ctx = context(confused)
        with pytest.raises(FatalFinalizationError) as exc_info:
            await ctx.controller.finalize_and_destroy(Mailbox())
        assert isinstance(exc_info.value.__cause__, TypeError)

    @pytest.mark.asyncio
    async def test_concurrency_conflict_propagates(self):
        ran: list[str] = []

        def save_progress(box: Mailbox, ctx: FinalizationContext) -> None:
            raise ConcurrencyException("Mailbox was modified concurrently")

        def after(box: Mailbox, ctx: FinalizationContext) -> None:
            ran.append("after")

        with pytest.raises(ConcurrencyException, match="modified concurrently"):
            await FinalizerPipeline().run(Mailbox(), context(save_progress, after))
        assert ran == []

    @pytest.mark.asyncio
    async def test_context_exposes_attempt_and_completed(self):
        seen: list[tuple[int, list[str]]] = []

        def first(box: Mailbox, ctx: FinalizationContext) -> None:
            pass

        def second(box: Mailbox, ctx: FinalizationContext) -> None:
            seen.append((ctx.attempt, list(ctx.completed)))

        await FinalizerPipeline().run(Mailbox(), context(first, second, attempt=4))
        assert seen == [(4, ["first"])]

    @pytest.mark.asyncio
    async def test_empty_pipeline_succeeds(self):
        result = await FinalizerPipeline().run(Mailbox(), context())
        assert result.succeeded
        assert result.completed == ()
