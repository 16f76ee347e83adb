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
"""Dependency resolver — gates a parent's finalization on its dependents.

Parents are not finalized or destroyed while dependents remain, so children
always run their own finalizers against a live parent. Waiting is not a
blocking call: the dependency check returns :class:`Retryable` and the
parent's job is rescheduled until the children are gone.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from finalizers.lifecycle.definition import (
    DependencyDescriptor,
    FinalizerHandler,
    UpdateContext,
    UpdateHook,
)
from finalizers.lifecycle.outcome import CONTINUE, FinalizerOutcome, Retryable

if TYPE_CHECKING:
    from finalizers.lifecycle.controller import LifecycleController
    from finalizers.lifecycle.pipeline import FinalizationContext

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Counts dependents, cascades erases and builds the dependency hooks."""

    async def count(self, entity: Any, dependency: DependencyDescriptor) -> int:
        """Number of dependents still present, erased-but-undestroyed included.

        A maintained counter on the parent wins over querying the repository.
        """
        if dependency.counter_attribute is not None:
            cached = getattr(entity, dependency.counter_attribute, None)
            if cached is not None:
                return int(cached)
        return await dependency.repository.count(entity.id)

    async def cascade(
        self,
        entity: Any,
        dependency: DependencyDescriptor,
        controller: LifecycleController,
    ) -> int:
        """Erase every not-yet-deleted dependent; returns how many were erased.

        Each erase schedules that dependent's own finalize job. A failing
        member is logged and skipped so the rest of the fan-out still happens;
        the dependency check enforces completion later.
        """
        members = await dependency.repository.list_not_deleted(entity.id)
        erased = 0
        for member in members:
            try:
                if await controller.erase(member):
                    erased += 1
            except Exception:
                logger.warning(
                    "Cascade erase of %s dependent %r failed for %s",
                    dependency.name,
                    getattr(member, "id", member),
                    entity.id,
                    exc_info=True,
                )
        return erased

    async def wait_for_no_dependents(
        self,
        entity: Any,
        ctx: FinalizationContext,
        dependencies: Sequence[DependencyDescriptor],
    ) -> FinalizerOutcome:
        for dependency in dependencies:
            count = await self.count(entity, dependency)
            if dependency.erase_if_found and count > 0:
                await self.cascade(entity, dependency, ctx.controller)
            if count > 0:
                return Retryable(
                    f"{ctx.definition.name} {entity.id} still has {count} dependent {dependency.name}"
                )
        return CONTINUE

    # -- hook factories -----------------------------------------------------

    def dependency_check(self, dependencies: Sequence[DependencyDescriptor]) -> FinalizerHandler:
        """Finalizer that fails retryably while any association has dependents."""
        deps = tuple(dependencies)

        async def check_dependents(entity: Any, ctx: FinalizationContext) -> FinalizerOutcome:
            return await self.wait_for_no_dependents(entity, ctx, deps)

        return check_dependents

    def cascade_on_delete(self, dependencies: Sequence[DependencyDescriptor]) -> UpdateHook:
        """Pre-update hook cascading erase as soon as the parent enters ``deleted``."""
        deps = tuple(dependencies)

        async def erase_dependents(entity: Any, change: UpdateContext) -> None:
            if not change.entering_deleted:
                return
            for dependency in deps:
                await self.cascade(entity, dependency, change.controller)

        return erase_dependents
