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
"""Finalizer pipeline — ordered, abortable execution of cleanup callbacks.

Finalizers execute outside of the destroy step. A finalizer may persist its
own progress (for example clearing a remote resource id) so that when a later
finalizer fails and the job is retried, completed work is not repeated.
Finalizers must still be idempotent: a finalizer can re-run after its work
succeeded but before that progress was persisted.

A :class:`~finalizers.kernel.exceptions.ConcurrencyException` raised while
persisting that progress propagates out of the pipeline unchanged, so the job
is retried with the conflict policy.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from finalizers.kernel.exceptions import ConcurrencyException
from finalizers.lifecycle.classifier import ErrorClassifier
from finalizers.lifecycle.definition import EntityTypeDefinition, FinalizerDescriptor
from finalizers.lifecycle.outcome import CONTINUE, FinalizerOutcome, OutcomeKind

if TYPE_CHECKING:
    from finalizers.lifecycle.controller import LifecycleController

logger = logging.getLogger(__name__)


@dataclass
class FinalizationContext:
    """Per-run context handed to every finalizer.

    Attributes:
        definition: The entity's type definition (gives access to its store).
        controller: Controller driving this run; used to cascade erases.
        attempt: 1-based attempt number of the finalize job.
        completed: Names of finalizers that already continued during this run.
    """

    definition: EntityTypeDefinition
    controller: LifecycleController
    attempt: int = 1
    completed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    """How a pipeline run ended.

    ``stopped_by`` names the finalizer that returned a non-continue outcome,
    or is ``None`` when every finalizer continued.
    """

    outcome: FinalizerOutcome
    stopped_by: str | None
    completed: tuple[str, ...]

    @property
    def succeeded(self) -> bool:
        return self.outcome.kind == OutcomeKind.CONTINUE


class FinalizerPipeline:
    """Runs an entity type's finalizers in order until one does not continue."""

    def __init__(self, classifier: ErrorClassifier | None = None) -> None:
        self._classifier = classifier or ErrorClassifier()

    async def run(self, entity: Any, ctx: FinalizationContext) -> PipelineResult:
        for descriptor in ctx.definition.finalizers:
            outcome = await self._run_one(descriptor, entity, ctx)
            if outcome.kind != OutcomeKind.CONTINUE:
                logger.debug(
                    "Finalizer %r stopped %s %s with %s",
                    descriptor.name,
                    ctx.definition.name,
                    entity.id,
                    outcome.kind,
                )
                return PipelineResult(
                    outcome=outcome,
                    stopped_by=descriptor.name,
                    completed=tuple(ctx.completed),
                )
            ctx.completed.append(descriptor.name)

        return PipelineResult(outcome=CONTINUE, stopped_by=None, completed=tuple(ctx.completed))

    async def _run_one(
        self,
        descriptor: FinalizerDescriptor,
        entity: Any,
        ctx: FinalizationContext,
    ) -> FinalizerOutcome:
        try:
            result = descriptor.handler(entity, ctx)
            if inspect.isawaitable(result):
                result = await result
            return self._classifier.classify(result)
        except ConcurrencyException:
            raise
        except Exception as exc:
            return self._classifier.classify(exc)
