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
"""Lifecycle controller — erase, validated updates, guarded destroy and finalization."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from finalizers.kernel.exceptions import (
    AbortFinalization,
    FatalFinalizationError,
    IllegalDirectDestroy,
    IllegalStateTransition,
    RetryableFinalizationError,
    ValidationException,
)
from finalizers.kernel.types import BASE_FIELD, FieldError
from finalizers.lifecycle.definition import EntityTypeDefinition, UpdateContext
from finalizers.lifecycle.entity import EntityState, errors_of
from finalizers.lifecycle.outcome import OutcomeKind
from finalizers.lifecycle.pipeline import FinalizationContext, FinalizerPipeline
from finalizers.lifecycle.registry import EntityTypeRegistry

if TYPE_CHECKING:
    from finalizers.jobs.scheduler import FinalizeScheduler

logger = logging.getLogger(__name__)


async def _call(fn: Any, *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _snapshot(entity: Any, *attrs: str) -> dict[str, Any]:
    return {attr: getattr(entity, attr) for attr in attrs if hasattr(entity, attr)}


class FinalizationStatus(StrEnum):
    DESTROYED = "DESTROYED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class FinalizationReport:
    """Result of a :meth:`LifecycleController.finalize_and_destroy` call that did not raise."""

    entity_type: str
    entity_id: Any
    status: FinalizationStatus
    finalizers_run: tuple[str, ...]
    stopped_by: str | None = None
    reason: str | None = None


class LifecycleController:
    """Owns every state transition of managed entities.

    ``active --erase--> deleted --finalize_and_destroy--> removed``; there is
    no way back. Entering ``deleted`` schedules exactly one finalize job,
    which later calls :meth:`finalize_and_destroy` through the job driver.
    """

    def __init__(
        self,
        registry: EntityTypeRegistry,
        scheduler: FinalizeScheduler,
        pipeline: FinalizerPipeline | None = None,
    ) -> None:
        self._registry = registry
        self._scheduler = scheduler
        self._pipeline = pipeline or FinalizerPipeline()

    @property
    def registry(self) -> EntityTypeRegistry:
        return self._registry

    # ── Erase ─────────────────────────────────────────────────

    async def erase(self, entity: Any) -> bool:
        """Mark *entity* deleted and schedule its finalization.

        Persists without validation. Repeating the call on a deleted entity
        does not schedule again. Store failures are logged and reported as
        ``False``.
        """
        definition = self._registry.for_entity(entity)
        try:
            await self._erase(entity, definition)
        except Exception:
            logger.warning(
                "Failed to erase %s %s",
                definition.name,
                getattr(entity, "id", None),
                exc_info=True,
            )
            return False
        return True

    async def erase_force(self, entity: Any) -> Any:
        """Like :meth:`erase`, but store failures propagate."""
        definition = self._registry.for_entity(entity)
        await self._erase(entity, definition)
        return entity

    async def safe_erase(self, entity: Any) -> bool:
        """Erase only when the type's ``erasable`` predicate allows it.

        On denial the message ``"<Type> in use"`` is attached to the entity's
        errors and its state is left untouched.
        """
        definition = self._registry.for_entity(entity)
        if not await self._is_erasable(entity, definition):
            errors_of(entity).append(FieldError(BASE_FIELD, f"{definition.human_name} in use"))
            return False
        return await self.erase(entity)

    # ── Validated update ──────────────────────────────────────

    async def update(self, entity: Any, **changes: Any) -> Any:
        """Apply *changes* with validation and persist them.

        Raises:
            IllegalStateTransition: If the change would leave ``deleted``.
            ValidationException: If an attribute is unknown, the state value
                is invalid, or the entity is not erasable when entering
                ``deleted``.
        """
        definition = self._registry.for_entity(entity)
        previous = str(entity.state)
        new_state = previous
        if "state" in changes:
            try:
                new_state = str(EntityState(changes["state"]))
            except ValueError:
                raise ValidationException(
                    f"{definition.human_name} state {changes['state']!r} is not valid",
                    errors=[FieldError("state", "is not valid", changes["state"])],
                ) from None

        if previous == EntityState.DELETED and new_state != EntityState.DELETED:
            raise IllegalStateTransition(
                f"{definition.human_name} {entity.id} cannot leave the deleted state",
                errors=[FieldError("state", "cannot change once deleted", new_state)],
                context={"entity_type": definition.name, "entity_id": entity.id},
            )

        unknown = [key for key in changes if not hasattr(entity, key)]
        if unknown:
            raise ValidationException(
                f"Unknown attribute(s) for {definition.human_name}: {', '.join(unknown)}",
                errors=[FieldError(key, "is not an attribute") for key in unknown],
            )

        change = UpdateContext(previous_state=previous, new_state=new_state, controller=self)
        if change.entering_deleted and not await self._is_erasable(entity, definition):
            error = FieldError(BASE_FIELD, f"{definition.human_name} in use")
            errors_of(entity).append(error)
            raise ValidationException(str(error), errors=[error])

        snapshot = _snapshot(entity, *changes, "state", "state_at")
        for key, value in changes.items():
            if key != "state":
                setattr(entity, key, value)
        if new_state != previous:
            entity.state = EntityState(new_state)
            if hasattr(entity, "state_at"):
                entity.state_at = datetime.now(UTC)

        await self._persist(entity, definition, change, snapshot)
        return entity

    # ── Destroy ───────────────────────────────────────────────

    async def destroy(self, entity: Any, force: bool = False) -> bool:
        """Physically remove *entity*.

        Only forced calls are allowed; everything else must go through
        :meth:`erase`. A before-destroy hook returning ``False`` or raising
        :class:`AbortFinalization` halts the destroy.

        Returns:
            Whether the record was actually removed.

        Raises:
            IllegalDirectDestroy: If *force* is not set.
        """
        definition = self._registry.for_entity(entity)
        if not force:
            raise IllegalDirectDestroy(
                f"{definition.human_name} {entity.id} must be erased, not destroyed directly",
                context={"entity_type": definition.name, "entity_id": entity.id},
            )

        for hook in definition.before_destroy:
            try:
                result = await _call(hook, entity)
            except AbortFinalization as exc:
                logger.debug("Destroy of %s %s aborted: %s", definition.name, entity.id, exc)
                return False
            if result is False:
                logger.debug("Destroy of %s %s halted by before-destroy hook", definition.name, entity.id)
                return False

        removed = await definition.store.delete(entity.id)
        if removed:
            for hook in definition.after_destroy:
                await _call(hook, entity)
        return removed

    # ── Finalize ──────────────────────────────────────────────

    async def finalize_and_destroy(self, entity: Any, attempt: int = 1) -> FinalizationReport:
        """Run the finalizer pipeline and, when every finalizer continues, destroy.

        Raises:
            RetryableFinalizationError: A finalizer asked to retry, or the
                destroy removed nothing.
            FatalFinalizationError: A finalizer failed unexpectedly; chained
                from the original error.
            ConcurrencyException: A finalizer hit a write conflict; raised
                unwrapped so the job is retried with the conflict policy.
        """
        definition = self._registry.for_entity(entity)
        ctx = FinalizationContext(definition=definition, controller=self, attempt=attempt)
        result = await self._pipeline.run(entity, ctx)
        outcome = result.outcome
        context = {
            "entity_type": definition.name,
            "entity_id": entity.id,
            "attempt": attempt,
            "finalizer": result.stopped_by,
        }

        if outcome.kind == OutcomeKind.ABORT:
            logger.info(
                "Finalization of %s %s aborted by %r", definition.name, entity.id, result.stopped_by
            )
            return FinalizationReport(
                entity_type=definition.name,
                entity_id=entity.id,
                status=FinalizationStatus.ABORTED,
                finalizers_run=result.completed,
                stopped_by=result.stopped_by,
                reason=outcome.reason,
            )
        if outcome.kind == OutcomeKind.RETRYABLE:
            raise RetryableFinalizationError(outcome.reason, code="FINALIZE_RETRY", context=context)
        if outcome.kind == OutcomeKind.FATAL:
            raise FatalFinalizationError(
                f"Finalizer {result.stopped_by!r} failed for {definition.name} {entity.id}: {outcome.error}",
                code="FINALIZE_FATAL",
                context=context,
            ) from outcome.error

        if not await self.destroy(entity, force=True):
            raise RetryableFinalizationError(
                f"{definition.name} {entity.id} finalizers did not complete",
                code="FINALIZE_RETRY",
                context=context,
            )
        logger.info("Destroyed %s %s after %d attempt(s)", definition.name, entity.id, attempt)
        return FinalizationReport(
            entity_type=definition.name,
            entity_id=entity.id,
            status=FinalizationStatus.DESTROYED,
            finalizers_run=result.completed,
        )

    # ── Internal helpers ──────────────────────────────────────

    async def _erase(self, entity: Any, definition: EntityTypeDefinition) -> None:
        previous = str(entity.state)
        change = UpdateContext(previous_state=previous, new_state=EntityState.DELETED, controller=self)
        snapshot = _snapshot(entity, "state", "state_at", "delete_at")
        if change.entering_deleted:
            entity.state = EntityState.DELETED
            if hasattr(entity, "state_at"):
                entity.state_at = datetime.now(UTC)
        if hasattr(entity, "delete_at"):
            entity.delete_at = None
        await self._persist(entity, definition, change, snapshot)

    async def _persist(
        self,
        entity: Any,
        definition: EntityTypeDefinition,
        change: UpdateContext,
        snapshot: dict[str, Any],
    ) -> None:
        """Run pre-update hooks and save; on failure the entity gets its previous values back."""
        try:
            if change.new_state != change.previous_state:
                for hook in definition.before_update:
                    await _call(hook, entity, change)
            await definition.store.save(entity)
        except Exception:
            for attr, value in snapshot.items():
                setattr(entity, attr, value)
            raise
        if change.entering_deleted:
            await self._scheduler.schedule(definition.name, entity.id)

    async def _is_erasable(self, entity: Any, definition: EntityTypeDefinition) -> bool:
        return bool(await _call(definition.erasable, entity))
