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
"""Entity type definitions — immutable per-type lifecycle configuration."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from finalizers.data.ports.outbound import DependentRepositoryPort, EntityStorePort
from finalizers.lifecycle.entity import EntityState

if TYPE_CHECKING:
    from finalizers.lifecycle.controller import LifecycleController
    from finalizers.lifecycle.outcome import FinalizerOutcome
    from finalizers.lifecycle.pipeline import FinalizationContext

FinalizerHandler = Callable[
    [Any, "FinalizationContext"],
    "Awaitable[FinalizerOutcome | None] | FinalizerOutcome | None",
]
ErasablePredicate = Callable[[Any], bool | Awaitable[bool]]
EntityHook = Callable[[Any], Any]
UpdateHook = Callable[[Any, "UpdateContext"], Any]

ANONYMOUS = "<anonymous>"


class Cardinality(StrEnum):
    """Shape of an association to dependents."""

    ONE = "ONE"
    MANY = "MANY"


@dataclass(frozen=True)
class FinalizerDescriptor:
    """One unit of cleanup logic run before physical destruction.

    Attributes:
        name: Display name; :data:`ANONYMOUS` for inline lambdas.
        handler: Callable receiving ``(entity, FinalizationContext)``.
        run_first: Run ahead of every descriptor without the flag.
            Dependency checks use it so they gate all other cleanup work.
    """

    name: str
    handler: FinalizerHandler
    run_first: bool = False


@dataclass(frozen=True)
class DependencyDescriptor:
    """An association whose members must be gone before the parent is destroyed.

    Attributes:
        name: Association name, used in log and retry messages.
        repository: Port used to count and list the dependents.
        cardinality: ``ONE`` or ``MANY``.
        erase_if_found: Cascade erase onto remaining dependents when checked.
        counter_attribute: Attribute on the parent holding a maintained count
            of dependents; preferred over querying when set and not ``None``.
    """

    name: str
    repository: DependentRepositoryPort
    cardinality: Cardinality = Cardinality.MANY
    erase_if_found: bool = False
    counter_attribute: str | None = None


@dataclass(frozen=True)
class UpdateContext:
    """What a pre-update hook sees about the change being persisted.

    ``controller`` is the controller persisting the change; hooks use it to
    erase other entities.
    """

    previous_state: str
    new_state: str
    controller: LifecycleController

    @property
    def entering_deleted(self) -> bool:
        return self.new_state == EntityState.DELETED and self.previous_state != EntityState.DELETED


def _always_erasable(entity: Any) -> bool:
    return True


@dataclass(frozen=True)
class EntityTypeDefinition:
    """Complete lifecycle configuration for one managed entity type.

    Built by :class:`~finalizers.lifecycle.builder.EntityTypeBuilder`.

    Attributes:
        name: Unique type name; travels in every finalize job payload.
        entity_class: Python class of the entities, used for lookups by instance.
        store: Persistence port for these entities.
        finalizers: Descriptors in execution order (``run_first`` ones first).
        dependencies: Associations gated by dependency-check finalizers.
        erasable: Predicate consulted by ``safe_erase`` and validated updates.
        before_update: Hooks run when a state change is about to be persisted.
        before_destroy: Hooks run before the record is removed.
        after_destroy: Hooks run after the record is removed.
        id_type: Callable coercing ids read back from serialized job payloads.
        human_name: Name used in user-facing messages; defaults to ``name``.
    """

    name: str
    entity_class: type
    store: EntityStorePort[Any]
    finalizers: tuple[FinalizerDescriptor, ...] = ()
    dependencies: tuple[DependencyDescriptor, ...] = ()
    erasable: ErasablePredicate = _always_erasable
    before_update: tuple[UpdateHook, ...] = ()
    before_destroy: tuple[EntityHook, ...] = ()
    after_destroy: tuple[EntityHook, ...] = ()
    id_type: Callable[[Any], Any] | None = None
    human_name: str = field(default="")

    def __post_init__(self) -> None:
        if not self.human_name:
            object.__setattr__(self, "human_name", self.name)

    def coerce_id(self, raw: Any) -> Any:
        """Convert an id read from a job payload into the store's id type."""
        if self.id_type is None or raw is None:
            return raw
        if isinstance(self.id_type, type) and isinstance(raw, self.id_type):
            return raw
        return self.id_type(raw)

    def finalizer_names(self) -> list[str]:
        return [f.name for f in self.finalizers]
