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
"""Entity type builder — fluent DSL declaring an entity type's lifecycle.

Example::

    vehicles = (
        EntityTypeBuilder(Vehicle)
        .store(vehicle_store)
        .dependency("wheels", InMemoryDependentRepository(wheel_store, "vehicle_id"))
        .erase_dependents("wheels")
        .add_finalizer(release_license_plate)
        .erasable(lambda v: not v.must_keep)
        .build()
    )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

from finalizers.data.ports.outbound import DependentRepositoryPort, EntityStorePort
from finalizers.kernel.exceptions import DefinitionValidationError
from finalizers.lifecycle.definition import (
    ANONYMOUS,
    Cardinality,
    DependencyDescriptor,
    EntityHook,
    EntityTypeDefinition,
    ErasablePredicate,
    FinalizerDescriptor,
    FinalizerHandler,
    UpdateHook,
)
from finalizers.lifecycle.dependencies import DependencyResolver


def _finalizer_name(handler: Callable[..., Any], name: str | None) -> str:
    if name:
        return name
    derived = getattr(handler, "__name__", "")
    if not derived or derived == "<lambda>":
        return ANONYMOUS
    return derived


class EntityTypeBuilder:
    """Fluent builder producing an :class:`EntityTypeDefinition`.

    Associations are declared once with :meth:`dependency` and then referenced
    by name from :meth:`wait_for_no_dependents` and :meth:`erase_dependents`.
    Call :meth:`build` to validate and produce the definition.
    """

    def __init__(
        self,
        entity_class: type,
        name: str | None = None,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self._entity_class = entity_class
        self._name = name or entity_class.__name__
        self._human_name = ""
        self._resolver = resolver or DependencyResolver()
        self._store: EntityStorePort[Any] | None = None
        self._id_type: Callable[[Any], Any] | None = None
        self._declared: dict[str, DependencyDescriptor] = {}
        self._gated: dict[str, DependencyDescriptor] = {}
        self._finalizers: list[FinalizerDescriptor] = []
        self._erasable: ErasablePredicate | None = None
        self._before_update: list[UpdateHook] = []
        self._before_destroy: list[EntityHook] = []
        self._after_destroy: list[EntityHook] = []
        self._errors: list[str] = []

    # ── Persistence ───────────────────────────────────────────

    def store(self, store: EntityStorePort[Any]) -> EntityTypeBuilder:
        """Set the store used to persist and re-resolve these entities."""
        self._store = store
        return self

    def id_type(self, coerce: Callable[[Any], Any]) -> EntityTypeBuilder:
        """Set how ids read from job payloads are converted (e.g. ``UUID``, ``int``)."""
        self._id_type = coerce
        return self

    def human_name(self, name: str) -> EntityTypeBuilder:
        """Set the name used in user-facing messages ("<name> in use")."""
        self._human_name = name
        return self

    # ── Dependencies ──────────────────────────────────────────

    def dependency(
        self,
        name: str,
        repository: DependentRepositoryPort,
        *,
        cardinality: Cardinality = Cardinality.MANY,
        counter_attribute: str | None = None,
    ) -> EntityTypeBuilder:
        """Declare an association to dependent entities."""
        if name in self._declared:
            self._errors.append(f"Dependency '{name}' is declared twice")
        self._declared[name] = DependencyDescriptor(
            name=name,
            repository=repository,
            cardinality=cardinality,
            counter_attribute=counter_attribute,
        )
        return self

    def wait_for_no_dependents(self, *names: str, erase_if_found: bool = False) -> EntityTypeBuilder:
        """Register a run-first finalizer that retries while dependents remain.

        With *erase_if_found*, remaining not-yet-deleted dependents are
        erased when the check finds them.
        """
        selected = self._select(names)
        if not selected:
            return self
        gated = tuple(dataclasses.replace(d, erase_if_found=erase_if_found) for d in selected)
        for descriptor in gated:
            self._gated[descriptor.name] = descriptor
        self._finalizers.append(
            FinalizerDescriptor(
                name=f"wait_for_no_dependents({', '.join(d.name for d in gated)})",
                handler=self._resolver.dependency_check(gated),
                run_first=True,
            )
        )
        return self

    def erase_dependents(self, *names: str) -> EntityTypeBuilder:
        """Erase dependents with the parent, and wait for them to be destroyed.

        Dependents are erased synchronously the moment the parent enters
        ``deleted``, so their own finalization starts without waiting for the
        parent's job.
        """
        selected = self._select(names)
        if not selected:
            return self
        self.wait_for_no_dependents(*names, erase_if_found=True)
        self._before_update.append(
            self._resolver.cascade_on_delete(
                [dataclasses.replace(d, erase_if_found=True) for d in selected]
            )
        )
        return self

    # ── Finalizers and hooks ──────────────────────────────────

    def add_finalizer(
        self,
        handler: FinalizerHandler,
        *,
        name: str | None = None,
        first: bool = False,
    ) -> EntityTypeBuilder:
        """Append a finalizer; ``first=True`` moves it ahead of unflagged ones."""
        if not callable(handler):
            self._errors.append(f"Finalizer {handler!r} is not callable")
            return self
        self._finalizers.append(
            FinalizerDescriptor(name=_finalizer_name(handler, name), handler=handler, run_first=first)
        )
        return self

    def erasable(self, predicate: ErasablePredicate) -> EntityTypeBuilder:
        """Set the predicate gating ``safe_erase`` and validated state updates."""
        self._erasable = predicate
        return self

    def before_update(self, hook: UpdateHook) -> EntityTypeBuilder:
        self._before_update.append(hook)
        return self

    def before_destroy(self, hook: EntityHook) -> EntityTypeBuilder:
        """Hook run before removal; returning ``False`` halts the destroy."""
        self._before_destroy.append(hook)
        return self

    def after_destroy(self, hook: EntityHook) -> EntityTypeBuilder:
        self._after_destroy.append(hook)
        return self

    # ── Build ─────────────────────────────────────────────────

    def build(self) -> EntityTypeDefinition:
        """Validate and produce the final :class:`EntityTypeDefinition`.

        Raises:
            DefinitionValidationError: If no store is set, an association is
                referenced without being declared or declared twice, a
                finalizer is not callable, or two finalizers share a name.
        """
        errors = list(self._errors)
        if self._store is None:
            errors.append("no store configured")

        seen: set[str] = set()
        for descriptor in self._finalizers:
            if descriptor.name == ANONYMOUS:
                continue
            if descriptor.name in seen:
                errors.append(f"Finalizer '{descriptor.name}' is registered twice")
            seen.add(descriptor.name)

        if errors:
            msg = f"Entity type '{self._name}' is invalid: " + "; ".join(errors)
            raise DefinitionValidationError(msg, context={"entity_type": self._name, "errors": errors})

        ordered = [f for f in self._finalizers if f.run_first] + [
            f for f in self._finalizers if not f.run_first
        ]
        dependencies = tuple(self._gated.get(name, d) for name, d in self._declared.items())

        kwargs: dict[str, Any] = {}
        if self._erasable is not None:
            kwargs["erasable"] = self._erasable

        return EntityTypeDefinition(
            name=self._name,
            entity_class=self._entity_class,
            store=self._store,  # type: ignore[arg-type]
            finalizers=tuple(ordered),
            dependencies=dependencies,
            before_update=tuple(self._before_update),
            before_destroy=tuple(self._before_destroy),
            after_destroy=tuple(self._after_destroy),
            id_type=self._id_type,
            human_name=self._human_name,
            **kwargs,
        )

    # ── Internal helpers ──────────────────────────────────────

    def _select(self, names: tuple[str, ...]) -> list[DependencyDescriptor]:
        if not names:
            self._errors.append("dependency hooks need at least one association name")
            return []
        missing = [n for n in names if n not in self._declared]
        if missing:
            self._errors.append(f"undeclared dependencies: {', '.join(missing)}")
            return []
        return [self._declared[n] for n in names]
