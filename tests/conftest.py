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
"""Shared fixtures: a garage of vehicles and wheels wired to an in-memory engine."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from finalizers.data.adapters.memory import InMemoryDependentRepository, InMemoryEntityStore
from finalizers.engine import FinalizationEngine
from finalizers.jobs.adapters.memory import InMemoryJobQueue
from finalizers.jobs.types import FinalizeJob
from finalizers.lifecycle.entity import FinalizableEntity
from finalizers.lifecycle.pipeline import FinalizationContext


@dataclass(eq=False)
class Vehicle(FinalizableEntity):
    name: str = ""
    plate: str | None = None
    must_keep: bool = False


@dataclass(eq=False)
class Wheel(FinalizableEntity):
    vehicle_id: Any = None
    position: str = ""


@dataclass
class Garage:
    engine: FinalizationEngine
    queue: InMemoryJobQueue
    vehicles: InMemoryEntityStore[Vehicle]
    wheels: InMemoryEntityStore[Wheel]
    released_plates: list[str] = field(default_factory=list)
    recycled: list[Any] = field(default_factory=list)

    async def add_vehicle(self, wheels: int = 4, **attrs: Any) -> Vehicle:
        vehicle = await self.vehicles.save(Vehicle(**attrs))
        for index in range(wheels):
            await self.wheels.save(Wheel(vehicle_id=vehicle.id, position=f"W{index + 1}"))
        return vehicle

    async def wheels_of(self, vehicle: Vehicle) -> list[Wheel]:
        return await self.wheels.find_all(vehicle_id=vehicle.id)

    def pending_jobs(self, entity_type: str) -> list[FinalizeJob]:
        return [job for job in self.queue.pending if job.entity_type == entity_type]

    async def drain(self, max_rounds: int = 10) -> int:
        """Perform every job, retries included, until the queue is empty."""
        rounds = 0
        while self.queue.pending and rounds < max_rounds:
            await self.queue.perform_enqueued(include_delayed=True)
            rounds += 1
        return rounds


@pytest.fixture
async def garage() -> AsyncIterator[Garage]:
    vehicles: InMemoryEntityStore[Vehicle] = InMemoryEntityStore()
    wheels: InMemoryEntityStore[Wheel] = InMemoryEntityStore()
    queue = InMemoryJobQueue()
    engine = FinalizationEngine(queue=queue)
    garage = Garage(engine=engine, queue=queue, vehicles=vehicles, wheels=wheels)

    async def release_plate(vehicle: Vehicle, ctx: FinalizationContext) -> None:
        if vehicle.plate is None:
            return
        garage.released_plates.append(vehicle.plate)
        vehicle.plate = None
        await ctx.definition.store.save(vehicle)

    def recycle(wheel: Wheel, ctx: FinalizationContext) -> None:
        garage.recycled.append(wheel.id)

    engine.register(
        engine.define(Vehicle)
        .store(vehicles)
        .dependency("wheels", InMemoryDependentRepository(wheels, "vehicle_id"))
        .erase_dependents("wheels")
        .add_finalizer(release_plate)
        .erasable(lambda v: not v.must_keep)
        .build()
    )
    engine.register(engine.define(Wheel).store(wheels).add_finalizer(recycle).build())

    await engine.start()
    yield garage
    await engine.stop()
