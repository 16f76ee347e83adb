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
"""Finalization engine — wires registry, controller, scheduler, driver and queue.

Usage::

    engine = FinalizationEngine.from_config(Config.from_file("finalizers.yaml"))
    engine.register(
        engine.define(Vehicle)
        .store(vehicle_store)
        .dependency("wheels", wheel_repository)
        .erase_dependents("wheels")
        .build()
    )
    async with engine:
        await engine.erase(vehicle)
"""

from __future__ import annotations

import logging
from typing import Any

from finalizers.core.config import Config
from finalizers.jobs.adapters.asyncio_queue import AsyncIOJobQueue
from finalizers.jobs.adapters.memory import InMemoryJobQueue
from finalizers.jobs.driver import RetryJobDriver
from finalizers.jobs.ports.outbound import ErrorReporterPort, JobQueuePort
from finalizers.jobs.properties import RetryProperties
from finalizers.jobs.reporting import LoggingErrorReporter
from finalizers.jobs.scheduler import FinalizeScheduler
from finalizers.jobs.types import FinalizeJob, JobOutcome
from finalizers.lifecycle.builder import EntityTypeBuilder
from finalizers.lifecycle.controller import FinalizationReport, LifecycleController
from finalizers.lifecycle.definition import EntityTypeDefinition
from finalizers.lifecycle.registry import EntityTypeRegistry
from finalizers.logging.port import LoggingPort
from finalizers.logging.structlog_adapter import StructlogAdapter

logger = logging.getLogger(__name__)


class FinalizationEngine:
    """Façade over one finalization system.

    Defaults to an :class:`InMemoryJobQueue` so tests can drive jobs by hand;
    :meth:`from_config` builds a worker-backed :class:`AsyncIOJobQueue`.
    """

    def __init__(
        self,
        queue: JobQueuePort | None = None,
        properties: RetryProperties | None = None,
        reporter: ErrorReporterPort | None = None,
        registry: EntityTypeRegistry | None = None,
    ) -> None:
        self.properties = properties or RetryProperties()
        self.queue: JobQueuePort = queue or InMemoryJobQueue()
        self.registry = registry or EntityTypeRegistry()
        self.reporter: ErrorReporterPort = reporter or LoggingErrorReporter()
        self.scheduler = FinalizeScheduler(self.queue, self.properties)
        self.controller = LifecycleController(self.registry, self.scheduler)
        self.driver = RetryJobDriver(self.controller, self.scheduler, self.reporter)
        self._started = False
        self._subscribed = False

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        queue: JobQueuePort | None = None,
        reporter: ErrorReporterPort | None = None,
        logging_adapter: LoggingPort | None = None,
    ) -> FinalizationEngine:
        """Build an engine from the ``finalizers`` configuration tree.

        Retry settings are bound from ``finalizers.jobs``. Logging is
        configured only when a *logging_adapter* is given, or when
        ``finalizers.logging.configure`` is true (then :class:`StructlogAdapter`).
        """
        config = config or Config.defaults()
        properties = config.bind(RetryProperties)

        if logging_adapter is None and _truthy(config.get("finalizers.logging.configure", False)):
            logging_adapter = StructlogAdapter()
        if logging_adapter is not None:
            logging_adapter.configure(config)

        return cls(
            queue=queue or AsyncIOJobQueue(workers=properties.workers),
            properties=properties,
            reporter=reporter,
        )

    # ── Registration ──────────────────────────────────────────

    def define(self, entity_class: type, name: str | None = None) -> EntityTypeBuilder:
        """Start a builder for *entity_class*; pass the result of ``build()`` to :meth:`register`."""
        return EntityTypeBuilder(entity_class, name=name)

    def register(self, definition: EntityTypeDefinition) -> EntityTypeDefinition:
        self.registry.register(definition)
        logger.debug(
            "Registered entity type %s with finalizers %s",
            definition.name,
            definition.finalizer_names(),
        )
        return definition

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        if self._started:
            return
        if not self._subscribed:
            await self.queue.subscribe(self.driver.perform)
            self._subscribed = True
        await self.queue.start()
        self._started = True

    async def stop(self) -> None:
        if not self._started:
            return
        await self.queue.stop()
        self._started = False

    async def __aenter__(self) -> FinalizationEngine:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # ── Operations ────────────────────────────────────────────

    async def erase(self, entity: Any) -> bool:
        return await self.controller.erase(entity)

    async def erase_force(self, entity: Any) -> Any:
        return await self.controller.erase_force(entity)

    async def safe_erase(self, entity: Any) -> bool:
        return await self.controller.safe_erase(entity)

    async def update(self, entity: Any, **changes: Any) -> Any:
        return await self.controller.update(entity, **changes)

    async def destroy(self, entity: Any, force: bool = False) -> bool:
        return await self.controller.destroy(entity, force=force)

    async def finalize_and_destroy(self, entity: Any, attempt: int = 1) -> FinalizationReport:
        return await self.controller.finalize_and_destroy(entity, attempt=attempt)

    async def perform(self, job: FinalizeJob) -> JobOutcome:
        """Run one finalize job synchronously, bypassing the queue."""
        return await self.driver.perform(job)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)
