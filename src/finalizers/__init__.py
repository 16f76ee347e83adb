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
"""Finalizers — soft deletion followed by asynchronous, retried finalization.

Erasing an entity marks it ``deleted`` and schedules a finalize job; the job
runs the entity type's finalizers and, once every one of them continues,
physically destroys the record.
"""

from __future__ import annotations

from finalizers.core.config import Config, config_properties
from finalizers.engine import FinalizationEngine
from finalizers.lifecycle.builder import EntityTypeBuilder
from finalizers.lifecycle.controller import FinalizationReport, FinalizationStatus, LifecycleController
from finalizers.lifecycle.entity import EntityState, FinalizableEntity
from finalizers.lifecycle.outcome import ABORT, CONTINUE, Abort, Continue, Fatal, Retryable

__version__ = "0.1.0"

__all__ = [
    "ABORT",
    "Abort",
    "CONTINUE",
    "Config",
    "Continue",
    "EntityState",
    "EntityTypeBuilder",
    "Fatal",
    "FinalizableEntity",
    "FinalizationEngine",
    "FinalizationReport",
    "FinalizationStatus",
    "LifecycleController",
    "Retryable",
    "config_properties",
]
