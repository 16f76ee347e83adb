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
"""Finalizers Lifecycle — erase, finalize and destroy managed entities.

Entity types are declared with :class:`EntityTypeBuilder`, registered in an
:class:`EntityTypeRegistry` and driven through a :class:`LifecycleController`.
"""

from __future__ import annotations

from finalizers.lifecycle.builder import EntityTypeBuilder
from finalizers.lifecycle.classifier import ErrorClassifier
from finalizers.lifecycle.controller import (
    FinalizationReport,
    FinalizationStatus,
    LifecycleController,
)
from finalizers.lifecycle.definition import (
    Cardinality,
    DependencyDescriptor,
    EntityTypeDefinition,
    FinalizerDescriptor,
    UpdateContext,
)
from finalizers.lifecycle.dependencies import DependencyResolver
from finalizers.lifecycle.entity import (
    EntityState,
    Finalizable,
    FinalizableEntity,
    errors_of,
    is_deleted,
)
from finalizers.lifecycle.outcome import (
    ABORT,
    CONTINUE,
    Abort,
    Continue,
    Fatal,
    FinalizerOutcome,
    OutcomeKind,
    Retryable,
)
from finalizers.lifecycle.pipeline import FinalizationContext, FinalizerPipeline, PipelineResult
from finalizers.lifecycle.registry import EntityTypeRegistry

__all__ = [
    "ABORT",
    "Abort",
    "CONTINUE",
    "Cardinality",
    "Continue",
    "DependencyDescriptor",
    "DependencyResolver",
    "EntityState",
    "EntityTypeBuilder",
    "EntityTypeDefinition",
    "EntityTypeRegistry",
    "ErrorClassifier",
    "Fatal",
    "Finalizable",
    "FinalizableEntity",
    "FinalizationContext",
    "FinalizationReport",
    "FinalizationStatus",
    "FinalizerDescriptor",
    "FinalizerOutcome",
    "FinalizerPipeline",
    "LifecycleController",
    "OutcomeKind",
    "PipelineResult",
    "Retryable",
    "UpdateContext",
    "errors_of",
    "is_deleted",
]
