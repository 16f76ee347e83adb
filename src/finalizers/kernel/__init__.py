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
"""Finalizers Kernel — foundation layer with zero external dependencies."""

from finalizers.kernel.exceptions import (
    AbortFinalization,
    BusinessException,
    ConcurrencyException,
    ConfigurationException,
    DefinitionValidationError,
    EntityTypeNotRegisteredError,
    FatalFinalizationError,
    FinalizationException,
    FinalizersException,
    IllegalDirectDestroy,
    IllegalStateTransition,
    RetryableFinalizationError,
    ValidationException,
)
from finalizers.kernel.lifecycle import Lifecycle
from finalizers.kernel.types import BASE_FIELD, FieldError

__all__ = [
    # Lifecycle
    "Lifecycle",
    # Types
    "BASE_FIELD",
    "FieldError",
    # Base
    "FinalizersException",
    # Business
    "BusinessException",
    "ValidationException",
    "IllegalStateTransition",
    "IllegalDirectDestroy",
    "ConcurrencyException",
    # Finalization
    "FinalizationException",
    "RetryableFinalizationError",
    "FatalFinalizationError",
    # Configuration
    "ConfigurationException",
    "DefinitionValidationError",
    "EntityTypeNotRegisteredError",
    # Signals
    "AbortFinalization",
]
